"""
Logging setup shared by the CLI and library callers.

Events are emitted with structlog (``log.info("branch.create", path=...)``)
and routed through the standard library so three sinks can receive them:

``console``
    :class:`rich.logging.RichHandler` on stderr; WARNING by default,
    INFO with ``--verbose`` and DEBUG with ``--debug``.
``showtree.log``
    Rotating JSON file, always at least INFO.  Its directory is
    ``$SHOWTREE_LOG_DIR``, else ``<site_root>/logs``, else the per-user
    application directory.
``--save-logfile``
    Optional plain-text copy of the console stream.

Calling :func:`setup_logging` again replaces the previous handlers.
"""

from __future__ import annotations

import logging
import logging.handlers
import os
from pathlib import Path
from typing import List, Optional

import click
import structlog
from rich.console import Console
from rich.logging import RichHandler

__all__ = ["setup_logging", "log_dir"]

LOG_DIR_ENV = "SHOWTREE_LOG_DIR"
LOG_FILE = "showtree.log"


def log_dir(site_root: Optional[Path]) -> Path:
    """Return the directory receiving :data:`LOG_FILE`."""
    if os.environ.get(LOG_DIR_ENV):
        return Path(os.environ[LOG_DIR_ENV]).expanduser()
    if site_root is not None:
        return site_root / "logs"
    return Path(click.get_app_dir("showtree")) / "logs"


def _console_level(verbose: bool, debug: bool) -> int:
    if debug:
        return logging.DEBUG
    return logging.INFO if verbose else logging.WARNING


def _handlers(
    site_root: Optional[Path],
    console_level: int,
    text_log: Optional[Path],
) -> List[logging.Handler]:
    """Build the console, JSON file and optional text handlers."""
    console = RichHandler(
        level=console_level,
        console=Console(stderr=True),
        rich_tracebacks=True,
        show_path=False,
        markup=False,
    )

    directory = log_dir(site_root)
    directory.mkdir(parents=True, exist_ok=True)
    json_file = logging.handlers.RotatingFileHandler(
        directory / LOG_FILE,
        maxBytes=5_000_000,
        backupCount=3,
        encoding="utf-8",
    )
    json_file.setLevel(min(console_level, logging.INFO))

    handlers: List[logging.Handler] = [console, json_file]
    if text_log is not None:
        text_log = text_log.expanduser().resolve()
        text_log.parent.mkdir(parents=True, exist_ok=True)
        text = logging.FileHandler(text_log, mode="a", encoding="utf-8")
        text.setLevel(console_level)
        text.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
        handlers.append(text)
    return handlers


def setup_logging(
    *,
    site_root: Optional[Path] = None,
    verbose: bool = False,
    debug: bool = False,
    extra_text_log: Optional[Path] = None,
) -> None:
    """Route structlog events to the console and log files.

    Args:
        site_root: Studio root; selects ``<site_root>/logs`` for the JSON log
            when ``$SHOWTREE_LOG_DIR`` is not set.
        verbose: Show INFO events on the console.
        debug: Show DEBUG events on the console and in the JSON log.
        extra_text_log: Plain-text file mirroring the console.
    """
    console_level = _console_level(verbose, debug)
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        handlers=_handlers(site_root, console_level, extra_text_log),
        force=True,
    )

    renderer = (
        structlog.dev.ConsoleRenderer(colors=False)
        if verbose or debug
        else structlog.processors.JSONRenderer()
    )
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(min(console_level, logging.INFO)),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )
