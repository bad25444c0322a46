"""Helpers shared by the sub-command modules."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

import click
import structlog

from showtree.errors import ShowtreeError

log = structlog.get_logger()

# Same settings as the root group so `-h` works on every sub-command.
CTX = dict(help_option_names=["-h", "--help"], show_default=True, max_content_width=120)


@contextmanager
def cli_errors() -> Iterator[None]:
    """Turn library and filesystem errors into :class:`click.ClickException`."""
    try:
        yield
    except (ShowtreeError, OSError) as exc:
        log.debug("cli.error", error_type=type(exc).__name__, error=str(exc))
        raise click.ClickException(str(exc)) from exc
