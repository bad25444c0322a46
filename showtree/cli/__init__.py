"""Root Click group of the ``showtree-cli`` console script.

Global flags select the site (``--site-root``/``--show-root``/``--schema``)
and the log verbosity.  Sub-commands live in sibling modules and are only
imported when invoked, so ``showtree-cli --help`` stays fast and works before
``$SITE_ROOT`` is configured.

Every sub-command receives a :class:`CliState` through ``ctx.obj``; the site
and its schema are loaded the first time a command asks for them.
"""

from __future__ import annotations

import importlib
import os
from pathlib import Path
from typing import Dict, Optional

import click

from showtree import __version__
from showtree.branch import Site
from showtree.config.settings import SITE_ROOT_ENV, SiteSettings
from showtree.errors import ShowtreeError
from showtree.prefs import UserPrefs
from showtree.runner import SceneRunner
from showtree.utils.logging import setup_logging

# Sub-command name → "module:attribute" imported on first use.
_COMMANDS: Dict[str, str] = {
    "list": "showtree.cli.tree:list_cmd",
    "create": "showtree.cli.tree:create_cmd",
    "tasks": "showtree.cli.scene:tasks_cmd",
    "scene": "showtree.cli.scene:scene",
    "pin": "showtree.cli.pin:pin_cmd",
    "unpin": "showtree.cli.pin:unpin_cmd",
}


class LazyGroup(click.Group):
    """Group whose sub-commands are imported from dotted targets on demand."""

    def __init__(self, *args, lazy_commands: Optional[Dict[str, str]] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.lazy_commands: Dict[str, str] = dict(lazy_commands or {})

    def list_commands(self, ctx):  # noqa: D401 - Click signature
        return sorted(set(super().list_commands(ctx)) | set(self.lazy_commands))

    def get_command(self, ctx, cmd_name):  # noqa: D401 - Click signature
        if cmd_name in self.commands or cmd_name not in self.lazy_commands:
            return super().get_command(ctx, cmd_name)
        module_name, _, attr = self.lazy_commands[cmd_name].partition(":")
        command = getattr(importlib.import_module(module_name), attr)
        self.add_command(command, cmd_name)
        return command


class CliState:
    """Objects shared by every sub-command.

    Configuration errors surface as :class:`click.ClickException` from the
    command that first touches :attr:`site`.
    """

    def __init__(
        self,
        *,
        site_root: Optional[Path],
        show_root: Optional[Path],
        schema: Optional[Path],
        prefs: UserPrefs,
    ) -> None:
        self._overrides = dict(site_root=site_root, show_root=show_root, schema_path=schema)
        self._site: Optional[Site] = None
        self.prefs = prefs

    @property
    def site(self) -> Site:
        if self._site is None:
            try:
                self._site = Site.from_settings(SiteSettings.from_env(**self._overrides))
            except ShowtreeError as exc:
                raise click.ClickException(str(exc)) from exc
        return self._site

    @property
    def runner(self) -> SceneRunner:
        return SceneRunner(self.site.settings)


def _log_root(site_root: Optional[Path]) -> Optional[Path]:
    """Return the site root used for the JSON log, when it exists."""
    if site_root is None and os.environ.get(SITE_ROOT_ENV):
        site_root = Path(os.environ[SITE_ROOT_ENV])
    return site_root if site_root is not None and site_root.is_dir() else None


@click.group(
    cls=LazyGroup,
    lazy_commands=_COMMANDS,
    context_settings=dict(
        help_option_names=["-h", "--help"], show_default=True, max_content_width=120
    ),
    help="""\b
showtree-cli – production tree toolkit.

Identifiers are given top-down: SHOW CATEGORY GROUP UNIT PART TASK.
""",
)
@click.version_option(__version__, prog_name="showtree-cli")
@click.option(
    "--site-root",
    type=click.Path(file_okay=False, path_type=Path),
    help="Studio root (defaults to $SITE_ROOT).",
)
@click.option(
    "--show-root",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory holding the shows (defaults to $SHOW_ROOT).",
)
@click.option(
    "--schema",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Schema document (defaults to $SHOWTREE_SCHEMA, then the site schema).",
)
@click.option("-v", "--verbose", is_flag=True, help="Show INFO events on the console.")
@click.option("--debug", is_flag=True, help="Show DEBUG events on the console.")
@click.option(
    "--save-logfile",
    type=click.Path(dir_okay=False, writable=True, path_type=Path),
    help="Also write console events to this text file.",
)
@click.pass_context
def main(
    ctx: click.Context,
    site_root: Optional[Path],
    show_root: Optional[Path],
    schema: Optional[Path],
    verbose: bool,
    debug: bool,
    save_logfile: Optional[Path],
) -> None:
    """Configure logging and hand a :class:`CliState` to the sub-command."""
    setup_logging(
        site_root=_log_root(site_root),
        verbose=verbose,
        debug=debug,
        extra_text_log=save_logfile,
    )
    ctx.obj = CliState(
        site_root=site_root,
        show_root=show_root,
        schema=schema,
        prefs=UserPrefs.default(),
    )


cli = main
__all__: list[str] = ["main", "cli", "LazyGroup", "CliState"]
