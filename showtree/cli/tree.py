"""
Browse and grow the production tree.

Both commands take the identifying chain top-down::

    showtree-cli list                        # shows
    showtree-cli list sh01 shot g1           # units of a group
    showtree-cli list sh01 shot g1 u1 comp   # tasks of a part
    showtree-cli create sh01 shot g1 u2      # new unit u2

Pinned shows and pinned units (see ``showtree-cli pin``) are listed first.
"""

from __future__ import annotations

from typing import Tuple

import click
import structlog

from showtree.branch import Group, Part, Site, _Container
from showtree.cli._common import CTX, cli_errors
from showtree.prefs import pinned_first
from showtree.utils.display import echo_banner, echo_items, echo_section, echo_success

log = structlog.get_logger()


def _echo_part(part: Part) -> None:
    """Print the tasks of *part* grouped by program."""
    tasks = part.tasks()
    if not tasks:
        click.echo("  (no tasks)")
        return
    for key in part.programs:
        mine = [t for t in tasks if t.program.key == key]
        if not mine:
            continue
        echo_section(key)
        for task in mine:
            click.echo(f"  • {task.name:<20} {' '.join(task.versions)}")


# ---------------------------------------------------------------------------
# list
# ---------------------------------------------------------------------------
@click.command(
    name="list",
    context_settings=CTX,
    help="List the children of SHOW CATEGORY GROUP UNIT PART (shows when empty).",
)
@click.argument("names", nargs=-1)
@click.pass_obj
def list_cmd(state, names: Tuple[str, ...]) -> None:
    """Entry-point for ``showtree-cli list``."""
    site: Site = state.site
    with cli_errors():
        node = site.resolve(*names)
        if isinstance(node, Part):
            echo_banner(" / ".join(names))
            _echo_part(node)
            return
        if not isinstance(node, _Container):
            raise click.ClickException(f"{node.label} {node.name!r} has no children")

        children = node.list()
        pinned: list[str] = []
        if isinstance(node, Site):
            pinned = state.prefs.pinned_shows()
        elif isinstance(node, Group):
            pinned = state.prefs.pinned_units(node.ids()["show"])
        pinned = [p for p in pinned if p in children]

    echo_banner(" / ".join(names) if names else str(site.path))
    echo_items(pinned_first(children, pinned), pinned=pinned)


# ---------------------------------------------------------------------------
# create
# ---------------------------------------------------------------------------
@click.command(
    name="create",
    context_settings=CTX,
    help="Create the last of NAMES below the existing chain given before it.",
)
@click.argument("names", nargs=-1, required=True)
@click.option(
    "--default-tasks/--no-default-tasks",
    default=True,
    help="When creating a part, also create the first scene of its default tasks.",
)
@click.pass_obj
def create_cmd(state, names: Tuple[str, ...], default_tasks: bool) -> None:
    """Entry-point for ``showtree-cli create``."""
    site: Site = state.site
    with cli_errors():
        parent = site.resolve(*names[:-1])
        if not isinstance(parent, _Container):
            raise click.ClickException(
                f"cannot create below {parent.label} {parent.name!r}; "
                "use 'showtree-cli scene new' for tasks"
            )
        child = parent.create(names[-1])
        echo_success(f"Created {child.label} {child.name} at {child.path}")

        if isinstance(child, Part) and default_tasks:
            for scene in state.runner.create_default_tasks(child):
                echo_success(f"Created scene {scene.name}")
