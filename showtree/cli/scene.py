"""
Scene commands.

``showtree-cli tasks SHOW CATEGORY GROUP UNIT PART``
    Tab-separated ``task program versions`` lines for scripting.

``showtree-cli scene new SHOW CATEGORY GROUP UNIT PART TASK``
    Create the next version of TASK (``v001`` for a new task) through the
    program's create launcher.  Blocks until the launcher exits.

``showtree-cli scene open SHOW CATEGORY GROUP UNIT PART TASK``
    Open the latest (or ``--version``) scene in a detached launcher.  With
    ``--wait`` the command waits for the launcher and fails when it does.

``showtree-cli scene last``
    Reopen the most recently created or opened scene.

Every successful ``new``/``open`` stores the selection in the user
preferences so ``scene last`` can find it again.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

import click
import structlog

from showtree.branch import Part, Site, Task
from showtree.cli._common import CTX, cli_errors
from showtree.errors import ExternalCommandError, NotFoundError
from showtree.scene import next_version
from showtree.utils.display import echo_banner, echo_success

log = structlog.get_logger()

_PART_LEVELS = ("show", "category", "group", "unit", "part")


def _part(site: Site, names: Tuple[str, ...]) -> Part:
    node = site.resolve(*names)
    if not isinstance(node, Part):
        raise NotFoundError(f"{node!r} is not a part")
    return node


def _pick_program(part: Part, program: Optional[str]) -> str:
    """Return *program* or the part's only program."""
    if program:
        return program
    keys = list(part.programs)
    if len(keys) == 1:
        return keys[0]
    raise click.UsageError(
        f"part {part.name!r} has several programs; pass --program "
        f"({', '.join(keys)})"
    )


def _open(state, task: Task, version: Optional[str], wait: bool) -> None:
    """Open *task* and report launcher failures on stderr."""
    errors: List[ExternalCommandError] = []

    def _report(err: ExternalCommandError) -> None:
        errors.append(err)
        click.secho(f"✗ {err}", fg="red", err=True)

    with cli_errors():
        version = version or task.latest_version
        handle = state.runner.open_scene(task, version, on_error=_report)
    if wait:
        handle.wait()
    if errors:
        raise click.ClickException("launcher failed")

    state.prefs.save_selected({**task.ids(), "program": task.program.key}, version)
    echo_success(f"Opening {task.scene_path(version).name} (pid {handle.pid})")


# ---------------------------------------------------------------------------
# tasks
# ---------------------------------------------------------------------------
@click.command(name="tasks", context_settings=CTX, help="Print the tasks of a part.")
@click.argument("names", nargs=len(_PART_LEVELS), metavar="SHOW CATEGORY GROUP UNIT PART")
@click.option("--program", help="Restrict to one program.")
@click.pass_obj
def tasks_cmd(state, names: Tuple[str, ...], program: Optional[str]) -> None:
    """Entry-point for ``showtree-cli tasks``."""
    with cli_errors():
        tasks = _part(state.site, names).tasks(program)
    for task in tasks:
        click.echo(f"{task.name}\t{task.program.key}\t{' '.join(task.versions)}")


# ---------------------------------------------------------------------------
# scene group
# ---------------------------------------------------------------------------
@click.group(name="scene", context_settings=CTX, help="Create and open scenes.")
def scene() -> None:
    pass


@scene.command(name="new", context_settings=CTX, help="Create a new scene version.")
@click.argument("names", nargs=len(_PART_LEVELS), metavar="SHOW CATEGORY GROUP UNIT PART")
@click.argument("task_name", metavar="TASK")
@click.option("--program", help="Program owning the scene (required when the part has several).")
@click.option("--version", "version", help="Explicit version, e.g. v003 (default: next).")
@click.pass_obj
def new_cmd(
    state,
    names: Tuple[str, ...],
    task_name: str,
    program: Optional[str],
    version: Optional[str],
) -> None:
    """Entry-point for ``showtree-cli scene new``."""
    with cli_errors():
        part = _part(state.site, names)
        task = part.new_task(task_name, _pick_program(part, program))
        version = version or next_version(task.versions)
        scene_path = state.runner.create_scene(task, version)

    state.prefs.save_selected({**task.ids(), "program": task.program.key}, version)
    echo_success(f"Created {scene_path}")


@scene.command(name="open", context_settings=CTX, help="Open a scene in its program.")
@click.argument("names", nargs=len(_PART_LEVELS), metavar="SHOW CATEGORY GROUP UNIT PART")
@click.argument("task_name", metavar="TASK")
@click.option("--program", help="Program owning the scene.")
@click.option("--version", "version", help="Version to open (default: latest).")
@click.option("--wait", is_flag=True, help="Wait for the launcher and fail when it fails.")
@click.pass_obj
def open_cmd(
    state,
    names: Tuple[str, ...],
    task_name: str,
    program: Optional[str],
    version: Optional[str],
    wait: bool,
) -> None:
    """Entry-point for ``showtree-cli scene open``."""
    with cli_errors():
        task = _part(state.site, names).get(task_name, program)
    _open(state, task, version, wait)


@scene.command(name="last", context_settings=CTX, help="Reopen the last selected scene.")
@click.option("--wait", is_flag=True, help="Wait for the launcher and fail when it fails.")
@click.pass_obj
def last_cmd(state, wait: bool) -> None:
    """Entry-point for ``showtree-cli scene last``."""
    selected = state.prefs.selected()
    missing = [k for k in (*_PART_LEVELS, "task") if k not in selected]
    if missing:
        raise click.ClickException("no scene selected yet")

    echo_banner(" / ".join(selected[k] for k in (*_PART_LEVELS, "task")))
    names = tuple(selected[k] for k in _PART_LEVELS)
    with cli_errors():
        task = _part(state.site, names).get(selected["task"], selected.get("program"))
    _open(state, task, selected.get("version"), wait)
