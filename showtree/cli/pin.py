"""Pin shows and units so ``showtree-cli list`` shows them first."""

from __future__ import annotations

from typing import Optional

import click

from showtree.cli._common import CTX, cli_errors
from showtree.utils.display import echo_success


@click.command(name="pin", context_settings=CTX, help="Pin SHOW, or UNIT within SHOW.")
@click.argument("show")
@click.argument("unit", required=False)
@click.pass_obj
def pin_cmd(state, show: str, unit: Optional[str]) -> None:
    """Entry-point for ``showtree-cli pin``."""
    with cli_errors():
        state.site.get(show)
    if unit:
        state.prefs.pin_unit(show, unit)
        echo_success(f"Pinned unit {unit} of {show}")
    else:
        state.prefs.pin_show(show)
        echo_success(f"Pinned show {show}")


@click.command(name="unpin", context_settings=CTX, help="Unpin SHOW, or UNIT within SHOW.")
@click.argument("show")
@click.argument("unit", required=False)
@click.pass_obj
def unpin_cmd(state, show: str, unit: Optional[str]) -> None:
    """Entry-point for ``showtree-cli unpin``."""
    if unit:
        state.prefs.unpin_unit(show, unit)
        echo_success(f"Unpinned unit {unit} of {show}")
    else:
        state.prefs.unpin_show(show)
        echo_success(f"Unpinned show {show}")
