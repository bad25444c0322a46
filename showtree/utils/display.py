"""Coloured terminal output used by the CLI commands."""

from __future__ import annotations

from typing import Iterable

import click

__all__ = ["echo_banner", "echo_items", "echo_success", "echo_section"]


def echo_banner(text: str) -> None:
    """Print *text* as a cyan heading above a listing."""
    click.secho(f"\n── {text} ──", fg="cyan", bold=True)


def echo_section(text: str) -> None:
    """Print a magenta sub-heading (one per program in a part listing)."""
    click.secho(f"\n  [{text}]", fg="magenta")


def echo_items(names: Iterable[str], pinned: Iterable[str] = ()) -> None:
    """Print one bullet per name; pinned names get a yellow ``*``.

    Args:
        names: Names in display order.
        pinned: Subset of *names* to highlight.
    """
    highlight = set(pinned)
    for name in names:
        if name in highlight:
            click.secho(f"  * {name}", fg="yellow")
        else:
            click.echo(f"  • {name}")


def echo_success(text: str) -> None:
    click.secho(f"✓ {text}", fg="green")
