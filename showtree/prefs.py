"""Per-user preferences stored as small JSON documents.

Files live in ``$SHOWTREE_CONFIG_DIR`` or the per-user application directory
returned by :func:`click.get_app_dir`:

* ``pinned_show.json`` – ``{show: true}``
* ``pinned_unit.json`` – ``{show: {unit: true}}``
* ``selected.json``   – last selected identifiers (show … version)

Pinned entries are listed first by the CLI.  None of this is part of the
production tree; losing the files only loses convenience state.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import click
import structlog

log = structlog.get_logger()

CONFIG_DIR_ENV = "SHOWTREE_CONFIG_DIR"

_PINNED_SHOW = "pinned_show.json"
_PINNED_UNIT = "pinned_unit.json"
_SELECTED = "selected.json"


def pinned_first(names: Iterable[str], pinned: Iterable[str]) -> List[str]:
    """Return *names* with pinned entries moved to the front, order kept."""
    names = list(names)
    marked = set(pinned)
    return [n for n in names if n in marked] + [n for n in names if n not in marked]


class UserPrefs:
    """JSON key/value store for one user.

    Args:
        directory: Folder holding the JSON files; created on first write.
    """

    def __init__(self, directory: Path) -> None:
        self.directory = directory

    @classmethod
    def default(cls) -> "UserPrefs":
        """Return the store located by ``$SHOWTREE_CONFIG_DIR`` or the app dir."""
        env_dir = os.environ.get(CONFIG_DIR_ENV)
        directory = Path(env_dir).expanduser() if env_dir else Path(click.get_app_dir("showtree"))
        return cls(directory)

    # ------------------------------------------------------------------ #
    # Raw access                                                           #
    # ------------------------------------------------------------------ #
    def load(self, name: str) -> Dict:
        """Return the document *name*, or ``{}`` when it does not exist."""
        path = self.directory / name
        if not path.is_file():
            return {}
        with path.open(encoding="utf-8") as fh:
            return json.load(fh)

    def save(self, name: str, data: Dict) -> None:
        """Write *data* to the document *name*."""
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.directory / name
        path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
        log.debug("prefs.save", path=str(path))

    # ------------------------------------------------------------------ #
    # Pinned shows                                                         #
    # ------------------------------------------------------------------ #
    def pinned_shows(self) -> List[str]:
        return sorted(self.load(_PINNED_SHOW))

    def pin_show(self, show: str) -> None:
        data = self.load(_PINNED_SHOW)
        data[show] = True
        self.save(_PINNED_SHOW, data)

    def unpin_show(self, show: str) -> None:
        data = self.load(_PINNED_SHOW)
        data.pop(show, None)
        self.save(_PINNED_SHOW, data)

    # ------------------------------------------------------------------ #
    # Pinned units                                                         #
    # ------------------------------------------------------------------ #
    def pinned_units(self, show: str) -> List[str]:
        return sorted(self.load(_PINNED_UNIT).get(show, {}))

    def pin_unit(self, show: str, unit: str) -> None:
        data = self.load(_PINNED_UNIT)
        data.setdefault(show, {})[unit] = True
        self.save(_PINNED_UNIT, data)

    def unpin_unit(self, show: str, unit: str) -> None:
        data = self.load(_PINNED_UNIT)
        units = data.get(show, {})
        units.pop(unit, None)
        if not units:
            data.pop(show, None)
        self.save(_PINNED_UNIT, data)

    # ------------------------------------------------------------------ #
    # Last selection                                                       #
    # ------------------------------------------------------------------ #
    def selected(self) -> Dict[str, str]:
        return self.load(_SELECTED)

    def save_selected(self, ids: Dict[str, str], version: Optional[str] = None) -> None:
        data = dict(ids)
        if version:
            data["version"] = version
        self.save(_SELECTED, data)


__all__ = ["UserPrefs", "pinned_first"]
