"""
Scene file naming and discovery.

A scene file name encodes the identifying chain and version::

    <show>_<group>_<unit>_<part>_<task>_<version><ext>

e.g. ``sh01_g1_u1_comp_main_v002.nk``.  Discovery reverses the encoding over
a directory listing:

1. keep regular files ending in the program extension;
2. strip the extension and the ``show_group_unit_part_`` prefix; files with
   another prefix are ignored so legacy files can share the directory;
3. the last ``_`` token is the version, everything before it the task name
   (task names may contain underscores);
4. versions must be ``v`` followed by digits with a non-zero value, so
   ``v000`` is ignored like any malformed token;
5. versions are sorted lexicographically per task and tasks by name.

Sorting is plain string ordering (``v100`` sorts before ``v20``), so callers
must keep version padding consistent.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, List, Optional

import structlog

log = structlog.get_logger()

VERSION_PREFIX = "v"
FIRST_VERSION = "v001"


def scene_prefix(show: str, group: str, unit: str, part: str) -> str:
    """Return the ``show_group_unit_part_`` prefix shared by a part's scenes."""
    return "_".join((show, group, unit, part)) + "_"


def scene_name(
    show: str,
    group: str,
    unit: str,
    part: str,
    task: str,
    version: str,
    extension: str,
) -> str:
    """Return the scene file name for the given identifiers."""
    return scene_prefix(show, group, unit, part) + f"{task}_{version}{extension}"


def is_version(token: str) -> bool:
    """Return *True* for ``v`` + digits with a non-zero integer value.

    ``v000`` is rejected: a zero version is treated the same as no version.
    """
    if not token.startswith(VERSION_PREFIX):
        return False
    digits = token[len(VERSION_PREFIX):]
    if not digits.isascii() or not digits.isdigit():
        return False
    return int(digits) != 0


def next_version(versions: List[str]) -> str:
    """Return the version after the last of *versions*, keeping its padding.

    An empty list yields :data:`FIRST_VERSION`.
    """
    if not versions:
        return FIRST_VERSION
    digits = versions[-1][len(VERSION_PREFIX):]
    return f"{VERSION_PREFIX}{int(digits) + 1:0{len(digits)}d}"


def parse_scene_stem(stem: str, prefix: str) -> Optional[tuple[str, str]]:
    """Split an extension-less file name into ``(task, version)``.

    Returns:
        The pair, or *None* when *stem* does not carry *prefix*, has no task
        name or the last token is not a valid version.
    """
    if not stem.startswith(prefix):
        return None
    tokens = stem[len(prefix):].split("_")
    if len(tokens) < 2:
        return None
    task, version = "_".join(tokens[:-1]), tokens[-1]
    if not task or not is_version(version):
        return None
    return task, version


def discover_tasks(directory: Path, prefix: str, extension: str) -> Dict[str, List[str]]:
    """Scan *directory* for scenes and group their versions by task.

    Args:
        directory: Program directory of a part.
        prefix: Value of :func:`scene_prefix` for the part.
        extension: Program extension including the leading dot.

    Returns:
        Mapping of task name to ascending version list, ordered by task
        name.  A missing directory yields an empty mapping.
    """
    if not directory.is_dir():
        log.debug("scene.discover_missing_dir", dir=str(directory))
        return {}

    found: Dict[str, List[str]] = {}
    with os.scandir(directory) as entries:
        for entry in entries:
            if not entry.is_file(follow_symlinks=False):
                continue
            if not entry.name.endswith(extension):
                continue
            parsed = parse_scene_stem(entry.name[: -len(extension)], prefix)
            if parsed is None:
                continue
            task, version = parsed
            found.setdefault(task, []).append(version)

    tasks = {task: sorted(found[task]) for task in sorted(found)}
    log.debug("scene.discover", dir=str(directory), tasks=len(tasks))
    return tasks


__all__ = [
    "FIRST_VERSION",
    "scene_prefix",
    "scene_name",
    "is_version",
    "next_version",
    "parse_scene_stem",
    "discover_tasks",
]
