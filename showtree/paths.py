"""Pure helpers mapping branch names onto filesystem paths.

Nothing here touches the disk: identical inputs always produce identical
paths, which lets the same helpers locate existing directories and decide
where new ones go.
"""

from __future__ import annotations

from pathlib import Path, PurePosixPath

from showtree.errors import InvalidNameError

_SEPARATORS = ("/", "\\")


def validate_name(name: str) -> str:
    """Return *name* unchanged when it is usable as a single directory name.

    Args:
        name: Candidate branch name.

    Returns:
        The same string.

    Raises:
        InvalidNameError: For empty names, ``.``/``..`` or names containing a
            path separator.
    """
    if not name or name in (".", ".."):
        raise InvalidNameError(f"invalid name: {name!r}")
    if any(sep in name for sep in _SEPARATORS):
        raise InvalidNameError(f"name must not contain a path separator: {name!r}")
    return name


def subdir_path(base: Path, relative: str) -> Path:
    """Join a ``/`` separated schema path onto *base*.

    ``""`` returns *base* itself; ``"pub/cam"`` becomes ``base / "pub" / "cam"``
    so the host separator is used on every platform.
    """
    parts = PurePosixPath(relative.replace("\\", "/")).parts if relative else ()
    return base.joinpath(*parts)


def child_path(child_root: Path, name: str) -> Path:
    """Return the directory of child *name* below *child_root*."""
    return child_root / validate_name(name)


__all__ = ["validate_name", "subdir_path", "child_path"]
