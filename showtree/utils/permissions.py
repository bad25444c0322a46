"""Directory creation with schema-declared permission bits.

POSIX hosts receive the declared mode verbatim through :func:`os.chmod`.
Windows has no equivalent bits, so a group/world-writable declaration
(``x775``/``x777``) is approximated by granting *everyone* full control with
``icacls``; a setgid or sticky special digit makes that grant inheritable by
directories created later.  This is a compatibility shim, not a security
boundary.
"""

from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path
from typing import Iterable

import structlog

from showtree.config.schema import DirSpec
from showtree.paths import subdir_path

log = structlog.get_logger()

_SHARED_BITS = {"775", "777"}


def _is_windows() -> bool:
    return sys.platform == "win32"


def _icacls_grant(path: Path, permission: str) -> None:
    """Approximate *permission* on Windows with an ``icacls`` grant."""
    special, standard = permission[0], permission[1:]
    if standard not in _SHARED_BITS:
        return
    user = "everyone:(F)"
    if int(special, 8) & 0o3:  # setgid (2) or sticky (1)
        user = "everyone:(CI)(OI)(F)"
    cmd = ["icacls", str(path), "/grant", user]
    log.debug("permissions.icacls", cmd=cmd)
    try:
        subprocess.run(cmd, check=True, capture_output=True, text=True)
    except subprocess.CalledProcessError as exc:
        raise OSError(
            f"icacls exited with status {exc.returncode} for {path}: {exc.stderr}"
        ) from exc


def apply_permission(path: Path, permission: str) -> None:
    """Apply a four digit *permission* string to *path*.

    Raises:
        OSError: When ``chmod`` or ``icacls`` fails.
    """
    if _is_windows():
        _icacls_grant(path, permission)
        return
    os.chmod(path, int(permission, 8))


def create_subdirs(parent: Path, specs: Iterable[DirSpec]) -> list[Path]:
    """Create every directory in *specs* below *parent* in declared order.

    Directories created before a failure are left in place.

    Returns:
        The created paths, in order.

    Raises:
        OSError: When a directory cannot be created or its mode applied.
    """
    created: list[Path] = []
    for spec in specs:
        path = subdir_path(parent, spec.name)
        path.mkdir()
        apply_permission(path, spec.permission)
        log.debug("permissions.subdir", path=str(path), permission=spec.permission)
        created.append(path)
    return created


__all__ = ["apply_permission", "create_subdirs"]
