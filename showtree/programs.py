"""Per-part program registry and host-OS command resolution.

A :class:`Program` binds a schema :class:`ProgramSpec` to the directory in
which a part keeps that program's scenes.  Every program exposes the same
naming/discovery/command contract, so parts simply hold a mapping of program
name to :class:`Program`.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from showtree.config.schema import PartInfo, ProgramSpec, SchemaInfo
from showtree.config.settings import SiteSettings
from showtree.errors import UnsupportedPlatformError
from showtree.paths import subdir_path
from showtree.scene import discover_tasks, scene_name, scene_prefix


def host_os(platform: Optional[str] = None) -> str:
    """Return the schema OS key (``linux``/``darwin``/``windows``) of the host."""
    platform = platform or sys.platform
    if platform == "win32":
        return "windows"
    if platform == "darwin":
        return "darwin"
    return "linux"


def resolve_command(
    spec: ProgramSpec,
    action: str,
    settings: SiteSettings,
    *,
    os_key: Optional[str] = None,
) -> Path:
    """Return the absolute launcher path of *spec* for *action* on this host.

    Args:
        spec: Program definition from the schema.
        action: ``"create"`` or ``"open"``.
        settings: Site settings used to resolve relative launcher paths.
        os_key: Override for the host OS key (tests).

    Raises:
        UnsupportedPlatformError: When no launcher is declared for the OS.
    """
    os_key = os_key or host_os()
    command = spec.command(action, os_key)
    if not command:
        raise UnsupportedPlatformError(
            f"{spec.name} has no {action} command for {os_key}"
        )
    return settings.resolve_command(command)


@dataclass(frozen=True)
class Program:
    """A program as seen from one part directory.

    Attributes:
        key: Program name used in the schema (``maya``).
        spec: The schema definition.
        directory: Absolute directory holding this program's scenes.
    """

    key: str
    spec: ProgramSpec
    directory: Path

    @property
    def extension(self) -> str:
        return self.spec.extension

    def scene_path(
        self,
        show: str,
        group: str,
        unit: str,
        part: str,
        task: str,
        version: str,
    ) -> Path:
        """Return the absolute scene path for the identifiers."""
        return self.directory / scene_name(
            show, group, unit, part, task, version, self.extension
        )

    def discover(self, show: str, group: str, unit: str, part: str) -> Dict[str, List[str]]:
        """Return ``{task: versions}`` found in :attr:`directory`."""
        return discover_tasks(
            self.directory, scene_prefix(show, group, unit, part), self.extension
        )


def programs_for(part_info: PartInfo, schema: SchemaInfo, part_dir: Path) -> Dict[str, Program]:
    """Build the program registry of a part in schema order."""
    return {
        key: Program(key, schema.programs[key], subdir_path(part_dir, rel))
        for key, rel in part_info.programs.items()
    }


__all__ = ["Program", "host_os", "resolve_command", "programs_for"]
