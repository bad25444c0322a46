"""
Pydantic models that mirror the studio schema consumed by *showtree*.

The classes in this module define a strongly-typed representation of the
schema document so that the rest of the codebase works with validated,
immutable objects instead of ad-hoc dictionaries.

Notes:
* Every model forbids unknown keys; a misspelt attribute is reported at load
  time instead of being silently ignored.
* Cross references (program names, child roots, program directories) are
  checked once on the root model so a single malformed part invalidates the
  whole document.
"""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# Operating-system keys accepted in ``create_command`` / ``open_command``.
OS_KEYS = ("linux", "darwin", "windows")

_OCTAL = set("01234567")

# --------------------------------------------------------------------------- #
# 1.  Leaf models – immutable value objects                                   #
# --------------------------------------------------------------------------- #


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class DirSpec(_Frozen):
    """Subdirectory created together with a branch.

    Attributes:
        name: Path relative to the branch directory.  ``/`` separated
            components (``asset/char``) are allowed; parents must be listed
            first.
        permission: Four character octal string – one special digit
            (setuid/setgid/sticky) followed by the user/group/other digits.
    """

    name: str
    permission: str

    @field_validator("name")
    @classmethod
    def _relative_name(cls, v: str) -> str:
        """Reject empty, absolute or parent-escaping subdirectory names."""
        parts = PurePosixPath(v.replace("\\", "/")).parts
        if not parts or v.startswith(("/", "\\")) or ".." in parts:
            raise ValueError(f"subdirectory name must be a relative path: {v!r}")
        return v

    @field_validator("permission")
    @classmethod
    def _four_octal_digits(cls, v: str) -> str:
        """Ensure the permission is exactly four octal digits (e.g. ``2775``)."""
        if len(v) != 4:
            raise ValueError(f"permission must be 4 characters long, got {v!r}")
        if not set(v) <= _OCTAL:
            raise ValueError(f"permission must be octal digits, got {v!r}")
        return v

    @property
    def mode(self) -> int:
        """Return the permission as an integer mode (``"2775"`` → ``0o2775``)."""
        return int(self.permission, 8)


class BranchInfo(_Frozen):
    """Layout of one hierarchy level.

    Attributes:
        label: Display label (``"Sequence"``, ``"Shot"`` …).
        subdirs: Subdirectories created with every branch of this level.
        child_root: Declared subdirectory holding the next level; empty
            string means the branch directory itself.
    """

    label: str
    subdirs: List[DirSpec]
    child_root: str

    def declared(self, name: str) -> bool:
        """Return *True* when *name* is one of :attr:`subdirs`."""
        return any(d.name == name for d in self.subdirs)


class DefaultTask(_Frozen):
    """Task whose first scene is created right after its part."""

    name: str
    program: str


class PartInfo(_Frozen):
    """Layout of a part (discipline work area) inside a unit.

    Attributes:
        label: Display label.
        subdirs: Subdirectories created with the part.
        programs: Mapping of program name to the directory, relative to the
            part directory, in which that program's scenes live.
        default_tasks: Tasks created at ``v001`` when the part is set up.
    """

    label: str
    subdirs: List[DirSpec]
    programs: Dict[str, str]
    default_tasks: List[DefaultTask] = Field(default_factory=list)

    def declared(self, name: str) -> bool:
        """Return *True* when *name* is one of :attr:`subdirs`."""
        return any(d.name == name for d in self.subdirs)


class CategoryInfo(_Frozen):
    """Sub-hierarchy of one work category (``shot``, ``asset`` …)."""

    label: str
    group: BranchInfo
    unit: BranchInfo
    part: Dict[str, PartInfo]


class ProgramSpec(_Frozen):
    """External creative application able to create and open scenes.

    Attributes:
        name: Display name.
        extension: Scene file extension including the leading dot.
        create_command: Launcher used to create a scene, keyed by OS.
        open_command: Launcher used to open a scene, keyed by OS.
    """

    name: str
    extension: str
    create_command: Dict[str, str]
    open_command: Dict[str, str]

    @field_validator("extension")
    @classmethod
    def _dotted(cls, v: str) -> str:
        """Require a non-empty extension starting with ``.``."""
        if len(v) < 2 or not v.startswith("."):
            raise ValueError(f"extension must start with '.', got {v!r}")
        return v

    @field_validator("create_command", "open_command")
    @classmethod
    def _known_os(cls, v: Dict[str, str]) -> Dict[str, str]:
        """Reject OS keys other than ``linux``, ``darwin`` and ``windows``."""
        unknown = set(v) - set(OS_KEYS)
        if unknown:
            raise ValueError("Unknown operating system(s): " + ", ".join(sorted(unknown)))
        return v

    def command(self, action: str, os_key: str) -> Optional[str]:
        """Return the launcher for *action* (``create``/``open``) on *os_key*."""
        table = self.create_command if action == "create" else self.open_command
        return table.get(os_key) or None


# --------------------------------------------------------------------------- #
# 2.  Top-level model – complete validated schema                             #
# --------------------------------------------------------------------------- #


class SchemaInfo(_Frozen):
    """Root schema object consumed by the rest of *showtree*.

    Attributes:
        show: Layout of a show directory.
        category: Layout shared by every category directory.
        categories: Per-category group/unit/part layouts.
        programs: Programs referenced by part definitions.
    """

    show: BranchInfo
    category: BranchInfo
    categories: Dict[str, CategoryInfo]
    programs: Dict[str, ProgramSpec]

    @model_validator(mode="after")
    def _references_resolve(self):
        """Check every name referenced across levels exists in the schema."""
        problems: list[str] = []

        def _child_root(where: str, info: BranchInfo) -> None:
            if info.child_root and not info.declared(info.child_root):
                problems.append(
                    f"{where}: child_root {info.child_root!r} is not a declared subdir"
                )

        _child_root("show", self.show)
        _child_root("category", self.category)

        for cname, cat in self.categories.items():
            _child_root(f"categories.{cname}.group", cat.group)
            _child_root(f"categories.{cname}.unit", cat.unit)
            for pname, part in cat.part.items():
                where = f"categories.{cname}.part.{pname}"
                for prog, rel in part.programs.items():
                    if prog not in self.programs:
                        problems.append(f"{where}: unknown program {prog!r}")
                    if rel and not part.declared(rel):
                        problems.append(
                            f"{where}: program directory {rel!r} is not a declared subdir"
                        )
                for task in part.default_tasks:
                    if task.program not in part.programs:
                        problems.append(
                            f"{where}: default task {task.name!r} uses program "
                            f"{task.program!r} not registered for the part"
                        )

        if problems:
            raise ValueError("; ".join(problems))
        return self

    # --------------------------- convenience ----------------------------- #
    def category_info(self, name: str) -> Optional[CategoryInfo]:
        """Return the :class:`CategoryInfo` for *name* or *None*."""
        return self.categories.get(name)

    @property
    def category_names(self) -> List[str]:
        """Declared category names in document order."""
        return list(self.categories)
