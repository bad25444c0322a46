"""
Schema-driven branch model.

The production tree is a chain of typed directory nodes::

    Site → Show → Category → Group → Unit → Part → Task

Each branch stores only its *parent* and its *name*; its path, subdirectory
layout and child location are derived on every access from the parent chain
and the schema slice of its level.  Nothing is cached, every call is a fresh
read against the filesystem, which stays the only durable state.

Container levels (Site/Show/Category/Group/Unit) share three operations:

``create(name)``
    Create the child directory plus all schema-declared subdirectories.
``get(name)``
    Return the child after checking it exists.
``list()``
    Sorted names of the child directories.

A :class:`Part` exposes its tasks instead, discovered from scene files by the
program registry in :mod:`showtree.programs`.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import ClassVar, Dict, Iterator, List, Optional, Type, Union

import structlog

from showtree.config.loader import load_schema_file
from showtree.config.schema import BranchInfo, CategoryInfo, DirSpec, PartInfo, SchemaInfo
from showtree.config.settings import SiteSettings
from showtree.errors import (
    AlreadyExistsError,
    InvalidCategoryError,
    InvalidPartError,
    NoVersionError,
    NotFoundError,
)
from showtree.paths import child_path, subdir_path, validate_name
from showtree.programs import Program, programs_for
from showtree.utils.permissions import create_subdirs

log = structlog.get_logger()

KindLike = Union[str, Type["Branch"]]


# --------------------------------------------------------------------------- #
# Base class                                                                  #
# --------------------------------------------------------------------------- #
class Branch:
    """Typed node of the production tree."""

    kind: ClassVar[str] = ""

    def __init__(self, parent: Optional["Branch"], name: str) -> None:
        self.parent = parent
        self.name = validate_name(name) if parent is not None else name

    # ------------------------------------------------------------------ #
    # Tree navigation                                                     #
    # ------------------------------------------------------------------ #
    @property
    def site(self) -> "Site":
        node: Branch = self
        while node.parent is not None:
            node = node.parent
        return node  # type: ignore[return-value]

    @property
    def schema(self) -> SchemaInfo:
        return self.site.schema

    @property
    def settings(self) -> SiteSettings:
        return self.site.settings

    def ancestors(self) -> Iterator["Branch"]:
        """Yield the parent chain, nearest first."""
        node = self.parent
        while node is not None:
            yield node
            node = node.parent

    def ancestor(self, kind: KindLike) -> Optional["Branch"]:
        """Return the nearest ancestor of *kind* (name or class), or *None*."""
        for node in self.ancestors():
            if (isinstance(kind, str) and node.kind == kind) or (
                isinstance(kind, type) and isinstance(node, kind)
            ):
                return node
        return None

    def chain(self) -> List["Branch"]:
        """Return the branches from the show down to *self*."""
        nodes = [self, *self.ancestors()]
        return [n for n in reversed(nodes) if not isinstance(n, Site)]

    def ids(self) -> Dict[str, str]:
        """Return ``{kind: name}`` for the chain from the show down to *self*."""
        return {n.kind: n.name for n in self.chain()}

    # ------------------------------------------------------------------ #
    # Schema slice and derived paths                                      #
    # ------------------------------------------------------------------ #
    @property
    def info(self) -> Union[BranchInfo, PartInfo, None]:
        """Schema slice describing this level."""
        return None

    @property
    def label(self) -> str:
        return self.info.label if self.info is not None else self.kind

    @property
    def path(self) -> Path:
        """Absolute directory, derived from the parent's child root.

        Raises:
            TypeError: When the branch has no parent; only :class:`Site`
                is parentless and it overrides this property.
        """
        if self.parent is None:
            raise TypeError(f"{type(self).__name__} {self.name!r} has no parent branch")
        return child_path(self.parent.child_root, self.name)

    @property
    def subdir_specs(self) -> List[DirSpec]:
        return list(self.info.subdirs) if self.info is not None else []

    @property
    def child_root(self) -> Path:
        """Directory holding the next level's branches."""
        info = self.info
        rel = info.child_root if isinstance(info, BranchInfo) else ""
        return subdir_path(self.path, rel)

    def exists(self) -> bool:
        return self.path.is_dir()

    def environ(self) -> Dict[str, str]:
        """Return the identifying chain as environment variables.

        For every level from the show down, ``<KIND>`` holds the name and
        ``<KIND>_DIR`` the absolute directory (``SHOW``, ``SHOW_DIR`` …).
        """
        env: Dict[str, str] = {}
        for node in self.chain():
            key = node.kind.upper()
            env[key] = node.name
            env[f"{key}_DIR"] = str(node.path)
        return env

    # ------------------------------------------------------------------ #
    # Dunder helpers                                                      #
    # ------------------------------------------------------------------ #
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Branch):
            return NotImplemented
        return type(self) is type(other) and self.path == other.path

    def __hash__(self) -> int:
        return hash((type(self), self.path))

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r} {self.path}>"


class _Container(Branch):
    """Branch whose children are directories below :attr:`child_root`."""

    child_class: ClassVar[Type[Branch]]

    def _accepts(self, name: str) -> bool:
        """Return *True* when a listed directory is a valid child."""
        return True

    def _make_child(self, name: str) -> Branch:
        return self.child_class(self, name)

    def list(self) -> List[str]:
        """Return child directory names, sorted.

        Raises:
            NotFoundError: When :attr:`child_root` does not exist.
        """
        root = self.child_root
        if not root.is_dir():
            raise NotFoundError(f"{self.label} directory {root} does not exist")
        with os.scandir(root) as entries:
            names = sorted(e.name for e in entries if e.is_dir(follow_symlinks=False))
        return [n for n in names if self._accepts(n)]

    def get(self, name: str) -> Branch:
        """Return child *name* after checking its directory exists.

        Raises:
            NotFoundError: When the directory is absent.
        """
        child = self._make_child(name)
        if not child.exists():
            raise NotFoundError(f"{child.label} {name!r} not found at {child.path}")
        return child

    def children(self) -> List[Branch]:
        """Return every listed child branch."""
        return [self._make_child(n) for n in self.list()]

    def create(self, name: str) -> Branch:
        """Create child *name* and its declared subdirectories.

        Directories created before a failure are left in place.

        Raises:
            NotFoundError: When :attr:`child_root` does not exist.
            AlreadyExistsError: When the child directory already exists.
            OSError: When a subdirectory or its permission cannot be set.
        """
        child = self._make_child(name)
        if not self.child_root.is_dir():
            raise NotFoundError(f"{self.label} directory {self.child_root} does not exist")
        try:
            child.path.mkdir()
        except FileExistsError as exc:
            raise AlreadyExistsError(
                f"{child.label} {name!r} already exists at {child.path}"
            ) from exc
        create_subdirs(child.path, child.subdir_specs)
        log.info("branch.create", kind=child.kind, name=name, path=str(child.path))
        return child


# --------------------------------------------------------------------------- #
# Concrete levels                                                             #
# --------------------------------------------------------------------------- #
class Task(Branch):
    """A task of a part, tied to the program that owns its scenes.

    Attributes:
        program: Program registry entry of the owning part.
        versions: Ascending versions discovered on disk.
    """

    kind = "task"

    def __init__(
        self,
        parent: "Part",
        name: str,
        program: Program,
        versions: Optional[List[str]] = None,
    ) -> None:
        super().__init__(parent, name)
        self.program = program
        self.versions = list(versions or [])

    @property
    def path(self) -> Path:
        """Program directory in which the task's scenes live."""
        return self.program.directory

    @property
    def child_root(self) -> Path:
        return self.path

    @property
    def latest_version(self) -> str:
        """Return the last discovered version.

        Raises:
            NoVersionError: When no version was discovered.
        """
        if not self.versions:
            raise NoVersionError(f"task {self.name!r} has no versions")
        return self.versions[-1]

    def exists(self) -> bool:
        return bool(self.versions)

    def scene_path(self, version: str) -> Path:
        """Return the scene file of *version*."""
        ids = self.ids()
        return self.program.scene_path(
            ids["show"], ids["group"], ids["unit"], ids["part"], self.name, version
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Task):
            return NotImplemented
        return (self.name, self.program.key, self.path) == (
            other.name,
            other.program.key,
            other.path,
        )

    def __hash__(self) -> int:
        return hash((Task, self.name, self.program.key, self.path))

    def __repr__(self) -> str:
        return f"<Task {self.name!r} {self.program.key} {self.versions}>"


class Part(Branch):
    """Discipline work area of a unit (``lit``, ``fx``, ``comp`` …)."""

    kind = "part"

    @property
    def category_info(self) -> CategoryInfo:
        return self.ancestor(Category).category_info  # type: ignore[union-attr]

    @property
    def info(self) -> PartInfo:
        return self.category_info.part[self.name]

    @property
    def program_dirs(self) -> Dict[str, str]:
        """Program name → directory relative to the part."""
        return dict(self.info.programs)

    @property
    def programs(self) -> Dict[str, Program]:
        return programs_for(self.info, self.schema, self.path)

    def program(self, key: str) -> Program:
        """Return registry entry *key*.

        Raises:
            NotFoundError: When the part has no such program.
        """
        try:
            return self.programs[key]
        except KeyError:
            raise NotFoundError(
                f"program {key!r} is not registered for part {self.name!r}"
            ) from None

    def tasks(self, program: Optional[str] = None) -> List[Task]:
        """Discover tasks, one scan per registered program.

        Args:
            program: Restrict discovery to one program.

        Returns:
            Tasks sorted by name; a name used by several programs appears once
            per program in registry order.
        """
        ids = self.ids()
        registry = self.programs if program is None else {program: self.program(program)}
        found: List[Task] = []
        for prog in registry.values():
            for name, versions in prog.discover(
                ids["show"], ids["group"], ids["unit"], self.name
            ).items():
                found.append(Task(self, name, prog, versions))
        order = {key: i for i, key in enumerate(registry)}
        return sorted(found, key=lambda t: (t.name, order[t.program.key]))

    def list(self) -> List[str]:
        """Return discovered task names, sorted and unique."""
        return sorted({t.name for t in self.tasks()})

    def get(self, name: str, program: Optional[str] = None) -> Task:
        """Return discovered task *name*.

        Raises:
            NotFoundError: When no scene of the task exists.
        """
        for task in self.tasks(program):
            if task.name == name:
                return task
        raise NotFoundError(f"task {name!r} not found in part {self.name!r}")

    def new_task(self, name: str, program: str) -> Task:
        """Return a task shell for *program*, carrying any existing versions."""
        prog = self.program(program)
        ids = self.ids()
        versions = prog.discover(ids["show"], ids["group"], ids["unit"], self.name)
        return Task(self, name, prog, versions.get(name, []))


class Unit(_Container):
    """Shot or asset."""

    kind = "unit"
    child_class = Part

    @property
    def category_info(self) -> CategoryInfo:
        return self.ancestor(Category).category_info  # type: ignore[union-attr]

    @property
    def info(self) -> BranchInfo:
        return self.category_info.unit

    def _accepts(self, name: str) -> bool:
        return name in self.category_info.part

    def _make_child(self, name: str) -> Part:
        if name not in self.category_info.part:
            raise InvalidPartError(
                f"part {name!r} is not declared for category "
                f"{self.ancestor(Category).name!r}"  # type: ignore[union-attr]
            )
        return Part(self, name)


class Group(_Container):
    """Sequence or asset type."""

    kind = "group"
    child_class = Unit

    @property
    def info(self) -> BranchInfo:
        return self.ancestor(Category).category_info.group  # type: ignore[union-attr]


class Category(_Container):
    """Work classification (``shot``, ``asset`` …)."""

    kind = "category"
    child_class = Group

    @property
    def category_info(self) -> CategoryInfo:
        return self.schema.categories[self.name]

    @property
    def info(self) -> BranchInfo:
        return self.schema.category


class Show(_Container):
    """Top-level project."""

    kind = "show"
    child_class = Category

    @property
    def info(self) -> BranchInfo:
        return self.schema.show

    def _accepts(self, name: str) -> bool:
        return name in self.schema.categories

    def _make_child(self, name: str) -> Category:
        if name not in self.schema.categories:
            raise InvalidCategoryError(
                f"category {name!r} is not declared; choose from "
                + ", ".join(self.schema.category_names)
            )
        return Category(self, name)


class Site(_Container):
    """Root of the tree: the show root of one studio site."""

    kind = "site"
    child_class = Show

    def __init__(self, settings: SiteSettings, schema: SchemaInfo) -> None:
        super().__init__(None, "")
        self._settings = settings
        self._schema = schema

    @classmethod
    def from_settings(cls, settings: SiteSettings) -> "Site":
        """Load the schema for *settings* and make sure the show root exists.

        Raises:
            ConfigError: When the schema cannot be resolved or is invalid.
        """
        schema = load_schema_file(settings.schema_path, site_root=settings.site_root)
        settings.ensure_show_root()
        return cls(settings, schema)

    @property
    def site(self) -> "Site":
        return self

    @property
    def schema(self) -> SchemaInfo:
        return self._schema

    @property
    def settings(self) -> SiteSettings:
        return self._settings

    @property
    def label(self) -> str:
        return "Show root"

    @property
    def path(self) -> Path:
        return self._settings.show_root

    @property
    def child_root(self) -> Path:
        return self._settings.show_root

    def resolve(self, *names: str) -> Branch:
        """Walk ``show, category, group, unit, part[, task]`` names to a branch.

        Every level is checked for existence with :meth:`get`.
        """
        node: Branch = self
        for name in names:
            if not isinstance(node, (_Container, Part)):
                raise NotFoundError(f"{node!r} has no child {name!r}")
            node = node.get(name)
        return node

    def __repr__(self) -> str:
        return f"<Site {self.path}>"


__all__ = [
    "Branch",
    "Site",
    "Show",
    "Category",
    "Group",
    "Unit",
    "Part",
    "Task",
]
