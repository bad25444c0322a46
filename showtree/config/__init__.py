"""
Configuration package façade.

Exports the small, stable surface that external callers rely on:

* :func:`load_schema` – Validate an already-parsed schema mapping.
* :func:`load_schema_file` – Locate, parse and validate a schema document.
* :class:`SchemaInfo` – Pydantic model representing the validated schema.
* :class:`SiteSettings` – Site locations read from the environment.

Anything not imported here is considered private implementation detail and may
change without prior notice.
"""

from .loader import load_schema, load_schema_file, resolve_schema_path  # noqa: F401
from .schema import (  # noqa: F401
    BranchInfo,
    CategoryInfo,
    DirSpec,
    PartInfo,
    ProgramSpec,
    SchemaInfo,
)
from .settings import SiteSettings  # noqa: F401

__all__: list[str] = [
    "load_schema",
    "load_schema_file",
    "resolve_schema_path",
    "BranchInfo",
    "CategoryInfo",
    "DirSpec",
    "PartInfo",
    "ProgramSpec",
    "SchemaInfo",
    "SiteSettings",
]
