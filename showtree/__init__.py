"""
showtree package initialisation.

The module performs two small tasks:

1. **Expose the version string**
   ``showtree.__version__`` is resolved at import-time from the installed
   distribution metadata.

2. **Re-export the public entry points**
   :func:`load_schema`, :func:`load_schema_file`, :class:`SiteSettings`,
   :class:`Site` and :class:`SceneRunner` so call-sites can simply do::

       from showtree import Site, SiteSettings

       site = Site.from_settings(SiteSettings.from_env())
"""

from importlib.metadata import PackageNotFoundError, version

# --------------------------------------------------------------------------- #
# Version resolution
# --------------------------------------------------------------------------- #
try:
    __version__: str = version("showtree")
except PackageNotFoundError:
    # Source tree without an installed wheel.
    __version__ = "0.0.0"

# --------------------------------------------------------------------------- #
# Public re-exports
# --------------------------------------------------------------------------- #
from .branch import Category, Group, Part, Show, Site, Task, Unit  # noqa: E402
from .config import SchemaInfo, SiteSettings, load_schema, load_schema_file  # noqa: E402
from .runner import SceneRunner  # noqa: E402

__all__: list[str] = [
    "__version__",
    "load_schema",
    "load_schema_file",
    "SchemaInfo",
    "SiteSettings",
    "Site",
    "Show",
    "Category",
    "Group",
    "Unit",
    "Part",
    "Task",
    "SceneRunner",
]
