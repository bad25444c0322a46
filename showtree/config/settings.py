"""
Site-level settings read from the process environment.

Two variables are mandatory:

* ``SITE_ROOT`` – studio installation root; relative launcher paths in the
  schema and the default schema location are resolved against it.
* ``SHOW_ROOT`` – directory that holds one sub-directory per show.

Optional overrides:

* ``SHOWTREE_SCHEMA`` – explicit schema document (YAML or JSON).

The resulting :class:`SiteSettings` object is immutable and is passed to
every component that needs it; nothing in *showtree* reads these variables
after start-up.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping, Optional

import structlog
from pydantic import BaseModel

from showtree.errors import ConfigError

log = structlog.get_logger()

SITE_ROOT_ENV = "SITE_ROOT"
SHOW_ROOT_ENV = "SHOW_ROOT"
SCHEMA_ENV = "SHOWTREE_SCHEMA"


class SiteSettings(BaseModel, frozen=True):
    """Resolved site locations.

    Attributes
    ----------
    site_root
        Absolute studio root.
    show_root
        Absolute directory containing every show.
    schema_path
        Explicit schema document, or *None* to use the search precedence of
        :func:`showtree.config.loader.resolve_schema_path`.
    """

    site_root: Path
    show_root: Path
    schema_path: Optional[Path] = None

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        *,
        site_root: Optional[Path] = None,
        show_root: Optional[Path] = None,
        schema_path: Optional[Path] = None,
    ) -> "SiteSettings":
        """Build settings from *environ* (defaults to :data:`os.environ`).

        Explicit keyword arguments win over the environment so the CLI can
        forward ``--site-root``/``--show-root`` flags.

        Raises:
            ConfigError: When the site root or show root is not supplied.
        """
        env = os.environ if environ is None else environ

        site = site_root or env.get(SITE_ROOT_ENV)
        if not site:
            raise ConfigError(
                f"${SITE_ROOT_ENV} is not set – export it before using showtree."
            )
        shows = show_root or env.get(SHOW_ROOT_ENV)
        if not shows:
            raise ConfigError(
                f"${SHOW_ROOT_ENV} is not set – export it before using showtree."
            )
        schema = schema_path or env.get(SCHEMA_ENV) or None

        return cls(
            site_root=Path(site).expanduser().resolve(),
            show_root=Path(shows).expanduser().resolve(),
            schema_path=Path(schema).expanduser().resolve() if schema else None,
        )

    def ensure_show_root(self) -> Path:
        """Create :attr:`show_root` when it does not exist yet and return it."""
        if not self.show_root.is_dir():
            log.info("settings.create_show_root", path=str(self.show_root))
            self.show_root.mkdir(parents=True, exist_ok=True)
        return self.show_root

    def resolve_command(self, command: str) -> Path:
        """Return *command* as an absolute path, relative to :attr:`site_root`."""
        path = Path(command).expanduser()
        return path if path.is_absolute() else self.site_root / path
