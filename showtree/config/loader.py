"""
Schema loader.

This helper locates, reads and validates the studio schema before returning a
:class:`showtree.config.schema.SchemaInfo` instance.

Search precedence (first match wins)
1. An explicit path argument (``--schema`` on the CLI / ``$SHOWTREE_SCHEMA``).
2. ``<site_root>/config/schema.yaml`` – site-local schema.
3. The packaged default shipped inside the wheel.

All resolution logic is concentrated here so the rest of *showtree* treats
the schema as an already-validated object.
"""

from __future__ import annotations

import json
from importlib.resources import as_file, files
from pathlib import Path
from typing import Any, Mapping, Optional

import structlog
import yaml
from pydantic import ValidationError

from showtree.errors import ConfigError

from .schema import SchemaInfo

log = structlog.get_logger()

# --------------------------------------------------------------------------- #
# Wheel-internal fallback (works even from a zipped wheel)                    #
# --------------------------------------------------------------------------- #
try:
    _DEFAULT_SCHEMA = files("showtree.resources") / "default_schema.yaml"
except ModuleNotFoundError:
    _DEFAULT_SCHEMA = Path(__file__).resolve().parent.parent / "resources" / "default_schema.yaml"

# --------------------------------------------------------------------------- #
# Helper functions                                                            #
# --------------------------------------------------------------------------- #


def _site_local(site_root: Optional[Path]) -> Optional[Path]:
    """Return ``<site_root>/config/schema.yaml`` or *None* without a root."""
    if site_root is None:
        return None
    return Path(site_root).expanduser().resolve() / "config" / "schema.yaml"


def _read_document(path: Path) -> Any:
    """Parse *path* as JSON (``.json``) or YAML (anything else).

    Raises:
        ConfigError: When the file cannot be read or parsed.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read schema {path}: {exc}") from exc
    try:
        if path.suffix.lower() == ".json":
            return json.loads(text)
        return yaml.safe_load(text) or {}
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigError(f"Cannot parse schema {path}: {exc}") from exc


# --------------------------------------------------------------------------- #
# Public API                                                                  #
# --------------------------------------------------------------------------- #
def resolve_schema_path(
    explicit: Optional[str | Path] = None,
    site_root: Optional[str | Path] = None,
) -> Path:
    """Resolve the schema document according to the documented precedence.

    Args:
        explicit: Path supplied by the caller (may be ``None``).  It must
            exist when given.
        site_root: Studio root used for the site-local schema.

    Returns:
        Path to the schema that should be loaded.

    Raises:
        ConfigError: When *explicit* points at a missing file.
    """
    if explicit is not None:
        path = Path(explicit).expanduser().resolve()
        if not path.is_file():
            raise ConfigError(f"Schema file {path} does not exist")
        return path

    local = _site_local(Path(site_root) if site_root else None)
    if local is not None and local.is_file():
        return local

    with as_file(_DEFAULT_SCHEMA) as p:
        return Path(p)


def load_schema(raw: Mapping[str, Any]) -> SchemaInfo:
    """Validate an already-parsed schema mapping.

    Validation is total: every level is checked and all problems are
    reported together.

    Args:
        raw: Parsed schema document.

    Returns:
        The immutable :class:`SchemaInfo`.

    Raises:
        ConfigError: When any required attribute is missing or malformed.
    """
    if not isinstance(raw, Mapping):
        raise ConfigError(
            f"Invalid schema – expected a mapping at the top level, got {type(raw).__name__}"
        )
    try:
        return SchemaInfo.model_validate(dict(raw))
    except ValidationError as exc:
        raise ConfigError(f"Invalid schema – {exc}") from exc


def load_schema_file(
    path: Optional[str | Path] = None,
    *,
    site_root: Optional[str | Path] = None,
) -> SchemaInfo:
    """Resolve, read and validate a schema document.

    Args:
        path: Explicit schema path. ``None`` triggers the search sequence
            described in the module doc-string.
        site_root: Studio root used for the site-local override.

    Returns:
        A :class:`SchemaInfo` ready for downstream use.

    Raises:
        ConfigError: When the document is missing, unreadable or invalid.
    """
    resolved = resolve_schema_path(path, site_root)
    log.debug("schema.load", path=str(resolved))
    return load_schema(_read_document(resolved))
