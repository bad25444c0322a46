"""Pytest configuration for showtree tests.

Fixtures build a throw-away studio below ``tmp_path``:

* ``site_root`` holds ``runner/`` launcher scripts;
* ``show_root`` holds the shows;
* logs and user preferences are redirected so nothing leaks into ``$HOME``.
"""

from __future__ import annotations

import copy
import stat
import sys
from importlib.resources import files
from pathlib import Path

import pytest
import yaml

from showtree.branch import Site
from showtree.config import SiteSettings, load_schema

_CREATE_SCRIPT = '#!/bin/sh\ntouch "$1"\n'
_OPEN_SCRIPT = "#!/bin/sh\nexit 0\n"


def write_launcher(path: Path, body: str) -> Path:
    """Write an executable shell script at *path*."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(body, encoding="utf-8")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture(scope="session")
def default_schema_raw() -> dict:
    """Parsed packaged default schema."""
    with files("showtree.resources").joinpath("default_schema.yaml").open() as fh:
        return yaml.safe_load(fh)


@pytest.fixture
def schema_raw(default_schema_raw) -> dict:
    """Mutable deep copy of the default schema for per-test edits."""
    return copy.deepcopy(default_schema_raw)


@pytest.fixture
def site_root(tmp_path: Path, monkeypatch) -> Path:
    """Studio root with working POSIX launchers for every default program."""
    root = tmp_path / "site"
    root.mkdir()
    if sys.platform != "win32":
        for prog in ("maya", "houdini", "nuke"):
            write_launcher(root / "runner" / f"{prog}_create.sh", _CREATE_SCRIPT)
            write_launcher(root / "runner" / f"{prog}_open.sh", _OPEN_SCRIPT)

    monkeypatch.setenv("SITE_ROOT", str(root))
    monkeypatch.setenv("SHOW_ROOT", str(tmp_path / "shows"))
    monkeypatch.delenv("SHOWTREE_SCHEMA", raising=False)
    monkeypatch.setenv("SHOWTREE_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("SHOWTREE_CONFIG_DIR", str(tmp_path / "prefs"))
    return root


@pytest.fixture
def settings(site_root: Path) -> SiteSettings:
    settings = SiteSettings.from_env()
    settings.ensure_show_root()
    return settings


@pytest.fixture
def site(settings: SiteSettings, default_schema_raw) -> Site:
    """Site rooted in ``tmp_path`` using the default schema."""
    return Site(settings, load_schema(default_schema_raw))


@pytest.fixture
def comp_part(site: Site):
    """``sh01/shot/g1/u1/comp`` created through the branch API."""
    show = site.create("sh01")
    group = show.get("shot").create("g1")
    unit = group.create("u1")
    return unit.create("comp")
