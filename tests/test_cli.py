"""End-to-end checks of ``showtree-cli`` through Click's test runner."""

import json
import os
import subprocess
import sys
import time
from pathlib import Path

import pytest
from click.testing import CliRunner

from conftest import write_launcher
from showtree.cli import main as cli_main

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="needs /bin/sh")

UNIT = ("sh01", "shot", "g1", "u1")


def _invoke(*args: str):
    """Run the CLI with *args* and return the Click result."""
    return CliRunner().invoke(cli_main, list(args))


def _build_unit() -> None:
    for depth in (1, 3, 4):
        result = _invoke("create", *UNIT[:depth])
        assert result.exit_code == 0, result.output


def test_help_works_without_environment(monkeypatch):
    """Verify help works without environment behavior."""
    monkeypatch.delenv("SITE_ROOT", raising=False)
    monkeypatch.delenv("SHOW_ROOT", raising=False)
    result = _invoke("--help")
    assert result.exit_code == 0
    for name in ("list", "create", "scene", "pin"):
        assert name in result.output


def test_missing_site_root_is_reported(tmp_path: Path, monkeypatch):
    """Verify missing site root is reported behavior."""
    monkeypatch.delenv("SITE_ROOT", raising=False)
    monkeypatch.setenv("SHOW_ROOT", str(tmp_path))
    monkeypatch.setenv("SHOWTREE_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("SHOWTREE_CONFIG_DIR", str(tmp_path / "prefs"))
    result = _invoke("list")
    assert result.exit_code == 1
    assert "SITE_ROOT" in result.output


def test_create_and_list(site_root: Path):
    """Verify create and list behavior."""
    _build_unit()
    result = _invoke("list", "sh01", "shot", "g1")
    assert result.exit_code == 0
    assert "u1" in result.output

    result = _invoke("list", "sh01")
    assert "shot" in result.output and "asset" in result.output
    assert "doc" not in result.output


def test_create_twice_fails(site_root: Path):
    """Verify create twice fails behavior."""
    assert _invoke("create", "sh01").exit_code == 0
    result = _invoke("create", "sh01")
    assert result.exit_code == 1
    assert "already exists" in result.output


def test_create_undeclared_category_fails(site_root: Path):
    """Verify create undeclared category fails behavior."""
    _invoke("create", "sh01")
    result = _invoke("create", "sh01", "layout")
    assert result.exit_code == 1
    assert "not declared" in result.output


def test_list_missing_branch_fails(site_root: Path):
    """Verify list missing branch fails behavior."""
    result = _invoke("list", "nope")
    assert result.exit_code == 1
    assert "not found" in result.output


def test_part_without_default_tasks(site_root: Path):
    """Verify part without default tasks behavior."""
    _build_unit()
    result = _invoke("create", *UNIT, "comp", "--no-default-tasks")
    assert result.exit_code == 0, result.output
    result = _invoke("list", *UNIT, "comp")
    assert "(no tasks)" in result.output


@posix_only
def test_part_with_default_tasks_and_new_version(site_root: Path):
    """Verify part with default tasks and new version behavior."""
    _build_unit()
    result = _invoke("create", *UNIT, "comp")
    assert result.exit_code == 0, result.output
    assert "sh01_g1_u1_comp_main_v001.nk" in result.output

    result = _invoke("scene", "new", *UNIT, "comp", "main")
    assert result.exit_code == 0, result.output

    result = _invoke("tasks", *UNIT, "comp")
    assert result.output.strip() == "main\tnuke\tv001 v002"

    result = _invoke("list", *UNIT, "comp")
    assert "v001 v002" in result.output


@posix_only
def test_scene_new_rejects_zero_version(site_root: Path):
    """Verify scene new rejects zero version behavior."""
    _build_unit()
    _invoke("create", *UNIT, "comp", "--no-default-tasks")
    result = _invoke("scene", "new", *UNIT, "comp", "main", "--version", "v000")
    assert result.exit_code == 1
    assert "invalid version" in result.output


def test_scene_new_needs_program_for_multi_program_part(site_root: Path):
    """Verify scene new needs program for multi program part behavior."""
    _build_unit()
    _invoke("create", *UNIT, "fx", "--no-default-tasks")
    result = _invoke("scene", "new", *UNIT, "fx", "main")
    assert result.exit_code == 2
    assert "--program" in result.output


@posix_only
def test_scene_open_and_last(site_root: Path, tmp_path: Path):
    """Verify scene open and last behavior."""
    _build_unit()
    _invoke("create", *UNIT, "comp")

    result = _invoke("scene", "open", *UNIT, "comp", "main", "--wait")
    assert result.exit_code == 0, result.output
    assert "Opening sh01_g1_u1_comp_main_v001.nk" in result.output

    selected = json.loads((tmp_path / "prefs" / "selected.json").read_text())
    assert selected["unit"] == "u1"
    assert selected["program"] == "nuke"
    assert selected["version"] == "v001"

    result = _invoke("scene", "last", "--wait")
    assert result.exit_code == 0, result.output


@posix_only
def test_scene_open_failure_is_reported(site_root: Path):
    """Verify scene open failure is reported behavior."""
    _build_unit()
    _invoke("create", *UNIT, "comp")
    write_launcher(site_root / "runner" / "nuke_open.sh", "#!/bin/sh\necho boom >&2\nexit 2\n")

    result = _invoke("scene", "open", *UNIT, "comp", "main", "--wait")
    assert result.exit_code == 1
    assert "boom" in result.output


@posix_only
def test_scene_open_outlives_cli_and_may_write_stderr(site_root: Path, tmp_path: Path):
    """Verify a detached editor keeps running after the CLI process exits."""
    _build_unit()
    _invoke("create", *UNIT, "comp")
    marker = tmp_path / "editor-done"
    write_launcher(
        site_root / "runner" / "nuke_open.sh",
        f"#!/bin/sh\nsleep 1\necho editor-warning >&2\ntouch \"{marker}\"\n",
    )

    result = subprocess.run(
        [sys.executable, "-m", "showtree", "scene", "open", *UNIT, "comp", "main"],
        env=dict(os.environ),
        capture_output=True,
        text=True,
        timeout=60,
    )
    assert result.returncode == 0, result.stderr

    deadline = time.monotonic() + 10
    while not marker.exists() and time.monotonic() < deadline:
        time.sleep(0.1)
    assert marker.exists()


def test_scene_last_without_selection(site_root: Path):
    """Verify scene last without selection behavior."""
    result = _invoke("scene", "last")
    assert result.exit_code == 1
    assert "no scene selected" in result.output


def test_pinned_show_is_listed_first(site_root: Path):
    """Verify pinned show is listed first behavior."""
    for show in ("aa", "bb", "cc"):
        _invoke("create", show)
    assert _invoke("pin", "cc").exit_code == 0

    lines = [line.strip() for line in _invoke("list").output.splitlines() if line.strip()]
    names = [line for line in lines if line[0] in "*•"]
    assert names == ["* cc", "• aa", "• bb"]

    assert _invoke("unpin", "cc").exit_code == 0
    assert "* cc" not in _invoke("list").output


def test_pin_unknown_show_fails(site_root: Path):
    """Verify pin unknown show fails behavior."""
    result = _invoke("pin", "nope")
    assert result.exit_code == 1
