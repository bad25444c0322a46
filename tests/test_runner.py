"""Scene creation and opening through launcher commands."""

import subprocess
import sys
from pathlib import Path

import pytest

from conftest import write_launcher
from showtree.branch import Part, Site
from showtree.config import load_schema
from showtree.errors import (
    AlreadyExistsError,
    ExternalCommandError,
    InvalidNameError,
    NoVersionError,
    UnsupportedPlatformError,
)
from showtree.runner import SceneRunner

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="needs /bin/sh")


class _Completed:
    def __init__(self, returncode=0, stderr=""):
        self.returncode = returncode
        self.stderr = stderr


class _FakePopen:
    """Stand-in for :class:`subprocess.Popen` recording its arguments."""

    calls: list = []

    def __init__(self, argv, **kwargs):
        self.argv = argv
        self.kwargs = kwargs
        self.pid = 4242
        self.returncode = None
        _FakePopen.calls.append(self)

    def wait(self):
        self.returncode = 0
        return 0


@pytest.fixture
def fake_run(monkeypatch):
    """Replace ``subprocess.run`` with a launcher that touches the scene."""
    calls = []

    def _run(argv, env, capture_output, text):
        calls.append({"argv": argv, "env": env})
        Path(argv[1]).write_text("")
        return _Completed()

    monkeypatch.setattr(subprocess, "run", _run)
    return calls


@pytest.fixture
def runner(settings) -> SceneRunner:
    return SceneRunner(settings, base_env={"PATH": "/usr/bin:/bin"}, os_key="linux")


def _touch(part: Part, *versions: str, task: str = "main") -> None:
    for version in versions:
        (part.path / f"sh01_g1_u1_comp_{task}_{version}.nk").write_text("")


# ---------------------------------------------------------------------------
# create
# ---------------------------------------------------------------------------
def test_create_scene_runs_launcher_with_environment(comp_part: Part, runner, fake_run, settings):
    """Verify create scene runs launcher with environment behavior."""
    task = comp_part.new_task("main", "nuke")
    scene = runner.create_scene(task)

    assert scene == comp_part.path / "sh01_g1_u1_comp_main_v001.nk"
    assert task.versions == ["v001"]
    (call,) = fake_run
    assert call["argv"] == [str(settings.site_root / "runner" / "nuke_create.sh"), str(scene)]
    env = call["env"]
    assert env["PATH"] == "/usr/bin:/bin"
    assert env["SITE_ROOT"] == str(settings.site_root)
    assert env["TASK"] == "main"
    assert env["VERSION"] == "v001"
    assert env["UNIT"] == "u1"
    assert env["PART_DIR"] == str(comp_part.path)


@posix_only
def test_create_scene_with_real_launcher(comp_part: Part, settings):
    """Verify create scene with real launcher behavior."""
    runner = SceneRunner(settings)
    task = comp_part.new_task("main", "nuke")
    runner.create_scene(task, "v001")
    runner.create_scene(task, "v002")
    assert comp_part.get("main").versions == ["v001", "v002"]


def test_create_existing_scene_raises(comp_part: Part, runner, fake_run):
    """Verify create existing scene raises behavior."""
    _touch(comp_part, "v001")
    task = comp_part.new_task("main", "nuke")
    with pytest.raises(AlreadyExistsError):
        runner.create_scene(task, "v001")
    assert fake_run == []


@pytest.mark.parametrize("version", ["v000", "1", "main"])
def test_create_rejects_bad_version(comp_part: Part, runner, fake_run, version):
    """Verify create rejects bad version behavior."""
    with pytest.raises(InvalidNameError):
        runner.create_scene(comp_part.new_task("main", "nuke"), version)


def test_create_without_launcher_for_os(settings, schema_raw, fake_run):
    """Verify create without launcher for OS behavior."""
    del schema_raw["programs"]["nuke"]["create_command"]["windows"]
    site = Site(settings, load_schema(schema_raw))
    part = site.create("sh01").get("shot").create("g1").create("u1").create("comp")

    runner = SceneRunner(settings, os_key="windows")
    with pytest.raises(UnsupportedPlatformError, match="windows"):
        runner.create_scene(part.new_task("main", "nuke"))


def test_create_nonzero_exit_raises(comp_part: Part, runner, monkeypatch):
    """Verify create nonzero exit raises behavior."""
    monkeypatch.setattr(
        subprocess, "run", lambda *a, **k: _Completed(3, "no license\n")
    )
    task = comp_part.new_task("main", "nuke")
    with pytest.raises(ExternalCommandError) as excinfo:
        runner.create_scene(task)
    assert excinfo.value.returncode == 3
    assert "no license" in str(excinfo.value)
    assert task.versions == []


def test_create_spawn_failure_raises(comp_part: Part, runner, monkeypatch):
    """Verify create spawn failure raises behavior."""

    def _boom(*args, **kwargs):
        raise FileNotFoundError("nuke_create.sh")

    monkeypatch.setattr(subprocess, "run", _boom)
    with pytest.raises(ExternalCommandError, match="cannot run"):
        runner.create_scene(comp_part.new_task("main", "nuke"))


def test_create_default_tasks(site: Site, runner, fake_run):
    """Verify create default tasks behavior."""
    unit = site.create("sh01").get("shot").create("g1").create("u1")
    fx = unit.create("fx")
    created = runner.create_default_tasks(fx)
    assert created == [fx.path / "sh01_g1_u1_fx_main_v001.hip"]
    assert fx.get("main").versions == ["v001"]


def test_create_default_tasks_without_defaults(site: Site, runner, fake_run):
    """Verify create default tasks without defaults behavior."""
    unit = site.create("sh01").get("asset").get("char").create("hero")
    assert runner.create_default_tasks(unit.create("model")) == []
    assert fake_run == []


# ---------------------------------------------------------------------------
# open
# ---------------------------------------------------------------------------
def test_open_defaults_to_latest_version(comp_part: Part, runner, monkeypatch, settings):
    """Verify open defaults to latest version behavior."""
    _FakePopen.calls = []
    monkeypatch.setattr(subprocess, "Popen", _FakePopen)
    _touch(comp_part, "v001", "v003")

    handle = runner.open_scene(comp_part.get("main"))
    assert handle.wait(5)
    assert handle.pid == 4242

    (proc,) = _FakePopen.calls
    assert proc.argv == [
        str(settings.site_root / "runner" / "nuke_open.sh"),
        str(comp_part.path / "sh01_g1_u1_comp_main_v003.nk"),
    ]
    assert proc.kwargs["env"]["VERSION"] == "v003"
    assert proc.kwargs["stderr"] is not subprocess.PIPE
    assert proc.kwargs["stderr"].closed


def test_open_without_versions_raises(comp_part: Part, runner):
    """Verify open without versions raises behavior."""
    with pytest.raises(NoVersionError):
        runner.open_scene(comp_part.new_task("main", "nuke"))


def test_open_spawn_failure_is_reported_once(comp_part: Part, runner, monkeypatch):
    """Verify open spawn failure is reported once behavior."""

    def _boom(*args, **kwargs):
        raise PermissionError("not executable")

    monkeypatch.setattr(subprocess, "Popen", _boom)
    _touch(comp_part, "v001")
    errors = []

    handle = runner.open_scene(comp_part.get("main"), on_error=errors.append)
    assert handle.pid is None
    assert handle.wait()
    assert len(errors) == 1
    assert "not executable" in str(errors[0])


@posix_only
def test_open_failure_reaches_callback_once(comp_part: Part, settings, site_root):
    """Verify open failure reaches callback once behavior."""
    write_launcher(site_root / "runner" / "nuke_open.sh", "#!/bin/sh\necho boom >&2\nexit 2\n")
    _touch(comp_part, "v001")
    errors = []

    handle = SceneRunner(settings).open_scene(comp_part.get("main"), on_error=errors.append)
    assert handle.wait(10)

    assert len(errors) == 1
    assert errors[0].returncode == 2
    assert "boom" in errors[0].stderr
    assert str(errors[0]).startswith("exit with error 2")


@posix_only
def test_open_success_reports_nothing(comp_part: Part, settings):
    """Verify open success reports nothing behavior."""
    _touch(comp_part, "v001")
    errors = []
    handle = SceneRunner(settings).open_scene(
        comp_part.get("main"), "v001", on_error=errors.append
    )
    assert handle.wait(10)
    assert errors == []
