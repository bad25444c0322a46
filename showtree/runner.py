"""
Scene lifecycle: create and open scenes through external launchers.

Launchers are resolved per program and host OS from the schema (see
:func:`showtree.programs.resolve_command`) and invoked as::

    <launcher> <scene path>

with the current process environment extended by the identifying chain of
the task (``SHOW``, ``CATEGORY`` … ``TASK``, their ``*_DIR`` counterparts and
``VERSION``).

* :meth:`SceneRunner.create_scene` blocks until the launcher exits and raises
  :class:`~showtree.errors.ExternalCommandError` on failure.
* :meth:`SceneRunner.open_scene` starts the launcher detached from the
  caller and returns immediately; failures are delivered once to the
  ``on_error`` callback from a watcher thread.

Neither operation retries or imposes a timeout.
"""

from __future__ import annotations

import os
import subprocess
import sys
import tempfile
import threading
from pathlib import Path
from typing import IO, Callable, Dict, List, Mapping, Optional

import structlog

from showtree.branch import Part, Task
from showtree.config.settings import SiteSettings
from showtree.errors import AlreadyExistsError, ExternalCommandError, InvalidNameError
from showtree.programs import resolve_command
from showtree.scene import FIRST_VERSION, is_version

log = structlog.get_logger()

ErrorCallback = Callable[[ExternalCommandError], None]


def _detach_kwargs() -> Dict[str, object]:
    """Popen arguments that keep the launcher alive after the caller exits."""
    if sys.platform == "win32":
        return {
            "creationflags": subprocess.DETACHED_PROCESS
            | subprocess.CREATE_NEW_PROCESS_GROUP
        }
    return {"start_new_session": True}


def _once(callback: ErrorCallback) -> ErrorCallback:
    """Wrap *callback* so that only the first call goes through."""
    lock = threading.Lock()
    fired = False

    def _call(err: ExternalCommandError) -> None:
        nonlocal fired
        with lock:
            if fired:
                return
            fired = True
        callback(err)

    return _call


def _log_error(err: ExternalCommandError) -> None:
    log.error("scene.open_failed", error=str(err), returncode=err.returncode)


class SceneProcess:
    """Handle on a detached launcher started by :meth:`SceneRunner.open_scene`.

    Attributes:
        process: The launcher process, or *None* when it could not be spawned.
    """

    def __init__(
        self,
        process: Optional[subprocess.Popen] = None,
        watcher: Optional[threading.Thread] = None,
    ) -> None:
        self.process = process
        self._watcher = watcher

    @property
    def pid(self) -> Optional[int]:
        return self.process.pid if self.process is not None else None

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the launcher exited and its outcome was reported.

        Returns:
            *True* when the watcher finished within *timeout*.
        """
        if self._watcher is None:
            return True
        self._watcher.join(timeout)
        return not self._watcher.is_alive()


class SceneRunner:
    """Create and open scenes of :class:`~showtree.branch.Task` branches.

    Args:
        settings: Site settings; relative launcher paths resolve against the
            site root.
        base_env: Environment the launcher inherits. Defaults to a copy of
            :data:`os.environ` taken on every call.
        os_key: Override for the host OS key (``linux``/``darwin``/``windows``).
    """

    def __init__(
        self,
        settings: SiteSettings,
        *,
        base_env: Optional[Mapping[str, str]] = None,
        os_key: Optional[str] = None,
    ) -> None:
        self.settings = settings
        self.base_env = base_env
        self.os_key = os_key

    # ------------------------------------------------------------------ #
    # Environment                                                          #
    # ------------------------------------------------------------------ #
    def scene_environ(self, task: Task, version: str) -> Dict[str, str]:
        """Return the launcher environment for *task* at *version*."""
        env = dict(os.environ if self.base_env is None else self.base_env)
        env["SITE_ROOT"] = str(self.settings.site_root)
        env["SHOW_ROOT"] = str(self.settings.show_root)
        env.update(task.environ())
        env["VERSION"] = version
        return env

    # ------------------------------------------------------------------ #
    # Create                                                               #
    # ------------------------------------------------------------------ #
    def create_scene(self, task: Task, version: str = FIRST_VERSION) -> Path:
        """Create *version* of *task* by running the program's create launcher.

        Returns:
            Path of the new scene.

        Raises:
            InvalidNameError: When *version* is not ``v`` + non-zero digits.
            AlreadyExistsError: When the scene file already exists.
            UnsupportedPlatformError: When the program has no launcher here.
            ExternalCommandError: When the launcher cannot start or exits
                non-zero.
        """
        if not is_version(version):
            raise InvalidNameError(f"invalid version {version!r}; expected e.g. v001")
        scene = task.scene_path(version)
        if scene.exists():
            raise AlreadyExistsError(f"scene {scene} already exists")

        cmd = resolve_command(task.program.spec, "create", self.settings, os_key=self.os_key)
        argv = [str(cmd), str(scene)]
        log.info("scene.create", cmd=argv, task=task.name, version=version)
        try:
            proc = subprocess.run(
                argv,
                env=self.scene_environ(task, version),
                capture_output=True,
                text=True,
            )
        except OSError as exc:
            log.error("scene.create_spawn_failed", cmd=argv, error=str(exc))
            raise ExternalCommandError(f"cannot run {cmd}: {exc}") from exc

        if proc.returncode != 0:
            log.error("scene.create_failed", cmd=argv, returncode=proc.returncode)
            raise ExternalCommandError(
                f"exit with error {proc.returncode}: {proc.stderr}",
                returncode=proc.returncode,
                stderr=proc.stderr or "",
            )

        if version not in task.versions:
            task.versions = sorted([*task.versions, version])
        return scene

    def create_default_tasks(self, part: Part) -> List[Path]:
        """Create the first scene of every default task declared for *part*."""
        created: List[Path] = []
        for default in part.info.default_tasks:
            task = part.new_task(default.name, default.program)
            created.append(self.create_scene(task, FIRST_VERSION))
        return created

    # ------------------------------------------------------------------ #
    # Open                                                                 #
    # ------------------------------------------------------------------ #
    def open_scene(
        self,
        task: Task,
        version: Optional[str] = None,
        on_error: Optional[ErrorCallback] = None,
    ) -> SceneProcess:
        """Open *task* at *version* (default: latest) in a detached launcher.

        Args:
            task: Task whose versions were discovered.
            version: Version to open; ``None`` selects the last version.
            on_error: Called exactly once, possibly from another thread, when
                the launcher cannot start or exits non-zero.

        Returns:
            A :class:`SceneProcess` handle.

        Raises:
            NoVersionError: When *version* is omitted and none exist.
            UnsupportedPlatformError: When the program has no launcher here.
        """
        version = version or task.latest_version
        scene = task.scene_path(version)
        cmd = resolve_command(task.program.spec, "open", self.settings, os_key=self.os_key)
        argv = [str(cmd), str(scene)]
        report = _once(on_error or _log_error)

        log.info("scene.open", cmd=argv, task=task.name, version=version)
        # A file, not a pipe: the launcher may write stderr after we exit.
        errfile = tempfile.TemporaryFile()
        try:
            proc = subprocess.Popen(
                argv,
                env=self.scene_environ(task, version),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=errfile,
                **_detach_kwargs(),
            )
        except OSError as exc:
            errfile.close()
            report(ExternalCommandError(f"cannot run {cmd}: {exc}"))
            return SceneProcess()

        watcher = threading.Thread(
            target=self._watch,
            args=(proc, errfile, report),
            name=f"showtree-open-{proc.pid}",
            daemon=True,
        )
        watcher.start()
        return SceneProcess(proc, watcher)

    @staticmethod
    def _watch(proc: subprocess.Popen, errfile: IO[bytes], report: ErrorCallback) -> None:
        """Wait for *proc*, then report a non-zero status with its stderr."""
        try:
            proc.wait()
            errfile.seek(0)
            stderr = errfile.read().decode("utf-8", errors="replace")
        finally:
            errfile.close()
        if proc.returncode != 0:
            report(
                ExternalCommandError(
                    f"exit with error {proc.returncode}: {stderr}",
                    returncode=proc.returncode,
                    stderr=stderr,
                )
            )
        else:
            log.debug("scene.open_exited", pid=proc.pid)


__all__ = ["SceneRunner", "SceneProcess", "ErrorCallback"]
