"""Exceptions raised by the showtree core.

Every error derives from :class:`ShowtreeError` so that the CLI layer can
turn them into a single :class:`click.ClickException` branch.  Errors that
describe a filesystem condition also inherit from the matching built-in
(``FileExistsError``/``FileNotFoundError``) so plain ``OSError`` handlers keep
working.
"""

from __future__ import annotations


class ShowtreeError(RuntimeError):
    """Base class for every error raised by :mod:`showtree`."""

    pass


class ConfigError(ShowtreeError):
    """Raised when the schema document or site environment is incomplete."""

    pass


class NotFoundError(ShowtreeError, FileNotFoundError):
    """Raised when a queried branch or scene does not exist on disk."""

    pass


class AlreadyExistsError(ShowtreeError, FileExistsError):
    """Raised when a branch directory or scene file is already present."""

    pass


class InvalidNameError(ShowtreeError, ValueError):
    """Raised for branch names that cannot be used as a directory name."""

    pass


class InvalidCategoryError(ShowtreeError, ValueError):
    """Raised when a category is not declared in the schema."""

    pass


class InvalidPartError(ShowtreeError, ValueError):
    """Raised when a part is not declared for its category."""

    pass


class UnsupportedPlatformError(ShowtreeError):
    """Raised when a program has no launcher for the host operating system."""

    pass


class NoVersionError(ShowtreeError):
    """Raised when a scene is opened without a version and none exist."""

    pass


class ExternalCommandError(ShowtreeError):
    """Raised (or reported) when a launcher could not run or exited non-zero.

    Attributes:
        returncode: Exit status of the launcher, ``None`` when it never ran.
        stderr: Text captured from the launcher's error stream.
    """

    def __init__(
        self,
        message: str,
        *,
        returncode: int | None = None,
        stderr: str = "",
    ) -> None:
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


__all__ = [
    "ShowtreeError",
    "ConfigError",
    "NotFoundError",
    "AlreadyExistsError",
    "InvalidNameError",
    "InvalidCategoryError",
    "InvalidPartError",
    "UnsupportedPlatformError",
    "NoVersionError",
    "ExternalCommandError",
]
