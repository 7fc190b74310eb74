"""Exception hierarchy shared by the scanner, store, merge engine and workflows.

Every exception carries a short, human-readable message; the
:class:`~logishare.api.facade.LogiShare` facade surfaces ``str(exc)`` as the
status line.
"""

from __future__ import annotations

from pathlib import Path


class LogiShareError(Exception):
    """Base class for all LogiShare failures."""


class NotDirectoryError(LogiShareError):
    """Raised when a path expected to be a package directory is not one."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        super().__init__(f"Selected path is not a folder/package: {self.path}")


class NotPackageTypeError(LogiShareError):
    """Raised when a package root does not carry the accepted extension."""

    def __init__(self, path: str | Path, extension: str) -> None:
        self.path = Path(path)
        self.extension = extension
        super().__init__(f"Please select a .{extension} project (got {self.path.name!r}).")


class IOFailure(LogiShareError):
    """Raised when reading, hashing or copying fails.

    The underlying :class:`OSError` is kept on :attr:`cause` and chained as
    ``__cause__``.
    """

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        self.cause = cause
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class NotFoundError(LogiShareError):
    """Raised when a referenced project or version id is absent."""


class ProjectNotFoundError(NotFoundError):
    def __init__(self, project_id: str) -> None:
        self.project_id = project_id
        super().__init__(f"Project '{project_id}' not found.")


class VersionNotFoundError(NotFoundError):
    def __init__(self, version_id: str, project_id: str | None = None) -> None:
        self.version_id = version_id
        self.project_id = project_id
        where = f" in project '{project_id}'" if project_id else ""
        super().__init__(f"Version '{version_id}' not found{where}.")


class MemberExistsError(LogiShareError):
    """Raised when a member identifier is already on a project."""

    def __init__(self, user_identifier: str) -> None:
        self.user_identifier = user_identifier
        super().__init__("Member already added")
