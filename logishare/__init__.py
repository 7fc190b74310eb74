"""LogiShare — serverless versioning, forking and merging of directory packages."""

__version__ = "1.0.0"

from logishare.api.facade import LogiShare
from logishare.errors import (
    IOFailure,
    LogiShareError,
    MemberExistsError,
    NotDirectoryError,
    NotFoundError,
    NotPackageTypeError,
    ProjectNotFoundError,
    VersionNotFoundError,
)
from logishare.history.manager import VersionHistoryManager
from logishare.launcher import EditorLauncher, NullLauncher, SystemLauncher
from logishare.manifest.hasher import Hasher
from logishare.manifest.scanner import scan_package, scan_package_async, validate_package
from logishare.merge.engine import ConflictPolicy, MergeConflict, MergeResult, merge_directories
from logishare.models import (
    ActivityEvent,
    Actor,
    FileEntry,
    Project,
    ProjectMember,
    ProjectRole,
    ProjectState,
    ProjectVersion,
)
from logishare.settings import ConfigManager
from logishare.storage.persistence import LocalPersistence
from logishare.storage.snapshots import SnapshotStore

__all__ = [
    "__version__",
    # Facade
    "LogiShare",
    # Models
    "ActivityEvent",
    "Actor",
    "FileEntry",
    "Project",
    "ProjectMember",
    "ProjectRole",
    "ProjectState",
    "ProjectVersion",
    # Engine
    "ConflictPolicy",
    "Hasher",
    "MergeConflict",
    "MergeResult",
    "SnapshotStore",
    "VersionHistoryManager",
    "merge_directories",
    "scan_package",
    "scan_package_async",
    "validate_package",
    # Collaborators
    "ConfigManager",
    "EditorLauncher",
    "LocalPersistence",
    "NullLauncher",
    "SystemLauncher",
    # Errors
    "IOFailure",
    "LogiShareError",
    "MemberExistsError",
    "NotDirectoryError",
    "NotFoundError",
    "NotPackageTypeError",
    "ProjectNotFoundError",
    "VersionNotFoundError",
]
