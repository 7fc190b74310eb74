"""LogiShare — the single entry point for hosts (UI, scripts, services).

Usage::

    from logishare import Actor, LogiShare

    share = LogiShare(app_dir="/path/to/app-data")
    me = Actor(user_id="u1", display_name="Sam")
    project = share.import_project("/music/Song.logicx", me)
    share.create_version(project.id, "vocal comp cleanup", me)
    share.fork_project(project.id, project.versions[0].id, me)
    share.open_working_copy(project.id)

The metadata document is read once on construction and written after each
successful mutation.
Failures never raise out of the facade; they become :attr:`status_message`
and the method returns ``None``.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Callable, TypeVar

from logishare.errors import IOFailure, LogiShareError, MemberExistsError, NotFoundError
from logishare.history.manager import VersionHistoryManager
from logishare.launcher import EditorLauncher, SystemLauncher
from logishare.merge.engine import ConflictPolicy, MergeResult
from logishare.models import (
    ActivityEvent,
    Actor,
    Project,
    ProjectMember,
    ProjectRole,
    ProjectVersion,
)
from logishare.settings import ConfigManager
from logishare.storage.persistence import LocalPersistence
from logishare.storage.snapshots import SnapshotStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LogiShare:
    """Run project workflows, persist the result and report status.

    Parameters
    ----------
    app_dir:
        Root of the on-disk layout.  Defaults to ``LOGISHARE_APP_DIR`` or
        the platform app-data directory.
    launcher:
        Opens packages in the external editor.  Defaults to
        :class:`SystemLauncher`.
    config:
        Pre-loaded configuration; loaded via :class:`ConfigManager` if
        omitted.
    """

    def __init__(
        self,
        app_dir: str | Path | None = None,
        *,
        launcher: EditorLauncher | None = None,
        config: dict[str, str] | None = None,
    ) -> None:
        self.config = config or ConfigManager().load_config(app_dir)
        if app_dir is not None:
            self.config["LOGISHARE_APP_DIR"] = str(app_dir)
        logging.getLogger("logishare").setLevel(
            self.config.get("LOGISHARE_LOG_LEVEL", "INFO").upper()
        )

        self.app_dir = Path(self.config["LOGISHARE_APP_DIR"])
        self.store = SnapshotStore(
            self.app_dir, self.config.get("LOGISHARE_PACKAGE_EXT", "logicx"),
        )
        self.persistence = LocalPersistence(self.app_dir)
        self.launcher = launcher or SystemLauncher()
        self.status_message: str | None = None

        self._lock: asyncio.Lock | None = None
        self._lock_loop: asyncio.AbstractEventLoop | None = None

        self.history = VersionHistoryManager(
            self.store,
            chunk_size=int(self.config.get("LOGISHARE_HASH_CHUNK", 1024 * 1024)),
        )
        self.load()

    # -- Persistence ----------------------------------------------------------

    def load(self) -> None:
        """(Re)load projects and activity from the metadata document."""
        try:
            self.history.state = self.persistence.load()
        except IOFailure as exc:
            self.history.state.projects = []
            self.history.state.activity = []
            self.status_message = f"Failed to load local data: {exc}"
            logger.warning(self.status_message)

    def save(self) -> bool:
        try:
            self.persistence.save(self.history.state)
        except IOFailure as exc:
            self.status_message = f"Failed to save: {exc}"
            logger.error(self.status_message)
            return False
        return True

    def _run(
        self,
        label: str,
        done: str,
        func: Callable[..., T],
        *args: Any,
        **kwargs: Any,
    ) -> T | None:
        """Call a workflow, then persist and set the status line."""
        try:
            result = func(*args, **kwargs)
        except (NotFoundError, MemberExistsError) as exc:
            self.status_message = str(exc)
            logger.info("%s skipped: %s", label, exc)
            return None
        except (LogiShareError, OSError) as exc:
            self.status_message = f"{label} failed: {exc}"
            logger.error(self.status_message, exc_info=isinstance(exc, OSError))
            return None
        self.status_message = done
        self.save()
        return result

    # -- Queries --------------------------------------------------------------

    @property
    def projects(self) -> list[Project]:
        return self.history.projects

    def get_project(self, project_id: str) -> Project | None:
        return self.history.state.find_project(project_id)

    def merge_candidates(
        self,
        project_id: str,
        excluding_version_id: str | None = None,
    ) -> list[ProjectVersion]:
        try:
            return self.history.merge_candidates(project_id, excluding_version_id)
        except NotFoundError:
            return []

    def activity(
        self,
        project_id: str | None = None,
        limit: int = 50,
    ) -> list[ActivityEvent]:
        """Activity events newest first, optionally for one project."""
        events = [
            e for e in self.history.activity
            if project_id is None or e.project_id == project_id
        ]
        events.sort(key=lambda e: e.date, reverse=True)
        return events[:limit]

    # -- Workflows ------------------------------------------------------------

    def import_project(
        self,
        source: str | Path,
        actor: Actor | None = None,
        *,
        access_token: str | None = None,
    ) -> Project | None:
        self.status_message = f"Importing {Path(source).stem}..."
        return self._run(
            "Import", "Import complete",
            self.history.import_project, source, actor or Actor(),
            access_token=access_token,
        )

    def create_version(
        self,
        project_id: str,
        message: str = "",
        actor: Actor | None = None,
    ) -> ProjectVersion | None:
        return self._run(
            "Version", "Version created",
            self.history.create_version, project_id, message, actor or Actor(),
        )

    def revert_working_copy(
        self,
        project_id: str,
        version_id: str,
        actor: Actor | None = None,
    ) -> Project | None:
        return self._run(
            "Revert", "Working copy reverted",
            self.history.revert_working_copy, project_id, version_id, actor or Actor(),
        )

    def fork_project(
        self,
        source_project_id: str,
        version_id: str,
        actor: Actor | None = None,
        new_name: str | None = None,
    ) -> Project | None:
        return self._run(
            "Fork", "Fork created",
            self.history.fork_project,
            source_project_id, version_id, actor or Actor(), new_name,
        )

    def merge_projects(
        self,
        project_a_id: str,
        version_a_id: str,
        project_b_id: str,
        version_b_id: str,
        actor: Actor | None = None,
        merged_name: str | None = None,
        policy: ConflictPolicy = ConflictPolicy.KEEP_BASE_RENAME_OVERLAY,
    ) -> Project | None:
        return self._run(
            "Merge", "Merge complete",
            self.history.merge_projects,
            project_a_id, version_a_id, project_b_id, version_b_id,
            actor or Actor(), merged_name, policy,
        )

    def add_version_into_working_copy(
        self,
        project_id: str,
        version_id: str,
        actor: Actor | None = None,
    ) -> MergeResult | None:
        return self._run(
            "Add", "Version added to working copy",
            self.history.add_version_into_working_copy,
            project_id, version_id, actor or Actor(),
        )

    def toggle_lock(self, project_id: str, actor: Actor | None = None) -> Project | None:
        return self._run(
            "Lock", "Lock updated",
            self.history.toggle_lock, project_id, actor or Actor(),
        )

    def add_member(
        self,
        project_id: str,
        user_identifier: str,
        role: ProjectRole | str = ProjectRole.EDITOR,
    ) -> ProjectMember | None:
        return self._run(
            "Add member", "Member added",
            self.history.add_member, project_id, user_identifier, role,
        )

    def remove_member(self, project_id: str, member_id: str) -> bool:
        self._run(
            "Remove member", "Member removed",
            self.history.remove_member, project_id, member_id,
        )
        return self.status_message == "Member removed"

    def remove_project(self, project_id: str) -> bool:
        self._run(
            "Remove project", "Project removed",
            self.history.remove_project, project_id,
        )
        return self.status_message == "Project removed"

    # -- Editor ---------------------------------------------------------------

    def open_working_copy(self, project_id: str) -> Path | None:
        project = self.get_project(project_id)
        if project is None:
            self.status_message = f"Project '{project_id}' not found."
            return None
        path = Path(project.working_copy_path)
        self.launcher.open(path)
        return path

    def open_version_checkout(self, project_id: str, version_id: str) -> Path | None:
        """Open a checkout of a version so the snapshot itself stays untouched."""
        try:
            path = self.history.checkout_version(project_id, version_id)
        except (LogiShareError, OSError) as exc:
            self.status_message = f"Failed to open version: {exc}"
            logger.error(self.status_message)
            return None
        self.launcher.open(path)
        return path

    # -- Background -----------------------------------------------------------

    def _workflow_lock(self) -> asyncio.Lock:
        loop = asyncio.get_running_loop()
        if self._lock is None or self._lock_loop is not loop:
            self._lock = asyncio.Lock()
            self._lock_loop = loop
        return self._lock

    async def submit(self, operation: str, /, *args: Any, **kwargs: Any) -> Any:
        """Run the workflow named *operation* on a worker thread.

        Submissions are serialized, so two workflows never run at once.
        """
        func = getattr(self, operation, None)
        if operation.startswith("_") or not callable(func):
            raise AttributeError(f"Unknown workflow: {operation!r}")
        async with self._workflow_lock():
            return await asyncio.to_thread(func, *args, **kwargs)
