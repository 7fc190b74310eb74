"""VersionHistoryManager — project lifecycle workflows.

Orchestrates the scanner, the snapshot store and the merge engine:
import -> create version -> revert / fork / merge / add version.

The manager owns a :class:`~logishare.models.ProjectState` and mutates it
only after the filesystem part of a workflow has succeeded, so a failing
workflow never inserts a partial project or version.  Every success prepends
an :class:`~logishare.models.ActivityEvent`.  There is no internal locking;
callers serialize workflows per project.
"""

from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator

from logishare.config import (
    DEFAULT_ACTOR_NAME,
    DEFAULT_PROJECT_NAME,
    DEFAULT_VERSION_MESSAGE,
    FORK_NAME_SUFFIX,
    HASH_CHUNK_SIZE,
    HIDDEN_PREFIX,
    INCOMING_SUFFIX,
    INITIAL_VERSION_MESSAGE,
    MERGE_INCOMING_SUFFIX,
    MERGED_NAME_SUFFIX,
)
from logishare.errors import (
    IOFailure,
    LogiShareError,
    MemberExistsError,
    NotDirectoryError,
    NotFoundError,
    ProjectNotFoundError,
    VersionNotFoundError,
)
from logishare.manifest.scanner import scan_package, validate_package
from logishare.merge.engine import (
    KEEP_WORKING_COPY,
    ConflictPolicy,
    MergeResult,
    merge_directories,
)
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
from logishare.storage.snapshots import SnapshotStore

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _clean_name(name: str) -> str:
    # tree names become a single, visible path component
    name = name.strip().replace("/", "-").replace("\\", "-")
    return name.lstrip(HIDDEN_PREFIX).strip()


class VersionHistoryManager:
    """Run project workflows against a snapshot store.

    Parameters
    ----------
    store:
        Where working copies, snapshots and checkouts live.
    state:
        Initial project/activity state, usually loaded from disk.
    chunk_size:
        Streaming hash read size passed to the scanner.
    """

    def __init__(
        self,
        store: SnapshotStore,
        state: ProjectState | None = None,
        *,
        chunk_size: int = HASH_CHUNK_SIZE,
    ) -> None:
        self.store = store
        self.state = state if state is not None else ProjectState()
        self.chunk_size = chunk_size

    @property
    def projects(self) -> list[Project]:
        return self.state.projects

    @property
    def activity(self) -> list[ActivityEvent]:
        return self.state.activity

    # -- Lookups --------------------------------------------------------------

    def get_project(self, project_id: str) -> Project:
        project = self.state.find_project(project_id)
        if project is None:
            raise ProjectNotFoundError(project_id)
        return project

    def get_version(self, project_id: str, version_id: str) -> ProjectVersion:
        version = self.get_project(project_id).find_version(version_id)
        if version is None:
            raise VersionNotFoundError(version_id, project_id)
        return version

    def merge_candidates(
        self,
        project_id: str,
        excluding_version_id: str | None = None,
    ) -> list[ProjectVersion]:
        """Versions of *project_id*, newest first, minus an excluded one."""
        return [
            v for v in self.get_project(project_id).versions
            if v.id != excluding_version_id
        ]

    # -- Internals ------------------------------------------------------------

    def _scan(self, root: str | Path) -> list[FileEntry]:
        return scan_package(root, self.chunk_size)

    def _record(
        self,
        title: str,
        detail: str | None = None,
        project_id: str | None = None,
    ) -> ActivityEvent:
        event = ActivityEvent(title=title, detail=detail, project_id=project_id)
        self.state.activity.insert(0, event)
        return event

    def _replace(self, project: Project) -> None:
        for i, existing in enumerate(self.state.projects):
            if existing.id == project.id:
                self.state.projects[i] = project
                return
        raise ProjectNotFoundError(project.id)

    def _touch(self, project: Project, **changes: object) -> Project:
        updated = project.model_copy(update={"updated_at": _utc_now(), **changes})
        self._replace(updated)
        return updated

    def _replace_tree(self, dst: str | Path, src: str | Path) -> Path:
        """Materialize *src* over a mutable tree; snapshots are refused."""
        if self.store.is_version_snapshot(dst):
            raise IOFailure(f"Refusing to overwrite version snapshot {dst}")
        if not Path(src).is_dir():
            raise NotDirectoryError(src)
        return self.store.materialize(dst, src)

    def _new_version(
        self,
        project_id: str,
        project_name: str,
        working_copy: Path,
        message: str,
        actor: Actor,
        author_name: str,
    ) -> ProjectVersion:
        """Scan *working_copy* and freeze it as a new version snapshot."""
        manifest = self._scan(working_copy)
        version_id = str(uuid.uuid4())
        try:
            snapshot = self.store.freeze_version(
                working_copy, project_id, version_id, project_name,
            )
        except LogiShareError:
            self.store.discard_version(project_id, version_id)
            raise
        return ProjectVersion(
            id=version_id,
            message=message,
            manifest=tuple(manifest),
            snapshot_path=str(snapshot),
            created_by_user_id=actor.user_id,
            created_by_name=author_name,
        )

    @contextmanager
    def _creating(self, project_id: str) -> Iterator[None]:
        """Discard every tree of a new project if its workflow fails."""
        try:
            yield
        except BaseException:
            self.store.discard_project(project_id)
            raise

    def _seed_project(
        self,
        name: str,
        source: Path,
        actor: Actor,
        message: str,
        local_path: str,
        *,
        access_token: str | None = None,
        overlay: Path | None = None,
        policy: ConflictPolicy = KEEP_WORKING_COPY,
    ) -> tuple[Project, MergeResult | None]:
        """Create a project whose working copy starts as a copy of *source*.

        If *overlay* is given it is merged into the new working copy before
        the first version is taken.
        """
        project_id = str(uuid.uuid4())
        owner_name = actor.name_or()
        merge_result = None
        with self._creating(project_id):
            working_copy = self.store.working_copy_path(project_id, name)
            self._replace_tree(working_copy, source)
            if overlay is not None:
                if not overlay.is_dir():
                    raise NotDirectoryError(overlay)
                merge_result = merge_directories(
                    working_copy, overlay, policy,
                    incoming_suffix=MERGE_INCOMING_SUFFIX,
                )
            version = self._new_version(
                project_id, name, working_copy, message, actor, owner_name,
            )
        project = Project(
            id=project_id,
            name=name,
            local_path=local_path,
            access_token=access_token,
            working_copy_path=str(working_copy),
            owner_user_id=actor.user_id,
            owner_display_name=owner_name,
            members=[ProjectMember(user_identifier=owner_name, role=ProjectRole.OWNER)],
            versions=[version],
        )
        self.state.projects.insert(0, project)
        return project, merge_result

    # -- Import / versioning --------------------------------------------------

    def import_project(
        self,
        source: str | Path,
        actor: Actor,
        *,
        access_token: str | None = None,
    ) -> Project:
        """Copy a package into a new project and record its first version.

        Raises
        ------
        NotPackageTypeError
            If *source* lacks the store's package extension.
        NotDirectoryError
            If *source* is not a directory.
        IOFailure
            If copying or hashing fails.
        """
        source = validate_package(source, self.store.extension)
        name = _clean_name(source.stem) or DEFAULT_PROJECT_NAME
        project, _ = self._seed_project(
            name, source, actor, INITIAL_VERSION_MESSAGE, str(source),
            access_token=access_token,
        )
        self._record("Imported project", name, project.id)
        logger.info("Imported %s as project %s", source, project.id)
        return project

    def create_version(
        self,
        project_id: str,
        message: str,
        actor: Actor,
    ) -> ProjectVersion:
        """Freeze the working copy of *project_id* as its newest version."""
        project = self.get_project(project_id)
        message = message.strip() or DEFAULT_VERSION_MESSAGE
        who = actor.name_or(project.owner_display_name or DEFAULT_ACTOR_NAME)

        version = self._new_version(
            project.id, project.name, Path(project.working_copy_path),
            message, actor, who,
        )
        self._touch(project, versions=[version, *project.versions])
        self._record("Created version", f"{project.name} - {message}", project.id)
        logger.info(
            "Created version %s of %s (%d files)",
            version.id, project.name, version.file_count,
        )
        return version

    def revert_working_copy(
        self,
        project_id: str,
        version_id: str,
        actor: Actor,
    ) -> Project:
        """Replace the working copy wholesale with a version's snapshot.

        History is left as it is.
        """
        project = self.get_project(project_id)
        version = self.get_version(project_id, version_id)
        self._replace_tree(project.working_copy_path, version.snapshot_path)
        updated = self._touch(project)
        self._record(
            "Reverted working copy",
            f"{project.name} -> {version.message} (by {actor.name_or()})",
            project.id,
        )
        logger.info("Reverted %s to version %s", project.name, version.id)
        return updated

    def checkout_version(self, project_id: str, version_id: str) -> Path:
        """Materialize a disposable checkout of a version and return its path."""
        project = self.get_project(project_id)
        version = self.get_version(project_id, version_id)
        dst = self.store.checkout_path(project.id, version.id, project.name)
        return self._replace_tree(dst, version.snapshot_path)

    # -- Fork / merge ---------------------------------------------------------

    def fork_project(
        self,
        source_project_id: str,
        version_id: str,
        actor: Actor,
        new_name: str | None = None,
    ) -> Project:
        """Start a new project owned by *actor* from one version's snapshot."""
        source = self.get_project(source_project_id)
        version = self.get_version(source_project_id, version_id)
        name = _clean_name(new_name or "") or f"{source.name}{FORK_NAME_SUFFIX}"

        fork, _ = self._seed_project(
            name,
            Path(version.snapshot_path),
            actor,
            f"Forked from {source.name} - {version.message}",
            f"(forked from {source.name})",
        )
        self._record("Forked project", name, fork.id)
        logger.info("Forked %s (%s) into %s", source.name, version.id, fork.id)
        return fork

    def merge_projects(
        self,
        project_a_id: str,
        version_a_id: str,
        project_b_id: str,
        version_b_id: str,
        actor: Actor,
        merged_name: str | None = None,
        policy: ConflictPolicy = ConflictPolicy.KEEP_BASE_RENAME_OVERLAY,
    ) -> Project:
        """Create a project from version A overlaid with version B.

        Incoming conflicts are renamed with ``__fromB`` and displaced base
        files with ``__fromA``, according to *policy*.
        """
        project_a = self.get_project(project_a_id)
        version_a = self.get_version(project_a_id, version_a_id)
        project_b = self.get_project(project_b_id)
        version_b = self.get_version(project_b_id, version_b_id)
        name = _clean_name(merged_name or "") or f"{project_a.name}{MERGED_NAME_SUFFIX}"

        merged, result = self._seed_project(
            name,
            Path(version_a.snapshot_path),
            actor,
            f"Merged {project_a.name} + {project_b.name}",
            f"(merged: {project_a.name} + {project_b.name})",
            overlay=Path(version_b.snapshot_path),
            policy=policy,
        )
        self._record("Merged projects", name, merged.id)
        logger.info(
            "Merged %s + %s into %s (%d conflicts)",
            project_a.name, project_b.name, merged.id, len(result.conflicts),
        )
        return merged

    def add_version_into_working_copy(
        self,
        project_id: str,
        version_id: str,
        actor: Actor,
    ) -> MergeResult:
        """Merge one of the project's versions into its working copy.

        The working copy wins conflicts; incoming files are renamed with
        ``__fromVersion``.  The working copy is re-scanned to validate it,
        but no version is created.
        """
        project = self.get_project(project_id)
        version = self.get_version(project_id, version_id)
        snapshot = Path(version.snapshot_path)
        if not snapshot.is_dir():
            raise NotDirectoryError(snapshot)

        working_copy = Path(project.working_copy_path)
        result = merge_directories(
            working_copy, snapshot, KEEP_WORKING_COPY,
            incoming_suffix=INCOMING_SUFFIX,
        )
        self._scan(working_copy)
        self._touch(project)
        self._record(
            "Added version to working copy",
            f"{project.name} <- {version.message} (by {actor.name_or()})",
            project.id,
        )
        return result

    # -- Lock / members / removal ---------------------------------------------

    def toggle_lock(self, project_id: str, actor: Actor) -> Project:
        """Flip the advisory lock.  Nothing else consults it."""
        project = self.get_project(project_id)
        locking = not project.is_locked
        username = actor.name_or()
        updated = self._touch(
            project,
            is_locked=locking,
            locked_by=username if locking else None,
        )
        if locking:
            self._record("Locked project", f"{project.name} (by {username})", project.id)
        else:
            self._record("Unlocked project", project.name, project.id)
        return updated

    def add_member(
        self,
        project_id: str,
        user_identifier: str,
        role: ProjectRole | str = ProjectRole.EDITOR,
    ) -> ProjectMember:
        project = self.get_project(project_id)
        trimmed = user_identifier.strip()
        if not trimmed:
            raise LogiShareError("Member identifier cannot be empty.")
        if project.has_member(trimmed):
            raise MemberExistsError(trimmed)

        member = ProjectMember(user_identifier=trimmed, role=ProjectRole(role))
        self._touch(project, members=[*project.members, member])
        self._record("Added member", f"{trimmed} -> {project.name}", project.id)
        return member

    def remove_member(self, project_id: str, member_id: str) -> None:
        project = self.get_project(project_id)
        member = next((m for m in project.members if m.id == member_id), None)
        if member is None:
            raise NotFoundError(f"Member '{member_id}' not found.")
        if member.role is ProjectRole.OWNER:
            raise LogiShareError("The project owner cannot be removed.")
        self._touch(
            project,
            members=[m for m in project.members if m.id != member_id],
        )
        self._record("Removed member", project.name, project.id)

    def remove_project(self, project_id: str) -> None:
        """Drop a project from the metadata; its trees stay on disk."""
        project = self.get_project(project_id)
        self.state.projects = [p for p in self.state.projects if p.id != project.id]
        self._record("Removed project", project.name)
