"""Pydantic models for projects, versions, manifests and the activity feed."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from logishare.config import DEFAULT_ACTOR_NAME


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


class ProjectRole(str, Enum):
    """Membership roles on a project."""

    OWNER = "owner"
    EDITOR = "editor"
    VIEWER = "viewer"


class FileEntry(BaseModel):
    """One file of a manifest, addressed by its slash-separated relative path."""

    model_config = ConfigDict(frozen=True)

    relative_path: str
    size_bytes: int
    modified_at: datetime
    sha256: str

    def identity(self) -> tuple[str, int, str]:
        """(path, size, hash): the part of an entry that survives a copy."""
        return (self.relative_path, self.size_bytes, self.sha256)


class ProjectVersion(BaseModel):
    """An immutable point in a project's history."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    created_at: datetime = Field(default_factory=_utc_now)
    message: str
    manifest: tuple[FileEntry, ...] = ()
    snapshot_path: str
    created_by_user_id: Optional[str] = None
    created_by_name: Optional[str] = None

    @property
    def file_count(self) -> int:
        return len(self.manifest)


class ProjectMember(BaseModel):
    id: str = Field(default_factory=_new_id)
    user_identifier: str
    role: ProjectRole


class Project(BaseModel):
    """A shareable unit with one working copy and a newest-first version list."""

    id: str = Field(default_factory=_new_id)
    name: str

    # Where the initial import came from (informational)
    local_path: str = ""
    access_token: Optional[str] = None
    """Opaque sandbox access token; unused outside sandboxed hosts."""

    working_copy_path: str

    owner_user_id: Optional[str] = None
    owner_display_name: Optional[str] = None
    members: list[ProjectMember] = Field(default_factory=list)

    created_at: datetime = Field(default_factory=_utc_now)
    updated_at: datetime = Field(default_factory=_utc_now)
    is_locked: bool = False
    locked_by: Optional[str] = None

    # newest first
    versions: list[ProjectVersion] = Field(default_factory=list)

    def find_version(self, version_id: str) -> ProjectVersion | None:
        for version in self.versions:
            if version.id == version_id:
                return version
        return None

    def has_member(self, user_identifier: str) -> bool:
        """Case-insensitive membership check."""
        needle = user_identifier.strip().casefold()
        return any(m.user_identifier.casefold() == needle for m in self.members)


class ActivityEvent(BaseModel):
    """An append-only audit record shown newest first."""

    id: str = Field(default_factory=_new_id)
    date: datetime = Field(default_factory=_utc_now)
    title: str
    detail: Optional[str] = None
    project_id: Optional[str] = None


class Actor(BaseModel):
    """The user on whose behalf a workflow runs."""

    user_id: Optional[str] = None
    display_name: Optional[str] = None

    def name_or(self, fallback: str = DEFAULT_ACTOR_NAME) -> str:
        name = (self.display_name or "").strip()
        return name or fallback


class ProjectState(BaseModel):
    """Everything the metadata document persists."""

    projects: list[Project] = Field(default_factory=list)
    activity: list[ActivityEvent] = Field(default_factory=list)

    def find_project(self, project_id: str) -> Project | None:
        for project in self.projects:
            if project.id == project_id:
                return project
        return None
