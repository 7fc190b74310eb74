"""Tests for the LogiShare facade: persistence, status lines, editor, background."""

from __future__ import annotations

import asyncio
import shutil
from pathlib import Path

import pytest

from logishare import Actor, LogiShare, NullLauncher
from logishare.errors import IOFailure


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_package(root: Path, files: dict[str, str]) -> Path:
    root.mkdir(parents=True, exist_ok=True)
    for rel, text in files.items():
        p = root / rel
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(text, encoding="utf-8")
    return root


SAM = Actor(user_id="u1", display_name="Sam")


@pytest.fixture
def app_dir(tmp_path: Path) -> Path:
    return tmp_path / "app"


@pytest.fixture
def share(app_dir: Path) -> LogiShare:
    return LogiShare(app_dir, launcher=NullLauncher())


@pytest.fixture
def song(tmp_path: Path) -> Path:
    return _make_package(tmp_path / "music" / "Song.logicx", {
        "ProjectData": "data",
        "Alternatives/000/ProjectData": "alt",
    })


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------


class TestPersistence:
    def test_state_survives_restart(self, share, song, app_dir):
        project = share.import_project(song, SAM)
        share.create_version(project.id, "second", SAM)

        reopened = LogiShare(app_dir, launcher=NullLauncher())
        loaded = reopened.get_project(project.id)
        assert loaded is not None
        assert [v.message for v in loaded.versions] == ["second", "Initial import"]
        assert [e.title for e in reopened.activity()] == ["Created version", "Imported project"]

    def test_corrupt_document_starts_empty(self, app_dir):
        app_dir.mkdir(parents=True)
        (app_dir / "snapshot.json").write_text("[[[", encoding="utf-8")

        share = LogiShare(app_dir, launcher=NullLauncher())
        assert share.projects == []
        assert share.status_message.startswith("Failed to load local data:")

    def test_save_failure_reported(self, share, song, monkeypatch):
        def _fail(state):
            raise IOFailure("read-only volume")

        monkeypatch.setattr(share.persistence, "save", _fail)
        project = share.import_project(song, SAM)

        assert project is not None
        assert share.status_message == "Failed to save: read-only volume"


# ---------------------------------------------------------------------------
# Status messages
# ---------------------------------------------------------------------------


class TestStatus:
    def test_success_messages(self, share, song):
        project = share.import_project(song, SAM)
        assert share.status_message == "Import complete"
        version = share.create_version(project.id, "", SAM)
        assert version.message == "Update"
        assert share.status_message == "Version created"
        share.toggle_lock(project.id, SAM)
        assert share.status_message == "Lock updated"

    def test_validation_failure(self, share, tmp_path):
        bad = _make_package(tmp_path / "Song.band", {"a": "1"})
        assert share.import_project(bad, SAM) is None
        assert share.status_message.startswith("Import failed: Please select a .logicx project")
        assert share.projects == []

    def test_blocked_storage_reported(self, share, song, app_dir):
        app_dir.mkdir(parents=True, exist_ok=True)
        (app_dir / "working").write_text("not a directory")

        assert share.import_project(song, SAM) is None
        assert share.status_message.startswith("Import failed: Could not create")
        assert share.projects == []

    def test_blocked_checkout_reported(self, share, song, app_dir):
        project = share.import_project(song, SAM)
        (app_dir / "checkouts").write_text("not a directory")

        assert share.open_version_checkout(project.id, project.versions[0].id) is None
        assert share.status_message.startswith("Failed to open version:")
        assert share.launcher.opened == []

    def test_create_version_with_blocked_versions_dir(self, share, song, app_dir):
        project = share.import_project(song, SAM)
        versions = app_dir / "versions"
        shutil.rmtree(versions)
        versions.write_text("not a directory")

        assert share.create_version(project.id, "x", SAM) is None
        assert share.status_message.startswith("Version failed:")
        assert len(share.get_project(project.id).versions) == 1

    def test_not_found_is_not_fatal(self, share):
        assert share.create_version("missing", "x", SAM) is None
        assert share.status_message == "Project 'missing' not found."
        assert share.merge_candidates("missing") == []

    def test_duplicate_member(self, share, song):
        project = share.import_project(song, SAM)
        member = share.add_member(project.id, "pat@example.com")
        assert member is not None
        assert share.add_member(project.id, "PAT@example.com") is None
        assert share.status_message == "Member already added"

        assert share.remove_member(project.id, member.id) is True
        assert share.remove_member(project.id, member.id) is False

    def test_owner_removal_reported(self, share, song):
        project = share.import_project(song, SAM)
        owner = project.members[0]
        assert share.remove_member(project.id, owner.id) is False
        assert share.status_message == "Remove member failed: The project owner cannot be removed."
        assert len(share.get_project(project.id).members) == 1

    def test_remove_project(self, share, song):
        project = share.import_project(song, SAM)
        assert share.remove_project(project.id) is True
        assert share.get_project(project.id) is None
        assert share.remove_project(project.id) is False

    def test_default_actor(self, share, song):
        project = share.import_project(song)
        assert project.owner_display_name == "You"

    def test_add_version_reports_result(self, share, song):
        project = share.import_project(song, SAM)
        wc = Path(project.working_copy_path)
        (wc / "ProjectData").write_text("changed")
        result = share.add_version_into_working_copy(project.id, project.versions[0].id, SAM)

        assert share.status_message == "Version added to working copy"
        assert result.has_conflicts
        assert (wc / "ProjectData__fromVersion").read_text() == "data"


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


class TestActivity:
    def test_filter_and_limit(self, share, song, tmp_path):
        first = share.import_project(song, SAM)
        other = share.import_project(_make_package(tmp_path / "Other.logicx", {"a": "1"}), SAM)
        share.create_version(first.id, "one", SAM)
        share.create_version(first.id, "two", SAM)

        mine = share.activity(first.id)
        assert all(e.project_id == first.id for e in mine)
        assert [e.detail for e in mine] == ["Song - two", "Song - one", "Song"]
        assert len(share.activity(limit=2)) == 2
        assert share.activity(other.id)[0].title == "Imported project"


# ---------------------------------------------------------------------------
# Editor
# ---------------------------------------------------------------------------


class TestEditor:
    def test_open_working_copy(self, share, song):
        project = share.import_project(song, SAM)
        path = share.open_working_copy(project.id)
        assert path == Path(project.working_copy_path)
        assert share.launcher.opened == [path]

    def test_open_unknown_project(self, share):
        assert share.open_working_copy("missing") is None
        assert share.launcher.opened == []

    def test_open_version_uses_checkout(self, share, song, app_dir):
        project = share.import_project(song, SAM)
        version = project.versions[0]
        path = share.open_version_checkout(project.id, version.id)

        assert path is not None
        assert path.relative_to(app_dir / "checkouts")
        assert path != Path(version.snapshot_path)
        assert (path / "ProjectData").read_text() == "data"
        assert share.launcher.opened == [path]

    def test_open_unknown_version(self, share, song):
        project = share.import_project(song, SAM)
        assert share.open_version_checkout(project.id, "missing") is None
        assert share.status_message.startswith("Failed to open version:")


# ---------------------------------------------------------------------------
# Background submission
# ---------------------------------------------------------------------------


class TestSubmit:
    def test_runs_workflow_off_loop(self, share, song):
        project = asyncio.run(share.submit("import_project", song, SAM))
        assert project is not None
        assert share.status_message == "Import complete"

    def test_serialized(self, share, song):
        project = share.import_project(song, SAM)

        async def _many():
            return await asyncio.gather(*(
                share.submit("create_version", project.id, f"v{i}", SAM)
                for i in range(4)
            ))

        versions = asyncio.run(_many())
        assert all(v is not None for v in versions)
        assert len(share.get_project(project.id).versions) == 5

    def test_rejects_private_and_unknown(self, share):
        with pytest.raises(AttributeError):
            asyncio.run(share.submit("_run"))
        with pytest.raises(AttributeError):
            asyncio.run(share.submit("no_such_workflow"))
