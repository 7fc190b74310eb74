"""SnapshotStore — working copies, immutable version snapshots, checkouts.

Layout under the app data directory::

    working/<projectId>/<name>.<ext>                  mutable
    versions/<projectId>/<versionId>/<name>.<ext>     immutable
    checkouts/<projectId>/<versionId>/<name>.<ext>    disposable

The only mutation primitive is :meth:`SnapshotStore.materialize`, which
deletes the destination and copies the source over it wholesale.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from logishare.config import (
    CHECKOUTS_DIR,
    DEFAULT_PACKAGE_EXTENSION,
    VERSIONS_DIR,
    WORKING_DIR,
)
from logishare.errors import IOFailure

logger = logging.getLogger(__name__)


class SnapshotStore:
    """Derive storage paths and copy directory trees between them.

    Parameters
    ----------
    app_dir:
        Root of the on-disk layout.
    extension:
        Package extension appended to every tree name.
    """

    def __init__(
        self,
        app_dir: str | Path,
        extension: str = DEFAULT_PACKAGE_EXTENSION,
    ) -> None:
        self.app_dir = Path(app_dir)
        self.extension = extension.lstrip(".")

    @property
    def working_dir(self) -> Path:
        return self.app_dir / WORKING_DIR

    @property
    def versions_dir(self) -> Path:
        return self.app_dir / VERSIONS_DIR

    @property
    def checkouts_dir(self) -> Path:
        return self.app_dir / CHECKOUTS_DIR

    # -- Paths ----------------------------------------------------------------

    def _package_name(self, project_name: str) -> str:
        return f"{project_name}.{self.extension}"

    @staticmethod
    def _ensure_dir(path: Path) -> Path:
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise IOFailure(f"Could not create {path}", exc) from exc
        return path

    def working_copy_path(self, project_id: str, project_name: str) -> Path:
        base = self._ensure_dir(self.working_dir / project_id)
        return base / self._package_name(project_name)

    def version_snapshot_path(
        self, project_id: str, version_id: str, project_name: str,
    ) -> Path:
        base = self._ensure_dir(self.versions_dir / project_id / version_id)
        return base / self._package_name(project_name)

    def checkout_path(
        self, project_id: str, version_id: str, project_name: str,
    ) -> Path:
        base = self._ensure_dir(self.checkouts_dir / project_id / version_id)
        return base / self._package_name(project_name)

    def is_version_snapshot(self, path: str | Path) -> bool:
        """Return *True* if *path* lies inside the immutable namespace."""
        try:
            Path(path).resolve().relative_to(self.versions_dir.resolve())
        except ValueError:
            return False
        return True

    # -- Copying --------------------------------------------------------------

    def materialize(self, dst: str | Path, src: str | Path) -> Path:
        """Replace *dst* with a full copy of *src*.

        Symlinks are copied as links.  Any failure is raised as
        :class:`IOFailure`; *dst* may then be missing or partial.
        """
        dst = Path(dst)
        src = Path(src)
        try:
            if dst.is_symlink() or dst.is_file():
                dst.unlink()
            elif dst.exists():
                shutil.rmtree(dst)
            dst.parent.mkdir(parents=True, exist_ok=True)
            shutil.copytree(src, dst, symlinks=True)
        except (OSError, shutil.Error) as exc:
            raise IOFailure(f"Could not copy {src} to {dst}", exc) from exc
        logger.debug("Materialized %s -> %s", src, dst)
        return dst

    def freeze_version(
        self,
        working_copy: str | Path,
        project_id: str,
        version_id: str,
        project_name: str,
    ) -> Path:
        """Copy *working_copy* into a new immutable version snapshot.

        Raises :class:`IOFailure` if a snapshot already exists for
        *version_id*; snapshots are written exactly once.
        """
        dst = self.version_snapshot_path(project_id, version_id, project_name)
        if dst.exists():
            raise IOFailure(f"Version snapshot already exists: {dst}")
        return self.materialize(dst, working_copy)

    def discard_version(self, project_id: str, version_id: str) -> None:
        """Delete a half-written version snapshot directory."""
        target = self.versions_dir / project_id / version_id
        if target.exists():
            shutil.rmtree(target, ignore_errors=True)
            logger.debug("Discarded %s", target)

    def discard_project(self, project_id: str) -> None:
        """Delete every tree stored for *project_id*.

        Used to roll back a workflow that failed while creating a project.
        """
        for namespace in (self.working_dir, self.versions_dir, self.checkouts_dir):
            target = namespace / project_id
            if target.exists():
                shutil.rmtree(target, ignore_errors=True)
                logger.debug("Discarded %s", target)
