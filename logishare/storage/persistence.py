"""LocalPersistence — the single metadata document (``snapshot.json``).

Projects and activity are serialized with ISO-8601 timestamps and sorted
keys, and written atomically (write-to-temp then rename).
"""

from __future__ import annotations

import json
import logging
import tempfile
from pathlib import Path

from pydantic import ValidationError

from logishare.config import METADATA_FILENAME
from logishare.errors import IOFailure
from logishare.models import ProjectState

logger = logging.getLogger(__name__)


class LocalPersistence:
    """Read/write access to ``<app_dir>/snapshot.json``."""

    def __init__(self, app_dir: str | Path) -> None:
        self.app_dir = Path(app_dir)
        self.path = self.app_dir / METADATA_FILENAME

    def load(self) -> ProjectState:
        """Return the stored state, or an empty state if no document exists.

        Raises
        ------
        IOFailure
            If the document exists but cannot be read or parsed.
        """
        if not self.path.is_file():
            return ProjectState()
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            state = ProjectState.model_validate(data)
        except (OSError, json.JSONDecodeError, ValidationError) as exc:
            raise IOFailure(f"Failed to load {self.path}", exc) from exc
        state.activity.sort(key=lambda e: e.date, reverse=True)
        return state

    def save(self, state: ProjectState) -> None:
        """Atomically persist *state*."""
        payload = state.model_dump(mode="json")
        self.app_dir.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(
            dir=self.app_dir, prefix=".snapshot_", suffix=".json"
        )
        try:
            with open(fd, "w", encoding="utf-8") as fh:
                json.dump(payload, fh, indent=2, sort_keys=True)
            Path(tmp).replace(self.path)
        except OSError as exc:
            Path(tmp).unlink(missing_ok=True)
            raise IOFailure(f"Failed to save {self.path}", exc) from exc
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise
        logger.debug(
            "Saved %d projects, %d events to %s",
            len(state.projects), len(state.activity), self.path,
        )
