"""Editor launch collaborators.

Opening a package in the external editor is fire-and-forget: nothing the
launcher returns is consumed by the workflows.
"""

from __future__ import annotations

import abc
import logging
import os
import subprocess
import sys
from pathlib import Path

logger = logging.getLogger(__name__)


class EditorLauncher(abc.ABC):
    """Base class for anything that can open a package directory."""

    @abc.abstractmethod
    def open(self, path: str | Path) -> None:
        """Open *path* in the editor."""


class SystemLauncher(EditorLauncher):
    """Hand the path to the platform's default opener."""

    def open(self, path: str | Path) -> None:
        target = str(path)
        try:
            if sys.platform == "darwin":
                subprocess.Popen(["open", target])
            elif sys.platform.startswith("win"):
                os.startfile(target)  # type: ignore[attr-defined]
            else:
                subprocess.Popen(["xdg-open", target])
        except OSError:
            logger.warning("Could not open %s", target, exc_info=True)
            return
        logger.info("Opened %s", target)


class NullLauncher(EditorLauncher):
    """Remember what would have been opened (headless use and tests)."""

    def __init__(self) -> None:
        self.opened: list[Path] = []

    def open(self, path: str | Path) -> None:
        self.opened.append(Path(path))
        logger.debug("Open requested for %s", path)
