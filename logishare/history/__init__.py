"""Version history — import, create version, revert, fork and merge workflows."""

from logishare.history.manager import VersionHistoryManager

__all__ = ["VersionHistoryManager"]
