"""On-disk storage: directory trees and the metadata document."""

from logishare.storage.persistence import LocalPersistence
from logishare.storage.snapshots import SnapshotStore

__all__ = ["LocalPersistence", "SnapshotStore"]
