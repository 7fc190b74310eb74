"""Merge engine — overlay one directory tree onto another."""

from logishare.merge.engine import (
    KEEP_WORKING_COPY,
    ConflictPolicy,
    MergeConflict,
    MergeResult,
    merge_directories,
    suffixed_name,
)

__all__ = [
    "ConflictPolicy",
    "KEEP_WORKING_COPY",
    "MergeConflict",
    "MergeResult",
    "merge_directories",
    "suffixed_name",
]
