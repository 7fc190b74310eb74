"""File-level overlay merge of one directory tree into another.

The merge only looks at which files exist.  A same-path conflict is resolved
by renaming one side (``stem + suffix + ext``); file contents are never
inspected.  A file already in *base* is never deleted or overwritten;
renamed copies take the first free suffixed name.  The merge mutates *base*
in place and is not transactional: a failure partway leaves *base*
partially merged.
"""

from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from logishare.config import EXISTING_SUFFIX, INCOMING_SUFFIX
from logishare.errors import IOFailure, NotDirectoryError
from logishare.manifest.scanner import is_hidden

logger = logging.getLogger(__name__)


class ConflictPolicy(str, Enum):
    """How a same-path conflict is resolved."""

    KEEP_BASE_RENAME_OVERLAY = "keep_base_rename_overlay"
    KEEP_OVERLAY_RENAME_BASE = "keep_overlay_rename_base"


# The working copy wins when a version is added into it.
KEEP_WORKING_COPY = ConflictPolicy.KEEP_BASE_RENAME_OVERLAY


@dataclass
class MergeConflict:
    """One same-path conflict and where the displaced file ended up."""

    relative_path: str
    renamed_path: str
    policy: ConflictPolicy


@dataclass
class MergeResult:
    """Files copied in without conflict, plus every resolved conflict."""

    added: list[str] = field(default_factory=list)
    conflicts: list[MergeConflict] = field(default_factory=list)

    @property
    def has_conflicts(self) -> bool:
        return len(self.conflicts) > 0


def suffixed_name(path: Path, suffix: str) -> Path:
    """``a/b/take.wav`` + ``__fromA`` -> ``a/b/take__fromA.wav``."""
    return path.with_name(f"{path.stem}{suffix}{path.suffix}")


def free_name(path: Path, suffix: str) -> Path:
    """First unused sibling name for *path* carrying *suffix*.

    ``take__fromA.wav`` if free, else ``take__fromA 2.wav``, ``take__fromA 3.wav``
    and so on.  Nothing already on disk is ever replaced.
    """
    candidate = suffixed_name(path, suffix)
    n = 2
    while os.path.lexists(candidate):
        candidate = suffixed_name(path, f"{suffix} {n}")
        n += 1
    return candidate


def merge_directories(
    base: str | Path,
    overlay: str | Path,
    policy: ConflictPolicy = KEEP_WORKING_COPY,
    *,
    incoming_suffix: str = INCOMING_SUFFIX,
    existing_suffix: str = EXISTING_SUFFIX,
) -> MergeResult:
    """Copy every non-hidden file of *overlay* into *base*.

    Parameters
    ----------
    base:
        Tree that receives the files.  Mutated in place.
    overlay:
        Tree to copy from.  Never modified.
    policy:
        Conflict policy.  ``KEEP_BASE_RENAME_OVERLAY`` copies the incoming
        file next to the existing one under ``incoming_suffix``;
        ``KEEP_OVERLAY_RENAME_BASE`` moves the existing file to
        ``existing_suffix`` and puts the incoming file at the original path.

    Returns
    -------
    MergeResult
        What was added and which conflicts were resolved.  The caller must
        re-scan *base* to obtain a manifest.
    """
    base = Path(base)
    overlay = Path(overlay)
    policy = ConflictPolicy(policy)
    for p in (base, overlay):
        if not p.is_dir():
            raise NotDirectoryError(p)

    result = MergeResult()
    try:
        for dirpath, dirnames, filenames in os.walk(overlay, onerror=_log_walk_error):
            dirnames[:] = [d for d in dirnames if not is_hidden(d)]
            src_dir = Path(dirpath)
            rel_dir = src_dir.relative_to(overlay)
            dst_dir = base / rel_dir
            if not dst_dir.exists():
                dst_dir.mkdir(parents=True)

            for name in filenames:
                if is_hidden(name):
                    continue
                src = src_dir / name
                dest = dst_dir / name
                rel = (rel_dir / name).as_posix()

                if not os.path.lexists(dest):
                    _copy(src, dest)
                    result.added.append(rel)
                    logger.debug("Merged %s", rel)
                    continue

                if policy is ConflictPolicy.KEEP_BASE_RENAME_OVERLAY:
                    renamed = free_name(dest, incoming_suffix)
                    _copy(src, renamed)
                else:
                    renamed = free_name(dest, existing_suffix)
                    shutil.move(str(dest), str(renamed))
                    _copy(src, dest)

                result.conflicts.append(MergeConflict(
                    relative_path=rel,
                    renamed_path=renamed.relative_to(base).as_posix(),
                    policy=policy,
                ))
                logger.debug("Conflict on %s -> %s", rel, renamed.name)
    except (OSError, shutil.Error) as exc:
        raise IOFailure(f"Merge of {overlay} into {base} failed", exc) from exc

    logger.info(
        "Merged %s into %s: %d added, %d conflicts",
        overlay, base, len(result.added), len(result.conflicts),
    )
    return result


def _copy(src: Path, dst: Path) -> None:
    shutil.copy2(src, dst, follow_symlinks=False)


def _log_walk_error(exc: OSError) -> None:
    logger.debug("Skipping unreadable entry %s", exc.filename, exc_info=True)
