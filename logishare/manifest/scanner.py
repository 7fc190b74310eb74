"""Manifest scanner: walk a package directory and hash every file.

The walk descends into every subdirectory, including ones that look like
nested packages, skips hidden entries, and emits only regular files.
Enumeration errors on individual entries are swallowed; an I/O error while
hashing a file that was enumerated aborts the whole scan.
"""

from __future__ import annotations

import asyncio
import logging
import os
from datetime import datetime, timezone
from pathlib import Path

from logishare.config import DEFAULT_PACKAGE_EXTENSION, HASH_CHUNK_SIZE, HIDDEN_PREFIX
from logishare.errors import IOFailure, NotDirectoryError, NotPackageTypeError
from logishare.manifest.hasher import Hasher
from logishare.manifest.ordering import natural_key
from logishare.models import FileEntry

logger = logging.getLogger(__name__)


def is_hidden(name: str) -> bool:
    return name.startswith(HIDDEN_PREFIX)


def validate_package(
    path: str | Path,
    extension: str = DEFAULT_PACKAGE_EXTENSION,
) -> Path:
    """Check that *path* is a package directory with the expected extension.

    Raises
    ------
    NotPackageTypeError
        If the suffix of *path* is not ``.<extension>`` (case-insensitive).
    NotDirectoryError
        If *path* does not exist or is not a directory.
    """
    p = Path(path)
    if p.suffix.lstrip(".").lower() != extension.lower():
        raise NotPackageTypeError(p, extension)
    if not p.is_dir():
        raise NotDirectoryError(p)
    return p


def _log_walk_error(exc: OSError) -> None:
    logger.debug("Skipping unreadable entry %s", exc.filename, exc_info=True)


def scan_package(
    package_root: str | Path,
    chunk_size: int = HASH_CHUNK_SIZE,
) -> list[FileEntry]:
    """Return the manifest of *package_root*, sorted by :func:`natural_key`.

    Parameters
    ----------
    package_root:
        Directory to scan.  The extension check is the caller's job
        (see :func:`validate_package`).
    chunk_size:
        Read size for the streaming hash.

    Raises
    ------
    NotDirectoryError
        If *package_root* is not a directory.
    IOFailure
        If a file that was enumerated cannot be stat'ed or read.
    """
    root = Path(package_root)
    if not root.is_dir():
        raise NotDirectoryError(root)

    entries: list[FileEntry] = []
    for dirpath, dirnames, filenames in os.walk(root, onerror=_log_walk_error):
        # prune in place so hidden directories are never entered
        dirnames[:] = [d for d in dirnames if not is_hidden(d)]
        current = Path(dirpath)
        for name in filenames:
            if is_hidden(name):
                continue
            path = current / name
            if not path.is_file():
                # dangling link, socket, fifo
                continue
            entries.append(_describe(root, path, chunk_size))

    entries.sort(key=lambda e: natural_key(e.relative_path))
    logger.debug("Scanned %s: %d files", root, len(entries))
    return entries


def _describe(root: Path, path: Path, chunk_size: int) -> FileEntry:
    try:
        st = path.stat()
        digest = Hasher.hash_file(path, chunk_size)
    except OSError as exc:
        raise IOFailure(f"Could not read {path}", exc) from exc
    return FileEntry(
        relative_path=path.relative_to(root).as_posix(),
        size_bytes=st.st_size,
        modified_at=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
        sha256=digest,
    )


async def scan_package_async(
    package_root: str | Path,
    chunk_size: int = HASH_CHUNK_SIZE,
) -> list[FileEntry]:
    """Run :func:`scan_package` on a worker thread.

    The awaiting task can be cancelled, but the scan itself runs to
    completion or failure.
    """
    return await asyncio.to_thread(scan_package, package_root, chunk_size)
