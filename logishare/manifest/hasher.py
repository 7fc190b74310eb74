"""Content hashing utilities using stdlib hashlib (SHA-256)."""

from __future__ import annotations

import hashlib
from pathlib import Path

from logishare.config import HASH_CHUNK_SIZE


class Hasher:
    """Streaming SHA-256 hashing for files and byte strings."""

    @staticmethod
    def hash_bytes(data: bytes) -> str:
        """Return the SHA-256 hex digest of *data*."""
        return hashlib.sha256(data).hexdigest()

    @staticmethod
    def hash_file(path: str | Path, chunk_size: int = HASH_CHUNK_SIZE) -> str:
        """Return the SHA-256 hex digest of the file at *path*.

        The file is fed to the hash *chunk_size* bytes at a time so that
        multi-gigabyte assets never sit in memory whole.
        """
        h = hashlib.sha256()
        p = Path(path)
        with p.open("rb") as f:
            while True:
                chunk = f.read(chunk_size)
                if not chunk:
                    break
                h.update(chunk)
        return h.hexdigest()
