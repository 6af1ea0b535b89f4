"""SHA-256 helpers for optional post-assembly integrity checks."""

from __future__ import annotations

import hashlib
from pathlib import Path

HASH_CHUNK_SIZE = 1024 * 1024


def sha256_hex(data: bytes) -> str:
    """Return the SHA-256 hex digest of raw bytes."""
    return hashlib.sha256(data).hexdigest()


def sha256_file(path: Path, chunk_size: int = HASH_CHUNK_SIZE) -> str:
    """Return the SHA-256 hex digest of a file, read in fixed-size chunks.

    The file is never held in memory as a whole, so this is safe for
    multi-gigabyte assembled artifacts.
    """
    digest = hashlib.sha256()
    with Path(path).open("rb") as fh:
        for chunk in iter(lambda: fh.read(chunk_size), b""):
            digest.update(chunk)
    return digest.hexdigest()
