"""Test helpers shared across test modules."""

from __future__ import annotations

from pathlib import Path

from modelbundle.core.asset_store import DirectoryAssetStore

MB = 1024 * 1024


class CountingDirectoryStore(DirectoryAssetStore):
    """DirectoryAssetStore that records every read attempt."""

    def __init__(self, root: Path) -> None:
        super().__init__(root)
        self.reads: list[str] = []

    def read(self, logical_path: str) -> bytes:
        self.reads.append(logical_path)
        return super().read(logical_path)


def blob(size: int, marker: int = 0) -> bytes:
    """Deterministic bytes of ``size`` whose content depends on ``marker``."""
    pattern = bytes((marker + i) % 256 for i in range(256))
    return (pattern * (size // 256 + 1))[:size]
