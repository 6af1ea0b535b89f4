"""Read-only bundled asset stores.

An asset store maps an exact logical path to bytes. There is deliberately
no listing method: callers discover multi-part artifacts by probing exact
paths (see ``modelbundle.core.part_probe``).
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path, PurePosixPath
from typing import Protocol, runtime_checkable

from modelbundle.core.errors import AssetNotFoundError

logger = logging.getLogger(__name__)


@runtime_checkable
class AssetStore(Protocol):
    """Exact-path, read-only byte source."""

    def read(self, logical_path: str) -> bytes:
        """Return the full content at ``logical_path``.

        Raises ``AssetNotFoundError`` if nothing is stored there.
        """
        ...


class DirectoryAssetStore:
    """Serves assets from a directory tree shipped with the application.

    Logical paths are POSIX-style and relative to ``root``. Paths that
    would escape the root are treated as not found.

    Parameters
    ----------
    root:
        The bundle directory.
    """

    def __init__(self, root: Path | str) -> None:
        self._root = Path(root).resolve()

    @property
    def root(self) -> Path:
        return self._root

    def _locate(self, logical_path: str) -> Path:
        relative = PurePosixPath(logical_path.lstrip("/"))
        if not relative.parts or ".." in relative.parts:
            raise AssetNotFoundError(logical_path)
        return self._root.joinpath(*relative.parts)

    def read(self, logical_path: str) -> bytes:
        path = self._locate(logical_path)
        try:
            data = path.read_bytes()
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError) as exc:
            raise AssetNotFoundError(logical_path) from exc
        logger.debug("DirectoryAssetStore: read %d bytes from %s", len(data), logical_path)
        return data


class InMemoryAssetStore:
    """Serves assets from an in-process mapping.

    Useful for embedding small bundles and for tests. ``reads`` records
    every successful and failed lookup in call order.
    """

    def __init__(self, assets: Mapping[str, bytes] | None = None) -> None:
        self._assets: dict[str, bytes] = {
            path.lstrip("/"): data for path, data in (assets or {}).items()
        }
        self.reads: list[str] = []

    def add(self, logical_path: str, data: bytes) -> None:
        self._assets[logical_path.lstrip("/")] = data

    def read(self, logical_path: str) -> bytes:
        self.reads.append(logical_path)
        try:
            return self._assets[logical_path.lstrip("/")]
        except KeyError:
            raise AssetNotFoundError(logical_path) from None
