"""Streaming assembly of bundled artifacts into the models directory.

Single-file mode copies one blob. Multi-part mode concatenates
``.part1..partN`` in ascending index order into one destination file,
holding at most one part in memory at a time. Either way the finished
file is size-checked (and digest-checked when the artifact declares a
``sha256``), and a failed attempt never leaves a file behind.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from pathlib import Path

from modelbundle.core.asset_store import AssetStore
from modelbundle.core.errors import AssemblyError, AssetNotFoundError
from modelbundle.core.hasher import sha256_file
from modelbundle.core.part_probe import detect_parts
from modelbundle.models.artifacts import ArtifactFile

logger = logging.getLogger(__name__)

# on_part(index, total_parts, bytes_in_part)
PartCallback = Callable[[int, int, int], None]

_MB = 1024 * 1024


class StreamAssembler:
    """Copies or assembles one artifact from an asset store onto disk.

    Parameters
    ----------
    store:
        The read-only asset store to pull bytes from.
    verify_checksums:
        Check ``ArtifactFile.sha256`` after assembly when it is set.
    on_part:
        Optional progress callback, called after each part is written.
    """

    def __init__(
        self,
        store: AssetStore,
        *,
        verify_checksums: bool = True,
        on_part: PartCallback | None = None,
    ) -> None:
        self._store = store
        self._verify_checksums = verify_checksums
        self._on_part = on_part

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def assemble(self, source: ArtifactFile | str, destination: Path) -> int:
        """Write ``source`` to ``destination`` and return the number of bytes written.

        ``source`` is either an ``ArtifactFile`` or a bare logical asset path.

        Raises
        ------
        AssetNotFoundError
            The blob (single-file mode) or a part vanished from the store.
        AssemblyError
            Size or digest mismatch, or an I/O failure while writing.
        """
        if isinstance(source, ArtifactFile):
            asset_path = source.asset_path
            expected_digest = source.sha256
        else:
            asset_path = source
            expected_digest = ""
        destination = Path(destination)

        try:
            parts = detect_parts(self._store, asset_path)
            if parts:
                logger.info(
                    "Assembling %s from %d parts -> %s", asset_path, len(parts), destination
                )
                total = self._assemble_parts(parts, destination)
            else:
                logger.info("Copying %s -> %s", asset_path, destination)
                total = self._copy_single(asset_path, destination)
            self._verify_size(destination, total)
            if expected_digest and self._verify_checksums:
                self._verify_digest(destination, expected_digest)
        except (AssetNotFoundError, AssemblyError):
            _discard(destination)
            raise
        except OSError as exc:
            _discard(destination)
            raise AssemblyError(
                f"I/O failure while assembling {asset_path}: {exc}",
                operation="assemble",
                path=destination,
            ) from exc
        except BaseException:
            _discard(destination)
            raise

        logger.info(
            "Wrote %s (%d bytes, %.2f MB)", destination.name, total, total / _MB
        )
        return total

    # ------------------------------------------------------------------
    # Modes
    # ------------------------------------------------------------------

    def _copy_single(self, asset_path: str, destination: Path) -> int:
        data = self._store.read(asset_path)
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_bytes(data)
        return len(data)

    def _assemble_parts(self, parts: list[str], destination: Path) -> int:
        destination.parent.mkdir(parents=True, exist_ok=True)
        total = 0
        with destination.open("wb") as sink:
            for index, part in enumerate(parts, start=1):
                data = self._store.read(part)
                sink.write(data)
                size = len(data)
                total += size
                del data
                logger.debug(
                    "Part %d/%d copied: %s (%d bytes)", index, len(parts), part, size
                )
                if self._on_part is not None:
                    self._on_part(index, len(parts), size)
            sink.flush()
            os.fsync(sink.fileno())
        return total

    # ------------------------------------------------------------------
    # Verification
    # ------------------------------------------------------------------

    @staticmethod
    def _verify_size(destination: Path, expected: int) -> None:
        actual = destination.stat().st_size
        if actual != expected:
            raise AssemblyError(
                f"size mismatch after assembly of {destination.name}: "
                f"expected {expected} bytes, got {actual}",
                operation="verify_size",
                path=destination,
            )

    @staticmethod
    def _verify_digest(destination: Path, expected: str) -> None:
        actual = sha256_file(destination)
        if actual != expected:
            raise AssemblyError(
                f"sha256 mismatch after assembly of {destination.name}: "
                f"expected {expected}, got {actual}",
                operation="verify_digest",
                path=destination,
            )


def _discard(path: Path) -> None:
    """Delete a failed destination if it exists."""
    try:
        path.unlink(missing_ok=True)
    except OSError:
        logger.debug("Could not remove failed destination %s", path, exc_info=True)
