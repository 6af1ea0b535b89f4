"""Offline preparation: split a large artifact into bundleable parts.

Produces ``{name}.part1 .. {name}.partN`` with ``N = ceil(size / chunk)``,
the naming ``detect_parts`` probes for at install time.
"""

from __future__ import annotations

import logging
import math
from pathlib import Path

from modelbundle.core.part_probe import part_path

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE_MB = 1900  # stays under a 2 GB per-asset limit
_MB = 1024 * 1024
_COPY_BLOCK = _MB


def expected_part_count(size_bytes: int, chunk_size_bytes: int) -> int:
    """Number of parts a file of ``size_bytes`` splits into."""
    if chunk_size_bytes <= 0:
        raise ValueError(f"chunk size must be positive, got {chunk_size_bytes}")
    return math.ceil(size_bytes / chunk_size_bytes)


def split_file(
    source: Path | str,
    chunk_size_mb: int = DEFAULT_CHUNK_SIZE_MB,
    output_dir: Path | str | None = None,
    *,
    chunk_size_bytes: int | None = None,
) -> list[Path]:
    """Split ``source`` into numbered parts and return their paths in order.

    Returns an empty list, writing nothing, when the file already fits in
    one chunk. ``chunk_size_bytes`` overrides ``chunk_size_mb`` when given.
    """
    source = Path(source)
    if not source.is_file():
        raise FileNotFoundError(f"File not found: {source}")
    chunk = chunk_size_bytes if chunk_size_bytes is not None else chunk_size_mb * _MB
    size = source.stat().st_size
    count = expected_part_count(size, chunk)
    if count <= 1:
        logger.info("%s (%d bytes) fits in one chunk, no split needed", source.name, size)
        return []

    target_dir = Path(output_dir) if output_dir is not None else source.parent
    target_dir.mkdir(parents=True, exist_ok=True)

    parts: list[Path] = []
    with source.open("rb") as src:
        for index in range(1, count + 1):
            part = target_dir / part_path(source.name, index)
            remaining = min(chunk, size - (index - 1) * chunk)
            with part.open("wb") as dst:
                while remaining > 0:
                    block = src.read(min(_COPY_BLOCK, remaining))
                    if not block:
                        raise OSError(f"Unexpected end of {source} while writing {part.name}")
                    dst.write(block)
                    remaining -= len(block)
            parts.append(part)
            logger.info("Created %s (%d bytes)", part.name, part.stat().st_size)

    logger.info("Split %s into %d parts", source.name, len(parts))
    return parts
