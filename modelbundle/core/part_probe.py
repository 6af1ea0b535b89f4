"""Multi-part artifact discovery by sequential existence probing.

Large artifacts may be bundled as ``{base}.part1``, ``{base}.part2``, ...
because a single bundled asset has a platform size limit. Asset stores
cannot be listed, so parts are discovered by reading consecutive indices
until the first miss. No ``.part1`` means the artifact is a single blob.
"""

from __future__ import annotations

import logging

from modelbundle.core.asset_store import AssetStore
from modelbundle.core.errors import AssetNotFoundError

logger = logging.getLogger(__name__)

PART_SUFFIX = ".part"


def part_path(base_path: str, index: int) -> str:
    """Logical path of part ``index`` (1-based, no zero padding)."""
    if index < 1:
        raise ValueError(f"Part index must be >= 1, got {index}")
    return f"{base_path}{PART_SUFFIX}{index}"


def detect_parts(store: AssetStore, base_path: str) -> list[str]:
    """Return the ordered part paths for ``base_path``, or ``[]`` for single-file mode.

    Probing stops at the first index the store does not have; parts after
    a gap are never considered. Errors other than ``AssetNotFoundError``
    propagate.
    """
    parts: list[str] = []
    index = 1
    while True:
        candidate = part_path(base_path, index)
        try:
            store.read(candidate)
        except AssetNotFoundError:
            break
        parts.append(candidate)
        index += 1

    if parts:
        logger.debug("Detected %d parts for %s", len(parts), base_path)
    else:
        logger.debug("No parts for %s, single-file mode", base_path)
    return parts
