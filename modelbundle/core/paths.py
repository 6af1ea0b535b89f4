"""Destination path resolution inside the writable models directory."""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class ModelPathResolver:
    """Maps artifact filenames to absolute paths under ``models_dir``.

    Parameters
    ----------
    models_dir:
        Private, writable directory that receives installed artifacts.
        Created lazily by the assembler when the first file is written.
    """

    def __init__(self, models_dir: Path | str) -> None:
        self._models_dir = Path(models_dir).expanduser().resolve()

    @property
    def models_dir(self) -> Path:
        return self._models_dir

    def resolve(self, filename: str) -> Path:
        """Return the absolute destination path for ``filename``."""
        path = (self._models_dir / filename).resolve()
        if path.parent != self._models_dir:
            raise ValueError(f"Filename escapes the models directory: {filename!r}")
        return path

    def delete_model_file(self, filename: str) -> bool:
        """Delete an installed file. Returns ``True`` if something was removed."""
        path = self.resolve(filename)
        if not path.exists():
            return False
        path.unlink()
        logger.debug("Deleted %s", path)
        return True
