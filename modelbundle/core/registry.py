"""Durable record of which model specs are installed, backed by SQLite.

A spec is installed when every one of its filenames has a row under the
spec's name. ``commit`` writes all rows of a spec in one transaction, so
a concurrent or later ``is_installed`` observes either none or all of
them.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol, runtime_checkable

from modelbundle.core.errors import RegistryError
from modelbundle.models.artifacts import ModelSpec
from modelbundle.models.install import InstalledFileRecord

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# DDL
# ---------------------------------------------------------------------------

_CREATE_INSTALLED = """
CREATE TABLE IF NOT EXISTS installed_files (
    spec_name     TEXT NOT NULL,
    filename      TEXT NOT NULL,
    size_bytes    INTEGER NOT NULL DEFAULT 0,
    installed_at  TEXT NOT NULL,
    PRIMARY KEY (spec_name, filename)
);
"""


@runtime_checkable
class InstallRegistry(Protocol):
    """What the coordinator needs from a registry."""

    def is_installed(self, spec: ModelSpec) -> bool: ...

    def commit(self, spec: ModelSpec, sizes: dict[str, int] | None = None) -> None: ...

    def remove(self, spec: ModelSpec) -> int: ...


class SqliteInstallRegistry:
    """Installation registry stored in a small SQLite file.

    Parameters
    ----------
    db_path:
        Path to the SQLite database file. Created if it does not exist.
    """

    def __init__(self, db_path: Path | str) -> None:
        self._db_path = Path(db_path)
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            self._init_schema()
        except (OSError, sqlite3.Error) as exc:
            raise RegistryError(f"Cannot open registry at {self._db_path}: {exc}") from exc

    @property
    def db_path(self) -> Path:
        return self._db_path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path))
        conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _init_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(_CREATE_INSTALLED)
        conn.close()

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def is_installed(self, spec: ModelSpec) -> bool:
        """True when every file of ``spec`` has been committed."""
        try:
            conn = self._connect()
            try:
                rows = conn.execute(
                    "SELECT filename FROM installed_files WHERE spec_name = ?",
                    (spec.name,),
                ).fetchall()
            finally:
                conn.close()
        except sqlite3.Error as exc:
            raise RegistryError(f"Registry lookup failed for {spec.name!r}: {exc}") from exc
        recorded = {row[0] for row in rows}
        return set(spec.filenames) <= recorded

    def records(self, spec_name: str | None = None) -> list[InstalledFileRecord]:
        """Return registry rows, optionally for one spec only."""
        query = "SELECT spec_name, filename, size_bytes, installed_at FROM installed_files"
        params: tuple[str, ...] = ()
        if spec_name is not None:
            query += " WHERE spec_name = ?"
            params = (spec_name,)
        query += " ORDER BY spec_name, filename"
        try:
            conn = self._connect()
            try:
                rows = conn.execute(query, params).fetchall()
            finally:
                conn.close()
        except sqlite3.Error as exc:
            raise RegistryError(f"Registry read failed: {exc}") from exc
        return [
            InstalledFileRecord(
                spec_name=name,
                filename=filename,
                size_bytes=size_bytes,
                installed_at=installed_at,
            )
            for name, filename, size_bytes, installed_at in rows
        ]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def commit(self, spec: ModelSpec, sizes: dict[str, int] | None = None) -> None:
        """Record every file of ``spec`` as installed, in a single transaction.

        Idempotent: committing an already-committed spec refreshes its rows.
        """
        sizes = sizes or {}
        now = datetime.now(timezone.utc).isoformat()
        rows = [
            (spec.name, filename, sizes.get(filename, 0), now)
            for filename in spec.filenames
        ]
        try:
            conn = self._connect()
            try:
                with conn:
                    conn.execute(
                        "DELETE FROM installed_files WHERE spec_name = ?", (spec.name,)
                    )
                    conn.executemany(
                        "INSERT INTO installed_files "
                        "(spec_name, filename, size_bytes, installed_at) VALUES (?, ?, ?, ?)",
                        rows,
                    )
            finally:
                conn.close()
        except sqlite3.Error as exc:
            raise RegistryError(f"Registry commit failed for {spec.name!r}: {exc}") from exc
        logger.info("Registered %s (%d files)", spec.name, len(rows))

    def remove(self, spec: ModelSpec) -> int:
        """Forget ``spec``. Returns the number of rows removed."""
        try:
            conn = self._connect()
            try:
                with conn:
                    cursor = conn.execute(
                        "DELETE FROM installed_files WHERE spec_name = ?", (spec.name,)
                    )
            finally:
                conn.close()
        except sqlite3.Error as exc:
            raise RegistryError(f"Registry remove failed for {spec.name!r}: {exc}") from exc
        if cursor.rowcount:
            logger.info("Unregistered %s (%d files)", spec.name, cursor.rowcount)
        return cursor.rowcount
