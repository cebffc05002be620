"""SQLite-backed global state that survives restarts.

All operations catch ``aiosqlite.Error`` (and the ``ValueError`` aiosqlite
raises on a closed connection) internally and degrade gracefully: read
failures return the caller's default, write failures are logged and ignored.
A broken state database must never stop module resolution; at worst
the user sees a prompt again. Errors are still logged with ``exc_info=True``
so they remain observable via stderr.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import aiosqlite
import structlog

from gomodctx.errors import ErrorCode

log = structlog.get_logger()

_CREATE_STATE_TABLE = """
CREATE TABLE IF NOT EXISTS global_state (
    key         TEXT PRIMARY KEY,
    value       TEXT NOT NULL,
    updated_at  TEXT NOT NULL
)
"""


async def open_state_db(db_path: str) -> aiosqlite.Connection:
    """Open the state database, creating parent directories as needed."""
    if db_path != ":memory:":
        Path(db_path).expanduser().parent.mkdir(parents=True, exist_ok=True)
        db_path = str(Path(db_path).expanduser())
    return await aiosqlite.connect(db_path)


class GlobalState:
    """Durable key/value store for JSON-serialisable values."""

    def __init__(self, db: aiosqlite.Connection) -> None:
        self._db = db

    async def init_db(self) -> None:
        """Create the table and set WAL mode. Called once at startup."""
        await self._db.execute("PRAGMA journal_mode = WAL")
        await self._db.execute(_CREATE_STATE_TABLE)
        await self._db.commit()

    async def get(self, key: str, default: Any = None) -> Any:
        """Read a value. Returns ``default`` when missing or unreadable."""
        try:
            cursor = await self._db.execute(
                "SELECT value FROM global_state WHERE key = ?", (key,)
            )
            row = await cursor.fetchone()
        except (aiosqlite.Error, ValueError):
            log.warning(
                "state_read_error", key=key, code=ErrorCode.STATE_UNAVAILABLE, exc_info=True
            )
            return default

        if row is None:
            return default
        try:
            return json.loads(row[0])
        except ValueError:
            log.warning(
                "state_decode_error", key=key, code=ErrorCode.STATE_UNAVAILABLE, exc_info=True
            )
            return default

    async def update(self, key: str, value: Any) -> None:
        """Write a value. Non-fatal on failure."""
        try:
            await self._db.execute(
                "INSERT OR REPLACE INTO global_state (key, value, updated_at) VALUES (?, ?, ?)",
                (key, json.dumps(value), datetime.now(UTC).isoformat()),
            )
            await self._db.commit()
        except (aiosqlite.Error, ValueError):
            log.warning(
                "state_write_error", key=key, code=ErrorCode.STATE_UNAVAILABLE, exc_info=True
            )
