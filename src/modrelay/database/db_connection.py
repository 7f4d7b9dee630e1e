"""
The single aiosqlite connection behind :class:`~modrelay.database.database.Database`.

The connection runs in autocommit mode and every write unit is an explicit
``BEGIN IMMEDIATE`` transaction, so a block upsert and its read-back (or a
relay log insert) either land together or not at all. Writers take the
database lock up front and are also queued on an asyncio semaphore, so two
interactions never interleave statements inside one transaction. Reads run
outside transactions; WAL lets them proceed while a write is in flight.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Dict

import aiosqlite

from modrelay.util.logger import get_logger

logger = get_logger("database_connection")

PRAGMAS: Dict[str, str] = {
    "journal_mode": "WAL",
    "foreign_keys": "ON",
    "synchronous": "NORMAL",
    "busy_timeout": "5000",
}


class ConnectionManager:
    """Owns one connection; ``transaction()`` for writes, ``read()`` for queries."""

    def __init__(self) -> None:
        self._conn: aiosqlite.Connection | None = None
        self._path: Path | None = None
        self._write_lock = asyncio.Semaphore(1)

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    @property
    def path(self) -> Path | None:
        return self._path

    async def open(self, path: Path) -> None:
        """Connect to ``path`` (creating its directory) and apply :data:`PRAGMAS`.

        Opening an already open manager is a no-op.
        """
        if self._conn is not None:
            logger.debug("[DB CONNECTION] Already connected to %s", self._path)
            return

        path.parent.mkdir(parents=True, exist_ok=True)
        conn = await aiosqlite.connect(path, isolation_level=None)
        try:
            for name, value in PRAGMAS.items():
                await conn.execute(f"PRAGMA {name} = {value}")
        except Exception:
            await conn.close()
            raise

        self._conn = conn
        self._path = path
        logger.info("[DB CONNECTION] Connected to %s", path)

    async def close(self) -> None:
        """Checkpoint the WAL into the main file and disconnect."""
        conn, self._conn = self._conn, None
        if conn is None:
            return
        try:
            await conn.execute("PRAGMA wal_checkpoint(TRUNCATE)")
        except aiosqlite.Error as exc:
            logger.warning("[DB CONNECTION] WAL checkpoint failed on close: %s", exc)
        finally:
            await conn.close()
            logger.info("[DB CONNECTION] Disconnected from %s", self._path)

    @property
    def connection(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise RuntimeError("Database connection is not open; call Database.initialize() first")
        return self._conn

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """One write unit: committed on clean exit, rolled back if the body raises."""
        conn = self.connection
        async with self._write_lock:
            await conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
            except BaseException:
                await conn.rollback()
                raise
            await conn.commit()

    @asynccontextmanager
    async def read(self) -> AsyncIterator[aiosqlite.Connection]:
        yield self.connection
