"""
Persistent storage for user blocks.

Timestamps are stored as INTEGER unix milliseconds; ``expires_at`` NULL marks a
permanent block. The ``(user_id, guild_id)`` primary key is the block identity.
"""

from __future__ import annotations

from typing import Optional

import aiosqlite

from modrelay.datatypes.discord_datatypes import GuildID, UserID
from modrelay.datatypes.thread_datatypes import BlockRecord, from_unix_ms
from modrelay.util.logger import get_logger

logger = get_logger("block_repo")


def _row_to_record(row) -> BlockRecord:
    return BlockRecord(
        user_id=UserID(row[0]),
        guild_id=GuildID(row[1]),
        expires_at=from_unix_ms(row[2]),
        created_at=from_unix_ms(row[3]),
    )


class BlockRepo:
    """Low-level CRUD for the ``blocks`` table."""

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    @staticmethod
    async def upsert(
        conn: aiosqlite.Connection,
        user_id: UserID,
        guild_id: GuildID,
        expires_at: Optional[int],
        created_at: int,
    ) -> None:
        """Insert a block, or overwrite only ``expires_at`` of the existing one."""
        await conn.execute(
            """
            INSERT INTO blocks (user_id, guild_id, expires_at, created_at)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(user_id, guild_id) DO UPDATE SET
                expires_at = excluded.expires_at
            """,
            (int(user_id), int(guild_id), expires_at, created_at),
        )

    @staticmethod
    async def delete(
        conn: aiosqlite.Connection,
        user_id: UserID,
        guild_id: GuildID,
    ) -> bool:
        """Remove a block. Returns True when a row was deleted."""
        cursor = await conn.execute(
            "DELETE FROM blocks WHERE user_id = ? AND guild_id = ?",
            (int(user_id), int(guild_id)),
        )
        return cursor.rowcount > 0

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @staticmethod
    async def get(
        conn: aiosqlite.Connection,
        user_id: UserID,
        guild_id: GuildID,
    ) -> Optional[BlockRecord]:
        async with conn.execute(
            "SELECT user_id, guild_id, expires_at, created_at "
            "FROM blocks WHERE user_id = ? AND guild_id = ?",
            (int(user_id), int(guild_id)),
        ) as cursor:
            row = await cursor.fetchone()
        return _row_to_record(row) if row is not None else None

