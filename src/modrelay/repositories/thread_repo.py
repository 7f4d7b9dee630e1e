"""
Persistent storage for support threads.

Thread rows are created and closed by the conversation workflows; the relay
core only looks up open ones. A thread is open while ``closed_by_id`` is NULL.
"""

from __future__ import annotations

from typing import Optional

import aiosqlite

from modrelay.datatypes.discord_datatypes import ChannelID, GuildID, UserID
from modrelay.datatypes.thread_datatypes import Thread, from_unix_ms

_COLUMNS = "thread_id, channel_id, guild_id, user_id, closed_by_id, created_at, closed_at"


def _row_to_thread(row) -> Thread:
    return Thread(
        thread_id=row[0],
        channel_id=ChannelID(row[1]),
        guild_id=GuildID(row[2]),
        user_id=UserID(row[3]),
        closed_by_id=UserID(row[4]) if row[4] is not None else None,
        created_at=from_unix_ms(row[5]),
        closed_at=from_unix_ms(row[6]),
    )


class ThreadRepo:
    """CRUD for the ``threads`` table."""

    @staticmethod
    async def create(
        conn: aiosqlite.Connection,
        guild_id: GuildID,
        channel_id: ChannelID,
        user_id: UserID,
        created_at: int,
    ) -> int:
        """Insert an open thread and return its ``thread_id``."""
        cursor = await conn.execute(
            "INSERT INTO threads (guild_id, channel_id, user_id, created_at) VALUES (?, ?, ?, ?)",
            (int(guild_id), int(channel_id), int(user_id), created_at),
        )
        return cursor.lastrowid

    @staticmethod
    async def close(
        conn: aiosqlite.Connection,
        thread_id: int,
        closed_by_id: UserID,
        closed_at: int,
    ) -> bool:
        cursor = await conn.execute(
            "UPDATE threads SET closed_by_id = ?, closed_at = ? "
            "WHERE thread_id = ? AND closed_by_id IS NULL",
            (int(closed_by_id), closed_at, thread_id),
        )
        return cursor.rowcount > 0

    @staticmethod
    async def find_open_by_channel(
        conn: aiosqlite.Connection,
        channel_id: ChannelID,
    ) -> Optional[Thread]:
        """Return the open thread bound to ``channel_id``; closed threads never match."""
        async with conn.execute(
            f"SELECT {_COLUMNS} FROM threads "
            "WHERE channel_id = ? AND closed_by_id IS NULL LIMIT 1",
            (int(channel_id),),
        ) as cursor:
            row = await cursor.fetchone()
        return _row_to_thread(row) if row is not None else None
