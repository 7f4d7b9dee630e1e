"""
Log of staff messages relayed into a thread's DM conversation.
"""

from __future__ import annotations

from typing import List

import aiosqlite

from modrelay.datatypes.discord_datatypes import GuildID, MessageID, UserID
from modrelay.datatypes.thread_datatypes import ThreadMessageRecord, from_unix_ms, to_unix_ms, utcnow


class ThreadMessageRepo:
    """Append/read access to the ``thread_messages`` table."""

    @staticmethod
    async def insert(conn: aiosqlite.Connection, record: ThreadMessageRecord) -> int:
        created_at = record.created_at or utcnow()
        cursor = await conn.execute(
            """
            INSERT INTO thread_messages (
                thread_id, guild_id, staff_id, source_message_id,
                user_message_id, anonymous, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                record.thread_id,
                int(record.guild_id),
                int(record.staff_id),
                int(record.source_message_id),
                int(record.user_message_id) if record.user_message_id is not None else None,
                1 if record.anonymous else 0,
                to_unix_ms(created_at),
            ),
        )
        return cursor.lastrowid

    @staticmethod
    async def list_for_thread(conn: aiosqlite.Connection, thread_id: int) -> List[ThreadMessageRecord]:
        async with conn.execute(
            """
            SELECT id, thread_id, guild_id, staff_id, source_message_id,
                   user_message_id, anonymous, created_at
            FROM thread_messages WHERE thread_id = ? ORDER BY id
            """,
            (thread_id,),
        ) as cursor:
            rows = await cursor.fetchall()

        return [
            ThreadMessageRecord(
                id=row[0],
                thread_id=row[1],
                guild_id=GuildID(row[2]),
                staff_id=UserID(row[3]),
                source_message_id=MessageID(row[4]),
                user_message_id=MessageID(row[5]) if row[5] is not None else None,
                anonymous=bool(row[6]),
                created_at=from_unix_ms(row[7]),
            )
            for row in rows
        ]
