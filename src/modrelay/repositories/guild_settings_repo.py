"""
Repository for the guild_settings table.
"""

from __future__ import annotations

import aiosqlite

from modrelay.datatypes.discord_datatypes import GuildID
from modrelay.datatypes.thread_datatypes import GuildSettings


class GuildSettingsRepository:
    """CRUD for the guild_settings table only."""

    async def get(
        self, conn: aiosqlite.Connection, guild_id: GuildID
    ) -> GuildSettings | None:
        """Fetch a single guild's settings row."""
        async with conn.execute(
            "SELECT guild_id, simple_mode FROM guild_settings WHERE guild_id = ?",
            (int(guild_id),),
        ) as cursor:
            row = await cursor.fetchone()

        if row is None:
            return None

        return GuildSettings(guild_id=GuildID(row[0]), simple_mode=bool(row[1]))

    async def upsert(
        self, conn: aiosqlite.Connection, settings: GuildSettings
    ) -> None:
        """Insert or update a guild's settings row."""
        await conn.execute(
            """
            INSERT INTO guild_settings (guild_id, simple_mode)
            VALUES (?, ?)
            ON CONFLICT(guild_id) DO UPDATE SET
                simple_mode = excluded.simple_mode
            """,
            (int(settings.guild_id), 1 if settings.simple_mode else 0),
        )
