"""
Database initialization and access for SQLite.

The Database class is the persistence collaborator of the relay core. It owns
the aiosqlite connection manager, creates the schema on startup and exposes
one coroutine per query the core needs, delegating SQL to the repositories.

Uniqueness of blocks is enforced by the ``blocks`` primary key and the
``ON CONFLICT`` upsert, so concurrent block attempts resolve as last-write-wins
without application-level locking.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import List, Optional

from modrelay.configuration.app_configuration import app_config
from modrelay.database.db_connection import ConnectionManager
from modrelay.database.db_schema import SchemaManager
from modrelay.datatypes.discord_datatypes import ChannelID, GuildID, UserID
from modrelay.datatypes.thread_datatypes import (
    BlockRecord,
    GuildSettings,
    Thread,
    ThreadMessageRecord,
    to_unix_ms,
    utcnow,
)
from modrelay.repositories.block_repo import BlockRepo
from modrelay.repositories.guild_settings_repo import GuildSettingsRepository
from modrelay.repositories.thread_message_repo import ThreadMessageRepo
from modrelay.repositories.thread_repo import ThreadRepo
from modrelay.util.logger import get_logger

logger = get_logger("database")


class Database:
    """
    Central database coordinator.

    Lifecycle:
        1. ``await initialize()`` at program startup
        2. Use the query coroutines
        3. ``await shutdown()`` at program end
    """

    def __init__(self, db_path: Optional[Path] = None):
        """
        Args:
            db_path: Path to the SQLite database file. Defaults to the
                configured ``database.path``.
        """
        self.db_path = db_path or app_config.database_path
        self.connection = ConnectionManager()
        self._guild_settings = GuildSettingsRepository()

    @property
    def initialized(self) -> bool:
        return self.connection.is_open

    async def initialize(self) -> bool:
        """
        Open the connection and create the schema.

        Returns:
            True if initialization succeeded, False otherwise
        """
        if self.initialized:
            logger.debug("[DATABASE] Already initialized, skipping")
            return True

        try:
            await self.connection.open(self.db_path)
            async with self.connection.transaction() as db:
                await SchemaManager.initialize_schema(db)
            logger.info("[DATABASE] Database initialized at %s", self.db_path)
            return True
        except Exception as e:
            logger.error("[DATABASE] Database initialization failed: %s", e)
            await self.connection.close()
            return False

    async def shutdown(self) -> None:
        if not self.initialized:
            return
        await self.connection.close()
        logger.info("[DATABASE] Database shutdown complete")

    # ------------------------------------------------------------------
    # Threads
    # ------------------------------------------------------------------

    async def find_open_thread(self, channel_id: ChannelID) -> Optional[Thread]:
        async with self.connection.read() as conn:
            return await ThreadRepo.find_open_by_channel(conn, channel_id)

    async def create_thread(
        self,
        guild_id: GuildID,
        channel_id: ChannelID,
        user_id: UserID,
        created_at: Optional[datetime] = None,
    ) -> int:
        async with self.connection.transaction() as conn:
            thread_id = await ThreadRepo.create(
                conn, guild_id, channel_id, user_id, to_unix_ms(created_at or utcnow())
            )
        logger.debug("[DATABASE] Opened thread %s for user %s in channel %s", thread_id, user_id, channel_id)
        return thread_id

    async def close_thread(self, thread_id: int, closed_by_id: UserID) -> bool:
        async with self.connection.transaction() as conn:
            return await ThreadRepo.close(conn, thread_id, closed_by_id, to_unix_ms(utcnow()))

    async def log_thread_message(self, record: ThreadMessageRecord) -> int:
        async with self.connection.transaction() as conn:
            return await ThreadMessageRepo.insert(conn, record)

    async def get_thread_messages(self, thread_id: int) -> List[ThreadMessageRecord]:
        async with self.connection.read() as conn:
            return await ThreadMessageRepo.list_for_thread(conn, thread_id)

    # ------------------------------------------------------------------
    # Blocks
    # ------------------------------------------------------------------

    async def upsert_block(
        self,
        user_id: UserID,
        guild_id: GuildID,
        expires_at: Optional[datetime],
    ) -> BlockRecord:
        """
        Create the ``(user_id, guild_id)`` block or overwrite its expiry.

        The write and the read-back share one transaction so the returned
        record is the row this call produced.
        """
        expires_ms = to_unix_ms(expires_at) if expires_at is not None else None
        async with self.connection.transaction() as conn:
            await BlockRepo.upsert(conn, user_id, guild_id, expires_ms, to_unix_ms(utcnow()))
            record = await BlockRepo.get(conn, user_id, guild_id)
        if record is None:
            raise RuntimeError(f"Block for user {user_id} in guild {guild_id} vanished after upsert")
        return record

    async def get_block(self, user_id: UserID, guild_id: GuildID) -> Optional[BlockRecord]:
        async with self.connection.read() as conn:
            return await BlockRepo.get(conn, user_id, guild_id)

    async def delete_block(self, user_id: UserID, guild_id: GuildID) -> bool:
        async with self.connection.transaction() as conn:
            return await BlockRepo.delete(conn, user_id, guild_id)

    # ------------------------------------------------------------------
    # Guild settings
    # ------------------------------------------------------------------

    async def get_guild_settings(self, guild_id: GuildID) -> Optional[GuildSettings]:
        async with self.connection.read() as conn:
            return await self._guild_settings.get(conn, guild_id)

    async def upsert_guild_settings(self, settings: GuildSettings) -> None:
        async with self.connection.transaction() as conn:
            await self._guild_settings.upsert(conn, settings)


# Global Database instance
database = Database()


def get_db() -> Database:
    """Return the global Database instance."""
    return database
