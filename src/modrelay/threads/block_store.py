"""
Block lifecycle: create, overwrite and lift ``(user, guild)`` blocks.

A block's expiry is evaluated when it is read (:meth:`BlockStore.is_blocked`);
there is no sweeper. Permanent blocks (``expires_at`` None) stay active until
:meth:`BlockStore.remove_block` clears them.

Blocking a thread's user also DMs them the reason and expiry. That DM runs as
a background task after the block is committed and its failure never affects
the block.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta
from typing import Callable, Optional, Set, Union

import discord

from modrelay.database.database import Database
from modrelay.datatypes.discord_datatypes import ChannelID, GuildID, UserID
from modrelay.datatypes.thread_datatypes import BlockRecord, Thread, utcnow
from modrelay.localization.translator import translator
from modrelay.threads.duration_parser import parse_duration
from modrelay.threads.errors import InvalidDuration, NotBlocked, ReasonRequired, UserUnresolvable
from modrelay.threads.thread_resolver import ThreadResolver
from modrelay.util import discord_utils
from modrelay.util.logger import get_logger

logger = get_logger("block_store")


class BlockStore:
    """Owns block state for every guild.

    Parameters
    ----------
    db:
        Persistence collaborator.
    bot:
        Discord client used to resolve and DM blocked users.
    resolver:
        Thread lookup; built from ``db`` when omitted.
    clock:
        Returns the current aware UTC datetime.
    """

    def __init__(
        self,
        db: Database,
        bot: discord.Client,
        resolver: Optional[ThreadResolver] = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.db = db
        self.bot = bot
        self.resolver = resolver or ThreadResolver(db)
        self.clock = clock
        self._notifications: Set[asyncio.Task] = set()

    # ------------------------------------------------------------------
    # Block state
    # ------------------------------------------------------------------

    async def upsert_block(
        self,
        user_id: Union[UserID, int],
        guild_id: Union[GuildID, int],
        expires_at: Optional[datetime],
    ) -> BlockRecord:
        """Create the block or replace its expiry. Repeated blocks never stack."""
        record = await self.db.upsert_block(UserID(user_id), GuildID(guild_id), expires_at)
        logger.info(
            "[BLOCK STORE] User %s blocked in guild %s until %s",
            record.user_id,
            record.guild_id,
            record.expires_at.isoformat() if record.expires_at else "never",
        )
        return record

    async def get_block(
        self, user_id: Union[UserID, int], guild_id: Union[GuildID, int]
    ) -> Optional[BlockRecord]:
        return await self.db.get_block(UserID(user_id), GuildID(guild_id))

    async def is_blocked(
        self,
        user_id: Union[UserID, int],
        guild_id: Union[GuildID, int],
        now: Optional[datetime] = None,
    ) -> bool:
        """Return True if the user has a block that has not expired at ``now``."""
        record = await self.get_block(user_id, guild_id)
        if record is None:
            return False
        return record.is_active(now or self.clock())

    async def remove_block(self, user_id: Union[UserID, int], guild_id: Union[GuildID, int]) -> bool:
        removed = await self.db.delete_block(UserID(user_id), GuildID(guild_id))
        if removed:
            logger.info("[BLOCK STORE] Block lifted for user %s in guild %s", user_id, guild_id)
        return removed

    # ------------------------------------------------------------------
    # Thread-driven operations
    # ------------------------------------------------------------------

    async def block_thread_user(
        self,
        channel_id: Union[ChannelID, int],
        guild_id: Union[GuildID, int],
        reason: Optional[str],
        raw_duration: Optional[str],
    ) -> BlockRecord:
        """Block the user of the channel's open thread.

        Raises
        ------
        NoOpenThread
            The channel has no open thread. Checked before anything else.
        ReasonRequired
            ``reason`` is missing or blank.
        InvalidDuration
            ``raw_duration`` was given but cannot be interpreted.
        UserUnresolvable
            The thread's user cannot be fetched.
        """
        thread = await self.resolver.require_open_thread(channel_id)

        if not reason or not reason.strip():
            raise ReasonRequired()

        duration_ms = parse_duration(raw_duration)
        expires_at = None
        if duration_ms:
            try:
                expires_at = self.clock() + timedelta(milliseconds=duration_ms)
            except OverflowError as exc:
                raise InvalidDuration(f"Duration {raw_duration!r} is out of range") from exc

        user = await discord_utils.fetch_user(self.bot, thread.user_id.to_int())
        if user is None:
            raise UserUnresolvable(f"User {thread.user_id} of thread {thread.thread_id} not found")

        record = await self.upsert_block(thread.user_id, guild_id, expires_at)

        self._schedule_notification(user, reason, record.expires_at)
        return record

    async def unblock_thread_user(
        self,
        channel_id: Union[ChannelID, int],
        guild_id: Union[GuildID, int],
    ) -> Thread:
        """Lift the block on the user of the channel's open thread.

        Raises :class:`NoOpenThread` or :class:`NotBlocked`.
        """
        thread = await self.resolver.require_open_thread(channel_id)
        if not await self.remove_block(thread.user_id, guild_id):
            raise NotBlocked()
        return thread

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    def build_notification(self, reason: str, expires_at: Optional[datetime]) -> str:
        expires = (
            discord_utils.format_relative_time(expires_at)
            if expires_at is not None
            else translator.translate("commands.block.never")
        )
        return translator.translate("commands.block.dm", reason=reason, expires=expires)

    def _schedule_notification(
        self,
        user: Union[discord.User, discord.Member],
        reason: str,
        expires_at: Optional[datetime],
    ) -> None:
        task = asyncio.create_task(self._notify_blocked(user, reason, expires_at))
        self._notifications.add(task)
        task.add_done_callback(self._notifications.discard)

    async def _notify_blocked(
        self,
        user: Union[discord.User, discord.Member],
        reason: str,
        expires_at: Optional[datetime],
    ) -> None:
        try:
            message = await discord_utils.send_dm(user, self.build_notification(reason, expires_at))
        except Exception:
            logger.exception("[BLOCK STORE] Block notification for user %s failed", user.id)
            return
        if message is None:
            logger.warning("[BLOCK STORE] Could not notify user %s about their block", user.id)

    async def wait_for_notifications(self) -> None:
        """Wait for pending block DMs; used at shutdown."""
        if self._notifications:
            await asyncio.gather(*self._notifications, return_exceptions=True)
