"""
Records and value objects shared by the thread, block and relay components.

Persisted rows (:class:`Thread`, :class:`BlockRecord`, :class:`GuildSettings`,
:class:`ThreadMessageRecord`) are plain dataclasses built by the repositories.
:class:`RelayMessage`, :class:`RelayPayload` and :class:`DeliveryResult` only
live for the duration of one relay.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import discord

from modrelay.datatypes.discord_datatypes import ChannelID, GuildID, MessageID, UserID


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_unix_ms(value: datetime) -> int:
    """Convert an aware (or naive UTC) datetime to integer unix milliseconds."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp() * 1000)


def from_unix_ms(value: Optional[int]) -> Optional[datetime]:
    if value is None:
        return None
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)


@dataclass(slots=True)
class Thread:
    """One support conversation binding a staff channel to an end user.

    ``closed_by_id`` is None while the thread is open.
    """

    thread_id: int
    channel_id: ChannelID
    guild_id: GuildID
    user_id: UserID
    closed_by_id: Optional[UserID] = None
    created_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None

    @property
    def is_open(self) -> bool:
        return self.closed_by_id is None


@dataclass(slots=True)
class BlockRecord:
    """A guild-scoped block of a user. ``expires_at`` None means permanent."""

    user_id: UserID
    guild_id: GuildID
    expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @property
    def is_permanent(self) -> bool:
        return self.expires_at is None

    def is_active(self, now: Optional[datetime] = None) -> bool:
        """Return True unless the block has an expiry that is already in the past."""
        if self.expires_at is None:
            return True
        return self.expires_at > (now or utcnow())


@dataclass(slots=True)
class GuildSettings:
    """Per-guild relay configuration."""

    guild_id: GuildID
    simple_mode: bool = False


@dataclass(slots=True)
class ThreadMessageRecord:
    """Log entry of a staff message relayed to the thread's user."""

    thread_id: int
    guild_id: GuildID
    staff_id: UserID
    source_message_id: MessageID
    user_message_id: Optional[MessageID]
    anonymous: bool
    created_at: Optional[datetime] = None
    id: Optional[int] = None


@dataclass(slots=True)
class RelayMessage:
    """A validated staff message ready to be composed and delivered.

    Only the first attachment of the source message is ever carried.
    """

    content: str
    staff: discord.Member
    member: discord.Member
    guild: discord.Guild
    thread_id: int
    source_message_id: MessageID
    attachment: Optional[discord.Attachment] = None
    simple_mode: bool = False
    anonymous: bool = False
    locale: Optional[str] = None


@dataclass(slots=True)
class RelayPayload:
    """Keyword arguments for a ``send``/``respond`` call: plain text or an embed."""

    content: Optional[str] = None
    embed: Optional[discord.Embed] = None

    def as_kwargs(self) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {}
        if self.content is not None:
            kwargs["content"] = self.content
        if self.embed is not None:
            kwargs["embed"] = self.embed
        return kwargs


@dataclass(slots=True)
class DeliveryResult:
    """Outcome of a successful relay."""

    thread_id: int
    user_message_id: Optional[MessageID]
    staff_payload: RelayPayload
    user_payload: RelayPayload
    attachment_url: Optional[str] = None
