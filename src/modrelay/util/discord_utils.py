"""
discord_utils.py
================

Low-level Discord helpers for modrelay.

Stateless wrappers around the py-cord client used by the block and relay
components: user/member resolution that returns None instead of raising,
best-effort DMs, and Discord timestamp markdown.
"""

from __future__ import annotations

import datetime
from typing import Optional, Union

import discord

from modrelay.util.logger import get_logger

logger = get_logger("discord_utils")


async def fetch_user(bot: discord.Client, user_id: Union[int, str]) -> Optional[discord.User]:
    """
    Resolve a user by ID, preferring the cache.

    Args:
        bot (discord.Client): Client used for the lookup.
        user_id (int | str): Snowflake of the user.

    Returns:
        discord.User | None: The user, or None if Discord does not know it.
    """
    user = bot.get_user(int(user_id))
    if user is not None:
        return user
    try:
        return await bot.fetch_user(int(user_id))
    except discord.NotFound:
        logger.debug("User %s not found", user_id)
    except discord.HTTPException as exc:
        logger.warning("Failed to fetch user %s: %s", user_id, exc)
    return None


async def fetch_member(guild: discord.Guild, user_id: Union[int, str]) -> Optional[discord.Member]:
    """
    Resolve a guild member by ID, preferring the cache.

    Args:
        guild (discord.Guild): Guild to look the member up in.
        user_id (int | str): Snowflake of the member.

    Returns:
        discord.Member | None: The member, or None if they left or never joined.
    """
    member = guild.get_member(int(user_id))
    if member is not None:
        return member
    try:
        return await guild.fetch_member(int(user_id))
    except discord.NotFound:
        logger.debug("Member %s not found in guild %s", user_id, guild.id)
    except discord.HTTPException as exc:
        logger.warning("Failed to fetch member %s in guild %s: %s", user_id, guild.id, exc)
    return None


async def send_dm(
    user: Union[discord.User, discord.Member],
    content: Optional[str] = None,
    *,
    embed: Optional[discord.Embed] = None,
) -> Optional[discord.Message]:
    """
    Send a direct message without raising on delivery failure.

    Args:
        user (discord.User | discord.Member): Recipient.
        content (str | None): Plain text content.
        embed (discord.Embed | None): Optional embed.

    Returns:
        discord.Message | None: The sent message, or None if Discord refused it.
    """
    try:
        return await user.send(content=content, embed=embed)
    except discord.Forbidden:
        logger.info("Cannot DM user %s (DMs closed or bot blocked)", user.id)
    except discord.HTTPException as exc:
        logger.warning("Failed to DM user %s: %s", user.id, exc)
    return None


def format_relative_time(value: datetime.datetime) -> str:
    """Return Discord relative timestamp markdown, e.g. ``<t:1700000000:R>``."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=datetime.timezone.utc)
    return discord.utils.format_dt(value, style="R")


def is_image_attachment(attachment: discord.Attachment) -> bool:
    """Return True when the attachment can be shown as an embed image."""
    content_type = getattr(attachment, "content_type", None) or ""
    if content_type.startswith("image/"):
        return True
    return attachment.filename.lower().endswith((".png", ".jpg", ".jpeg", ".gif", ".webp"))
