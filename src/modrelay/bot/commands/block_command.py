"""
Front-ends for blocking and unblocking the user of a thread.
"""

from __future__ import annotations

from typing import List, Optional

import discord

from modrelay.bot.commands.base import locale_of, run_guarded
from modrelay.configuration.app_configuration import app_config
from modrelay.localization.translator import translator
from modrelay.threads.block_store import BlockStore
from modrelay.threads.duration_parser import suggest_durations


async def duration_autocomplete(ctx: discord.AutocompleteContext) -> List[discord.OptionChoice]:
    """Suggest block durations for what has been typed so far."""
    return [
        discord.OptionChoice(name=label, value=value)
        for label, value in suggest_durations(ctx.value, app_config.duration_suggestions)
    ]


class BlockCommand:
    """``/block reason:<text> duration:<text>`` run inside a thread channel."""

    name_key = "commands.block.name"
    description_key = "commands.block.description"

    def __init__(self, block_store: BlockStore) -> None:
        self.block_store = block_store

    async def handle(
        self,
        ctx: discord.ApplicationContext,
        reason: Optional[str] = None,
        duration: Optional[str] = None,
    ) -> None:
        async def block() -> None:
            await self.block_store.block_thread_user(
                channel_id=ctx.channel_id,
                guild_id=ctx.guild_id,
                reason=reason,
                raw_duration=duration,
            )
            await ctx.respond(translator.translate("common.success.blocked", locale_of(ctx)))

        await run_guarded(ctx, block, command_name="block")

    autocomplete = staticmethod(duration_autocomplete)


class UnblockCommand:
    """``/unblock`` run inside a thread channel."""

    name_key = "commands.unblock.name"
    description_key = "commands.unblock.description"

    def __init__(self, block_store: BlockStore) -> None:
        self.block_store = block_store

    async def handle(self, ctx: discord.ApplicationContext) -> None:
        async def unblock() -> None:
            await self.block_store.unblock_thread_user(channel_id=ctx.channel_id, guild_id=ctx.guild_id)
            await ctx.respond(translator.translate("common.success.unblocked", locale_of(ctx)))

        await run_guarded(ctx, unblock, command_name="unblock")
