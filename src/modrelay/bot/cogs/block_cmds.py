"""
Block cog: slash commands that block or unblock the user of a thread.

Both commands only work inside a thread channel with an open thread. The
duration option accepts a bare number of minutes or a duration expression
such as ``2d`` or ``3h30m`` and offers suggestions while typing. Leaving it
empty blocks permanently.

Quick usage example
    from modrelay.bot.cogs import block_cmds
    block_cmds.setup(bot, block_store)
"""

import discord
from discord import Option
from discord.ext import commands

from modrelay.bot.commands.block_command import BlockCommand, UnblockCommand, duration_autocomplete
from modrelay.localization.translator import t, translator
from modrelay.threads.block_store import BlockStore
from modrelay.util.logger import get_logger

logger = get_logger("block_cog")

localized = translator.localizations


class BlockCog(commands.Cog):
    """Cog exposing ``/block`` and ``/unblock``."""

    def __init__(self, discord_bot_instance, block_store: BlockStore):
        self.discord_bot_instance = discord_bot_instance
        self.block_command = BlockCommand(block_store)
        self.unblock_command = UnblockCommand(block_store)
        logger.info("Block cog loaded")

    @commands.slash_command(
        name=t("commands.block.name"),
        description=t("commands.block.description"),
        name_localizations=localized("commands.block.name"),
        description_localizations=localized("commands.block.description"),
    )
    @discord.default_permissions(administrator=True)
    @discord.guild_only()
    async def block(
        self,
        ctx: discord.ApplicationContext,
        reason: Option(
            str,
            t("commands.block.options.reason.description"),
            required=False,
            default=None,
            name_localizations=localized("commands.block.options.reason.name"),
            description_localizations=localized("commands.block.options.reason.description"),
        ),  # type: ignore
        duration: Option(
            str,
            t("commands.block.options.duration.description"),
            required=False,
            default=None,
            autocomplete=duration_autocomplete,
            name_localizations=localized("commands.block.options.duration.name"),
            description_localizations=localized("commands.block.options.duration.description"),
        ),  # type: ignore
    ) -> None:
        """Block the thread's user, optionally for a limited time."""
        await self.block_command.handle(ctx, reason=reason, duration=duration)

    @commands.slash_command(
        name=t("commands.unblock.name"),
        description=t("commands.unblock.description"),
        name_localizations=localized("commands.unblock.name"),
        description_localizations=localized("commands.unblock.description"),
    )
    @discord.default_permissions(administrator=True)
    @discord.guild_only()
    async def unblock(self, ctx: discord.ApplicationContext) -> None:
        await self.unblock_command.handle(ctx)


def setup(discord_bot_instance, block_store: BlockStore):
    """Register the block cog with the bot."""
    discord_bot_instance.add_cog(BlockCog(discord_bot_instance, block_store))
