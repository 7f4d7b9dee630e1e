"""
Reply cog: message commands relaying a staff message to the thread's user.

"Reply" shows the staff member as the sender; "Reply anonymously" shows the
anonymous staff label instead. Both share one relay engine and differ only in
the anonymity flag.
"""

import discord
from discord.ext import commands

from modrelay.bot.commands.reply_command import ReplyCommand
from modrelay.localization.translator import t, translator
from modrelay.threads.relay_engine import RelayEngine
from modrelay.util.logger import get_logger

logger = get_logger("reply_cog")

localized = translator.localizations


class ReplyCog(commands.Cog):
    """Cog exposing the "Reply" and "Reply anonymously" message commands."""

    def __init__(self, discord_bot_instance, relay_engine: RelayEngine):
        self.discord_bot_instance = discord_bot_instance
        self.reply_command = ReplyCommand(relay_engine)
        self.anonymous_reply_command = ReplyCommand(relay_engine, anonymous=True)
        logger.info("Reply cog loaded")

    @discord.message_command(
        name=t("context-menus.reply.name"),
        name_localizations=localized("context-menus.reply.name"),
    )
    @discord.default_permissions(administrator=True)
    @discord.guild_only()
    async def reply(self, ctx: discord.ApplicationContext, message: discord.Message) -> None:
        await self.reply_command.handle(ctx, message)

    @discord.message_command(
        name=t("context-menus.reply_anon.name"),
        name_localizations=localized("context-menus.reply_anon.name"),
    )
    @discord.default_permissions(administrator=True)
    @discord.guild_only()
    async def reply_anonymously(self, ctx: discord.ApplicationContext, message: discord.Message) -> None:
        await self.anonymous_reply_command.handle(ctx, message)


def setup(discord_bot_instance, relay_engine: RelayEngine):
    """Register the reply cog with the bot."""
    discord_bot_instance.add_cog(ReplyCog(discord_bot_instance, relay_engine))
