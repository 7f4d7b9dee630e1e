"""
Front-end for the "Reply" message command and its anonymous variant.

Staff write their answer as a normal message in the thread channel and then
relay it with the message command. The interaction is answered with the staff
side copy of what the user received.
"""

from __future__ import annotations

import discord

from modrelay.bot.commands.base import locale_of, run_guarded
from modrelay.threads.relay_engine import RelayEngine


class ReplyCommand:
    """Relays the targeted message to the thread's user; ``anonymous`` hides the sender."""

    def __init__(self, relay_engine: RelayEngine, anonymous: bool = False) -> None:
        self.relay_engine = relay_engine
        self.anonymous = anonymous
        self.name_key = "context-menus.reply_anon.name" if anonymous else "context-menus.reply.name"

    async def handle(self, ctx: discord.ApplicationContext, message: discord.Message) -> None:
        async def reply() -> None:
            relay = await self.relay_engine.prepare_staff_relay(
                channel_id=ctx.channel_id,
                guild=ctx.guild,
                staff=ctx.author,
                source_message=message,
                anonymous=self.anonymous,
                locale=locale_of(ctx),
            )
            result = await self.relay_engine.relay_staff_message(relay)
            await ctx.respond(**result.staff_payload.as_kwargs())

        await run_guarded(ctx, reply, command_name="reply")
