"""
Staff-to-user message relay.

A staff message posted in a thread channel is relayed to the thread's user as
a DM. :meth:`RelayEngine.prepare_staff_relay` checks the preconditions in a
fixed order and builds a :class:`RelayMessage`; :meth:`RelayEngine.compose`
turns it into the DM payload; :meth:`RelayEngine.relay_staff_message` delivers
it and records the relay.

Presentation
------------
* simple mode (guild setting): plain text ``**name:** content`` with the
  attachment URL on its own line;
* otherwise an embed whose author is the staff member, or the anonymous staff
  label with the guild icon when the relay is anonymous. Image attachments
  become the embed image, anything else a link field.

Only the first attachment of the source message is relayed. Content is
mandatory; an attachment alone is not enough.
"""

from __future__ import annotations

from typing import Optional

import discord

from modrelay.configuration.app_configuration import app_config
from modrelay.database.database import Database
from modrelay.datatypes.discord_datatypes import ChannelID, GuildID, MessageID, UserID
from modrelay.datatypes.thread_datatypes import (
    DeliveryResult,
    RelayMessage,
    RelayPayload,
    ThreadMessageRecord,
)
from modrelay.localization.translator import translator
from modrelay.threads.errors import (
    DeliveryFailure,
    EmptyContent,
    NotOwnContent,
    RecipientUnresolvable,
)
from modrelay.threads.thread_resolver import ThreadResolver
from modrelay.util import discord_utils
from modrelay.util.logger import get_logger

logger = get_logger("relay_engine")


class RelayEngine:
    """Relays staff messages from thread channels to the thread's user."""

    def __init__(
        self,
        db: Database,
        resolver: Optional[ThreadResolver] = None,
        embed_color: Optional[int] = None,
    ) -> None:
        self.db = db
        self.resolver = resolver or ThreadResolver(db)
        self.embed_color = embed_color if embed_color is not None else app_config.embed_color

    # ------------------------------------------------------------------
    # Preconditions
    # ------------------------------------------------------------------

    async def prepare_staff_relay(
        self,
        *,
        channel_id: ChannelID | int,
        guild: discord.Guild,
        staff: discord.Member,
        source_message: discord.Message,
        anonymous: bool = False,
        user_triggered: bool = True,
        locale: Optional[str] = None,
    ) -> RelayMessage:
        """Validate a relay request and build the message to deliver.

        Checks run in this order: open thread, ownership of the source
        message (only when ``user_triggered``), recipient membership, content.

        Raises
        ------
        NoOpenThread, NotOwnContent, RecipientUnresolvable, EmptyContent
        """
        thread = await self.resolver.require_open_thread(channel_id)

        if user_triggered and source_message.author.id != staff.id:
            raise NotOwnContent()

        member = await discord_utils.fetch_member(guild, thread.user_id.to_int())
        if member is None:
            raise RecipientUnresolvable(f"User {thread.user_id} is not a member of guild {guild.id}")

        if not source_message.content:
            raise EmptyContent()

        settings = await self.db.get_guild_settings(GuildID(guild.id))
        attachments = source_message.attachments or []

        return RelayMessage(
            content=source_message.content,
            staff=staff,
            member=member,
            guild=guild,
            thread_id=thread.thread_id,
            source_message_id=MessageID(source_message.id),
            attachment=attachments[0] if attachments else None,
            simple_mode=settings.simple_mode if settings is not None else False,
            anonymous=anonymous,
            locale=locale,
        )

    # ------------------------------------------------------------------
    # Composition
    # ------------------------------------------------------------------

    def _author_name(self, msg: RelayMessage, hide_identity: bool) -> str:
        if hide_identity:
            return translator.translate("relay.anonymous_author", msg.locale)
        return msg.staff.display_name

    def compose(self, msg: RelayMessage, *, for_staff: bool = False) -> RelayPayload:
        """Build the payload for the user, or the staff-side echo when ``for_staff``.

        The staff echo always names the sender; anonymous relays are marked
        instead of hidden.
        """
        hide_identity = msg.anonymous and not for_staff
        name = self._author_name(msg, hide_identity)

        if msg.simple_mode:
            lines = [f"**{name}:** {msg.content}"]
            if msg.attachment is not None:
                lines.append(msg.attachment.url)
            if for_staff and msg.anonymous:
                lines.append(f"-# {translator.translate('relay.anonymous_marker', msg.locale)}")
            return RelayPayload(content="\n".join(lines))

        embed = discord.Embed(
            description=msg.content,
            color=self.embed_color,
            timestamp=discord.utils.utcnow(),
        )
        if hide_identity:
            icon = msg.guild.icon.url if msg.guild.icon else None
            embed.set_author(name=f"{name} - {msg.guild.name}", icon_url=icon)
        else:
            embed.set_author(name=name, icon_url=msg.staff.display_avatar.url)

        if msg.attachment is not None:
            if discord_utils.is_image_attachment(msg.attachment):
                embed.set_image(url=msg.attachment.url)
            else:
                embed.add_field(
                    name=translator.translate("relay.attachment", msg.locale),
                    value=f"[{msg.attachment.filename}]({msg.attachment.url})",
                    inline=False,
                )

        if for_staff and msg.anonymous:
            embed.set_footer(text=translator.translate("relay.anonymous_marker", msg.locale))

        return RelayPayload(embed=embed)

    # ------------------------------------------------------------------
    # Delivery
    # ------------------------------------------------------------------

    async def relay_staff_message(self, msg: RelayMessage) -> DeliveryResult:
        """Deliver ``msg`` to the thread's user. No retry on failure.

        Raises
        ------
        EmptyContent
            ``msg.content`` is empty.
        RecipientUnresolvable
            Discord no longer knows the recipient.
        DeliveryFailure
            Discord refused the DM.
        """
        if not msg.content:
            raise EmptyContent()

        user_payload = self.compose(msg)
        try:
            sent = await msg.member.send(**user_payload.as_kwargs())
        except discord.NotFound as exc:
            raise RecipientUnresolvable(str(exc)) from exc
        except discord.HTTPException as exc:
            logger.warning(
                "[RELAY] Delivery to user %s for thread %s failed: %s",
                msg.member.id,
                msg.thread_id,
                exc,
            )
            raise DeliveryFailure(str(exc)) from exc

        user_message_id = MessageID(sent.id) if sent is not None else None
        # Delivered at this point; the log write is best-effort.
        try:
            await self.db.log_thread_message(
                ThreadMessageRecord(
                    thread_id=msg.thread_id,
                    guild_id=GuildID(msg.guild.id),
                    staff_id=UserID(msg.staff.id),
                    source_message_id=msg.source_message_id,
                    user_message_id=user_message_id,
                    anonymous=msg.anonymous,
                )
            )
        except Exception:
            logger.exception("[RELAY] Failed to log relayed message %s for thread %s", msg.source_message_id, msg.thread_id)
        logger.info(
            "[RELAY] Staff %s relayed message %s to user %s (thread %s, anonymous=%s)",
            msg.staff.id,
            msg.source_message_id,
            msg.member.id,
            msg.thread_id,
            msg.anonymous,
        )

        return DeliveryResult(
            thread_id=msg.thread_id,
            user_message_id=user_message_id,
            staff_payload=self.compose(msg, for_staff=True),
            user_payload=user_payload,
            attachment_url=msg.attachment.url if msg.attachment is not None else None,
        )
