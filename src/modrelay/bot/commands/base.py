"""
Shared contract and outcome reporting for command handlers.

Handlers are plain objects; cogs wire them to py-cord decorators. Every
invocation answers the interaction exactly once: the handler's success reply,
the localized key of a :class:`ThreadRelayError`, or a generic failure for
anything unexpected.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, List, Optional, Protocol, runtime_checkable

import discord

from modrelay.localization.translator import translator
from modrelay.threads.errors import ThreadRelayError
from modrelay.util.logger import get_logger

logger = get_logger("command_handlers")


@runtime_checkable
class CommandHandler(Protocol):
    """A command front-end: localization keys for its schema and a ``handle`` entry point."""

    name_key: str

    async def handle(self, ctx: discord.ApplicationContext, *args: Any, **kwargs: Any) -> None:
        ...


@runtime_checkable
class AutocompleteHandler(Protocol):
    async def autocomplete(self, ctx: discord.AutocompleteContext) -> List[discord.OptionChoice]:
        ...


def locale_of(ctx: Any) -> Optional[str]:
    locale = getattr(ctx, "locale", None)
    return str(locale) if locale else None


async def safe_respond(ctx: discord.ApplicationContext, content: Optional[str] = None, **kwargs: Any) -> None:
    """Respond to the interaction, logging instead of raising if Discord refuses."""
    try:
        await ctx.respond(content, **kwargs)
    except discord.HTTPException as exc:
        logger.error("Failed to send response to interaction: %s", exc)


async def run_guarded(
    ctx: discord.ApplicationContext,
    action: Callable[[], Awaitable[None]],
    *,
    command_name: str,
) -> None:
    """Run ``action`` and turn any failure into a single localized response."""
    try:
        await action()
    except ThreadRelayError as exc:
        logger.debug("[%s] Rejected: %s", command_name.upper(), exc.translation_key)
        await safe_respond(
            ctx,
            translator.translate(exc.translation_key, locale_of(ctx), **exc.params),
            ephemeral=True,
        )
    except Exception:
        logger.exception("[%s] Unexpected error while handling command", command_name.upper())
        await safe_respond(
            ctx,
            translator.translate("common.errors.generic", locale_of(ctx)),
            ephemeral=True,
        )
