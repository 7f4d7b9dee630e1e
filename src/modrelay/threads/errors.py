"""
Expected failure conditions of the block and relay operations.

Every error carries the localization key the command front-ends answer with,
so each expected condition maps to exactly one user-visible outcome.
"""

from __future__ import annotations


class ThreadRelayError(Exception):
    """Base class for expected, user-reportable failures."""

    translation_key: str = "common.errors.generic"

    def __init__(self, message: str | None = None, **params) -> None:
        super().__init__(message or self.translation_key)
        self.params = params


class NoOpenThread(ThreadRelayError):
    translation_key = "common.errors.no_thread"


class InvalidDuration(ThreadRelayError):
    translation_key = "common.errors.invalid_time"


class ReasonRequired(ThreadRelayError):
    translation_key = "commands.block.errors.reason_required"


class UserUnresolvable(ThreadRelayError):
    """The thread's user could not be fetched (deleted account or unknown id)."""

    translation_key = "common.errors.user_deleted"


class RecipientUnresolvable(ThreadRelayError):
    """The thread's user is no longer a member of the guild."""

    translation_key = "common.errors.no_member"


class EmptyContent(ThreadRelayError):
    translation_key = "common.errors.no_content"


class NotOwnContent(ThreadRelayError):
    translation_key = "common.errors.not_own_message"


class DeliveryFailure(ThreadRelayError):
    """Discord rejected the relayed message (DMs closed, missing access, ...)."""

    translation_key = "common.errors.delivery_failed"


class NotBlocked(ThreadRelayError):
    translation_key = "common.errors.not_blocked"
