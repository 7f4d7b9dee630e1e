"""
Duration input for the block command.

A bare number is a count of **minutes**; anything else goes through the
``pytimeparse`` grammar ("2d", "3h30m", "1 day", "1.5h"). The numeric check
runs first, so "90" is ninety minutes, never ninety seconds. Either way a
result that is not strictly positive is rejected.
"""

from __future__ import annotations

import math
import re
from typing import Iterable, List, Optional, Tuple

from pytimeparse import parse as parse_timespan

from modrelay.threads.errors import InvalidDuration

MS_PER_SECOND = 1000
MS_PER_MINUTE = 60 * MS_PER_SECOND

_DECIMAL_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")

_UNITS = (
    ("week", 7 * 24 * 60 * 60 * MS_PER_SECOND),
    ("day", 24 * 60 * 60 * MS_PER_SECOND),
    ("hour", 60 * 60 * MS_PER_SECOND),
    ("minute", MS_PER_MINUTE),
    ("second", MS_PER_SECOND),
)

MAX_SUGGESTIONS = 25


def parse_duration(raw: Optional[str]) -> Optional[int]:
    """Convert raw duration input to milliseconds.

    Parameters
    ----------
    raw:
        User input, or None when the option was not given.

    Returns
    -------
    int | None
        Milliseconds, or None when no duration was requested.

    Raises
    ------
    InvalidDuration
        When the input cannot be interpreted or is not strictly positive.
    """
    if not raw:
        return None

    text = raw.strip()
    if _DECIMAL_RE.fullmatch(text):
        milliseconds = float(text) * MS_PER_MINUTE
    else:
        seconds = parse_timespan(text) if text else None
        if seconds is None:
            raise InvalidDuration(f"Unrecognised duration: {raw!r}")
        milliseconds = float(seconds) * MS_PER_SECOND

    if not math.isfinite(milliseconds):
        raise InvalidDuration(f"Duration is not finite: {raw!r}")

    result = round(milliseconds)
    if result <= 0:
        raise InvalidDuration(f"Duration must be positive: {raw!r}")
    return result


def format_duration(milliseconds: int) -> str:
    """Render milliseconds as a short label such as ``"3 hours, 30 minutes"``.

    Only the two largest non-zero units are shown; anything below one second
    reads as ``"less than a second"``.
    """
    parts: List[str] = []
    remaining = milliseconds
    for name, size in _UNITS:
        count, remaining = divmod(remaining, size)
        if count:
            parts.append(f"{count} {name}{'s' if count != 1 else ''}")
        if len(parts) == 2:
            break
    return ", ".join(parts) if parts else "less than a second"


def suggest_durations(raw: Optional[str], defaults: Iterable[str]) -> List[Tuple[str, str]]:
    """Build ``(label, value)`` autocomplete suggestions for a duration option.

    Empty input lists the configured defaults; input that parses yields itself
    with a readable label; input that does not parse yields nothing.
    """
    text = (raw or "").strip()
    if not text:
        suggestions = []
        for value in defaults:
            try:
                milliseconds = parse_duration(value)
            except InvalidDuration:
                continue
            if milliseconds is not None:
                suggestions.append((format_duration(milliseconds), value))
        return suggestions[:MAX_SUGGESTIONS]

    try:
        milliseconds = parse_duration(text)
    except InvalidDuration:
        return []
    if milliseconds is None:
        return []
    return [(format_duration(milliseconds), text)]
