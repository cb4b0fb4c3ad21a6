"""
Half-hour quantisation of wall-clock strings.

All helpers accept ``HH:MM`` or ``HH:MM:SS``, ignore the seconds and
return a zero-padded ``HH:MM``.
"""

from __future__ import annotations

import re

_CLOCK_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")


def parse_clock(value: str) -> tuple[int, int, int]:
    """Split a clock string into ``(hour, minute, second)``.

    Raises ``ValueError`` for anything that is not a valid time of day.
    """
    match = _CLOCK_RE.match(value.strip()) if isinstance(value, str) else None
    if match is None:
        raise ValueError(f"Invalid clock time: {value!r}")
    hour, minute = int(match.group(1)), int(match.group(2))
    second = int(match.group(3) or 0)
    if hour > 23 or minute > 59 or second > 59:
        raise ValueError(f"Invalid clock time: {value!r}")
    return hour, minute, second


def format_clock(hour: int, minute: int) -> str:
    return f"{hour % 24:02d}:{minute:02d}"


def clock_minutes(value: str) -> int:
    """Minutes since midnight, seconds dropped."""
    hour, minute, _ = parse_clock(value)
    return hour * 60 + minute


def clock_seconds(value: str) -> int:
    hour, minute, second = parse_clock(value)
    return hour * 3600 + minute * 60 + second


def round_to_nearest_half_hour(value: str) -> str:
    """0–29 → :00, 30–59 → :30 of the same hour."""
    hour, minute, _ = parse_clock(value)
    return format_clock(hour, 0 if minute < 30 else 30)


def round_up_to_nearest_half_hour(value: str) -> str:
    """Exact hours stay; 1–30 → :30; 31–59 → next hour."""
    hour, minute, _ = parse_clock(value)
    if minute == 0:
        return format_clock(hour, 0)
    if minute <= 30:
        return format_clock(hour, 30)
    return format_clock(hour + 1, 0)


def round_down_to_nearest_half_hour(value: str) -> str:
    """Exact hours stay; 1–29 → :00; 30–59 → :30."""
    hour, minute, _ = parse_clock(value)
    return format_clock(hour, 0 if minute < 30 else 30)
