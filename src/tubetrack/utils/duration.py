"""Conversions between ISO-8601 durations, seconds, and display strings."""

from __future__ import annotations

import math
import re

_ISO_DURATION_PATTERN = re.compile(r"PT(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?")


def parse_duration(iso_duration: str | None) -> int:
    """Convert a ``PT#H#M#S`` duration into whole seconds.

    Missing components count as zero and unparseable input yields ``0``; this never raises.
    """

    if not iso_duration:
        return 0
    match = _ISO_DURATION_PATTERN.search(iso_duration)
    if match is None:
        return 0

    hours, minutes, seconds = (int(group or 0) for group in match.groups())
    return hours * 3600 + minutes * 60 + seconds


def format_duration(seconds: int) -> str:
    """Render seconds as ``"{h}h {m}m"`` or ``"{m}m"``, truncating leftover seconds."""

    seconds = max(0, int(seconds))
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def format_number(value: int) -> str:
    """Abbreviate large counts (``1500`` -> ``"1.5K"``, ``2300000`` -> ``"2.3M"``)."""

    if value < 1_000:
        return str(value)
    if value < 1_000_000:
        return f"{_round_tenths(value, 1_000)}K"
    return f"{_round_tenths(value, 1_000_000)}M"


def _round_tenths(value: int, unit: int) -> float:
    # Halves round up: 1250 / 1000 -> 1.3.
    return math.floor(value / (unit // 10) + 0.5) / 10


__all__ = ["format_duration", "format_number", "parse_duration"]
