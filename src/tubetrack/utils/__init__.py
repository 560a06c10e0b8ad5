"""Utility helpers shared across Tubetrack modules."""

from tubetrack.utils.duration import format_duration, format_number, parse_duration

__all__ = ["format_duration", "format_number", "parse_duration"]
