"""Common utility helpers used across the project."""

from __future__ import annotations

__all__ = ["clamp", "minutes_to_ms", "seconds_to_ms"]


def clamp(value: float, lo: float, hi: float) -> float:
    """Clamp a value between lo and hi (inclusive)."""
    try:
        v = float(value)
    except (TypeError, ValueError):
        v = 0.0
    return max(lo, min(hi, v))


def minutes_to_ms(minutes: float) -> int:
    """Convert a (possibly fractional) minute count to whole milliseconds, never negative."""
    return int(round(clamp(minutes, 0.0, float("inf")) * 60 * 1000))


def seconds_to_ms(seconds: float) -> int:
    return int(round(clamp(seconds, 0.0, float("inf")) * 1000))
