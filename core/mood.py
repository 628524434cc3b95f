"""Moods that can put a GIF on screen."""

from __future__ import annotations

from enum import Enum


class Mood(str, Enum):
    """Trigger category of an overlay.

    IDLE is the resting state: no overlay is currently attributable to a mood.
    """
    IDLE = "idle"
    AFK = "afk"
    ERROR = "error"
    SUCCESS = "success"
    TEST = "test"

    @property
    def is_sticky(self) -> bool:
        """Sticky moods survive ordinary typing and navigation."""
        return self is Mood.ERROR


# Moods that can be asked for a GIF (IDLE never is).
TRIGGER_MOODS = (Mood.AFK, Mood.ERROR, Mood.SUCCESS, Mood.TEST)
