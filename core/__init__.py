# core package - mood state machine and the editor host model

from .mood import Mood, TRIGGER_MOODS
from .host import EditorHost
from .monitor import EventMonitor, NO_ERROR_LINE, AFK_PERSIST_MS

__all__ = [
    "Mood",
    "TRIGGER_MOODS",
    "EditorHost",
    "EventMonitor",
    "NO_ERROR_LINE",
    "AFK_PERSIST_MS",
]
