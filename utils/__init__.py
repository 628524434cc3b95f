# utils package - shared utilities for the visualgifs companion
from utils.helpers import clamp, minutes_to_ms, seconds_to_ms
from utils.logging import log, log_warn, log_to_file, DEFAULT_TZ
from utils.errors import (
    VisualGifsError,
    AssetReadFailure,
    NoActiveSurface,
    log_error,
    report_editor_error,
    wrap_listener_errors,
)
from utils.timers import TimerSlot

__all__ = [
    # helpers
    "clamp",
    "minutes_to_ms",
    "seconds_to_ms",
    # logging
    "log",
    "log_warn",
    "log_to_file",
    "DEFAULT_TZ",
    # errors
    "VisualGifsError",
    "AssetReadFailure",
    "NoActiveSurface",
    "log_error",
    "report_editor_error",
    "wrap_listener_errors",
    # timers
    "TimerSlot",
]
