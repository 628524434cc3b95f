"""Logging utilities for the visualgifs companion."""

from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

import pytz

if TYPE_CHECKING:
    from pytz.tzinfo import BaseTzInfo

# Default timezone for timestamps
DEFAULT_TZ: BaseTzInfo = pytz.timezone(os.getenv("VISUALGIFS_TZ", "UTC"))

# Optional mirror of every console line
LOG_FILE: str | None = os.getenv("VISUALGIFS_LOG_FILE") or None


def _stamp(tz: BaseTzInfo | None = None) -> str:
    tz = tz or DEFAULT_TZ
    return datetime.now(tz).strftime("%Y-%m-%d %H:%M:%S")


def log(message: str, tz: BaseTzInfo | None = None) -> None:
    """Print console messages with a local timestamp."""
    print(f"[{_stamp(tz)}] {message}")
    if LOG_FILE:
        log_to_file(LOG_FILE, message, tz=tz)


def log_warn(message: str) -> None:
    """Console message marked as a warning."""
    log(f"[WARN] {message}")


def log_to_file(
    filepath: str | Path,
    message: str,
    *,
    tz: BaseTzInfo | None = None,
    create_parents: bool = True,
) -> None:
    """Append a timestamped message to a file."""
    ts = _stamp(tz)

    path = Path(filepath)
    try:
        if create_parents:
            path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "a", encoding="utf-8") as f:
            f.write(f"[{ts}] {message}\n")
    except Exception as e:
        # Logging should never break the extension
        print(f"[{ts}] log write failed: {e} | path={filepath}")
