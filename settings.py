"""settings.py

User settings for the visualgifs companion.

Settings live in a JSON file in the editor's `settings.json` style: flat,
dotted keys prefixed with the namespace, for example

    {
        "visualgifs.gifFolderPath": "/home/me/gifs",
        "visualgifs.tags.error": ["facepalm", "panic"],
        "visualgifs.afk.timeInMinutes": 5
    }

Nothing is cached: every getter re-reads the file, so edits are picked up
on the next lookup. A missing or unreadable file, or a value of the wrong
type, falls back to the default.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from utils.helpers import clamp, minutes_to_ms, seconds_to_ms
from utils.logging import log

if TYPE_CHECKING:
    from core.mood import Mood

NAMESPACE = "visualgifs"

SETTINGS_FILE = os.getenv("VISUALGIFS_SETTINGS", "settings.json")

POSITIONS = ("top-left", "top-right", "bottom-left", "bottom-right")

DEFAULTS: Dict[str, Any] = {
    "gifFolderPath": None,
    "activeSeries": [],
    "afk.timeInMinutes": 5,
    "events.enableError": True,
    "events.enableAfk": True,
    "events.enableSuccess": True,
    "tags.error": [],
    "tags.afk": [],
    "tags.test": [],
    "tags.success": [],
    "display.maxWidth": 300,
    "display.maxHeight": 300,
    "display.durationSeconds": 5,
    "display.position": "top-right",
    "error.debounceTime": 3000,
}


class Settings:
    """Typed, cache-free lookups for the `visualgifs` settings namespace."""

    def __init__(
        self,
        path: str | Path | None = SETTINGS_FILE,
        overrides: Optional[Dict[str, Any]] = None,
    ):
        self.path = Path(path) if path else None
        self.overrides: Dict[str, Any] = dict(overrides or {})

    # -------------------------
    # Raw access
    # -------------------------

    def _load(self) -> Dict[str, Any]:
        if self.path is None or not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, ValueError) as e:
            log(f"[Settings] Could not read {self.path}: {e}")
            return {}
        if not isinstance(raw, dict):
            return {}

        prefix = NAMESPACE + "."
        values: Dict[str, Any] = {}
        for key, value in raw.items():
            if key.startswith(prefix):
                values[key[len(prefix):]] = value
        # A nested {"visualgifs": {...}} block is accepted as well
        nested = raw.get(NAMESPACE)
        if isinstance(nested, dict):
            values.update(_flatten(nested))
        return values

    def get(self, key: str, default: Any = None) -> Any:
        """Return the value of `key` (without the namespace), or `default`."""
        if key in self.overrides:
            return self.overrides[key]
        return self._load().get(key, default)

    def update(self, key: str, value: Any) -> None:
        """Set an in-memory override for `key`."""
        self.overrides[key] = value

    def _typed(self, key: str, kind: type | tuple[type, ...]) -> Any:
        default = DEFAULTS[key]
        value = self.get(key, default)
        # bool is an int subclass; never let it stand in for a number
        if isinstance(value, bool) and kind is not bool:
            return default
        if not isinstance(value, kind):
            return default
        return value

    # -------------------------
    # Assets
    # -------------------------

    def get_gif_folder_path(self) -> Optional[str]:
        value = self._typed("gifFolderPath", (str, type(None)))
        return value or None

    def get_active_series(self) -> List[str]:
        series = self._typed("activeSeries", list)
        return [s for s in series if isinstance(s, str) and s.strip()]

    def get_tags_for_mood(self, mood: "Mood") -> List[str]:
        key = f"tags.{mood.value}"
        if key not in DEFAULTS:
            return []
        tags = self._typed(key, list)
        return [t for t in tags if isinstance(t, str) and t.strip()]

    # -------------------------
    # Events
    # -------------------------

    def get_afk_time_ms(self) -> int:
        """Inactivity delay in milliseconds; 0 disables the AFK timer."""
        return minutes_to_ms(self._typed("afk.timeInMinutes", (int, float)))

    def is_afk_enabled(self) -> bool:
        return self._typed("events.enableAfk", bool)

    def is_error_enabled(self) -> bool:
        return self._typed("events.enableError", bool)

    def is_success_enabled(self) -> bool:
        return self._typed("events.enableSuccess", bool)

    def get_error_debounce_ms(self) -> int:
        return int(clamp(self._typed("error.debounceTime", (int, float)), 0, float("inf")))

    # -------------------------
    # Display
    # -------------------------

    def get_max_width(self) -> int:
        return int(clamp(self._typed("display.maxWidth", (int, float)), 1, 4096))

    def get_max_height(self) -> int:
        return int(clamp(self._typed("display.maxHeight", (int, float)), 1, 4096))

    def get_duration_ms(self) -> int:
        return seconds_to_ms(self._typed("display.durationSeconds", (int, float)))

    def get_position(self) -> str:
        position = self._typed("display.position", str)
        return position if position in POSITIONS else DEFAULTS["display.position"]


def _flatten(block: Dict[str, Any], prefix: str = "") -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for key, value in block.items():
        full = f"{prefix}{key}"
        if isinstance(value, dict):
            out.update(_flatten(value, full + "."))
        else:
            out[full] = value
    return out
