"""gif_provider.py

Finds a GIF on disk for a mood.

Layout of the GIF folder:
- Files directly in the root folder are matched (non-recursive).
- Each active series is a sub-folder, matched recursively
  (e.g. `k-on/` and `k-on/yui/`).
A file matches a tag when it is named `<tag>_<anything>.gif`.
"""

from __future__ import annotations

import asyncio
import os
import random
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional

from core.mood import Mood
from settings import Settings
from utils.logging import log, log_warn

if TYPE_CHECKING:
    from core.host import EditorHost

__all__ = ["LocalGifProvider", "find_gifs_in_dir", "find_gifs_in_dir_recursive"]

GIF_SUFFIX = ".gif"


def _matches(name: str, tag: str) -> bool:
    return name.startswith(f"{tag}_") and name.endswith(GIF_SUFFIX)


def find_gifs_in_dir(directory: str | Path, tag: str) -> List[str]:
    """Matching GIFs in a single directory. A missing folder yields nothing."""
    try:
        with os.scandir(directory) as entries:
            return sorted(
                os.path.join(directory, e.name)
                for e in entries
                if e.is_file() and _matches(e.name, tag)
            )
    except OSError:
        return []


def find_gifs_in_dir_recursive(directory: str | Path, tag: str) -> List[str]:
    """Matching GIFs in a directory and all of its sub-directories."""
    found: List[str] = []
    try:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError:
        return []

    for entry in entries:
        full_path = os.path.join(directory, entry.name)
        if entry.is_dir():
            found.extend(find_gifs_in_dir_recursive(full_path, tag))
        elif entry.is_file() and _matches(entry.name, tag):
            found.append(full_path)
    return found


class LocalGifProvider:
    """Picks a random GIF for a mood from the configured local folder."""

    def __init__(
        self,
        settings: Settings,
        host: "EditorHost | None" = None,
        rng: random.Random | None = None,
    ):
        self.settings = settings
        self.host = host
        self._rng = rng or random.Random()

    async def pick_random_gif_path(self, mood: Mood) -> Optional[str]:
        """
        Find all GIFs matching one random tag of `mood` and pick one.

        Returns the full path, or None when nothing matches.
        """
        folder_path = self.settings.get_gif_folder_path()
        if not folder_path:
            message = "visualgifs: GIF Folder Path is not set. Please update your settings."
            if self.host is not None:
                self.host.show_error_message(message)
            else:
                log_warn(message)
            return None

        tags = self.settings.get_tags_for_mood(mood)
        if not tags:
            log(f"[Provider] No tags configured for mood: {mood.value}")
            return None

        # e.g. "happy" from ["happy", "pat"]
        tag = self._rng.choice(tags)
        found = await asyncio.to_thread(self._collect, folder_path, tag)

        if not found:
            log(f"[Provider] No GIFs found for tag: {tag}")
            return None

        gif_path = self._rng.choice(found)
        log(f"[Provider] Selected GIF: {gif_path}")
        return gif_path

    def _collect(self, folder_path: str, tag: str) -> List[str]:
        found = find_gifs_in_dir(folder_path, tag)
        for series in self.settings.get_active_series():
            found.extend(find_gifs_in_dir_recursive(os.path.join(folder_path, series), tag))
        return found
