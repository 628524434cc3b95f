"""display_manager.py

Shows a GIF as an overlay decoration on the first line of the active editor.

- show() replaces whatever is on screen; hide() is idempotent.
- When the duration runs out the overlay is hidden and the caller is told
  through `on_expired`, so it can drop the mood that overlay stood for.
- Duration: an explicit override wins; otherwise `display.durationSeconds`.
  A duration of 0 keeps the overlay until hide() is called.
"""

from __future__ import annotations

import asyncio
import base64
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional

from settings import Settings
from utils.errors import AssetReadFailure, NoActiveSurface
from utils.logging import log
from utils.timers import TimerSlot

if TYPE_CHECKING:
    from core.host import DecorationType, EditorHost

__all__ = ["GifDisplayManager", "build_decoration_options"]


def build_decoration_options(
    data_uri: str,
    position: str,
    max_width: int,
    max_height: int,
) -> Dict[str, Any]:
    """Decoration render options that draw the GIF after the anchor line."""
    css = (
        "; display: inline-block;"
        f" width: {max_width}px;"
        f" height: {max_height}px;"
        f" background-image: url({data_uri});"
        " background-size: contain;"
        " background-repeat: no-repeat;"
        " background-position: center center;"
    )
    # Horizontal alignment is the only placement the decoration API allows
    margin = "20px 0 0 auto" if position.endswith("right") else "20px 0 0 0"
    return {
        "after": {
            "contentText": "",
            "margin": margin,
            "textDecoration": css,
        },
        "isWholeLine": True,
    }


class GifDisplayManager:
    """Owns the single overlay decoration and its auto-hide timer."""

    def __init__(self, settings: Settings, host: "EditorHost"):
        self.settings = settings
        self.host = host
        self.current_decoration: Optional["DecorationType"] = None
        self._close_timer = TimerSlot("display.close")

    @property
    def is_showing(self) -> bool:
        return self.current_decoration is not None

    async def show_gif(
        self,
        gif_path: str,
        duration_override_ms: Optional[int] = None,
        *,
        should_show: Optional[Callable[[], bool]] = None,
        on_expired: Optional[Callable[[], None]] = None,
    ) -> bool:
        """
        Put `gif_path` on screen.

        `should_show` is asked again once the file has been read; if it says
        no, nothing is drawn and False is returned. `on_expired` runs after the
        auto-hide timer removes the overlay, never after an explicit hide().

        Raises NoActiveSurface when there is no editor and AssetReadFailure
        when the file cannot be read.
        """
        editor = self.host.active_text_editor
        if editor is None:
            raise NoActiveSurface("No active editor.")

        self.hide_gif()

        try:
            gif_data = await asyncio.to_thread(Path(gif_path).read_bytes)
        except OSError as exc:
            raise AssetReadFailure(f"Error reading GIF: {gif_path}", cause=exc) from exc

        if should_show is not None and not should_show():
            return False

        # The editor may have changed while the file was being read
        editor = self.host.active_text_editor
        if editor is None:
            raise NoActiveSurface("Active editor closed while loading the GIF.")

        data_uri = "data:image/gif;base64," + base64.b64encode(gif_data).decode("ascii")
        options = build_decoration_options(
            data_uri,
            self.settings.get_position(),
            self.settings.get_max_width(),
            self.settings.get_max_height(),
        )

        # A concurrent show may have landed while we were reading
        self.hide_gif()
        self.current_decoration = self.host.create_decoration_type(options)
        editor.set_decorations(self.current_decoration, [0])
        log(f"[Display] Showing {Path(gif_path).name}")

        duration_ms = (
            self.settings.get_duration_ms()
            if duration_override_ms is None
            else max(0, int(duration_override_ms))
        )
        if duration_ms > 0:
            self._close_timer.schedule(duration_ms, lambda: self._expire(on_expired))
        return True

    def hide_gif(self) -> None:
        """Remove the overlay. Safe to call when nothing is shown."""
        self._close_timer.cancel()
        if self.current_decoration is not None:
            self.current_decoration.dispose()
            self.current_decoration = None

    def _expire(self, on_expired: Optional[Callable[[], None]]) -> None:
        self.hide_gif()
        log("[Display] Overlay expired.")
        if on_expired is not None:
            on_expired()
