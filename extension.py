"""
visualgifs - editor companion that shows a GIF matching your mood.

Key rules:
- activate() builds every component once and starts monitoring.
- The `visualgifs.test` command triggers the TEST mood by hand.
- deactivate() tears everything down; calling it twice is harmless.

Notes:
- The editor host delivers events on the asyncio loop, so activate() must be
  called from a running loop.
"""

from __future__ import annotations

from typing import List, Optional

from core.host import Disposable, EditorHost
from core.monitor import EventMonitor
from core.mood import Mood
from display_manager import GifDisplayManager
from gif_provider import LocalGifProvider
from settings import Settings
from utils.logging import log

TEST_COMMAND = "visualgifs.test"

# State of the active session
_MONITOR: Optional[EventMonitor] = None
_DISPLAY: Optional[GifDisplayManager] = None
_SUBSCRIPTIONS: List[Disposable] = []


def activate(host: EditorHost, settings: Optional[Settings] = None) -> EventMonitor:
    """Wire up the companion inside `host` and start watching for moods."""
    global _MONITOR, _DISPLAY

    if _MONITOR is not None:
        log("[visualgifs] Already active.")
        return _MONITOR

    log("[visualgifs] Extension is now active!")

    settings = settings or Settings()
    gif_provider = LocalGifProvider(settings, host)
    display_manager = GifDisplayManager(settings, host)
    monitor = EventMonitor(settings, gif_provider, display_manager, host)

    monitor.start_monitoring()

    async def run_test_command() -> bool:
        host.show_information_message("Test: Triggering a GIF...")
        return await monitor.trigger_mood(Mood.TEST)

    _SUBSCRIPTIONS.append(host.register_command(TEST_COMMAND, run_test_command))
    _SUBSCRIPTIONS.append(Disposable(monitor.dispose))

    _MONITOR = monitor
    _DISPLAY = display_manager
    return monitor


def deactivate() -> None:
    """Stop monitoring, hide any overlay and unregister commands."""
    global _MONITOR, _DISPLAY

    if _MONITOR is None:
        return

    while _SUBSCRIPTIONS:
        _SUBSCRIPTIONS.pop().dispose()
    if _DISPLAY is not None:
        _DISPLAY.hide_gif()

    _MONITOR = None
    _DISPLAY = None
    log("[visualgifs] Extension deactivated.")
