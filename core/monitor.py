"""Event monitor - turns editor activity into GIF moods.

The monitor subscribes to the host's event sources, owns the inactivity
timer and the error debounce timer, tracks the mood of whatever overlay is
on screen, and is the only caller of the GIF provider and display manager.

Mood rules:
- AFK fires after the configured inactivity delay and persists until hidden.
- ERROR is debounced, then re-checked; it is sticky against typing and
  navigation and only clears when the error is resolved or on a mouse click.
- SUCCESS and TEST are transient: the next activity event clears them.
- Any mood ends when the display hides its overlay after the display
  duration. AFK asks for an overlay that never expires.

Handlers run on the event loop one at a time. The trigger pipeline is the
only place that awaits (GIF lookup and display). Every trigger and every
forced hide bumps a generation counter; a pipeline that resumes after a newer
generation began drops its result instead of overwriting the newer overlay.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any, Coroutine, Dict, List, Optional

from core.host import (
    ConfigurationChangeEvent,
    Diagnostic,
    DiagnosticSeverity,
    Disposable,
    SelectionChangeEvent,
    SelectionChangeKind,
)
from core.mood import Mood, TRIGGER_MOODS
from settings import NAMESPACE
from utils.errors import NoActiveSurface, report_editor_error, wrap_listener_errors
from utils.logging import log, log_warn
from utils.timers import TimerSlot

if TYPE_CHECKING:
    from core.host import EditorHost
    from display_manager import GifDisplayManager
    from gif_provider import LocalGifProvider
    from settings import Settings

__all__ = ["EventMonitor", "NO_ERROR_LINE", "AFK_PERSIST_MS"]

# Sentinel for "no error line reported"
NO_ERROR_LINE = -1

# Duration override meaning "keep on screen until hidden"
AFK_PERSIST_MS = 0

# (host event source, handler method, optional)
# Optional sources are probed once; a host without them is not an error.
_SUBSCRIPTIONS = (
    ("on_did_change_text_document", "on_activity", False),
    ("on_did_change_active_text_editor", "on_activity", False),
    ("on_did_change_text_editor_selection", "_on_selection_changed", False),
    ("on_did_change_diagnostics", "on_diagnostics_changed", False),
    ("on_did_end_task_process", "_on_process_end", False),
    ("on_did_terminate_debug_session", "_on_process_end", False),
    ("on_did_end_terminal_shell_execution", "_on_process_end", True),
    ("on_did_change_configuration", "_on_configuration_changed", False),
)


class EventMonitor:
    """Mood state machine driven by editor events."""

    def __init__(
        self,
        settings: "Settings",
        gif_provider: "LocalGifProvider",
        display_manager: "GifDisplayManager",
        host: "EditorHost",
    ):
        self.settings = settings
        self.gif_provider = gif_provider
        self.display_manager = display_manager
        self.host = host

        self.current_mood: Mood = Mood.IDLE
        self.last_error_line: int = NO_ERROR_LINE

        self._afk_timer = TimerSlot("afk")
        self._error_timer = TimerSlot("error.debounce")
        self._subscriptions: List[Disposable] = []
        self._pipelines: set[asyncio.Task] = set()
        self._generation = 0
        self._monitoring = False
        self._disposed = False

    # =========================
    # Lifecycle
    # =========================

    def start_monitoring(self) -> None:
        """Subscribe to every host event source and arm the AFK timer.

        Calling it again while monitoring, or after dispose(), does nothing.
        """
        if self._disposed:
            log_warn("[Monitor] start_monitoring() after dispose(); ignored.")
            return
        if self._monitoring:
            return

        # Resolve every source before subscribing to any of them
        sources = []
        for source_name, handler_name, optional in _SUBSCRIPTIONS:
            source = getattr(self.host, source_name, None)
            if source is None:
                if optional:
                    log(f"[Monitor] Host has no {source_name}; not listening to it.")
                    continue
                raise AttributeError(f"Host is missing event source: {source_name}")
            sources.append((source, handler_name))

        for source, handler_name in sources:
            self._subscriptions.append(source.subscribe(getattr(self, handler_name)))
        self._monitoring = True

        self._reset_afk_timer()
        log(f"[Monitor] Monitoring started ({len(self._subscriptions)} subscriptions).")

    def dispose(self) -> None:
        """Cancel both timers and any running pipeline, and unsubscribe everything."""
        if self._disposed:
            return
        self._disposed = True
        self._monitoring = False

        self._afk_timer.cancel()
        self._error_timer.cancel()
        self._generation += 1
        for task in list(self._pipelines):
            task.cancel()

        subscriptions, self._subscriptions = self._subscriptions, []
        for subscription in subscriptions:
            subscription.dispose()
        log("[Monitor] Disposed.")

    @property
    def is_monitoring(self) -> bool:
        return self._monitoring

    def stats(self) -> Dict[str, Any]:
        """Snapshot of the monitor state."""
        return {
            "mood": self.current_mood.value,
            "last_error_line": self.last_error_line,
            "afk_timer_pending": self._afk_timer.pending,
            "error_timer_pending": self._error_timer.pending,
            "subscriptions": len(self._subscriptions),
            "pipelines": len(self._pipelines),
            "generation": self._generation,
        }

    # =========================
    # Event handlers
    # =========================

    @wrap_listener_errors
    def on_activity(self, _event: Any = None) -> None:
        """Typing, switching files or moving the cursor."""
        self._reset_afk_timer()
        if self.current_mood.is_sticky:
            return
        self._clear_overlay()

    @wrap_listener_errors
    def on_mouse_dismiss(self, _event: Any = None) -> None:
        """An intentional click always closes the overlay."""
        self._reset_afk_timer()
        self._clear_overlay()

    @wrap_listener_errors
    def on_diagnostics_changed(self, _event: Any = None) -> None:
        first_error = self._first_error()

        if first_error is None:
            self._error_timer.cancel()
            if self.current_mood is Mood.ERROR:
                self._clear_overlay()
            self.last_error_line = NO_ERROR_LINE
            return

        if first_error.line == self.last_error_line:
            return

        if not self._error_timer.pending:
            self._error_timer.schedule(
                self.settings.get_error_debounce_ms(),
                self._on_error_debounce_expired,
            )

    @wrap_listener_errors
    def on_external_success(self, exit_code: Optional[int]) -> None:
        """A task, debug session or shell command finished."""
        if exit_code == 0 and self.settings.is_success_enabled():
            self._spawn(self.trigger_mood(Mood.SUCCESS))

    @wrap_listener_errors
    def on_config_changed(self, _event: Any = None) -> None:
        self._reset_afk_timer()

    def _on_selection_changed(self, event: Optional[SelectionChangeEvent]) -> None:
        if event is not None and event.kind == SelectionChangeKind.MOUSE:
            self.on_mouse_dismiss(event)
        else:
            self.on_activity(event)

    def _on_process_end(self, event: Any) -> None:
        self.on_external_success(getattr(event, "exit_code", None))

    def _on_configuration_changed(self, event: Optional[ConfigurationChangeEvent]) -> None:
        if event is not None and not event.affects_configuration(NAMESPACE):
            return
        log("[Monitor] Config updated. Resetting AFK timer.")
        self.on_config_changed(event)

    # =========================
    # Timers
    # =========================

    def _reset_afk_timer(self) -> None:
        delay_ms = self.settings.get_afk_time_ms()
        if not self.settings.is_afk_enabled() or delay_ms <= 0:
            self._afk_timer.cancel()
            return
        self._afk_timer.schedule(delay_ms, self._on_afk_timeout)

    @wrap_listener_errors
    def _on_afk_timeout(self) -> None:
        if self.current_mood is Mood.ERROR:
            return
        self._spawn(self.trigger_mood(Mood.AFK))

    @wrap_listener_errors
    def _on_error_debounce_expired(self) -> None:
        first_error = self._first_error()
        if first_error is None or first_error.line == self.last_error_line:
            return
        self.last_error_line = first_error.line
        log(f"[Monitor] New error detected on line {first_error.line + 1}.")
        self._spawn(self.trigger_mood(Mood.ERROR))

    @wrap_listener_errors
    def _on_overlay_expired(self, generation: int) -> None:
        """The display hid the overlay on its own; the mood it stood for is over."""
        if generation != self._generation:
            return
        self._generation += 1
        log(f"[Monitor] {self.current_mood.value} overlay expired.")
        self.current_mood = Mood.IDLE
        # An AFK timeout skipped while the error was showing is rearmed here
        if not self._afk_timer.pending:
            self._reset_afk_timer()

    def _first_error(self) -> Optional[Diagnostic]:
        """First error-severity diagnostic of the active document, if errors are enabled."""
        if not self.settings.is_error_enabled():
            return None
        editor = self.host.active_text_editor
        if editor is None:
            return None
        errors = [
            d for d in self.host.get_diagnostics(editor.document.uri)
            if d.severity == DiagnosticSeverity.ERROR
        ]
        if not errors:
            return None
        return min(errors, key=lambda d: d.line)

    # =========================
    # Trigger pipeline
    # =========================

    def _clear_overlay(self) -> None:
        self._generation += 1
        self.display_manager.hide_gif()
        self.current_mood = Mood.IDLE

    def _spawn(self, coro: Coroutine[Any, Any, Any]) -> Optional[asyncio.Task]:
        if self._disposed:
            coro.close()
            return None
        task = asyncio.get_running_loop().create_task(coro)
        self._pipelines.add(task)
        task.add_done_callback(self._pipelines.discard)
        return task

    async def trigger_mood(self, mood: Mood) -> bool:
        """
        Find a GIF for `mood` and show it.

        Returns True if the overlay was shown. Failures never propagate:
        they reset the mood and are reported once.
        """
        if mood not in TRIGGER_MOODS:
            raise ValueError(f"Cannot trigger mood: {mood!r}")
        if self._disposed:
            return False

        self._generation += 1
        generation = self._generation

        def is_current() -> bool:
            return generation == self._generation

        self.current_mood = mood
        if mood is not Mood.ERROR:
            self._error_timer.cancel()

        try:
            gif_path = await self.gif_provider.pick_random_gif_path(mood)
            if not is_current():
                log(f"[Monitor] Dropping stale {mood.value} GIF.")
                return False

            if not gif_path:
                self.current_mood = Mood.IDLE
                # An empty success pool is a normal setup
                if mood is not Mood.SUCCESS:
                    log_warn(f"[Monitor] No GIF found for mood: {mood.value}")
                return False

            duration_override = AFK_PERSIST_MS if mood is Mood.AFK else None
            shown = await self.display_manager.show_gif(
                gif_path,
                duration_override,
                should_show=is_current,
                on_expired=lambda: self._on_overlay_expired(generation),
            )
            if not shown:
                log(f"[Monitor] Dropping stale {mood.value} GIF.")
            return shown

        except asyncio.CancelledError:
            raise
        except NoActiveSurface:
            if is_current():
                self.current_mood = Mood.IDLE
            return False
        except Exception as exc:
            if is_current():
                self.current_mood = Mood.IDLE
            report_editor_error(self.host, f"An error occurred while showing a {mood.value} GIF:", exc)
            return False
