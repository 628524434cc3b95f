"""Single-shot timer slots.

A `TimerSlot` holds at most one pending timer. Scheduling always cancels the
previous timer first, inside the same synchronous call, so an old and a new
timer can never both fire. A cancelled timer never runs its callback.
"""

from __future__ import annotations

import asyncio
from typing import Callable, Optional

__all__ = ["TimerSlot"]


class TimerSlot:
    """One named slot for a delay-then-callback timer on the running loop."""

    def __init__(self, name: str):
        self.name = name
        self._task: Optional[asyncio.Task] = None

    @property
    def pending(self) -> bool:
        """Whether a timer is scheduled and has not fired yet."""
        return self._task is not None and not self._task.done()

    def schedule(self, delay_ms: float, callback: Callable[[], None]) -> None:
        """Replace any pending timer with one that calls `callback` after `delay_ms`."""
        self.cancel()
        self._task = asyncio.get_running_loop().create_task(
            self._run(max(0.0, delay_ms) / 1000.0, callback),
            name=f"timer:{self.name}",
        )

    def cancel(self) -> None:
        """Cancel the pending timer, if any. Safe to call at any time."""
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()

    async def _run(self, delay_s: float, callback: Callable[[], None]) -> None:
        await asyncio.sleep(delay_s)
        # Clear the handle before the callback so it may reschedule this slot.
        if self._task is asyncio.current_task():
            self._task = None
        callback()
