"""
Cancelable timers for debounce and auto-advance.

Timers are injected so feeds can be driven deterministically in tests and
cancelled on unmount; production code uses the running asyncio loop.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Protocol

logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Something that can run a callback after a delay."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...


class NullTimerHandle:
    """Handle for a timer that was never scheduled."""

    cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class AsyncioScheduler:
    """Scheduler backed by ``loop.call_later``.

    Args:
        loop: Event loop to use. If None, the loop running at the time of
            each call_later() is used. Without a running loop the timer is
            dropped with a warning and a NullTimerHandle is returned.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        loop = self._loop
        if loop is None:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                logger.warning(f"No running event loop, dropping {delay:.1f}s timer")
                return NullTimerHandle()
        return loop.call_later(max(0.0, delay), callback)
