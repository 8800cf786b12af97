"""
Debounced, threshold-gated persistence of playback position.

Generic media players report progress several times per second. The
tracker turns that stream into occasional writes:

- update_progress() restarts an idle timer on every call and saves once
  the player has been quiet for the debounce interval
- save_progress() only writes when the position moved at least the
  minimum delta since the last save

Writes go to the PlaylistStore as fire-and-forget tasks. A failed write
is logged and not retried; the next qualifying save tries again.
"""

from __future__ import annotations

import asyncio
import logging
import math
from typing import Callable

from vidfeed.config.loader import VidfeedConfig, get_config
from vidfeed.navigation.scheduler import AsyncioScheduler, Scheduler, TimerHandle
from vidfeed.store import PlaylistStore
from vidfeed.utils.tasks import fire_and_forget

logger = logging.getLogger(__name__)


class ProgressTracker:
    """Progress persistence for one mounted player.

    Args:
        video_id: Video whose position is tracked.
        initial_timestamp: Position already stored for the video.
        store: Persistence collaborator. Without one, saves are skipped.
        scheduler: Timer source for the debounce (defaults to asyncio).
        config: Settings supplying debounce interval and minimum delta.
        on_saved: Called with the persisted whole-second position.
    """

    def __init__(
        self,
        video_id: int,
        initial_timestamp: float = 0,
        store: PlaylistStore | None = None,
        *,
        scheduler: Scheduler | None = None,
        config: VidfeedConfig | None = None,
        on_saved: Callable[[int], None] | None = None,
    ) -> None:
        config = config or get_config()
        self.video_id = video_id
        self.store = store
        self.scheduler = scheduler or AsyncioScheduler()
        self.debounce_seconds = config.progress_debounce_seconds
        self.min_delta_seconds = config.progress_min_delta_seconds
        self.on_saved = on_saved
        self.last_saved: float = float(initial_timestamp or 0)
        self._timer: TimerHandle | None = None
        self._closed = False

    @property
    def has_pending_save(self) -> bool:
        return self._timer is not None

    def update_progress(self, seconds: float) -> None:
        """Record a progress report; saves after the player goes quiet."""
        if self._closed:
            return
        self._cancel_timer()
        self._timer = self.scheduler.call_later(
            self.debounce_seconds, lambda: self._on_debounce(seconds)
        )

    def _on_debounce(self, seconds: float) -> None:
        self._timer = None
        if not self._closed:
            self.save_progress(seconds)

    def save_progress(self, seconds: float) -> asyncio.Task | None:
        """Persist a position if it moved far enough from the last save.

        Returns:
            The background task performing the write, or None if the save
            was gated (or there is nothing to save to).
        """
        if self._closed or self.store is None:
            return None
        if abs(seconds - self.last_saved) < self.min_delta_seconds:
            return None

        previous = self.last_saved
        target = math.floor(seconds)
        # Gate follow-up calls against the in-flight value
        self.last_saved = target
        task = fire_and_forget(
            self._persist(target, previous),
            operation=f"update_progress(video={self.video_id})",
        )
        if task is None:
            # Write was dropped, nothing to gate against
            self.last_saved = previous
        return task

    async def _persist(self, target: int, previous: float) -> None:
        try:
            await self.store.update_progress(self.video_id, target)
        except Exception:
            if self.last_saved == target:
                self.last_saved = previous
            raise
        logger.debug(f"Saved progress for video {self.video_id}: {target}s")
        if self.on_saved is not None:
            self.on_saved(target)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def close(self) -> None:
        """Cancel any pending debounced save; further calls are ignored."""
        self._cancel_timer()
        self._closed = True


def track(
    video_id: int,
    initial_timestamp: float = 0,
    store: PlaylistStore | None = None,
    **kwargs,
) -> ProgressTracker:
    """Start tracking progress for a video.

    Returns:
        ProgressTracker exposing update_progress() and save_progress().
    """
    return ProgressTracker(video_id, initial_timestamp, store, **kwargs)
