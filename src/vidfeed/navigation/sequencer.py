"""
Playlist sequencing: which entry plays, which are pre-mounted, and when
the feed moves on.

A PlaylistSequencer owns the playback session of one mounted feed:

- NOT_STARTED until the user picks an entry, then PLAYING, then ENDED once
  the last entry finishes. Selecting any entry from ENDED plays again.
- Entries within ``buffer_window`` of the active index get a mounted
  (muted, inactive) player; the rest render as thumbnails.
- Generic media players report "ended" and advance immediately. Iframe and
  Instagram players cannot, so a fallback timer of duration + buffer is
  armed for them when a positive duration is known.
- A player error flags its entry and offers skip(). It never advances on
  its own.

Reorders and tag syncs are applied locally first and persisted through the
PlaylistStore in the background.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable

from vidfeed.config.loader import VidfeedConfig, get_config
from vidfeed.embed.adapters import can_report_ended, fallback_buffer, select_adapter_for_video
from vidfeed.embed.aspect import video_aspect_ratio
from vidfeed.embed.instagram import InstagramEmbedService
from vidfeed.exceptions import PlaybackError
from vidfeed.models.embed import EmbedSpec, GenericMediaEmbed
from vidfeed.models.saved_video import AspectRatio, PlaylistEntry, SavedVideo
from vidfeed.models.session import FeedState, PlaybackSession
from vidfeed.models.video_source import Platform, VideoSource
from vidfeed.navigation.progress import ProgressTracker
from vidfeed.navigation.reorder import move_item, translate_index
from vidfeed.navigation.scheduler import AsyncioScheduler, Scheduler, TimerHandle
from vidfeed.store import PlaylistStore
from vidfeed.urls import classify
from vidfeed.utils.tasks import fire_and_forget

logger = logging.getLogger(__name__)


@dataclass
class EntryView:
    """Render instructions for one playlist entry."""

    index: int
    video: SavedVideo
    source: VideoSource
    is_active: bool
    is_mounted: bool
    aspect_ratio: AspectRatio
    embed: EmbedSpec | None = None
    has_error: bool = False
    error_reason: str = ""

    @property
    def thumbnail_url(self) -> str | None:
        return self.video.thumbnail_url

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "video_id": self.video.id,
            "title": self.video.title,
            "url": self.video.url,
            "platform": self.source.kind.value,
            "is_active": self.is_active,
            "is_mounted": self.is_mounted,
            "aspect_ratio": self.aspect_ratio.value,
            "thumbnail_url": self.thumbnail_url,
            "embed": self.embed.model_dump() if self.embed is not None else None,
            "has_error": self.has_error,
            "error_reason": self.error_reason,
        }


class PlaylistSequencer:
    """State machine for one playlist feed.

    Args:
        playlist_id: Playlist being played (used for persistence calls).
        videos: Entries in playlist order.
        store: Persistence collaborator. Without one, nothing is persisted.
        scheduler: Timer source for fallback and debounce timers.
        config: Settings (buffer window, fallback buffers, debounce).
        embed_service: Instagram embed processor, run after Instagram
            entries are mounted.
        parent_domain: Embedding host passed to adapters.
        on_advance: Called with (index, video) whenever the active entry
            changes.
        on_state_change: Called with the new FeedState on transitions.
        repeat_playlist: Wrap from the last entry back to the first instead
            of ending the feed.
    """

    def __init__(
        self,
        playlist_id: int,
        videos: list[SavedVideo],
        store: PlaylistStore | None = None,
        *,
        scheduler: Scheduler | None = None,
        config: VidfeedConfig | None = None,
        embed_service: InstagramEmbedService | None = None,
        parent_domain: str | None = None,
        on_advance: Callable[[int, SavedVideo], None] | None = None,
        on_state_change: Callable[[FeedState], None] | None = None,
        repeat_playlist: bool = False,
    ) -> None:
        self.playlist_id = playlist_id
        self.store = store
        self.scheduler = scheduler or AsyncioScheduler()
        self.config = config or get_config()
        self.embed_service = embed_service
        self.parent_domain = parent_domain
        self.on_advance = on_advance
        self.on_state_change = on_state_change
        self.repeat_playlist = repeat_playlist

        self._videos: list[SavedVideo] = list(videos)
        self._sources: dict[str, VideoSource] = {}
        self._errors: dict[int, PlaybackError] = {}
        self._state = FeedState.NOT_STARTED
        self.session = PlaybackSession(
            video_id=self._videos[0].id if self._videos else None,
        )

        self._timer: TimerHandle | None = None
        self._timer_generation = 0
        self._tracker: ProgressTracker | None = None
        self._closed = False

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def state(self) -> FeedState:
        return self._state

    @property
    def videos(self) -> list[SavedVideo]:
        return list(self._videos)

    @property
    def active_index(self) -> int:
        return self.session.active_index

    @property
    def active_video(self) -> SavedVideo | None:
        if 0 <= self.session.active_index < len(self._videos):
            return self._videos[self.session.active_index]
        return None

    @property
    def has_fallback_timer(self) -> bool:
        return self._timer is not None

    @property
    def progress_tracker(self) -> ProgressTracker | None:
        """Tracker of the active generic media entry, if any."""
        return self._tracker

    @property
    def is_closed(self) -> bool:
        return self._closed

    def has_error(self, index: int) -> bool:
        if not 0 <= index < len(self._videos):
            return False
        return self._videos[index].id in self._errors

    def index_of(self, video_id: int) -> int | None:
        for i, video in enumerate(self._videos):
            if video.id == video_id:
                return i
        return None

    def source_of(self, video: SavedVideo) -> VideoSource:
        source = self._sources.get(video.url)
        if source is None:
            source = classify(video.url)
            self._sources[video.url] = source
        return source

    def window(self) -> list[int]:
        """Indexes currently eligible to mount a player."""
        if not self._videos:
            return []
        active = self.session.active_index
        width = self.config.buffer_window
        lo = max(0, active - width)
        hi = min(len(self._videos) - 1, active + width)
        return list(range(lo, hi + 1))

    def is_mounted(self, index: int) -> bool:
        if not 0 <= index < len(self._videos):
            return False
        return abs(index - self.session.active_index) <= self.config.buffer_window

    def render(self, index: int) -> EntryView:
        """Describe how the entry at ``index`` should be rendered.

        Mounted entries get an embed; only the active one is interactive,
        and it autoplays only once the feed has started.

        Raises:
            IndexError: If index is out of range.
        """
        if not 0 <= index < len(self._videos):
            raise IndexError(f"index {index} out of range for {len(self._videos)} entries")
        video = self._videos[index]
        source = self.source_of(video)
        is_active = index == self.session.active_index
        mounted = self.is_mounted(index)
        error = self._errors.get(video.id)

        embed = None
        if mounted:
            embed = self._build_embed(video, source, is_active=is_active)

        return EntryView(
            index=index,
            video=video,
            source=source,
            is_active=is_active,
            is_mounted=mounted,
            aspect_ratio=video_aspect_ratio(video, source),
            embed=embed,
            has_error=error is not None,
            error_reason=error.reason if error is not None else "",
        )

    def render_all(self) -> list[EntryView]:
        return [self.render(i) for i in range(len(self._videos))]

    def entries(self) -> list[PlaylistEntry]:
        """Current order as positioned entries with their error flags."""
        result = []
        for position, video in enumerate(self._videos):
            error = self._errors.get(video.id)
            result.append(
                PlaylistEntry(
                    video=video,
                    position=position,
                    has_error=error is not None,
                    error_reason=error.reason if error is not None else "",
                )
            )
        return result

    def _build_embed(self, video: SavedVideo, source: VideoSource, *, is_active: bool) -> EmbedSpec:
        return select_adapter_for_video(
            video,
            is_active=is_active,
            autoplay=self.session.has_started,
            source=source,
            parent_domain=self.parent_domain,
            config=self.config,
        )

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def start(self, index: int = 0) -> None:
        """Start playback at ``index`` (same as selecting it)."""
        self.select(index)

    def select(self, index: int) -> None:
        """Make the entry at ``index`` active and start playing it.

        Clears the entry's error flag.

        Raises:
            IndexError: If index is out of range.
        """
        if self._closed:
            return
        if not 0 <= index < len(self._videos):
            raise IndexError(f"index {index} out of range for {len(self._videos)} entries")

        video = self._videos[index]
        self._errors.pop(video.id, None)
        self.session.active_index = index
        self.session.video_id = video.id
        self.session.has_started = True
        self.session.has_errored = False
        self._set_state(FeedState.PLAYING)
        self._activate()

        if self.on_advance is not None:
            self.on_advance(index, video)

    def next(self) -> bool:
        """Advance to the following entry.

        Returns:
            True if another entry became active, False if the feed ended
            (or had not started at the last entry). With repeat_playlist the
            last entry wraps to the first.
        """
        if self._closed or not self._videos:
            return False
        target = self.session.active_index + 1
        if target >= len(self._videos) and self.repeat_playlist and self.session.has_started:
            target = 0
        if target < len(self._videos):
            self.select(target)
            return True
        if self.session.has_started:
            self._end()
        return False

    def previous(self) -> bool:
        if self._closed or self.session.active_index <= 0:
            return False
        self.select(self.session.active_index - 1)
        return True

    def skip(self) -> bool:
        """Move past the active entry (the affordance offered on errors)."""
        video = self.active_video
        if video is not None and video.id in self._errors:
            logger.info(f"Skipping failed video {video.id} in playlist {self.playlist_id}")
        return self.next()

    def repeat(self) -> None:
        """Play the playlist again from the first entry."""
        if self._videos:
            self.select(0)

    def _end(self) -> None:
        self._cancel_fallback()
        logger.info(f"Playlist {self.playlist_id} finished")
        self._set_state(FeedState.ENDED)

    # ------------------------------------------------------------------
    # Player events
    # ------------------------------------------------------------------

    def _is_current(self, video_id: int) -> bool:
        return (
            not self._closed
            and self._state is FeedState.PLAYING
            and self.session.video_id == video_id
        )

    def handle_ended(self, video_id: int) -> bool:
        """React to an "ended" event from a player.

        Events from players that are no longer active are ignored.

        Returns:
            True if the event advanced the feed.
        """
        if not self._is_current(video_id):
            logger.debug(f"Ignoring stale ended event for video {video_id}")
            return False
        self.next()
        return True

    def handle_error(self, video_id: int, reason: str = "") -> PlaybackError | None:
        """Flag an entry whose player failed.

        The feed stays on the entry; the caller offers skip().

        Returns:
            The recorded PlaybackError, or None for unknown videos.
        """
        if self._closed or self.index_of(video_id) is None:
            return None
        error = PlaybackError(video_id, reason)
        self._errors[video_id] = error
        logger.info(f"{error} (playlist {self.playlist_id})")

        if self.session.video_id == video_id:
            self.session.has_errored = True
            self._cancel_fallback()
        return error

    def handle_progress(self, video_id: int, seconds: float) -> None:
        """Forward a progress report from the active generic player."""
        if self._tracker is not None and self._is_current(video_id):
            self._tracker.update_progress(seconds)

    def handle_pause(self, video_id: int, seconds: float) -> None:
        """Save immediately when the user pauses (still delta-gated)."""
        if self._tracker is not None and self._is_current(video_id):
            self._tracker.save_progress(seconds)

    # ------------------------------------------------------------------
    # Playlist changes
    # ------------------------------------------------------------------

    def reorder(self, old_index: int, new_index: int) -> asyncio.Task | None:
        """Move an entry and keep the same video active.

        The new order applies immediately; persisting it runs in the
        background.

        Raises:
            IndexError: If either index is out of range.

        Returns:
            The background persistence task, if one was scheduled.
        """
        if self._closed:
            return None
        self._videos = move_item(self._videos, old_index, new_index)
        if old_index == new_index:
            return None

        previous_active = self.session.active_index
        self.session.active_index = translate_index(previous_active, old_index, new_index)
        if self.session.active_index != previous_active and self._state is FeedState.PLAYING:
            self._arm_fallback()
        self._process_instagram()

        if self.store is None:
            return None
        ordered_ids = [v.id for v in self._videos]
        return fire_and_forget(
            self.store.reorder_playlist(self.playlist_id, ordered_ids),
            operation=f"reorder_playlist(playlist={self.playlist_id})",
        )

    def set_videos(self, videos: list[SavedVideo]) -> None:
        """Replace the entries, e.g. after a sync or a context change.

        The active video stays active if it is still present; otherwise
        the active index is clamped to the new list.
        """
        if self._closed:
            return
        self._videos = list(videos)
        ids = {v.id for v in self._videos}
        self._errors = {vid: err for vid, err in self._errors.items() if vid in ids}

        if not self._videos:
            self._cancel_fallback()
            self._close_tracker()
            self.session.active_index = 0
            self.session.video_id = None
            return

        previous_id = self.session.video_id
        index = self.index_of(previous_id) if previous_id is not None else None
        if index is None:
            index = min(self.session.active_index, len(self._videos) - 1)
        self.session.active_index = index
        current = self._videos[index]
        self.session.video_id = current.id
        self.session.has_errored = current.id in self._errors

        if current.id != previous_id and self._state is FeedState.PLAYING:
            self._activate()
            if self.on_advance is not None:
                self.on_advance(index, current)

    async def sync(self) -> int:
        """Pull tag-matched videos into the playlist and reload entries.

        Returns:
            Number of videos added (0 when nothing changed or the store
            failed; failures are logged).
        """
        if self.store is None or self._closed:
            return 0
        try:
            added = await self.store.sync_playlist(self.playlist_id)
            if added:
                videos = await self.store.list_playlist_videos(self.playlist_id)
                self.set_videos(videos)
        except Exception:
            logger.warning(f"Sync failed for playlist {self.playlist_id}", exc_info=True)
            return 0
        if added:
            logger.info(f"Synced {added} video(s) into playlist {self.playlist_id}")
        return added

    # ------------------------------------------------------------------
    # Timers and per-entry resources
    # ------------------------------------------------------------------

    def _activate(self) -> None:
        """Set up the active entry: tracker, fallback timer, embeds."""
        video = self.active_video
        if video is None:
            return
        if self._tracker is None or self._tracker.video_id != video.id:
            self._close_tracker()
            spec = self._build_embed(video, self.source_of(video), is_active=True)
            if isinstance(spec, GenericMediaEmbed):
                self._tracker = ProgressTracker(
                    video.id,
                    video.resume_position,
                    self.store,
                    scheduler=self.scheduler,
                    config=self.config,
                    on_saved=lambda ts, v=video: setattr(v, "last_timestamp", ts),
                )
        self._arm_fallback()
        self._process_instagram()

    def _arm_fallback(self) -> None:
        self._cancel_fallback()
        if self._state is not FeedState.PLAYING:
            return
        video = self.active_video
        if video is None or not video.has_known_duration or video.id in self._errors:
            return
        source = self.source_of(video)
        spec = self._build_embed(video, source, is_active=True)
        if can_report_ended(spec):
            return

        delay = video.duration + fallback_buffer(source.kind, self.config)
        self._timer_generation += 1
        generation = self._timer_generation
        video_id = video.id
        self._timer = self.scheduler.call_later(
            delay, lambda: self._on_fallback(generation, video_id)
        )
        logger.debug(f"Fallback advance for video {video_id} armed in {delay}s")

    def _on_fallback(self, generation: int, video_id: int) -> None:
        if generation != self._timer_generation:
            return
        self._timer = None
        if not self._is_current(video_id):
            return
        logger.info(f"No ended signal from video {video_id}, advancing after timeout")
        self.next()

    def _cancel_fallback(self) -> None:
        self._timer_generation += 1
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _close_tracker(self) -> None:
        if self._tracker is not None:
            self._tracker.close()
            self._tracker = None

    def _process_instagram(self) -> None:
        if self.embed_service is None:
            return
        mounted = [self._videos[i] for i in self.window()]
        if any(self.source_of(v).kind is Platform.INSTAGRAM for v in mounted):
            fire_and_forget(
                self.embed_service.ensure_processed(),
                operation="instagram_embed_process",
            )

    def _set_state(self, state: FeedState) -> None:
        if state is self._state:
            return
        logger.debug(f"Playlist {self.playlist_id}: {self._state.value} -> {state.value}")
        self._state = state
        if self.on_state_change is not None:
            self.on_state_change(state)

    def close(self) -> None:
        """Tear down the feed: cancel timers and pending progress saves."""
        if self._closed:
            return
        self._cancel_fallback()
        self._close_tracker()
        self._closed = True
