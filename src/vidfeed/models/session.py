"""
Ephemeral playback state owned by a mounted playlist feed.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class FeedState(Enum):
    """Lifecycle of a playlist feed."""

    NOT_STARTED = "not_started"
    PLAYING = "playing"
    ENDED = "ended"


@dataclass
class PlaybackSession:
    """Per-feed playback session.

    Destroyed with the feed; nothing here is persisted.
    """

    video_id: int | None = None
    active_index: int = 0
    has_started: bool = False
    has_errored: bool = False

    def to_dict(self) -> dict:
        return {
            "video_id": self.video_id,
            "active_index": self.active_index,
            "has_started": self.has_started,
            "has_errored": self.has_errored,
        }
