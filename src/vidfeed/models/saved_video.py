"""
Saved video records as supplied by the library store.

``duration`` and ``aspect_ratio`` come from best-effort scraping of
third-party metadata, so both are hints: the player may override the
aspect ratio and the sequencer skips its fallback timer without a
positive duration.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator


class AspectRatio(str, Enum):
    """Stored layout preference for a video."""

    AUTO = "auto"
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"
    SQUARE = "square"


class Tag(BaseModel):
    """User-defined label attached to videos and playlists."""

    id: int
    name: str
    color: str = "#3b82f6"


class SavedVideo(BaseModel):
    """A video link saved by the user."""

    id: int
    url: str
    title: str = "Video"
    thumbnail_url: str | None = None
    author_name: str | None = None
    duration: int | None = Field(None, description="Length in seconds (hint)")
    last_timestamp: float | None = Field(0, description="Saved resume position in seconds")
    aspect_ratio: AspectRatio = AspectRatio.AUTO
    notes: str | None = None
    embed_html: str | None = Field(
        None, description="Pre-fetched oEmbed HTML (Instagram only)"
    )
    tags: list[Tag] = Field(default_factory=list)

    @field_validator("aspect_ratio", mode="before")
    @classmethod
    def coerce_aspect_ratio(cls, v: Any) -> Any:
        """Unknown or empty aspect ratios fall back to auto."""
        if v is None or v == "":
            return AspectRatio.AUTO
        if isinstance(v, str) and v not in {a.value for a in AspectRatio}:
            return AspectRatio.AUTO
        return v

    @field_validator("duration", mode="before")
    @classmethod
    def coerce_duration(cls, v: Any) -> Any:
        """Scraped durations may arrive as floats or numeric strings."""
        if v is None or v == "":
            return None
        try:
            return int(float(v))
        except (TypeError, ValueError):
            return None

    @property
    def resume_position(self) -> float:
        """Resume position in seconds (0 when never watched)."""
        return float(self.last_timestamp or 0)

    @property
    def has_known_duration(self) -> bool:
        return self.duration is not None and self.duration > 0


class PlaylistEntry(BaseModel):
    """A saved video at a position in an ordered playlist."""

    video: SavedVideo
    position: int
    has_error: bool = False
    error_reason: str = ""

    @property
    def video_id(self) -> int:
        return self.video.id
