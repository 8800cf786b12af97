"""
Playlist records as returned by the library store.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from vidfeed.models.saved_video import Tag


class Playlist(BaseModel):
    """An ordered, user-curated list of saved videos."""

    id: int
    name: str
    description: str | None = None
    auto_add: bool = Field(False, description="Pull in videos carrying linked tags on sync")
    tags: list[Tag] = Field(default_factory=list)
    video_count: int = 0
