"""
VideoSource Pydantic model: the normalized result of URL classification.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Platform(str, Enum):
    """Video hosting platforms the embed engine knows how to play."""

    YOUTUBE = "youtube"
    YOUTUBE_SHORTS = "youtube-shorts"
    TIKTOK = "tiktok"
    VIMEO = "vimeo"
    FACEBOOK = "facebook"
    INSTAGRAM = "instagram"
    PINTEREST = "pinterest"
    TWITCH = "twitch"
    OTHER = "other"

    @property
    def is_youtube(self) -> bool:
        return self in (Platform.YOUTUBE, Platform.YOUTUBE_SHORTS)


class VideoSource(BaseModel):
    """Normalized platform + id classification of a raw URL.

    ``external_id`` is present for every kind except facebook, other, and
    pinterest/twitch URLs whose id could not be extracted (those degrade to
    the ``other`` kind). For Instagram it is the shortcode, kept for display
    only.
    """

    model_config = ConfigDict(frozen=True)

    kind: Platform = Field(..., description="Detected platform")
    external_id: str | None = Field(None, description="Platform video id, if any")
    subtype: str | None = Field(None, description="Instagram post type (reel/tv/post)")
    canonical_url: str = Field("", description="Normalized URL (scheme added)")

    @property
    def is_known_platform(self) -> bool:
        """Check if the URL belongs to a platform with a dedicated embed."""
        return self.kind is not Platform.OTHER

    def __str__(self) -> str:
        if self.external_id:
            return f"{self.kind.value}:{self.external_id}"
        return f"{self.kind.value}:{self.canonical_url}"
