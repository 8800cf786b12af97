"""
Effective aspect ratio for laying out a player.

A stored aspect ratio other than ``auto`` always wins. For ``auto`` the
layout is guessed from the platform and URL: short-form platforms and
Facebook Reels are vertical, everything else is horizontal.
"""

from __future__ import annotations

from urllib.parse import urlparse

from vidfeed.models.saved_video import AspectRatio, SavedVideo
from vidfeed.models.video_source import Platform, VideoSource
from vidfeed.urls import classify

_VERTICAL_PLATFORMS = frozenset(
    [Platform.TIKTOK, Platform.YOUTUBE_SHORTS, Platform.INSTAGRAM]
)
_FACEBOOK_REEL_MARKERS = ("/reel/", "/reels/", "/share/r/")


def is_facebook_reel(url: str) -> bool:
    """Check if a Facebook URL points at a Reel (always vertical)."""
    if any(marker in url for marker in _FACEBOOK_REEL_MARKERS):
        return True
    try:
        host = urlparse(url).hostname or ""
    except ValueError:
        return False
    return host == "fb.watch" or host.endswith(".fb.watch")


def effective_aspect_ratio(
    source: VideoSource,
    stored: AspectRatio | str = AspectRatio.AUTO,
) -> AspectRatio:
    """Resolve the aspect ratio a player should be laid out with.

    Args:
        source: Classified source of the video.
        stored: Aspect ratio saved on the record (``auto`` means "guess").

    Returns:
        The stored ratio if it is not ``auto``, otherwise VERTICAL or
        HORIZONTAL from platform heuristics.
    """
    stored = AspectRatio(stored) if stored else AspectRatio.AUTO
    if stored is not AspectRatio.AUTO:
        return stored

    if source.kind in _VERTICAL_PLATFORMS:
        return AspectRatio.VERTICAL
    if source.kind is Platform.FACEBOOK and is_facebook_reel(source.canonical_url):
        return AspectRatio.VERTICAL
    return AspectRatio.HORIZONTAL


def video_aspect_ratio(video: SavedVideo, source: VideoSource | None = None) -> AspectRatio:
    """Effective aspect ratio of a saved video record."""
    return effective_aspect_ratio(source or classify(video.url), video.aspect_ratio)


def is_vertical(video: SavedVideo, source: VideoSource | None = None) -> bool:
    return video_aspect_ratio(video, source) is AspectRatio.VERTICAL
