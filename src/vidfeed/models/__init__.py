"""
Data models for vidfeed.

Provides Pydantic models for URL classification, saved videos and embed
specifications, and dataclasses for feed playback state.
"""

from vidfeed.models.embed import (
    CustomEmbed,
    EmbedContext,
    EmbedSpec,
    GenericMediaEmbed,
    IframeEmbed,
    ScaleHint,
)
from vidfeed.models.playlist import Playlist
from vidfeed.models.saved_video import AspectRatio, PlaylistEntry, SavedVideo, Tag
from vidfeed.models.session import FeedState, PlaybackSession
from vidfeed.models.video_source import Platform, VideoSource

__all__ = [
    "AspectRatio",
    "CustomEmbed",
    "EmbedContext",
    "EmbedSpec",
    "FeedState",
    "GenericMediaEmbed",
    "IframeEmbed",
    "PlaybackSession",
    "Playlist",
    "Platform",
    "PlaylistEntry",
    "SavedVideo",
    "ScaleHint",
    "Tag",
    "VideoSource",
]
