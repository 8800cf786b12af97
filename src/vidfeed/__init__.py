"""
vidfeed - play saved video links as a continuous feed.

Turns arbitrary video URLs into playable feeds:
1. Classify a URL into platform + id (YouTube, TikTok, Vimeo, ...)
2. Pick an embed: parametric iframe, Instagram embed HTML, or generic media
3. Sequence playlists with pre-mounted neighbors, auto-advance and
   debounced progress saving
"""

__version__ = "0.4.0"

# Config
from vidfeed.config import VidfeedConfig, clear_config_cache, get_config

# Embeds
from vidfeed.embed import (
    InstagramEmbedService,
    effective_aspect_ratio,
    select_adapter,
    select_adapter_for_video,
)

# Exceptions
from vidfeed.exceptions import (
    EmbedUnavailableError,
    MetadataError,
    PersistenceError,
    PlaybackError,
    PlaylistNotFoundError,
    VideoNotFoundError,
    VidfeedError,
)

# Storage
from vidfeed.library import LibraryStore

# Models
from vidfeed.models import (
    AspectRatio,
    EmbedContext,
    FeedState,
    Platform,
    Playlist,
    SavedVideo,
    Tag,
    VideoSource,
)

# Playback
from vidfeed.navigation import PlaylistSequencer, ProgressTracker, track
from vidfeed.store import PlaylistStore

# Classification
from vidfeed.urls import classify, list_supported_platforms

__all__ = [
    "__version__",
    "AspectRatio",
    "EmbedContext",
    "EmbedUnavailableError",
    "FeedState",
    "InstagramEmbedService",
    "LibraryStore",
    "MetadataError",
    "PersistenceError",
    "Platform",
    "PlaybackError",
    "Playlist",
    "PlaylistNotFoundError",
    "PlaylistSequencer",
    "PlaylistStore",
    "ProgressTracker",
    "SavedVideo",
    "Tag",
    "VideoNotFoundError",
    "VideoSource",
    "VidfeedConfig",
    "VidfeedError",
    "classify",
    "clear_config_cache",
    "effective_aspect_ratio",
    "get_config",
    "list_supported_platforms",
    "select_adapter",
    "select_adapter_for_video",
    "track",
]
