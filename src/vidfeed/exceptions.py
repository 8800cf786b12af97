"""
Custom exceptions for vidfeed.

All vidfeed exceptions inherit from VidfeedError for easy catching.

URL classification never raises: unknown or malformed input degrades to
an ``other`` source instead of an exception.
"""

from __future__ import annotations

from typing import Any


class VidfeedError(Exception):
    """Base exception for all vidfeed errors."""

    pass


class PersistenceError(VidfeedError):
    """A write or read against the playlist/video store failed.

    The playback core treats these as non-fatal: they are logged and
    swallowed by the fire-and-forget helpers, and local state stays as it
    was optimistically updated.

    Attributes:
        message: Human-readable error message
        operation: Store operation that failed (e.g., "update_progress")
        details: Additional diagnostic information
    """

    def __init__(
        self,
        message: str,
        *,
        operation: str = "unknown",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.operation = operation
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a structured dict for MCP error responses."""
        result: dict[str, Any] = {
            "type": self.__class__.__name__,
            "message": self.message,
            "operation": self.operation,
        }
        if self.details:
            result["details"] = self.details
        return result


class PlaylistNotFoundError(PersistenceError):
    """Referenced playlist does not exist."""

    def __init__(self, playlist_id: int, *, operation: str = "unknown"):
        super().__init__(
            f"Playlist not found: {playlist_id}",
            operation=operation,
            details={"playlist_id": playlist_id},
        )
        self.playlist_id = playlist_id


class VideoNotFoundError(PersistenceError):
    """Referenced video does not exist."""

    def __init__(self, video_id: int, *, operation: str = "unknown"):
        super().__init__(
            f"Video not found: {video_id}",
            operation=operation,
            details={"video_id": video_id},
        )
        self.video_id = video_id


class EmbedUnavailableError(VidfeedError):
    """A third-party embed script could not be loaded.

    Raised by EmbedScriptLoader implementations. The Instagram embed
    service catches it and leaves the placeholder in place; processing is
    retried on the next mount.
    """

    def __init__(self, message: str, *, script_url: str = ""):
        super().__init__(message)
        self.message = message
        self.script_url = script_url


class PlaybackError(VidfeedError):
    """An embed adapter reported that a video failed to play.

    Recorded per playlist entry by the sequencer. It is never raised out of
    a feed; the user gets a manual skip instead.
    """

    def __init__(self, video_id: int, reason: str = ""):
        message = f"Playback failed for video {video_id}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.video_id = video_id
        self.reason = reason

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.__class__.__name__,
            "video_id": self.video_id,
            "reason": self.reason,
        }


class MetadataError(VidfeedError):
    """Fetching third-party metadata (oEmbed, page HTML) failed."""

    def __init__(self, message: str, *, url: str = "", status: int | None = None):
        super().__init__(message)
        self.message = message
        self.url = url
        self.status = status
