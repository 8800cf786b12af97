"""
Interface to the persistence collaborator.

The playback core never owns storage. It reports progress, reorders and
tag syncs to a PlaylistStore, and reads playlist membership back from it.
LibraryStore (vidfeed.library) is the bundled sqlite implementation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from vidfeed.models.saved_video import SavedVideo


@runtime_checkable
class PlaylistStore(Protocol):
    """Async persistence operations used by the playback core."""

    async def update_progress(self, video_id: int, timestamp: float) -> None:
        """Persist the resume position of a video (whole seconds)."""
        ...

    async def reorder_playlist(self, playlist_id: int, ordered_video_ids: list[int]) -> None:
        """Persist a playlist's full order; position = index in the list."""
        ...

    async def sync_playlist(self, playlist_id: int) -> int:
        """Union tagged videos into the playlist; returns memberships added."""
        ...

    async def list_playlist_videos(self, playlist_id: int) -> list[SavedVideo]:
        """Return the playlist's videos in position order."""
        ...
