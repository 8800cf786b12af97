"""
Sqlite-backed video library implementing the PlaylistStore interface.

Repository calls are synchronous, so every public coroutine hands the
work to a worker thread (asyncio.to_thread) and converts rows to models.
Database failures surface as PersistenceError; missing rows as
VideoNotFoundError or PlaylistNotFoundError.
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from typing import Any, Callable, TypeVar

from vidfeed.db.connection import Database
from vidfeed.db.repos import PlaylistRepository, TagRepository, VideoRepository
from vidfeed.exceptions import PersistenceError, PlaylistNotFoundError, VideoNotFoundError
from vidfeed.models.playlist import Playlist
from vidfeed.models.saved_video import SavedVideo, Tag
from vidfeed.urls import classify

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LibraryStore:
    """Saved videos, tags and playlists in one sqlite database.

    Args:
        db: Migrated Database. Defaults to the process-wide singleton.
    """

    def __init__(self, db: Database | None = None) -> None:
        if db is None:
            from vidfeed.db import get_database

            db = get_database()
        self.db = db
        self.videos = VideoRepository(db)
        self.tags = TagRepository(db)
        self.playlists = PlaylistRepository(db)

    async def _run(self, operation: str, fn: Callable[..., T], *args: Any) -> T:
        try:
            return await asyncio.to_thread(fn, *args)
        except (sqlite3.Error, ValueError) as e:
            raise PersistenceError(str(e), operation=operation) from e

    # ------------------------------------------------------------------
    # Row conversion (runs in worker threads)
    # ------------------------------------------------------------------

    def _video_from_row(self, row: dict[str, Any], tags: list[dict[str, Any]]) -> SavedVideo:
        return SavedVideo(**row, tags=[Tag(**t) for t in tags])

    def _load_video(self, video_id: int) -> SavedVideo | None:
        row = self.videos.get(video_id)
        if row is None:
            return None
        return self._video_from_row(row, self.tags.get_for_video(video_id))

    def _load_videos(self, rows: list[dict[str, Any]]) -> list[SavedVideo]:
        tags = self.tags.get_for_videos([row["id"] for row in rows])
        return [self._video_from_row(row, tags[row["id"]]) for row in rows]

    def _load_playlist(self, playlist_id: int) -> Playlist | None:
        row = self.playlists.get(playlist_id)
        if row is None:
            return None
        return Playlist(
            **row,
            tags=[Tag(**t) for t in self.playlists.get_tags(playlist_id)],
            video_count=self.playlists.count_videos(playlist_id),
        )

    def _require_playlist(self, playlist_id: int, operation: str) -> None:
        if self.playlists.get(playlist_id) is None:
            raise PlaylistNotFoundError(playlist_id, operation=operation)

    def _require_video(self, video_id: int, operation: str) -> None:
        if self.videos.get(video_id) is None:
            raise VideoNotFoundError(video_id, operation=operation)

    # ------------------------------------------------------------------
    # PlaylistStore
    # ------------------------------------------------------------------

    async def update_progress(self, video_id: int, timestamp: float) -> None:
        """Store a video's resume position (whole seconds).

        Raises:
            PersistenceError: If timestamp is negative.
            VideoNotFoundError: If the video does not exist.
        """
        if timestamp < 0:
            raise PersistenceError(
                f"timestamp must be >= 0, got {timestamp}",
                operation="update_progress",
                details={"video_id": video_id},
            )
        updated = await self._run(
            "update_progress", self.videos.update_timestamp, video_id, timestamp
        )
        if not updated:
            raise VideoNotFoundError(video_id, operation="update_progress")

    async def reorder_playlist(self, playlist_id: int, ordered_video_ids: list[int]) -> None:
        def work() -> int:
            self._require_playlist(playlist_id, "reorder_playlist")
            return self.playlists.reorder(playlist_id, list(ordered_video_ids))

        updated = await self._run("reorder_playlist", work)
        logger.debug(f"Reordered playlist {playlist_id} ({updated} positions written)")

    async def sync_playlist(self, playlist_id: int) -> int:
        def work() -> int:
            self._require_playlist(playlist_id, "sync_playlist")
            return self.playlists.sync(playlist_id)

        added = await self._run("sync_playlist", work)
        if added:
            logger.info(f"Added {added} tagged video(s) to playlist {playlist_id}")
        return added

    async def list_playlist_videos(self, playlist_id: int) -> list[SavedVideo]:
        def work() -> list[SavedVideo]:
            self._require_playlist(playlist_id, "list_playlist_videos")
            return self._load_videos(self.playlists.get_videos(playlist_id))

        return await self._run("list_playlist_videos", work)

    # ------------------------------------------------------------------
    # Videos and tags
    # ------------------------------------------------------------------

    async def add_video(self, url: str, **metadata: Any) -> SavedVideo:
        """Save a video URL with optional metadata (title, duration, ...)."""
        source = classify(url)

        def work() -> SavedVideo:
            video_id = self.videos.insert(url, platform=source.kind.value, **metadata)
            return self._load_video(video_id)

        video = await self._run("add_video", work)
        logger.info(f"Saved {source.kind.value} video {video.id}: {url}")
        return video

    async def get_video(self, video_id: int) -> SavedVideo:
        video = await self._run("get_video", self._load_video, video_id)
        if video is None:
            raise VideoNotFoundError(video_id, operation="get_video")
        return video

    async def find_by_url(self, url: str) -> SavedVideo | None:
        def work() -> SavedVideo | None:
            row = self.videos.get_by_url(url)
            return self._load_video(row["id"]) if row else None

        return await self._run("find_by_url", work)

    async def list_videos(self, *, tag_id: int | None = None) -> list[SavedVideo]:
        def work() -> list[SavedVideo]:
            return self._load_videos(self.videos.list_all(tag_id=tag_id))

        return await self._run("list_videos", work)

    async def create_tag(self, name: str, color: str | None = None) -> Tag:
        def work() -> Tag:
            existing = self.tags.get_by_name(name)
            if existing is not None:
                return Tag(**existing)
            return Tag(**self.tags.get(self.tags.insert(name, color)))

        return await self._run("create_tag", work)

    async def tag_video(self, video_id: int, tag_id: int) -> bool:
        def work() -> bool:
            self._require_video(video_id, "tag_video")
            return self.tags.tag_video(video_id, tag_id)

        return await self._run("tag_video", work)

    # ------------------------------------------------------------------
    # Playlists
    # ------------------------------------------------------------------

    async def create_playlist(
        self,
        name: str,
        tag_ids: list[int] | None = None,
        auto_add: bool = False,
        *,
        description: str | None = None,
    ) -> Playlist:
        """Create a playlist, linking tags and syncing them in if auto_add."""

        def work() -> Playlist:
            playlist_id = self.playlists.insert(name, description=description, auto_add=auto_add)
            for tag_id in tag_ids or []:
                self.playlists.add_tag(playlist_id, tag_id)
            if auto_add and tag_ids:
                self.playlists.sync(playlist_id)
            return self._load_playlist(playlist_id)

        playlist = await self._run("create_playlist", work)
        logger.info(f"Created playlist {playlist.id} ({playlist.video_count} videos)")
        return playlist

    async def get_playlist(self, playlist_id: int) -> Playlist:
        playlist = await self._run("get_playlist", self._load_playlist, playlist_id)
        if playlist is None:
            raise PlaylistNotFoundError(playlist_id, operation="get_playlist")
        return playlist

    async def list_playlists(self) -> list[Playlist]:
        def work() -> list[Playlist]:
            return [self._load_playlist(row["id"]) for row in self.playlists.list_all()]

        return await self._run("list_playlists", work)

    async def add_tag_to_playlist(self, playlist_id: int, tag_id: int) -> int:
        """Link a tag; re-syncs when the playlist auto-adds.

        Returns:
            Number of videos added by the re-sync.
        """

        def work() -> int:
            row = self.playlists.get(playlist_id)
            if row is None:
                raise PlaylistNotFoundError(playlist_id, operation="add_tag_to_playlist")
            self.playlists.add_tag(playlist_id, tag_id)
            return self.playlists.sync(playlist_id) if row["auto_add"] else 0

        return await self._run("add_tag_to_playlist", work)

    async def remove_tag_from_playlist(self, playlist_id: int, tag_id: int) -> bool:
        def work() -> bool:
            self._require_playlist(playlist_id, "remove_tag_from_playlist")
            return self.playlists.remove_tag(playlist_id, tag_id)

        return await self._run("remove_tag_from_playlist", work)

    async def add_video_to_playlist(self, playlist_id: int, video_id: int) -> bool:
        """Append a video. Returns False if it was already a member."""

        def work() -> bool:
            self._require_playlist(playlist_id, "add_video_to_playlist")
            self._require_video(video_id, "add_video_to_playlist")
            return self.playlists.add_video(playlist_id, video_id)

        return await self._run("add_video_to_playlist", work)

    async def remove_video_from_playlist(self, playlist_id: int, video_id: int) -> bool:
        def work() -> bool:
            self._require_playlist(playlist_id, "remove_video_from_playlist")
            return self.playlists.remove_video(playlist_id, video_id)

        return await self._run("remove_video_from_playlist", work)
