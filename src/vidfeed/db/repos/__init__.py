"""Repository classes for vidfeed database entities.

Each repository encapsulates CRUD operations and queries for a specific
table or set of related tables. Repositories take a Database instance
and use parameterized queries for all operations.

Usage:
    from vidfeed.db import get_database
    from vidfeed.db.repos import PlaylistRepository, VideoRepository

    db = get_database()
    videos = VideoRepository(db)
    video_id = videos.insert("https://youtu.be/abc123", platform="youtube")

    playlists = PlaylistRepository(db)
    playlist_id = playlists.insert("Watch later")
    playlists.add_video(playlist_id, video_id)
"""

from vidfeed.db.repos.playlists import PlaylistRepository
from vidfeed.db.repos.tags import TagRepository
from vidfeed.db.repos.videos import VideoRepository

__all__ = [
    "PlaylistRepository",
    "TagRepository",
    "VideoRepository",
]
