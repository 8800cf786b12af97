"""Playlist repository for CRUD operations on playlist-related tables.

Manages playlists, playlist_tags (auto-add rules) and playlist_videos
(ordered membership).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from vidfeed.db.connection import Database


class PlaylistRepository:
    """Repository for playlist operations.

    A playlist is an ordered list of saved videos. Membership lives in the
    playlist_videos junction table, which tracks position for ordering.
    A playlist may also be linked to tags; with auto_add set, sync()
    pulls in every video carrying one of those tags.
    """

    def __init__(self, db: Database) -> None:
        self.db = db

    def insert(
        self,
        name: str,
        *,
        description: str | None = None,
        auto_add: bool = False,
    ) -> int:
        """Insert a new playlist.

        Returns:
            The new playlist's integer id.

        Raises:
            ValueError: If name is blank.
        """
        name = name.strip()
        if not name:
            raise ValueError("playlist name must not be empty")
        cursor = self.db.execute(
            "INSERT INTO playlists (name, description, auto_add) VALUES (?, ?, ?)",
            (name, description, 1 if auto_add else 0),
        )
        self.db.commit()
        return cursor.lastrowid

    def get(self, playlist_id: int) -> dict[str, Any] | None:
        cursor = self.db.execute("SELECT * FROM playlists WHERE id = ?", (playlist_id,))
        row = cursor.fetchone()
        if not row:
            return None
        data = dict(row)
        data["auto_add"] = bool(data["auto_add"])
        return data

    def list_all(self) -> list[dict[str, Any]]:
        """List all playlists with their video counts, newest first."""
        cursor = self.db.execute(
            """
            SELECT p.*, COUNT(pv.video_id) AS video_count
            FROM playlists p
            LEFT JOIN playlist_videos pv ON pv.playlist_id = p.id
            GROUP BY p.id
            ORDER BY p.created_at DESC, p.id DESC
            """
        )
        playlists = []
        for row in cursor.fetchall():
            data = dict(row)
            data["auto_add"] = bool(data["auto_add"])
            playlists.append(data)
        return playlists

    def set_auto_add(self, playlist_id: int, auto_add: bool) -> bool:
        cursor = self.db.execute(
            "UPDATE playlists SET auto_add = ?, updated_at = datetime('now') WHERE id = ?",
            (1 if auto_add else 0, playlist_id),
        )
        self.db.commit()
        return cursor.rowcount > 0

    def delete(self, playlist_id: int) -> bool:
        """Delete a playlist.

        Note: Due to ON DELETE CASCADE, this removes all memberships and
        tag links.
        """
        cursor = self.db.execute("DELETE FROM playlists WHERE id = ?", (playlist_id,))
        self.db.commit()
        return cursor.rowcount > 0

    # ------------------------------------------------------------------
    # Tags
    # ------------------------------------------------------------------

    def add_tag(self, playlist_id: int, tag_id: int) -> bool:
        """Link a tag to a playlist. Returns False if already linked."""
        cursor = self.db.execute(
            "INSERT OR IGNORE INTO playlist_tags (playlist_id, tag_id) VALUES (?, ?)",
            (playlist_id, tag_id),
        )
        self.db.commit()
        return cursor.rowcount > 0

    def remove_tag(self, playlist_id: int, tag_id: int) -> bool:
        """Unlink a tag. Videos already added through it stay."""
        cursor = self.db.execute(
            "DELETE FROM playlist_tags WHERE playlist_id = ? AND tag_id = ?",
            (playlist_id, tag_id),
        )
        self.db.commit()
        return cursor.rowcount > 0

    def get_tags(self, playlist_id: int) -> list[dict[str, Any]]:
        cursor = self.db.execute(
            """
            SELECT t.* FROM tags t
            JOIN playlist_tags pt ON pt.tag_id = t.id
            WHERE pt.playlist_id = ?
            ORDER BY t.name
            """,
            (playlist_id,),
        )
        return [dict(row) for row in cursor.fetchall()]

    # ------------------------------------------------------------------
    # Membership
    # ------------------------------------------------------------------

    def _next_position(self, playlist_id: int) -> int:
        cursor = self.db.execute(
            "SELECT COALESCE(MAX(position), -1) + 1 AS pos FROM playlist_videos WHERE playlist_id = ?",
            (playlist_id,),
        )
        return cursor.fetchone()["pos"]

    def add_video(self, playlist_id: int, video_id: int, position: int | None = None) -> bool:
        """Add a video to a playlist.

        Uses INSERT OR IGNORE to handle duplicate (playlist, video) pairs.

        Args:
            playlist_id: Playlist id.
            video_id: Video id.
            position: Position (0-based). Appends after the last entry if None.

        Returns:
            True if the video was added, False if it was already a member.

        Raises:
            ValueError: If position is negative.
        """
        if position is not None and position < 0:
            msg = f"position must be >= 0, got {position}"
            raise ValueError(msg)
        if position is None:
            position = self._next_position(playlist_id)
        cursor = self.db.execute(
            """
            INSERT OR IGNORE INTO playlist_videos (playlist_id, video_id, position)
            VALUES (?, ?, ?)
            """,
            (playlist_id, video_id, position),
        )
        self.db.commit()
        return cursor.rowcount > 0

    def remove_video(self, playlist_id: int, video_id: int) -> bool:
        cursor = self.db.execute(
            "DELETE FROM playlist_videos WHERE playlist_id = ? AND video_id = ?",
            (playlist_id, video_id),
        )
        self.db.commit()
        return cursor.rowcount > 0

    def get_video_ids(self, playlist_id: int) -> list[int]:
        cursor = self.db.execute(
            "SELECT video_id FROM playlist_videos WHERE playlist_id = ? ORDER BY position, added_at",
            (playlist_id,),
        )
        return [row["video_id"] for row in cursor.fetchall()]

    def get_videos(self, playlist_id: int) -> list[dict[str, Any]]:
        """Get all videos in a playlist ordered by position."""
        cursor = self.db.execute(
            """
            SELECT v.*, pv.position
            FROM playlist_videos pv
            JOIN videos v ON pv.video_id = v.id
            WHERE pv.playlist_id = ?
            ORDER BY pv.position, pv.added_at
            """,
            (playlist_id,),
        )
        return [dict(row) for row in cursor.fetchall()]

    def count_videos(self, playlist_id: int) -> int:
        cursor = self.db.execute(
            "SELECT COUNT(*) as cnt FROM playlist_videos WHERE playlist_id = ?",
            (playlist_id,),
        )
        row = cursor.fetchone()
        return row["cnt"] if row else 0

    def reorder(self, playlist_id: int, ordered_video_ids: list[int]) -> int:
        """Rewrite positions so each video sits at its index in the list.

        Ids that are not members are ignored.

        Returns:
            Number of memberships updated.

        Raises:
            ValueError: If the list contains duplicates.
        """
        if len(set(ordered_video_ids)) != len(ordered_video_ids):
            raise ValueError("ordered_video_ids contains duplicates")
        updated = 0
        with self.db:
            for position, video_id in enumerate(ordered_video_ids):
                cursor = self.db.execute(
                    "UPDATE playlist_videos SET position = ? WHERE playlist_id = ? AND video_id = ?",
                    (position, playlist_id, video_id),
                )
                updated += cursor.rowcount
        return updated

    def sync(self, playlist_id: int) -> int:
        """Add every video carrying one of the playlist's tags.

        New members are appended after the current last position in the
        order the videos were saved. Existing members are left alone, so
        running this again adds nothing.

        Returns:
            Number of videos added.
        """
        cursor = self.db.execute(
            """
            SELECT DISTINCT v.id FROM videos v
            JOIN video_tags vt ON vt.video_id = v.id
            JOIN playlist_tags pt ON pt.tag_id = vt.tag_id
            WHERE pt.playlist_id = ?
              AND v.id NOT IN (
                  SELECT video_id FROM playlist_videos WHERE playlist_id = ?
              )
            ORDER BY v.created_at, v.id
            """,
            (playlist_id, playlist_id),
        )
        candidates = [row["id"] for row in cursor.fetchall()]
        if not candidates:
            return 0

        added = 0
        with self.db:
            position = self._next_position(playlist_id)
            for video_id in candidates:
                cursor = self.db.execute(
                    """
                    INSERT OR IGNORE INTO playlist_videos (playlist_id, video_id, position)
                    VALUES (?, ?, ?)
                    """,
                    (playlist_id, video_id, position),
                )
                if cursor.rowcount > 0:
                    added += 1
                    position += 1
        return added
