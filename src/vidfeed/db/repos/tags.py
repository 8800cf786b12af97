"""Tag repository for the tags and video_tags tables."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from vidfeed.db.connection import Database

DEFAULT_TAG_COLOR = "#3b82f6"


class TagRepository:
    """Repository for tags and their video associations."""

    def __init__(self, db: Database) -> None:
        self.db = db

    def insert(self, name: str, color: str = DEFAULT_TAG_COLOR) -> int:
        """Create a tag.

        Raises:
            ValueError: If name is blank.
            sqlite3.IntegrityError: If a tag with this name exists.
        """
        name = name.strip()
        if not name:
            raise ValueError("tag name must not be empty")
        cursor = self.db.execute(
            "INSERT INTO tags (name, color) VALUES (?, ?)",
            (name, color or DEFAULT_TAG_COLOR),
        )
        self.db.commit()
        return cursor.lastrowid

    def get(self, tag_id: int) -> dict[str, Any] | None:
        cursor = self.db.execute("SELECT * FROM tags WHERE id = ?", (tag_id,))
        row = cursor.fetchone()
        return dict(row) if row else None

    def get_by_name(self, name: str) -> dict[str, Any] | None:
        cursor = self.db.execute("SELECT * FROM tags WHERE name = ?", (name.strip(),))
        row = cursor.fetchone()
        return dict(row) if row else None

    def list_all(self) -> list[dict[str, Any]]:
        cursor = self.db.execute("SELECT * FROM tags ORDER BY name")
        return [dict(row) for row in cursor.fetchall()]

    def tag_video(self, video_id: int, tag_id: int) -> bool:
        """Attach a tag to a video.

        Returns:
            True if newly attached, False if it already was.
        """
        cursor = self.db.execute(
            "INSERT OR IGNORE INTO video_tags (video_id, tag_id) VALUES (?, ?)",
            (video_id, tag_id),
        )
        self.db.commit()
        return cursor.rowcount > 0

    def untag_video(self, video_id: int, tag_id: int) -> bool:
        cursor = self.db.execute(
            "DELETE FROM video_tags WHERE video_id = ? AND tag_id = ?",
            (video_id, tag_id),
        )
        self.db.commit()
        return cursor.rowcount > 0

    def get_for_video(self, video_id: int) -> list[dict[str, Any]]:
        cursor = self.db.execute(
            """
            SELECT t.* FROM tags t
            JOIN video_tags vt ON vt.tag_id = t.id
            WHERE vt.video_id = ?
            ORDER BY t.name
            """,
            (video_id,),
        )
        return [dict(row) for row in cursor.fetchall()]

    def get_for_videos(self, video_ids: list[int]) -> dict[int, list[dict[str, Any]]]:
        """Tags for several videos at once, keyed by video id."""
        result: dict[int, list[dict[str, Any]]] = {vid: [] for vid in video_ids}
        if not video_ids:
            return result
        placeholders = ", ".join("?" for _ in video_ids)
        cursor = self.db.execute(
            f"""
            SELECT vt.video_id AS video_id, t.* FROM tags t
            JOIN video_tags vt ON vt.tag_id = t.id
            WHERE vt.video_id IN ({placeholders})
            ORDER BY t.name
            """,
            tuple(video_ids),
        )
        for row in cursor.fetchall():
            data = dict(row)
            video_id = data.pop("video_id")
            result[video_id].append(data)
        return result

    def delete(self, tag_id: int) -> bool:
        cursor = self.db.execute("DELETE FROM tags WHERE id = ?", (tag_id,))
        self.db.commit()
        return cursor.rowcount > 0
