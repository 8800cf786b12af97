"""Video repository for CRUD operations on the videos table.

Saved videos are user bookmarks of third-party video URLs. Besides the
URL, a row carries best-effort scraped metadata (title, thumbnail,
author, duration) and the resume position.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from vidfeed.db.connection import Database


class VideoRepository:
    """Repository for saved video operations."""

    # Valid aspect ratios per schema CHECK constraint
    VALID_ASPECT_RATIOS = frozenset(["auto", "horizontal", "vertical", "square"])

    # Columns that update() may change
    UPDATABLE = (
        "title",
        "thumbnail_url",
        "author_name",
        "duration",
        "aspect_ratio",
        "notes",
        "embed_html",
    )

    def __init__(self, db: Database) -> None:
        self.db = db

    def insert(
        self,
        url: str,
        *,
        platform: str = "other",
        title: str | None = None,
        thumbnail_url: str | None = None,
        author_name: str | None = None,
        duration: int | None = None,
        aspect_ratio: str = "auto",
        notes: str | None = None,
        embed_html: str | None = None,
    ) -> int:
        """Insert a new saved video.

        Returns:
            The new video's integer id.

        Raises:
            ValueError: If url is empty or aspect_ratio is invalid.
        """
        if not url:
            raise ValueError("url must not be empty")
        if aspect_ratio not in self.VALID_ASPECT_RATIOS:
            msg = f"Invalid aspect_ratio: {aspect_ratio}. Must be one of {sorted(self.VALID_ASPECT_RATIOS)}"
            raise ValueError(msg)

        cursor = self.db.execute(
            """
            INSERT INTO videos (
                url, platform, title, thumbnail_url, author_name,
                duration, aspect_ratio, notes, embed_html
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                url,
                platform,
                title or "Video",
                thumbnail_url,
                author_name,
                duration,
                aspect_ratio,
                notes,
                embed_html,
            ),
        )
        self.db.commit()
        return cursor.lastrowid

    def get(self, video_id: int) -> dict[str, Any] | None:
        cursor = self.db.execute("SELECT * FROM videos WHERE id = ?", (video_id,))
        row = cursor.fetchone()
        return dict(row) if row else None

    def get_by_url(self, url: str) -> dict[str, Any] | None:
        """Get the most recently saved video with exactly this URL."""
        cursor = self.db.execute(
            "SELECT * FROM videos WHERE url = ? ORDER BY id DESC LIMIT 1",
            (url,),
        )
        row = cursor.fetchone()
        return dict(row) if row else None

    def list_all(self, *, tag_id: int | None = None) -> list[dict[str, Any]]:
        """List saved videos, newest first, optionally filtered by tag."""
        if tag_id is None:
            cursor = self.db.execute("SELECT * FROM videos ORDER BY created_at DESC, id DESC")
        else:
            cursor = self.db.execute(
                """
                SELECT v.* FROM videos v
                JOIN video_tags vt ON vt.video_id = v.id
                WHERE vt.tag_id = ?
                ORDER BY v.created_at DESC, v.id DESC
                """,
                (tag_id,),
            )
        return [dict(row) for row in cursor.fetchall()]

    def update(self, video_id: int, **fields: Any) -> bool:
        """Update metadata columns of a video.

        Returns:
            True if updated, False if not found.

        Raises:
            ValueError: If an unknown column or invalid aspect ratio is given.
        """
        unknown = set(fields) - set(self.UPDATABLE)
        if unknown:
            raise ValueError(f"Cannot update columns: {sorted(unknown)}")
        if "aspect_ratio" in fields and fields["aspect_ratio"] not in self.VALID_ASPECT_RATIOS:
            raise ValueError(f"Invalid aspect_ratio: {fields['aspect_ratio']}")
        if not fields:
            return self.get(video_id) is not None

        assignments = [f"{name} = ?" for name in fields]
        assignments.append("updated_at = datetime('now')")
        cursor = self.db.execute(
            f"UPDATE videos SET {', '.join(assignments)} WHERE id = ?",
            (*fields.values(), video_id),
        )
        self.db.commit()
        return cursor.rowcount > 0

    def update_timestamp(self, video_id: int, timestamp: float) -> bool:
        """Store the resume position, truncated to whole seconds.

        Returns:
            True if updated, False if not found.

        Raises:
            ValueError: If timestamp is negative.
        """
        if timestamp < 0:
            msg = f"timestamp must be >= 0, got {timestamp}"
            raise ValueError(msg)
        cursor = self.db.execute(
            "UPDATE videos SET last_timestamp = ?, updated_at = datetime('now') WHERE id = ?",
            (math.floor(timestamp), video_id),
        )
        self.db.commit()
        return cursor.rowcount > 0

    def delete(self, video_id: int) -> bool:
        """Delete a video (cascades to tag and playlist memberships)."""
        cursor = self.db.execute("DELETE FROM videos WHERE id = ?", (video_id,))
        self.db.commit()
        return cursor.rowcount > 0
