"""Database module for vidfeed.

Provides a singleton Database connection for the video library.

Usage:
    from vidfeed.db import get_database, close_database

    db = get_database()
    cursor = db.execute("SELECT * FROM videos WHERE id = ?", (video_id,))
    row = cursor.fetchone()

    # Transactions via context manager:
    with db:
        db.execute("UPDATE ...", (...))
        db.execute("UPDATE ...", (...))
    # auto-commits on success, rolls back on exception

    # Cleanup on shutdown:
    close_database()
"""

import logging
import threading
from pathlib import Path

from vidfeed.db.connection import Database
from vidfeed.db.migrate import run_migrations

logger = logging.getLogger(__name__)

_db_instance: Database | None = None
_db_lock = threading.Lock()


def get_database(db_path: str | Path | None = None) -> Database:
    """Get the singleton Database instance, creating it if needed.

    On first call, creates the database, enables WAL mode and foreign keys,
    and runs any pending migrations.

    Args:
        db_path: Path to the SQLite database file. If None, resolved from
            config: {root_dir}/vidfeed.db unless VIDFEED_DB_PATH is set.

    Returns:
        The singleton Database instance.
    """
    global _db_instance

    if _db_instance is not None:
        return _db_instance

    with _db_lock:
        # Double-check after acquiring lock
        if _db_instance is not None:
            return _db_instance

        if db_path is None:
            from vidfeed.config.loader import get_db_path

            db_path = get_db_path(ensure_parent=True)

        db = Database(db_path)
        run_migrations(db)

        _db_instance = db
        logger.info("Database initialized at %s", db_path)
        return db


def close_database() -> None:
    """Close and release the singleton Database instance."""
    global _db_instance

    with _db_lock:
        if _db_instance is not None:
            _db_instance.close()
            _db_instance = None
            logger.info("Database closed")


def reset_database() -> None:
    """Reset the singleton for testing purposes."""
    global _db_instance

    with _db_lock:
        if _db_instance is not None:
            _db_instance.close()
        _db_instance = None


__all__ = ["Database", "close_database", "get_database", "reset_database", "run_migrations"]
