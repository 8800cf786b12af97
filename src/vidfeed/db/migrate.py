"""Database migration runner.

Reads SQL migration files from the migrations/ directory, tracks applied
versions in a schema_version table, and applies pending migrations in order.

Migration files are named NNN_description.sql (e.g., 001_initial.sql).
Each migration runs in its own transaction.
"""

import logging
import re
from importlib import resources
from pathlib import Path

from vidfeed.db.connection import Database

logger = logging.getLogger(__name__)

# Pattern for migration filenames: NNN_description.sql
_MIGRATION_PATTERN = re.compile(r"^(\d{3})_(.+)\.sql$")


def _ensure_schema_version_table(db: Database) -> None:
    """Create the schema_version table if it doesn't exist."""
    db.execute("""
        CREATE TABLE IF NOT EXISTS schema_version (
            version     INTEGER PRIMARY KEY,
            applied_at  TEXT NOT NULL DEFAULT (datetime('now')),
            description TEXT
        )
    """)
    db.commit()


def _get_applied_versions(db: Database) -> set[int]:
    """Return the set of already-applied migration version numbers."""
    cursor = db.execute("SELECT version FROM schema_version ORDER BY version")
    return {row["version"] for row in cursor.fetchall()}


def _parse_migration(name: str, read) -> tuple[int, str, str] | None:
    match = _MIGRATION_PATTERN.match(name)
    if not match:
        return None
    version = int(match.group(1))
    description = match.group(2).replace("_", " ")
    return version, description, read()


def _discover_migrations(migrations_dir: Path | None = None) -> list[tuple[int, str, str]]:
    """Discover migration SQL files sorted by version number.

    Args:
        migrations_dir: Directory containing .sql files. If None, uses the
            package's bundled migrations/ directory.

    Returns:
        List of (version, description, sql_content) tuples, sorted by version.
    """
    migrations = []
    if migrations_dir is not None:
        if not migrations_dir.is_dir():
            logger.warning("Migrations directory does not exist: %s", migrations_dir)
            return migrations
        items = sorted(migrations_dir.glob("*.sql"))
    else:
        try:
            items = list(resources.files("vidfeed.db.migrations").iterdir())
        except (TypeError, FileNotFoundError):
            logger.debug("No bundled migrations found in package")
            return migrations

    for item in items:
        parsed = _parse_migration(item.name, lambda item=item: item.read_text(encoding="utf-8"))
        if parsed is None:
            logger.debug("Skipping non-migration file: %s", item.name)
            continue
        migrations.append(parsed)

    migrations.sort(key=lambda m: m[0])
    return migrations


def run_migrations(db: Database, migrations_dir: Path | None = None) -> int:
    """Apply all pending migrations in order.

    Each migration runs in its own transaction. If a migration fails,
    it is rolled back and the error is raised (subsequent migrations
    are not attempted).

    Args:
        db: Database instance to migrate.
        migrations_dir: Optional directory with .sql files. If None,
            uses the package's bundled migrations/.

    Returns:
        Number of migrations applied.
    """
    _ensure_schema_version_table(db)
    applied = _get_applied_versions(db)
    available = _discover_migrations(migrations_dir)

    applied_count = 0
    for version, description, sql_content in available:
        if version in applied:
            logger.debug("Migration %03d already applied, skipping", version)
            continue

        logger.info("Applying migration %03d: %s", version, description)
        try:
            db.executescript(sql_content)
            with db:
                db.execute(
                    "INSERT INTO schema_version (version, description) VALUES (?, ?)",
                    (version, description),
                )
            applied_count += 1
            logger.info("Migration %03d applied successfully", version)
        except Exception:
            logger.exception("Migration %03d failed, rolling back", version)
            raise

    if applied_count == 0:
        logger.debug("No pending migrations")
    else:
        logger.info("Applied %d migration(s)", applied_count)

    return applied_count
