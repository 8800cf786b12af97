"""Pytest configuration and shared fakes for vidfeed tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from vidfeed.config.loader import ConfigSource, VidfeedConfig, clear_config_cache
from vidfeed.db import reset_database
from vidfeed.db.connection import Database
from vidfeed.db.migrate import run_migrations
from vidfeed.exceptions import EmbedUnavailableError, PersistenceError
from vidfeed.models.saved_video import SavedVideo


def pytest_addoption(parser):
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="Run integration tests against real third-party endpoints (requires network)",
    )


def pytest_collection_modifyitems(config, items):
    if not config.getoption("--run-integration"):
        skip = pytest.mark.skip(reason="needs --run-integration flag")
        for item in items:
            if "integration" in item.keywords:
                item.add_marker(skip)


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path, monkeypatch):
    """Keep tests away from the user's real config and database."""
    monkeypatch.setenv("VIDFEED_ROOT", str(tmp_path / "vidfeed-root"))
    monkeypatch.delenv("VIDFEED_DB_PATH", raising=False)
    monkeypatch.delenv("VIDFEED_PARENT_DOMAIN", raising=False)
    clear_config_cache()
    yield
    reset_database()
    clear_config_cache()


# ============================================================
# Timers
# ============================================================


class FakeTimer:
    def __init__(self, scheduler: FakeScheduler, when: float, callback) -> None:
        self.scheduler = scheduler
        self.when = when
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler:
    """Deterministic scheduler: time only moves when advance() is called."""

    def __init__(self) -> None:
        self.now = 0.0
        self.timers: list[FakeTimer] = []

    def call_later(self, delay, callback) -> FakeTimer:
        timer = FakeTimer(self, self.now + max(0.0, delay), callback)
        self.timers.append(timer)
        return timer

    @property
    def pending(self) -> list[FakeTimer]:
        return [t for t in self.timers if not t.cancelled]

    def advance(self, seconds: float) -> None:
        """Move time forward, firing due timers in order."""
        target = self.now + seconds
        while True:
            due = [t for t in self.pending if t.when <= target]
            if not due:
                break
            timer = min(due, key=lambda t: t.when)
            self.now = timer.when
            timer.cancelled = True
            timer.callback()
        self.now = target


@pytest.fixture
def scheduler():
    return FakeScheduler()


# ============================================================
# Persistence
# ============================================================


class FakeStore:
    """In-memory PlaylistStore that records every call."""

    def __init__(self, playlist_videos: list[SavedVideo] | None = None) -> None:
        self.progress_calls: list[tuple[int, float]] = []
        self.reorder_calls: list[tuple[int, list[int]]] = []
        self.sync_calls: list[int] = []
        self.playlist_videos = list(playlist_videos or [])
        self.sync_result = 0
        self.fail = False

    def _maybe_fail(self, operation: str) -> None:
        if self.fail:
            raise PersistenceError("store offline", operation=operation)

    async def update_progress(self, video_id, timestamp):
        self.progress_calls.append((video_id, timestamp))
        self._maybe_fail("update_progress")

    async def reorder_playlist(self, playlist_id, ordered_video_ids):
        self.reorder_calls.append((playlist_id, list(ordered_video_ids)))
        self._maybe_fail("reorder_playlist")

    async def sync_playlist(self, playlist_id):
        self.sync_calls.append(playlist_id)
        self._maybe_fail("sync_playlist")
        return self.sync_result

    async def list_playlist_videos(self, playlist_id):
        return list(self.playlist_videos)


@pytest.fixture
def store():
    return FakeStore()


# ============================================================
# Instagram embed script
# ============================================================


class FakeLoader:
    """EmbedScriptLoader fake that counts loads and process calls."""

    def __init__(self, *, loaded: bool = False, fail: bool = False) -> None:
        self.loaded = loaded
        self.fail = fail
        self.load_calls = 0
        self.process_calls = 0

    def is_loaded(self) -> bool:
        return self.loaded

    async def load(self) -> None:
        self.load_calls += 1
        if self.fail:
            raise EmbedUnavailableError("blocked", script_url="https://example.test/embed.js")
        self.loaded = True

    def process(self) -> None:
        self.process_calls += 1


@pytest.fixture
def loader():
    return FakeLoader()


# ============================================================
# Config, models and database
# ============================================================


@pytest.fixture
def config(tmp_path):
    """Default settings with paths under tmp_path."""
    return VidfeedConfig(
        root_dir=tmp_path,
        db_path=tmp_path / "vidfeed.db",
        parent_domain="feed.example.com",
        source=ConfigSource.DEFAULT,
    )


def make_video(video_id: int, url: str, **kwargs) -> SavedVideo:
    return SavedVideo(id=video_id, url=url, title=kwargs.pop("title", f"Video {video_id}"), **kwargs)


@pytest.fixture
def db():
    """Create an in-memory database with migrations applied."""
    database = Database(":memory:")
    run_migrations(database)
    yield database
    database.close()


@pytest.fixture
def db_file(tmp_path) -> Path:
    return tmp_path / "library.db"
