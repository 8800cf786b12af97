"""Tests for vidfeed MCP server."""

import json
from unittest.mock import patch

import pytest

from vidfeed.library import LibraryStore
from vidfeed.operations.metadata import MetadataHints


@pytest.fixture
def library(db, monkeypatch):
    """Point the server at an in-memory library."""
    store = LibraryStore(db)
    monkeypatch.setattr("vidfeed.mcp_server._store", store)
    return store


class TestStatelessTools:
    @pytest.mark.asyncio
    async def test_classify(self):
        from vidfeed.mcp_server import classify_url_tool

        data = json.loads(await classify_url_tool("https://vimeo.com/12345/abcdef"))
        assert data["kind"] == "vimeo"
        assert data["external_id"] == "12345?h=abcdef"

    @pytest.mark.asyncio
    async def test_embed(self):
        from vidfeed.mcp_server import get_embed_tool

        data = json.loads(await get_embed_tool("https://www.instagram.com/p/Cx1AbC/"))
        assert data["kind"] == "custom"
        assert data["needs_script"] is True

    @pytest.mark.asyncio
    @patch("vidfeed.mcp_server.fetch_metadata_hints")
    async def test_metadata(self, mock_fetch):
        from vidfeed.mcp_server import get_metadata_hints_tool

        mock_fetch.return_value = MetadataHints(title="Hello", duration=12)
        data = json.loads(await get_metadata_hints_tool("https://example.com/a"))
        mock_fetch.assert_called_once_with("https://example.com/a")
        assert data["title"] == "Hello"
        assert data["duration"] == 12


class TestLibraryTools:
    @pytest.mark.asyncio
    async def test_save_progress(self, library):
        from vidfeed.mcp_server import save_progress_tool

        video = await library.add_video("https://cdn.example.com/a.mp4")
        data = json.loads(await save_progress_tool(video.id, 42.7))
        assert data == {"video_id": video.id, "last_timestamp": 42}
        assert (await library.get_video(video.id)).last_timestamp == 42

    @pytest.mark.asyncio
    async def test_save_progress_missing_video(self, library):
        from vidfeed.mcp_server import save_progress_tool

        data = json.loads(await save_progress_tool(404, 1))
        assert data["error"]["type"] == "VideoNotFoundError"

    @pytest.mark.asyncio
    async def test_feed_reorder_and_sync(self, library):
        from vidfeed.mcp_server import (
            get_playlist_feed_tool,
            list_playlists_tool,
            reorder_playlist_tool,
            sync_playlist_tool,
        )

        tag = await library.create_tag("clips")
        playlist = await library.create_playlist("Clips", [tag.id], auto_add=True)
        ids = []
        for n in range(3):
            video = await library.add_video(f"https://www.tiktok.com/@u/video/{n + 1}")
            await library.tag_video(video.id, tag.id)
            ids.append(video.id)

        assert json.loads(await sync_playlist_tool(playlist.id))["added"] == 3
        assert json.loads(await sync_playlist_tool(playlist.id))["added"] == 0

        order = [ids[2], ids[0], ids[1]]
        assert json.loads(await reorder_playlist_tool(playlist.id, order))["order"] == order

        feed = json.loads(await get_playlist_feed_tool(playlist.id, active_index=2))
        assert [e["video_id"] for e in feed["entries"]] == order
        assert feed["window"] == [1, 2]
        assert feed["entries"][0]["embed"] is None
        assert feed["session"]["video_id"] == ids[1]

        listed = json.loads(await list_playlists_tool())
        assert listed["playlists"][0]["video_count"] == 3

    @pytest.mark.asyncio
    async def test_missing_playlist(self, library):
        from vidfeed.mcp_server import get_playlist_feed_tool, sync_playlist_tool

        assert json.loads(await sync_playlist_tool(404))["error"]["type"] == "PlaylistNotFoundError"
        assert json.loads(await get_playlist_feed_tool(404))["error"]["operation"] == "get_playlist"

    @pytest.mark.asyncio
    async def test_feed_index_out_of_range(self, library):
        from vidfeed.mcp_server import get_playlist_feed_tool

        playlist = await library.create_playlist("Empty")
        data = json.loads(await get_playlist_feed_tool(playlist.id, active_index=0))
        assert "out of range" in data["error"]
