"""
vidfeed MCP server - expose classification, embeds and playlist feeds via
Model Context Protocol.

Run as: vidfeed-mcp (stdio transport)
"""

import asyncio
import json
import logging

from mcp.server.fastmcp import FastMCP

from vidfeed.embed.adapters import select_adapter
from vidfeed.exceptions import PersistenceError
from vidfeed.library import LibraryStore
from vidfeed.models.embed import EmbedContext
from vidfeed.operations.feed import playlist_feed
from vidfeed.operations.metadata import fetch_metadata_hints
from vidfeed.urls import classify
from vidfeed.utils.logging import configure_logging

# All logging goes to stderr so stdout stays clean for JSON-RPC
configure_logging()
logger = logging.getLogger(__name__)

mcp = FastMCP("vidfeed")

_store: LibraryStore | None = None


def _get_store() -> LibraryStore:
    global _store
    if _store is None:
        _store = LibraryStore()
    return _store


@mcp.tool()
async def classify_url_tool(url: str) -> str:
    """Classify a video URL into platform, id and canonical URL.

    Never fails: unrecognized or malformed input is reported as "other".

    Args:
        url: Any video link (scheme optional).
    """
    return json.dumps(classify(url).model_dump(mode="json"), indent=2)


@mcp.tool()
async def get_embed_tool(
    url: str,
    vertical: bool = False,
    autoplay: bool = True,
    active: bool = True,
    start_at: float | None = None,
    parent_domain: str | None = None,
) -> str:
    """Build the player embed for a video URL.

    Returns an iframe src with permissions and scale hint, Instagram embed
    HTML, or a generic media URL with per-platform player options.

    Args:
        url: Video link.
        vertical: Lay out as a vertical (9:16) player.
        autoplay: Start playing when mounted (only if active).
        active: False renders a muted, pre-mounted neighbor.
        start_at: Resume position in seconds (YouTube and generic only).
        parent_domain: Embedding host, required by Twitch.
    """
    ctx = EmbedContext(
        is_vertical=vertical,
        autoplay=autoplay,
        is_active=active,
        start_at=start_at,
        parent_domain=parent_domain,
    )
    spec = select_adapter(classify(url), ctx)
    return json.dumps(spec.model_dump(mode="json"), indent=2)


@mcp.tool()
async def get_metadata_hints_tool(url: str) -> str:
    """Fetch best-effort title, thumbnail, author and duration for a URL.

    Short links are resolved first. Every field is optional; missing
    values come back empty.

    Args:
        url: Video link.
    """
    hints = await asyncio.to_thread(fetch_metadata_hints, url)
    return json.dumps(hints.to_dict(), indent=2)


@mcp.tool()
async def save_progress_tool(video_id: int, seconds: float) -> str:
    """Store a saved video's resume position (truncated to whole seconds).

    Args:
        video_id: Library id of the video.
        seconds: Playback position in seconds (>= 0).
    """
    try:
        await _get_store().update_progress(video_id, seconds)
    except PersistenceError as e:
        return json.dumps({"error": e.to_dict()})
    return json.dumps({"video_id": video_id, "last_timestamp": int(seconds)})


@mcp.tool()
async def get_playlist_feed_tool(
    playlist_id: int,
    active_index: int | None = None,
    parent_domain: str | None = None,
) -> str:
    """Render a playlist feed around an active entry.

    Entries within the buffering window of the active index include their
    embed; the rest only a thumbnail. Without active_index the feed is
    shown as not started.

    Args:
        playlist_id: Playlist to render.
        active_index: 0-based index of the playing entry.
        parent_domain: Embedding host for generated embeds.
    """
    try:
        feed = await playlist_feed(
            _get_store(), playlist_id, active_index, parent_domain=parent_domain
        )
    except PersistenceError as e:
        return json.dumps({"error": e.to_dict()})
    except IndexError as e:
        return json.dumps({"error": str(e), "playlist_id": playlist_id})
    return json.dumps(feed, indent=2, default=str)


@mcp.tool()
async def reorder_playlist_tool(playlist_id: int, ordered_video_ids: list[int]) -> str:
    """Persist a playlist's full order.

    Args:
        playlist_id: Playlist to reorder.
        ordered_video_ids: Every video id in the new order; position = index.
    """
    try:
        await _get_store().reorder_playlist(playlist_id, ordered_video_ids)
    except PersistenceError as e:
        return json.dumps({"error": e.to_dict()})
    return json.dumps({"playlist_id": playlist_id, "order": ordered_video_ids})


@mcp.tool()
async def sync_playlist_tool(playlist_id: int) -> str:
    """Add every video carrying one of the playlist's tags.

    Idempotent: running it again adds nothing new.

    Args:
        playlist_id: Playlist to sync.
    """
    try:
        added = await _get_store().sync_playlist(playlist_id)
    except PersistenceError as e:
        return json.dumps({"error": e.to_dict()})
    return json.dumps({"playlist_id": playlist_id, "added": added})


@mcp.tool()
async def list_playlists_tool() -> str:
    """List playlists with their linked tags and video counts."""
    playlists = await _get_store().list_playlists()
    return json.dumps(
        {"count": len(playlists), "playlists": [p.model_dump(mode="json") for p in playlists]},
        indent=2,
    )


def main():
    """Entry point for the vidfeed-mcp command."""
    mcp.run()


if __name__ == "__main__":
    main()
