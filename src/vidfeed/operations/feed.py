"""
Snapshot of a playlist feed: what a renderer would mount for a given
active entry.
"""

from __future__ import annotations

from typing import Any

from vidfeed.library import LibraryStore
from vidfeed.navigation.sequencer import PlaylistSequencer


async def playlist_feed(
    store: LibraryStore,
    playlist_id: int,
    active_index: int | None = None,
    *,
    parent_domain: str | None = None,
) -> dict[str, Any]:
    """Render every entry of a playlist around an active index.

    Args:
        store: Library holding the playlist.
        playlist_id: Playlist to render.
        active_index: Entry to treat as playing (0-based). If None, the
            feed is shown as not started.
        parent_domain: Embedding host for the generated embeds.

    Raises:
        PlaylistNotFoundError: If the playlist does not exist.
        IndexError: If active_index is out of range.
    """
    playlist = await store.get_playlist(playlist_id)
    videos = await store.list_playlist_videos(playlist_id)
    sequencer = PlaylistSequencer(playlist_id, videos, store, parent_domain=parent_domain)
    try:
        if active_index is not None:
            sequencer.select(active_index)
        return {
            "playlist": playlist.model_dump(mode="json"),
            "state": sequencer.state.value,
            "session": sequencer.session.to_dict(),
            "window": sequencer.window(),
            "entries": [entry.to_dict() for entry in sequencer.render_all()],
        }
    finally:
        sequencer.close()
