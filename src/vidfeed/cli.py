#!/usr/bin/env python3
"""
vidfeed CLI - classify video links, build embeds and manage playlists.

Usage:
    vidfeed classify "https://youtu.be/VIDEO_ID"
    vidfeed embed "https://www.tiktok.com/@user/video/123" --vertical
    vidfeed metadata "https://vimeo.com/12345"
    vidfeed add "https://youtu.be/VIDEO_ID" --tag music
    vidfeed playlist show 1 --active 2
    vidfeed validate-config
"""

import argparse
import asyncio
import json
import logging
import sys
import time

from vidfeed.embed.adapters import select_adapter
from vidfeed.exceptions import PersistenceError
from vidfeed.models.embed import EmbedContext
from vidfeed.urls import classify

logger = logging.getLogger(__name__)


def _print_json(data) -> None:
    print(json.dumps(data, indent=2, default=str))


def _cmd_classify(args):
    """Handle the classify subcommand."""
    source = classify(args.url)
    _print_json(source.model_dump(mode="json"))


def _cmd_embed(args):
    """Handle the embed subcommand."""
    source = classify(args.url)
    ctx = EmbedContext(
        is_vertical=args.vertical,
        autoplay=not args.no_autoplay,
        is_active=not args.inactive,
        start_at=args.start,
        parent_domain=args.parent,
    )
    spec = select_adapter(source, ctx)
    _print_json(spec.model_dump(mode="json"))


def _cmd_metadata(args):
    """Handle the metadata subcommand."""
    from vidfeed.operations.metadata import fetch_metadata_hints
    from vidfeed.utils.logging import log_timed

    start = time.time()
    log_timed(f"Fetching metadata for {args.url}")
    hints = fetch_metadata_hints(args.url)
    log_timed(f"Done ({', '.join(hints.sources) or 'no sources'})", start)
    _print_json(hints.to_dict())


async def _add_video(args) -> dict:
    from vidfeed.library import LibraryStore
    from vidfeed.operations.metadata import fetch_metadata_hints, resolve_url_redirects

    store = LibraryStore()
    url = args.url
    if not args.no_fetch:
        url = await asyncio.to_thread(resolve_url_redirects, args.url)

    video = await store.find_by_url(url)
    if video is None and url != args.url:
        video = await store.find_by_url(args.url)
    if video is not None:
        logger.info(f"Already saved as video {video.id}: {video.url}")
    else:
        metadata = {}
        if not args.no_fetch:
            hints = await asyncio.to_thread(fetch_metadata_hints, url)
            url = hints.resolved_url or url
            metadata = {
                "title": hints.title,
                "thumbnail_url": hints.thumbnail_url or None,
                "author_name": hints.author_name or None,
                "duration": hints.duration or None,
                "aspect_ratio": hints.aspect_ratio.value,
                "embed_html": hints.embed_html or None,
            }
        video = await store.add_video(url, **metadata)

    for name in args.tag or []:
        tag = await store.create_tag(name)
        await store.tag_video(video.id, tag.id)
    video = await store.get_video(video.id)
    return video.model_dump(mode="json")


def _cmd_add(args):
    """Handle the add subcommand."""
    _print_json(asyncio.run(_add_video(args)))


def _cmd_progress(args):
    """Handle the progress subcommand."""
    from vidfeed.library import LibraryStore
    from vidfeed.utils.formatting import format_progress

    async def run():
        store = LibraryStore()
        await store.update_progress(args.video_id, args.seconds)
        return await store.get_video(args.video_id)

    video = asyncio.run(run())
    _print_json(
        {
            "video_id": video.id,
            "last_timestamp": video.last_timestamp,
            "position": format_progress(video.last_timestamp, video.duration),
        }
    )


async def _playlist_feed(playlist_id: int, active: int | None) -> dict:
    from vidfeed.library import LibraryStore
    from vidfeed.operations.feed import playlist_feed

    return await playlist_feed(LibraryStore(), playlist_id, active)


def _cmd_playlist(args):
    """Handle the playlist subcommands."""
    from vidfeed.library import LibraryStore

    if args.playlist_command == "show":
        _print_json(asyncio.run(_playlist_feed(args.playlist_id, args.active)))
        return

    async def run():
        store = LibraryStore()
        if args.playlist_command == "create":
            tag_ids = []
            for name in args.tag or []:
                tag_ids.append((await store.create_tag(name)).id)
            playlist = await store.create_playlist(args.name, tag_ids, args.auto_add)
            return playlist.model_dump(mode="json")
        if args.playlist_command == "sync":
            added = await store.sync_playlist(args.playlist_id)
            return {"playlist_id": args.playlist_id, "added": added}
        if args.playlist_command == "reorder":
            from vidfeed.navigation.reorder import move_item

            videos = await store.list_playlist_videos(args.playlist_id)
            ordered = [v.id for v in move_item(videos, args.old_index, args.new_index)]
            await store.reorder_playlist(args.playlist_id, ordered)
            return {"playlist_id": args.playlist_id, "order": ordered}
        playlists = await store.list_playlists()
        return {"count": len(playlists), "playlists": [p.model_dump(mode="json") for p in playlists]}

    _print_json(asyncio.run(run()))


def _cmd_validate_config(args):
    """Handle the validate-config subcommand."""
    from vidfeed.config.loader import (
        _find_project_config,
        _get_user_config_path,
        _load_yaml_config,
        get_config,
    )
    from vidfeed.config.validation import validate_config_dict

    paths = []
    project_path = _find_project_config()
    if project_path:
        paths.append(project_path)
    user_path = _get_user_config_path()
    if user_path.exists():
        paths.append(user_path)

    if not paths:
        print("No config file found.")
        print("  Searched: .vidfeed/config.yaml (project)")
        print(f"  Searched: {user_path} (user)")
        print("\nUsing defaults (no validation needed).")
        sys.exit(0)

    valid = True
    for path in paths:
        print(f"Config file: {path}")
        yaml_config = _load_yaml_config(path)
        if yaml_config is None:
            print("  Failed to parse config file.")
            valid = False
            continue

        result = validate_config_dict(yaml_config)
        for error in result.errors:
            print(f"  x {error}")
        for warning in result.warnings:
            print(f"  ! {warning}")
        if result.is_valid and not result.warnings:
            print("  Config is valid.")
        valid = valid and result.is_valid

    print(f"\nResolved: {get_config()!r}")
    sys.exit(0 if valid else 1)


def main():
    from vidfeed.utils.logging import configure_logging

    configure_logging(fmt="%(message)s")

    parser = argparse.ArgumentParser(
        description="Classify video links, build embeds and play playlists",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    %(prog)s classify "https://youtu.be/abc123"
    %(prog)s embed "https://www.twitch.tv/videos/123" --parent example.com
    %(prog)s add "https://vimeo.com/12345" --tag travel
    %(prog)s playlist create "Travel" --tag travel --auto-add
    %(prog)s playlist reorder 1 0 3
    %(prog)s progress 7 95.5
        """,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command")

    cl_parser = subparsers.add_parser("classify", help="Classify a video URL")
    cl_parser.add_argument("url")

    em_parser = subparsers.add_parser("embed", help="Build the embed for a video URL")
    em_parser.add_argument("url")
    em_parser.add_argument("--vertical", action="store_true", help="Vertical layout")
    em_parser.add_argument("--no-autoplay", action="store_true", help="Disable autoplay")
    em_parser.add_argument(
        "--inactive", action="store_true", help="Render as a muted, pre-mounted neighbor"
    )
    em_parser.add_argument("--start", type=float, default=None, help="Resume position (seconds)")
    em_parser.add_argument("--parent", default=None, help="Embedding host (Twitch parent=)")

    md_parser = subparsers.add_parser("metadata", help="Fetch title/thumbnail/duration hints")
    md_parser.add_argument("url")

    add_parser = subparsers.add_parser("add", help="Save a video to the library")
    add_parser.add_argument("url")
    add_parser.add_argument("--tag", action="append", help="Tag name (repeatable)")
    add_parser.add_argument(
        "--no-fetch", action="store_true", help="Skip fetching metadata hints"
    )

    pr_parser = subparsers.add_parser("progress", help="Store a video's resume position")
    pr_parser.add_argument("video_id", type=int)
    pr_parser.add_argument("seconds", type=float)

    pl_parser = subparsers.add_parser("playlist", help="Playlist operations")
    pl_sub = pl_parser.add_subparsers(dest="playlist_command")
    pl_sub.add_parser("list", help="List playlists")
    show = pl_sub.add_parser("show", help="Show a playlist feed")
    show.add_argument("playlist_id", type=int)
    show.add_argument("--active", type=int, default=None, help="Active index (0-based)")
    create = pl_sub.add_parser("create", help="Create a playlist")
    create.add_argument("name")
    create.add_argument("--tag", action="append", help="Linked tag name (repeatable)")
    create.add_argument("--auto-add", action="store_true", help="Add tagged videos on sync")
    sync = pl_sub.add_parser("sync", help="Add videos carrying the playlist's tags")
    sync.add_argument("playlist_id", type=int)
    reorder = pl_sub.add_parser("reorder", help="Move an entry (0-based indexes)")
    reorder.add_argument("playlist_id", type=int)
    reorder.add_argument("old_index", type=int)
    reorder.add_argument("new_index", type=int)

    subparsers.add_parser("validate-config", help="Validate config files")

    args = parser.parse_args()
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    handlers = {
        "classify": _cmd_classify,
        "embed": _cmd_embed,
        "metadata": _cmd_metadata,
        "add": _cmd_add,
        "progress": _cmd_progress,
        "playlist": _cmd_playlist,
        "validate-config": _cmd_validate_config,
    }
    handler = handlers.get(args.command)
    if handler is None:
        parser.print_help()
        return

    try:
        handler(args)
    except PersistenceError as e:
        _print_json({"error": e.to_dict()})
        sys.exit(1)
    except IndexError as e:
        _print_json({"error": str(e)})
        sys.exit(1)


if __name__ == "__main__":
    main()
