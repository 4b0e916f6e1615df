#!/usr/bin/env python3
"""
CLI for the gemfeed discovery engine

Usage:
    python -m gemfeed.cli trending [--region KR] [--refresh]
    python -m gemfeed.cli feed [--access-token TOKEN] [--target-size 50] [--seed 42]
    python -m gemfeed.cli compose --history-file history.json --trending-file pool.json
    python -m gemfeed.cli rank --input-file videos.json
    python -m gemfeed.cli details ID [ID ...]
    python -m gemfeed.cli related VIDEO_ID [--title TITLE]
    python -m gemfeed.cli clear-cache [--region KR]
"""
import argparse
import json
import logging
import os
import sys

import numpy as np
from dotenv import load_dotenv

from .config import get_settings
from .db.database import Database
from .discovery.composer import compose_discovery_feed
from .discovery.feed import DiscoveryFeed
from .discovery.gems import score_and_rank
from .discovery.models import VideoRecord, dump_videos, load_videos
from .discovery.trending import cache_id_for_region, get_trending_pool
from .discovery.youtube_client import YouTubeAPIError, YouTubeClient

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def parse_args():
    """Parse command line arguments."""
    settings = get_settings()
    parser = argparse.ArgumentParser(
        description="Hidden-gem discovery feeds over the YouTube Data API"
    )
    parser.add_argument(
        "--db-path",
        default=settings.db_path,
        help=f"Path to SQLite cache database (default: {settings.db_path})"
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output results as JSON"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    trending_parser = subparsers.add_parser(
        "trending",
        help="Show the regional trending pool (cached for an hour by default)"
    )
    trending_parser.add_argument(
        "--region",
        default=settings.region_code,
        help=f"Region code (default: {settings.region_code})"
    )
    trending_parser.add_argument(
        "--refresh",
        action="store_true",
        help="Ignore the cache and refetch"
    )

    feed_parser = subparsers.add_parser(
        "feed",
        help="Build a discovery feed (personalized when an access token is given)"
    )
    feed_parser.add_argument(
        "--access-token",
        default=os.getenv("YOUTUBE_ACCESS_TOKEN"),
        help="OAuth access token for the user (default: $YOUTUBE_ACCESS_TOKEN)"
    )
    feed_parser.add_argument(
        "--target-size",
        type=int,
        default=settings.target_size,
        help=f"Feed length for signed-in users (default: {settings.target_size})"
    )
    feed_parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the shuffle (default: random)"
    )

    compose_parser = subparsers.add_parser(
        "compose",
        help="Compose a feed offline from JSON history and trending files"
    )
    compose_parser.add_argument(
        "--history-file",
        required=True,
        help="JSON list of watched videos"
    )
    compose_parser.add_argument(
        "--trending-file",
        required=True,
        help="JSON list of candidate videos"
    )
    compose_parser.add_argument(
        "--target-size",
        type=int,
        default=settings.target_size,
        help=f"Feed length (default: {settings.target_size})"
    )
    compose_parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the shuffle (default: random)"
    )

    rank_parser = subparsers.add_parser(
        "rank",
        help="Gem-score a JSON list of videos"
    )
    rank_parser.add_argument(
        "--input-file",
        required=True,
        help="JSON list of videos"
    )

    details_parser = subparsers.add_parser(
        "details",
        help="Fetch details and statistics for video ids"
    )
    details_parser.add_argument(
        "ids",
        nargs="+",
        help="YouTube video ids"
    )

    related_parser = subparsers.add_parser(
        "related",
        help="Find videos related to a video"
    )
    related_parser.add_argument(
        "video_id",
        help="YouTube video id"
    )
    related_parser.add_argument(
        "--title",
        default=None,
        help="Video title to search with (default: the id)"
    )
    related_parser.add_argument(
        "--max-results",
        type=int,
        default=12,
        help="Max related videos (default: 12)"
    )

    clear_parser = subparsers.add_parser(
        "clear-cache",
        help="Delete cached trending pools"
    )
    clear_parser.add_argument(
        "--region",
        default=None,
        help="Only clear this region (default: all)"
    )

    return parser.parse_args()


def _make_rng(seed):
    return np.random.default_rng(seed)


def _read_videos(path: str) -> list[VideoRecord]:
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a JSON list of videos")
    return load_videos(data)


def cmd_trending(db: Database, args) -> dict:
    """Execute the trending command."""
    settings = get_settings()
    with YouTubeClient() as client:
        videos = get_trending_pool(
            db,
            client,
            region_code=args.region,
            ttl_seconds=settings.trending_ttl_seconds,
            max_pages=settings.trending_pages,
            force_refresh=args.refresh,
        )
    return {
        "command": "trending",
        "region": args.region,
        "count": len(videos),
        "videos": dump_videos(videos),
    }


def cmd_feed(db: Database, args) -> dict:
    """Execute the feed command."""
    with YouTubeClient() as client:
        feed = DiscoveryFeed(db, client, rng=_make_rng(args.seed))
        videos = feed.run(access_token=args.access_token, target_size=args.target_size)
    return {
        "command": "feed",
        "personalized": bool(args.access_token),
        "count": len(videos),
        "videos": dump_videos(videos),
    }


def cmd_compose(db: Database, args) -> dict:
    """Execute the compose command (offline, no API calls)."""
    history = _read_videos(args.history_file)
    trending = _read_videos(args.trending_file)
    videos = compose_discovery_feed(
        history, trending, target_size=args.target_size, rng=_make_rng(args.seed)
    )
    return {
        "command": "compose",
        "history_size": len(history),
        "pool_size": len(trending),
        "count": len(videos),
        "videos": dump_videos(videos),
    }


def cmd_rank(db: Database, args) -> dict:
    """Execute the rank command (offline, no API calls)."""
    videos = score_and_rank(_read_videos(args.input_file))
    return {
        "command": "rank",
        "count": len(videos),
        "videos": dump_videos(videos),
    }


def cmd_details(db: Database, args) -> dict:
    """Execute the details command."""
    with YouTubeClient() as client:
        videos = client.get_video_details(args.ids)
    return {
        "command": "details",
        "requested": len(args.ids),
        "count": len(videos),
        "videos": dump_videos(videos),
    }


def cmd_related(db: Database, args) -> dict:
    """Execute the related command."""
    with YouTubeClient() as client:
        videos = client.get_related_videos(
            args.video_id, max_results=args.max_results, video_title=args.title
        )
    return {
        "command": "related",
        "video_id": args.video_id,
        "count": len(videos),
        "videos": dump_videos(videos),
    }


def cmd_clear_cache(db: Database, args) -> dict:
    """Execute the clear-cache command."""
    db.ensure_trending_tables()
    cache_id = cache_id_for_region(args.region) if args.region else None
    removed = db.clear_trending_cache(cache_id)
    return {
        "command": "clear-cache",
        "region": args.region,
        "removed": removed,
    }


COMMANDS = {
    "trending": cmd_trending,
    "feed": cmd_feed,
    "compose": cmd_compose,
    "rank": cmd_rank,
    "details": cmd_details,
    "related": cmd_related,
    "clear-cache": cmd_clear_cache,
}


def _print_videos(videos: list[dict], limit: int = 20) -> None:
    for i, v in enumerate(videos[:limit], 1):
        score = v.get("gemScore")
        score_str = f"{score:>8.2f}" if score is not None else "     n/a"
        tags = ", ".join(v.get("tags", []))
        print(f"  #{i:>2} [{score_str}] {v.get('title', '')[:60]}")
        print(f"       {v['id']} | {v.get('channelTitle', '')}" + (f" | {tags}" if tags else ""))
    if len(videos) > limit:
        print(f"  ... and {len(videos) - limit} more")


def main():
    """Main entry point."""
    load_dotenv()
    get_settings.cache_clear()

    args = parse_args()
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    handler = COMMANDS[args.command]

    exit_code = 0
    with Database(args.db_path) as db:
        try:
            result = handler(db, args)
        except YouTubeAPIError as e:
            result = {"command": args.command, "success": False, "error": str(e)}
            exit_code = 1
        except (OSError, ValueError) as e:
            result = {"command": args.command, "success": False, "error": str(e)}
            exit_code = 2

    # Output results
    if args.json:
        print(json.dumps(result, indent=2, ensure_ascii=False))
    else:
        print(f"\n{'=' * 50}")
        print(f"Command: {result['command']}")
        print(f"{'=' * 50}")

        if result.get("success") is False:
            print(f"Error: {result['error']}")

        elif args.command == "trending":
            print(f"Region: {result['region']}")
            print(f"Trending videos: {result['count']}")
            _print_videos(result["videos"])

        elif args.command == "feed":
            mode = "personalized" if result["personalized"] else "anonymous sample"
            print(f"Feed ({mode}): {result['count']} videos")
            _print_videos(result["videos"])

        elif args.command == "compose":
            print(f"History: {result['history_size']} | Pool: {result['pool_size']}")
            print(f"Feed: {result['count']} videos")
            _print_videos(result["videos"])

        elif args.command == "rank":
            print(f"Ranked: {result['count']} videos")
            _print_videos(result["videos"])

        elif args.command == "details":
            print(f"Found {result['count']} of {result['requested']} videos")
            _print_videos(result["videos"])

        elif args.command == "related":
            print(f"Related to {result['video_id']}: {result['count']} videos")
            _print_videos(result["videos"])

        elif args.command == "clear-cache":
            print(f"Removed {result['removed']} cached pool(s)")

        print(f"{'=' * 50}\n")

    if exit_code:
        sys.exit(exit_code)


if __name__ == "__main__":
    main()
