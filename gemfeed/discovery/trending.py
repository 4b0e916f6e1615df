"""
Regional trending pool with a SQLite-backed TTL cache.
"""
import logging
from datetime import timedelta

from ..db.database import Database
from .gems import Clock, as_utc, utc_now
from .models import VideoRecord
from .youtube_client import YouTubeClient

logger = logging.getLogger(__name__)


def cache_id_for_region(region_code: str) -> str:
    return f"{region_code.lower()}_trends"


def get_trending_pool(
    db: Database,
    client: YouTubeClient,
    region_code: str = "KR",
    ttl_seconds: int = 3600,
    max_pages: int = 2,
    clock: Clock = utc_now,
    force_refresh: bool = False,
) -> list[VideoRecord]:
    """Return the trending pool for a region, hitting the API only when stale.

    Args:
        db: Connected database holding the cache.
        client: API client used on a cache miss.
        region_code: ISO 3166-1 alpha-2 region.
        ttl_seconds: Max cache age before refetching.
        max_pages: Chart pages to fetch on refresh (50 videos each).
        clock: Current-time provider for the age check.
        force_refresh: Skip the cache lookup.

    Raises:
        YouTubeAPIError: If the cache is stale/missing and the fetch fails.
    """
    db.ensure_trending_tables()
    cache_id = cache_id_for_region(region_code)
    now = as_utc(clock())

    if not force_refresh:
        cached = db.get_trending_cache(cache_id)
        if cached is not None:
            videos, updated_at = cached
            if now - updated_at < timedelta(seconds=ttl_seconds):
                logger.info("Using cached trending pool %s (%d videos)", cache_id, len(videos))
                return videos
            logger.warning("Trending cache %s expired (updated %s)", cache_id, updated_at.isoformat())

    videos = client.get_trending_videos(region_code=region_code, max_pages=max_pages)
    db.save_trending_cache(cache_id, videos, updated_at=now)
    return videos
