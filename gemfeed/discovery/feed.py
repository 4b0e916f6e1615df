"""
Discovery feed service.

Anonymous callers get a random sample of the trending pool. Signed-in callers
get a personalized feed built from their watch history.
"""
import logging
from typing import Optional

import numpy as np

from ..config import Settings, get_settings
from ..db.database import Database
from .composer import compose_discovery_feed
from .gems import Clock, utc_now
from .models import VideoRecord
from .trending import get_trending_pool
from .youtube_client import YouTubeAPIError, YouTubeClient

logger = logging.getLogger(__name__)


def filter_watched_videos(
    all_videos: list[VideoRecord], watched_videos: list[VideoRecord]
) -> list[VideoRecord]:
    """Drop every video whose id appears in ``watched_videos``."""
    watched_ids = {v.id for v in watched_videos}
    return [v for v in all_videos if v.id not in watched_ids]


def sample_videos(
    videos: list[VideoRecord], size: int, rng: np.random.Generator
) -> list[VideoRecord]:
    """Uniform random sample without replacement, in random order."""
    size = max(0, min(size, len(videos)))
    if size == 0:
        return []
    picks = rng.choice(len(videos), size=size, replace=False)
    return [videos[i] for i in picks]


class DiscoveryFeed:
    """Builds the feed served for one request."""

    def __init__(
        self,
        db: Database,
        client: YouTubeClient,
        settings: Optional[Settings] = None,
        clock: Clock = utc_now,
        rng: Optional[np.random.Generator] = None,
    ):
        self.db = db
        self.client = client
        self.settings = settings or get_settings()
        self.clock = clock
        self.rng = rng if rng is not None else np.random.default_rng()

    def load_trending(self, force_refresh: bool = False) -> list[VideoRecord]:
        return get_trending_pool(
            self.db,
            self.client,
            region_code=self.settings.region_code,
            ttl_seconds=self.settings.trending_ttl_seconds,
            max_pages=self.settings.trending_pages,
            clock=self.clock,
            force_refresh=force_refresh,
        )

    def anonymous_feed(self, trending: list[VideoRecord]) -> list[VideoRecord]:
        return sample_videos(trending, self.settings.anonymous_sample_size, self.rng)

    def enrich_history(self, history: list[VideoRecord]) -> list[VideoRecord]:
        """Fill in channel and category ids from a detail lookup.

        Activity records carry neither, which would leave the interest pool
        empty. On failure the history is returned as-is.
        """
        missing = [v.id for v in history if v.channel_id is None or v.category_id is None]
        if not missing:
            return history

        try:
            details = {v.id: v for v in self.client.get_video_details(missing)}
        except YouTubeAPIError as e:
            logger.warning("History enrichment failed, using raw history: %s", e)
            return history

        enriched = []
        for video in history:
            detail = details.get(video.id)
            if detail is None:
                enriched.append(video)
                continue
            enriched.append(video.model_copy(update={
                "channel_id": video.channel_id or detail.channel_id,
                "category_id": video.category_id or detail.category_id,
            }))
        logger.debug("Enriched %d of %d history entries", len(details), len(history))
        return enriched

    def personal_feed(
        self,
        history: list[VideoRecord],
        trending: list[VideoRecord],
        target_size: Optional[int] = None,
    ) -> list[VideoRecord]:
        if target_size is None:
            target_size = self.settings.target_size
        return compose_discovery_feed(
            history,
            trending,
            target_size=target_size,
            clock=self.clock,
            rng=self.rng,
        )

    def run(
        self,
        access_token: Optional[str] = None,
        target_size: Optional[int] = None,
    ) -> list[VideoRecord]:
        """Serve one feed request.

        Raises:
            YouTubeAPIError: If the trending pool cannot be loaded.
        """
        trending = self.load_trending()

        if not access_token:
            feed = self.anonymous_feed(trending)
            logger.info("Served anonymous feed: %d videos", len(feed))
            return feed

        history = self.client.get_user_history(access_token)
        if self.settings.enrich_history and history:
            history = self.enrich_history(history)

        return self.personal_feed(history, trending, target_size=target_size)
