"""
Personalized discovery feed composition.

Blends three sources into one shuffled list:
  - Interest-aligned: categories the user watches, from channels they haven't seen
  - Serendipity: categories the user has never touched
  - Backfill: whatever is left of the trending pool when the above run short
"""
import logging
from typing import Optional

import numpy as np

from .gems import Clock, score_and_rank, utc_now
from .models import VideoRecord

logger = logging.getLogger(__name__)

SERENDIPITY_RATIO = 0.2
MAX_FEED_TAGS = 3
POPULAR_LIKE_RATIO = 0.07

TAG_MY_INTERESTS = "#my-interests"
TAG_NEW_PERSPECTIVE = "#new-perspective"
TAG_TRENDING = "#trending"

TAG_NEW_CHANNEL = "new/unknown channel"
TAG_GENUINELY_POPULAR = "genuinely popular"


def _allocate(target_size: int) -> tuple[int, int]:
    """Split a target size into (relevance_size, serendipity_size)."""
    serendipity_size = int(target_size * SERENDIPITY_RATIO)
    return target_size - serendipity_size, serendipity_size


def _insight_tags(video: VideoRecord, known_channel_ids: set[str]) -> list[str]:
    tags = []
    if video.channel_id is None or video.channel_id not in known_channel_ids:
        tags.append(TAG_NEW_CHANNEL)
    if video.statistics is not None:
        views = max(1, video.view_count)
        if video.like_count / views > POPULAR_LIKE_RATIO:
            tags.append(TAG_GENUINELY_POPULAR)
    return tags


def _rank_and_tag(
    videos: list[VideoRecord],
    base_tag: str,
    known_channel_ids: set[str],
    clock: Clock,
) -> list[VideoRecord]:
    """Gem-rank a pool, then put the base tag and insight tags in front."""
    tagged = []
    for video in score_and_rank(videos, clock=clock):
        tags = [base_tag, *_insight_tags(video, known_channel_ids), *(video.tags or [])]
        tagged.append(video.model_copy(update={"tags": tags[:MAX_FEED_TAGS]}))
    return tagged


def _dedupe(videos: list[VideoRecord]) -> list[VideoRecord]:
    seen = set()
    unique = []
    for video in videos:
        if video.id in seen:
            continue
        seen.add(video.id)
        unique.append(video)
    return unique


def compose_discovery_feed(
    history: list[VideoRecord],
    trending_pool: list[VideoRecord],
    target_size: int = 50,
    clock: Clock = utc_now,
    rng: Optional[np.random.Generator] = None,
) -> list[VideoRecord]:
    """Build a shuffled discovery feed for one user.

    Args:
        history: Videos the user has already watched.
        trending_pool: Candidate universe for this call.
        target_size: Desired feed length. Negative values are treated as 0.
        clock: Current-time provider passed to the gem scorer.
        rng: Random source for the final shuffle. A fresh unseeded
            generator is used when omitted.

    Returns:
        At most ``target_size`` unwatched videos with unique ids, tagged
        and in random order. Shorter when the trending pool runs out.
    """
    target_size = max(0, int(target_size))
    if rng is None:
        rng = np.random.default_rng()

    watched_ids = {v.id for v in history}
    known_channel_ids = {v.channel_id for v in history if v.channel_id is not None}
    user_categories = {v.category_id for v in history if v.category_id is not None}

    fresh_trending = _dedupe([v for v in trending_pool if v.id not in watched_ids])

    # Same topic, new creator
    interest_based = [
        v for v in fresh_trending
        if v.category_id in user_categories
        and (v.channel_id is None or v.channel_id not in known_channel_ids)
    ]
    # Topics the user has never touched
    serendipity_pool = [
        v for v in fresh_trending if v.category_id not in user_categories
    ]

    relevance_size, serendipity_size = _allocate(target_size)

    ranked_interests = _rank_and_tag(
        interest_based, TAG_MY_INTERESTS, known_channel_ids, clock
    )
    ranked_serendipity = _rank_and_tag(
        serendipity_pool, TAG_NEW_PERSPECTIVE, known_channel_ids, clock
    )

    combined = ranked_interests[:relevance_size] + ranked_serendipity[:serendipity_size]

    logger.debug(
        "Pools: fresh=%d interest=%d serendipity=%d (allocated %d/%d)",
        len(fresh_trending),
        len(interest_based),
        len(serendipity_pool),
        relevance_size,
        serendipity_size,
    )

    shortfall = target_size - len(combined)
    if shortfall > 0:
        included_ids = {v.id for v in combined}
        remaining = [v for v in fresh_trending if v.id not in included_ids][:shortfall]
        if remaining:
            logger.debug("Backfilling %d trending videos", len(remaining))
            combined.extend(
                _rank_and_tag(remaining, TAG_TRENDING, known_channel_ids, clock)
            )

    order = rng.permutation(len(combined))
    feed = [combined[i] for i in order]

    logger.info(
        "Composed discovery feed: %d videos (target %d, history %d, pool %d)",
        len(feed),
        target_size,
        len(history),
        len(trending_pool),
    )
    return feed
