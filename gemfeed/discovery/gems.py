"""
"Hidden gem" scoring.

Rewards engagement relative to visibility:
  1. Like/view ratio (engagement) - base weight
  2. Comment/view ratio (active participation) - extra weight
  3. Freshness boost for recent uploads
  4. Size penalty for videos that are already huge
"""
from datetime import datetime, timezone
from typing import Callable, Optional

from .models import VideoRecord

Clock = Callable[[], datetime]

LIKE_RATIO_SCALE = 1000
COMMENT_RATIO_SCALE = 5000

# Strict ">" thresholds on view count
LARGE_CHANNEL_VIEWS = 1_000_000
MEDIUM_CHANNEL_VIEWS = 100_000

MAX_GEM_TAGS = 2

TAG_SMALL_CHANNEL = "new/small channel"
TAG_TRENDING_NOW = "trending now"
TAG_HIDDEN_GEM = "hidden gem"
TAG_HIGH_SATISFACTION = "high satisfaction"
TAG_FRESH_PERSPECTIVE = "fresh perspective"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(moment: datetime) -> datetime:
    """Treat naive datetimes as UTC so they compare with parsed timestamps."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def freshness_boost(hours_since_upload: Optional[float]) -> float:
    """1.5 under 24h, 1.2 under 72h, otherwise 1.0 (also for unknown age)."""
    if hours_since_upload is None:
        return 1.0
    if hours_since_upload < 24:
        return 1.5
    if hours_since_upload < 72:
        return 1.2
    return 1.0


def size_penalty(views: int) -> float:
    """Discount very large videos, boost small ones."""
    if views > LARGE_CHANNEL_VIEWS:
        return 0.7
    if views > MEDIUM_CHANNEL_VIEWS:
        return 0.9
    return 1.1


def _hours_since(video: VideoRecord, now: datetime) -> Optional[float]:
    published = video.published_datetime
    if published is None:
        return None
    return (now - published).total_seconds() / 3600


def score_video(video: VideoRecord, now: datetime) -> VideoRecord:
    """Return a copy of ``video`` with ``gem_score`` and ``tags`` filled in.

    Videos without statistics get a score of 0 and keep their tags untouched.
    """
    if video.statistics is None:
        return video.model_copy(update={"gem_score": 0.0})

    views = max(1, video.view_count)
    likes = video.like_count
    comments = video.comment_count

    like_ratio = (likes / views) * LIKE_RATIO_SCALE
    comment_ratio = (comments / views) * COMMENT_RATIO_SCALE

    boost = freshness_boost(_hours_since(video, now))
    penalty = size_penalty(views)

    gem_score = (like_ratio * 0.5 + comment_ratio * 0.5) * penalty * boost

    tags = []
    if penalty > 1.0:
        tags.append(TAG_SMALL_CHANNEL)
    if boost > 1.2:
        tags.append(TAG_TRENDING_NOW)
    if gem_score > 60:
        tags.append(TAG_HIDDEN_GEM)
    if like_ratio > 50:
        tags.append(TAG_HIGH_SATISFACTION)
    if not tags:
        tags.append(TAG_FRESH_PERSPECTIVE)

    return video.model_copy(update={
        "gem_score": round(gem_score, 2),
        "tags": tags[:MAX_GEM_TAGS],
    })


def score_and_rank(
    videos: list[VideoRecord], clock: Clock = utc_now
) -> list[VideoRecord]:
    """Score every video and sort by descending gem score.

    Args:
        videos: Candidate videos. Not modified.
        clock: Returns the current time; read once per call.

    Returns:
        New list with the same videos, scored and tagged. Ties keep input order.
    """
    now = as_utc(clock())
    scored = [score_video(v, now) for v in videos]
    scored.sort(key=lambda v: v.gem_score or 0.0, reverse=True)
    return scored
