"""
Data models for the discovery engine.

Video records keep the YouTube Data API's camelCase field names on the wire,
so JSON produced by the API (or by a previous feed) can be loaded and dumped
without translation.
"""
from datetime import datetime, timezone
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def _parse_count(value: Optional[Union[str, int]]) -> int:
    """Parse a count. Missing or malformed values read as 0."""
    if value is None:
        return 0
    try:
        return max(0, int(value))
    except (TypeError, ValueError):
        return 0


class VideoStatistics(BaseModel):
    """Engagement counters as reported by the platform.

    The API sends strings; hand-written JSON often has plain numbers.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="allow"
    )

    view_count: Optional[Union[str, int]] = None
    like_count: Optional[Union[str, int]] = None
    comment_count: Optional[Union[str, int]] = None


class VideoRecord(BaseModel):
    """One candidate video.

    ``gem_score`` and ``tags`` are derived fields: they stay ``None`` until a
    scoring or composition pass fills them in on a copy of the record.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="allow"
    )

    id: str
    title: str = ""
    thumbnail: str = ""
    channel_title: str = ""
    channel_id: Optional[str] = None
    category_id: Optional[str] = None
    published_at: Optional[str] = None
    description: str = ""
    statistics: Optional[VideoStatistics] = None
    gem_score: Optional[float] = None
    tags: Optional[list[str]] = None

    @property
    def view_count(self) -> int:
        if self.statistics is None:
            return 0
        return _parse_count(self.statistics.view_count)

    @property
    def like_count(self) -> int:
        if self.statistics is None:
            return 0
        return _parse_count(self.statistics.like_count)

    @property
    def comment_count(self) -> int:
        if self.statistics is None:
            return 0
        return _parse_count(self.statistics.comment_count)

    @property
    def published_datetime(self) -> Optional[datetime]:
        """``published_at`` as an aware datetime, or None if absent/invalid.

        Naive timestamps are assumed to be UTC.
        """
        if not self.published_at:
            return None
        try:
            parsed = datetime.fromisoformat(self.published_at.replace("Z", "+00:00"))
        except ValueError:
            return None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed

    def to_dict(self) -> dict[str, Any]:
        """Serialize with camelCase keys, omitting absent optional fields."""
        return self.model_dump(by_alias=True, exclude_none=True)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "VideoRecord":
        return cls.model_validate(data)


def load_videos(data: list[dict[str, Any]]) -> list[VideoRecord]:
    """Validate a JSON list of video dicts into VideoRecords."""
    return [VideoRecord.from_dict(item) for item in data]


def dump_videos(videos: list[VideoRecord]) -> list[dict[str, Any]]:
    return [v.to_dict() for v in videos]
