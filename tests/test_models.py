"""
Tests for video record models.
"""
from datetime import datetime, timezone

from gemfeed.discovery.models import VideoRecord, dump_videos, load_videos


def _api_dict(**overrides):
    data = {
        "id": "abc123",
        "title": "Test Video",
        "thumbnail": "https://img.youtube.com/vi/abc123/hqdefault.jpg",
        "channelTitle": "TestChannel",
        "channelId": "UC123",
        "categoryId": "22",
        "publishedAt": "2025-01-01T00:00:00Z",
        "description": "A test video description",
        "statistics": {"viewCount": "50000", "likeCount": "1000", "commentCount": "200"},
    }
    data.update(overrides)
    return data


class TestVideoRecord:
    def test_create_from_camel_case(self):
        video = VideoRecord.from_dict(_api_dict())
        assert video.channel_id == "UC123"
        assert video.category_id == "22"
        assert video.view_count == 50000
        assert video.like_count == 1000
        assert video.comment_count == 200

    def test_to_dict_uses_camel_case(self):
        data = VideoRecord.from_dict(_api_dict()).to_dict()
        assert data["channelId"] == "UC123"
        assert data["statistics"]["viewCount"] == "50000"
        assert "gemScore" not in data
        assert "tags" not in data

    def test_minimal_record(self):
        video = VideoRecord(id="h1")
        assert video.channel_id is None
        assert video.category_id is None
        assert video.statistics is None
        assert video.view_count == 0
        assert video.to_dict() == {
            "id": "h1",
            "title": "",
            "thumbnail": "",
            "channelTitle": "",
            "description": "",
        }

    def test_malformed_counts_read_as_zero(self):
        video = VideoRecord.from_dict(
            _api_dict(statistics={"viewCount": "lots", "likeCount": None})
        )
        assert video.view_count == 0
        assert video.like_count == 0
        assert video.comment_count == 0

    def test_numeric_counts(self):
        [video] = load_videos([{"id": "a", "statistics": {"viewCount": 1000, "likeCount": 5}}])
        assert video.view_count == 1000
        assert video.like_count == 5
        assert video.comment_count == 0
        assert video.to_dict()["statistics"] == {"viewCount": 1000, "likeCount": 5}

    def test_published_datetime(self):
        video = VideoRecord.from_dict(_api_dict())
        assert video.published_datetime == datetime(2025, 1, 1, tzinfo=timezone.utc)

    def test_published_datetime_naive_is_utc(self):
        video = VideoRecord(id="x", published_at="2025-01-01T06:30:00")
        assert video.published_datetime.tzinfo is not None
        assert video.published_datetime.hour == 6

    def test_published_datetime_invalid(self):
        assert VideoRecord(id="x", published_at="yesterday").published_datetime is None
        assert VideoRecord(id="x").published_datetime is None

    def test_extra_fields_round_trip(self):
        video = VideoRecord.from_dict(_api_dict(duration="PT10M"))
        assert video.to_dict()["duration"] == "PT10M"

    def test_load_and_dump_videos(self):
        videos = load_videos([_api_dict(id="a"), _api_dict(id="b", gemScore=12.5, tags=["x"])])
        assert [v.id for v in videos] == ["a", "b"]
        assert videos[1].gem_score == 12.5

        dumped = dump_videos(videos)
        assert dumped[1]["tags"] == ["x"]
        assert "tags" not in dumped[0]
