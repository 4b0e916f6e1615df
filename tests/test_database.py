"""
Tests for the trending cache database.
"""
from datetime import datetime, timezone

import pytest

from gemfeed.db.database import Database
from gemfeed.discovery.models import VideoRecord


def _videos():
    return [
        VideoRecord(
            id="a",
            title="첫 번째 영상",
            channel_id="c1",
            category_id="10",
            statistics={"viewCount": "100", "likeCount": "5", "commentCount": "1"},
        ),
        VideoRecord(id="b", title="Second"),
    ]


class TestTrendingCache:
    def test_ensure_tables_idempotent(self, temp_db):
        # Calling twice should not raise
        temp_db.ensure_trending_tables()
        temp_db.ensure_trending_tables()

    def test_missing_cache_returns_none(self, temp_db):
        assert temp_db.get_trending_cache("kr_trends") is None

    def test_save_and_get(self, temp_db):
        updated = datetime(2025, 1, 10, 12, 0, tzinfo=timezone.utc)
        temp_db.save_trending_cache("kr_trends", _videos(), updated_at=updated)

        videos, updated_at = temp_db.get_trending_cache("kr_trends")
        assert [v.id for v in videos] == ["a", "b"]
        assert videos[0].title == "첫 번째 영상"
        assert videos[0].view_count == 100
        assert videos[1].statistics is None
        assert updated_at == updated

    def test_save_upserts(self, temp_db):
        temp_db.save_trending_cache("kr_trends", _videos())
        temp_db.save_trending_cache("kr_trends", [VideoRecord(id="c")])

        videos, _ = temp_db.get_trending_cache("kr_trends")
        assert [v.id for v in videos] == ["c"]

    def test_default_updated_at_is_aware(self, temp_db):
        temp_db.save_trending_cache("us_trends", [])
        videos, updated_at = temp_db.get_trending_cache("us_trends")
        assert videos == []
        assert updated_at.tzinfo is not None

    def test_corrupt_row_is_a_miss(self, temp_db):
        temp_db._conn.execute(
            "INSERT INTO trending_pool (id, data, updated_at) VALUES (?, ?, ?)",
            ("kr_trends", "{not json", "2025-01-10T12:00:00+00:00"),
        )
        temp_db._conn.commit()
        assert temp_db.get_trending_cache("kr_trends") is None

    def test_clear_one_region(self, temp_db):
        temp_db.save_trending_cache("kr_trends", _videos())
        temp_db.save_trending_cache("us_trends", _videos())

        assert temp_db.clear_trending_cache("kr_trends") == 1
        assert temp_db.get_trending_cache("kr_trends") is None
        assert temp_db.get_trending_cache("us_trends") is not None

    def test_clear_all(self, temp_db):
        temp_db.save_trending_cache("kr_trends", _videos())
        temp_db.save_trending_cache("us_trends", _videos())
        assert temp_db.clear_trending_cache() == 2


class TestConnection:
    def test_not_connected_raises(self):
        db = Database(":memory:")
        with pytest.raises(RuntimeError, match="not connected"):
            db.get_trending_cache("kr_trends")

    def test_context_manager(self):
        with Database(":memory:") as db:
            db.ensure_trending_tables()
            db.save_trending_cache("kr_trends", [])
            assert db.get_trending_cache("kr_trends") is not None
        assert db._conn is None
