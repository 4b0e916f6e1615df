"""
SQLite store for the trending-pool cache.
"""
import json
import logging
import sqlite3
from datetime import datetime, timezone
from typing import Optional, Tuple

from ..discovery.models import VideoRecord, dump_videos, load_videos

logger = logging.getLogger(__name__)


class Database:
    """Database adapter for cached trending pools."""

    def __init__(self, db_path: str):
        """
        Args:
            db_path: Path to the SQLite file (":memory:" works for tests).
        """
        self.db_path = db_path
        self._conn: Optional[sqlite3.Connection] = None

    def connect(self) -> None:
        """Establish database connection."""
        self._conn = sqlite3.connect(self.db_path)
        self._conn.row_factory = sqlite3.Row

    def close(self) -> None:
        """Close database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def _require_conn(self) -> sqlite3.Connection:
        if not self._conn:
            raise RuntimeError("Database not connected")
        return self._conn

    def ensure_trending_tables(self) -> None:
        """Create the trending_pool table if it doesn't exist."""
        conn = self._require_conn()
        conn.execute("""
            CREATE TABLE IF NOT EXISTS trending_pool (
                id TEXT PRIMARY KEY,
                data TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        """)
        conn.commit()

    def get_trending_cache(
        self, cache_id: str
    ) -> Optional[Tuple[list[VideoRecord], datetime]]:
        """Load a cached pool.

        Returns:
            (videos, updated_at) or None if there is no usable row.
        """
        conn = self._require_conn()
        row = conn.execute(
            "SELECT data, updated_at FROM trending_pool WHERE id = ?",
            (cache_id,),
        ).fetchone()
        if not row:
            return None

        try:
            videos = load_videos(json.loads(row["data"]))
            updated_at = datetime.fromisoformat(row["updated_at"].replace("Z", "+00:00"))
        except ValueError as e:
            # pydantic's ValidationError and JSONDecodeError are both ValueErrors
            logger.warning("Ignoring corrupt trending cache row %s: %s", cache_id, e)
            return None

        if updated_at.tzinfo is None:
            updated_at = updated_at.replace(tzinfo=timezone.utc)
        return videos, updated_at

    def save_trending_cache(
        self,
        cache_id: str,
        videos: list[VideoRecord],
        updated_at: Optional[datetime] = None,
    ) -> None:
        """Insert or replace a cached pool."""
        conn = self._require_conn()
        if updated_at is None:
            updated_at = datetime.now(timezone.utc)

        conn.execute("""
            INSERT INTO trending_pool (id, data, updated_at)
            VALUES (?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                data = excluded.data,
                updated_at = excluded.updated_at
        """, (
            cache_id,
            json.dumps(dump_videos(videos), ensure_ascii=False),
            updated_at.isoformat(),
        ))
        conn.commit()

    def clear_trending_cache(self, cache_id: Optional[str] = None) -> int:
        """Delete one cached pool, or all of them. Returns rows removed."""
        conn = self._require_conn()
        if cache_id is None:
            cursor = conn.execute("DELETE FROM trending_pool")
        else:
            cursor = conn.execute("DELETE FROM trending_pool WHERE id = ?", (cache_id,))
        conn.commit()
        return cursor.rowcount
