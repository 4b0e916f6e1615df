"""
Pytest configuration and fixtures.
"""
import os
import sys
import tempfile

import pytest

# Add repo root to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from gemfeed.config import get_settings
from gemfeed.db.database import Database


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch):
    """Keep real credentials and env overrides out of tests."""
    for name in list(os.environ):
        if name.startswith("GEMFEED_") or name.startswith("YOUTUBE_"):
            monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()

@pytest.fixture
def temp_db():
    """Create a temporary SQLite database with the trending cache table."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = f.name

    db = Database(db_path)
    db.connect()
    db.ensure_trending_tables()
    yield db
    db.close()
    os.unlink(db_path)
