"""
Runtime settings, read from the environment (and a .env file via the CLI).
"""
import os
from functools import lru_cache

from pydantic import BaseModel, Field


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    youtube_api_key: str = Field(default_factory=lambda: os.getenv("YOUTUBE_API_KEY", ""))
    youtube_api_base_url: str = Field(
        default_factory=lambda: os.getenv(
            "YOUTUBE_API_BASE_URL", "https://www.googleapis.com/youtube/v3"
        )
    )
    db_path: str = Field(default_factory=lambda: os.getenv("GEMFEED_DB_PATH", "gemfeed.db"))
    region_code: str = Field(default_factory=lambda: os.getenv("GEMFEED_REGION", "KR"))
    trending_ttl_seconds: int = Field(
        default_factory=lambda: int(os.getenv("GEMFEED_TRENDING_TTL_SECONDS", "3600"))
    )
    trending_pages: int = Field(
        default_factory=lambda: int(os.getenv("GEMFEED_TRENDING_PAGES", "2"))
    )
    target_size: int = Field(
        default_factory=lambda: int(os.getenv("GEMFEED_TARGET_SIZE", "50"))
    )
    anonymous_sample_size: int = Field(
        default_factory=lambda: int(os.getenv("GEMFEED_ANONYMOUS_SAMPLE_SIZE", "50"))
    )
    request_timeout: float = Field(
        default_factory=lambda: float(os.getenv("GEMFEED_REQUEST_TIMEOUT", "30"))
    )
    enrich_history: bool = Field(
        default_factory=lambda: _env_bool("GEMFEED_ENRICH_HISTORY", True)
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
