"""
YouTube Data API v3 access: trending chart, details, keyword search, history.

Each call returns VideoRecords ready for the gem scorer and composer.
"""
import logging
from typing import Any, Optional

import httpx

from ..config import get_settings
from .models import VideoRecord, VideoStatistics

logger = logging.getLogger(__name__)

MAX_IDS_PER_REQUEST = 50  # videos.list limit


class YouTubeAPIError(Exception):
    """A YouTube Data API request failed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


def _pick_thumbnail(snippet: dict) -> str:
    thumbnails = snippet.get("thumbnails", {})
    return (
        thumbnails.get("high", {}).get("url")
        or thumbnails.get("medium", {}).get("url")
        or thumbnails.get("default", {}).get("url", "")
    )


def _parse_video_item(item: dict, video_id: Optional[str] = None) -> VideoRecord:
    """Convert a videos.list / search.list / activities.list item to a record."""
    snippet = item.get("snippet", {})
    stats = item.get("statistics")
    return VideoRecord(
        id=video_id if video_id is not None else item["id"],
        title=snippet.get("title", ""),
        thumbnail=_pick_thumbnail(snippet),
        channel_title=snippet.get("channelTitle", ""),
        channel_id=snippet.get("channelId"),
        category_id=snippet.get("categoryId"),
        published_at=snippet.get("publishedAt"),
        description=snippet.get("description", ""),
        statistics=VideoStatistics.model_validate(stats) if stats is not None else None,
    )


def _error_message(resp: httpx.Response, fallback: str) -> str:
    """Pull ``error.message`` out of an API error body if there is one."""
    try:
        data = resp.json()
    except ValueError:
        return fallback
    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict) and error.get("message"):
            return error["message"]
    return fallback


class YouTubeClient:
    """Thin synchronous client around the YouTube Data API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        settings = get_settings()
        self.api_key = api_key if api_key is not None else settings.youtube_api_key
        self.base_url = (base_url or settings.youtube_api_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.request_timeout
        self._client = httpx.Client()

    def close(self) -> None:
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def _get(
        self,
        endpoint: str,
        params: dict[str, Any],
        failure: str,
        headers: Optional[dict[str, str]] = None,
    ) -> dict:
        """GET an endpoint and return the decoded JSON body.

        Raises:
            YouTubeAPIError: On transport errors or non-2xx responses.
        """
        try:
            resp = self._client.get(
                f"{self.base_url}/{endpoint}",
                params=params,
                headers=headers,
                timeout=self.timeout,
            )
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            message = _error_message(e.response, failure)
            if status == 403:
                logger.error("YouTube API quota exceeded or access denied: %s", message)
            else:
                logger.error("YouTube API error (%d): %s", status, message)
            raise YouTubeAPIError(message, status_code=status) from e
        except httpx.HTTPError as e:
            logger.error("%s: %s", failure, e)
            raise YouTubeAPIError(f"{failure}: {e}") from e

    def get_trending_videos(
        self, region_code: str = "KR", max_results: int = 50, max_pages: int = 2
    ) -> list[VideoRecord]:
        """Fetch the most-popular chart for a region.

        Follows ``nextPageToken`` for up to ``max_pages`` pages, so the default
        yields up to 100 videos.
        """
        params = {
            "part": "snippet,contentDetails,statistics",
            "chart": "mostPopular",
            "regionCode": region_code,
            "maxResults": min(max_results, MAX_IDS_PER_REQUEST),
            "key": self.api_key,
        }

        items: list[dict] = []
        for page in range(max(1, max_pages)):
            data = self._get(
                "videos", params, f"YouTube trending fetch failed ({region_code}, page {page + 1})"
            )
            items.extend(data.get("items", []))
            next_token = data.get("nextPageToken")
            if not next_token:
                break
            params = {**params, "pageToken": next_token}

        videos = [_parse_video_item(item) for item in items]
        logger.info("Fetched %d trending videos for region %s", len(videos), region_code)
        return videos

    def get_video_details(self, video_ids: list[str]) -> list[VideoRecord]:
        """Fetch full snippet and statistics for the given ids."""
        if not video_ids:
            return []

        videos = []
        for start in range(0, len(video_ids), MAX_IDS_PER_REQUEST):
            batch = video_ids[start:start + MAX_IDS_PER_REQUEST]
            data = self._get(
                "videos",
                {
                    "part": "snippet,contentDetails,statistics",
                    "id": ",".join(batch),
                    "key": self.api_key,
                },
                "YouTube detail fetch failed",
            )
            videos.extend(_parse_video_item(item) for item in data.get("items", []))

        logger.info("Fetched details for %d of %d videos", len(videos), len(video_ids))
        return videos

    def get_related_videos(
        self,
        video_id: str,
        max_results: int = 10,
        video_title: Optional[str] = None,
    ) -> list[VideoRecord]:
        """Find videos related to ``video_id``.

        relatedToVideoId is no longer supported by the API, so this runs a
        keyword search on the title (or the id when no title is known).
        """
        query = video_title or video_id
        data = self._get(
            "search",
            {
                "part": "snippet",
                "q": query,
                "type": "video",
                "maxResults": min(max_results, MAX_IDS_PER_REQUEST),
                "key": self.api_key,
            },
            "YouTube search failed",
        )

        videos = []
        for item in data.get("items", []):
            related_id = item.get("id", {}).get("videoId")
            if not related_id:
                continue
            videos.append(_parse_video_item(item, video_id=related_id))

        logger.info("Found %d related videos for %s", len(videos), video_id)
        return videos

    def get_user_history(
        self, access_token: str, max_results: int = 50
    ) -> list[VideoRecord]:
        """Fetch the signed-in user's recent watch activity.

        Never raises: failures are logged and produce an empty history, so the
        feed degrades to pure discovery.
        """
        try:
            data = self._get(
                "activities",
                {
                    "part": "snippet,contentDetails",
                    "mine": "true",
                    "maxResults": min(max_results, MAX_IDS_PER_REQUEST),
                },
                "YouTube history fetch failed",
                headers={"Authorization": f"Bearer {access_token}"},
            )
        except YouTubeAPIError as e:
            logger.error("Could not load watch history: %s", e)
            return []

        history = []
        for item in data.get("items", []):
            watch = item.get("contentDetails", {}).get("watch", {})
            video_id = watch.get("videoId") or item.get("id")
            if not video_id:
                continue
            record = _parse_video_item(item, video_id=video_id)
            # The activity snippet describes the actor, not the watched video
            history.append(record.model_copy(update={"channel_id": None, "category_id": None}))

        logger.info("Loaded %d watch-history entries", len(history))
        return history
