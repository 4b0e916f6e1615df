# Discovery module
from .models import VideoRecord, VideoStatistics, load_videos, dump_videos
from .gems import score_and_rank, utc_now
from .composer import compose_discovery_feed
from .youtube_client import YouTubeClient, YouTubeAPIError
