"""RSS feed module: retrieval, parsing and normalization of feed items."""

from .fetcher import FeedFetcher, feed_url
from .models import FetchedFeed, RawItem, VideoRecord
from .normalize import normalize_item, parse_date, resolve_thumbnail

__all__ = [
    "FeedFetcher",
    "FetchedFeed",
    "RawItem",
    "VideoRecord",
    "feed_url",
    "normalize_item",
    "parse_date",
    "resolve_thumbnail",
]
