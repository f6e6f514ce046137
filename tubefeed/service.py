"""Cache-first feed service used by the API routes."""

import logging
import time
from collections.abc import Callable, Sequence

from tubefeed.cache import CacheInfo, TTLCache
from tubefeed.errors import SubscriptionsError
from tubefeed.feed.aggregator import AggregationResult, Fetcher, SourceError, aggregate_feeds
from tubefeed.rss.models import CamelModel, VideoRecord

logger = logging.getLogger(__name__)

CACHE_KEY = "rss_feeds"
CACHE_TTL_SECONDS = 15 * 60

FETCH_FAILED = "Failed to fetch feeds"


def _millis(seconds: float | None = None) -> int:
    return int((time.time() if seconds is None else seconds) * 1000)


class FeedResponse(CamelModel):
    videos: list[VideoRecord]
    cached: bool
    cache_timestamp: int
    error: str | None = None
    errors: list[SourceError] = []


class RefreshResponse(CamelModel):
    success: bool
    timestamp: int
    message: str | None = None
    videos: list[VideoRecord] | None = None
    error: str | None = None
    errors: list[SourceError] = []


class CacheInfoResponse(CamelModel):
    success: bool
    cache_info: CacheInfo
    timestamp: int


class ClearCacheResponse(CamelModel):
    success: bool
    message: str
    timestamp: int


class FeedService:
    """Serves aggregated feeds, hitting upstream only when the cache is cold.

    Args:
        cache: Cache holding the last aggregation
        fetcher: Fetches a single feed source
        load_sources: Returns the configured sources, read on every aggregation
        cache_key: Key the aggregated feed is stored under
        ttl: Seconds an aggregation stays in the cache
    """

    def __init__(
        self,
        cache: TTLCache,
        fetcher: Fetcher,
        load_sources: Callable[[], Sequence[str]],
        cache_key: str = CACHE_KEY,
        ttl: float = CACHE_TTL_SECONDS,
    ):
        self.cache = cache
        self.fetcher = fetcher
        self._load_sources = load_sources
        self.cache_key = cache_key
        self.ttl = ttl

    async def _aggregate(self) -> AggregationResult:
        sources = self._load_sources()
        return await aggregate_feeds(sources, self.fetcher)

    async def get_feeds(self) -> FeedResponse:
        """Return the aggregated feed, from cache when possible."""
        entry = self.cache.get_entry(self.cache_key)
        if entry is not None:
            logger.debug("Serving %d cached videos", len(entry.data))
            return FeedResponse(
                videos=list(entry.data),
                cached=True,
                cache_timestamp=_millis(entry.created_at),
            )

        try:
            result = await self._aggregate()
        except SubscriptionsError as e:
            return FeedResponse(
                videos=[], cached=False, cache_timestamp=_millis(), error=str(e)
            )

        if result.failed:
            logger.error("All %d feed sources failed", len(result.errors))
            return FeedResponse(
                videos=[],
                cached=False,
                cache_timestamp=_millis(),
                error=FETCH_FAILED,
                errors=list(result.errors),
            )

        entry = self.cache.set(self.cache_key, result.videos, self.ttl)
        return FeedResponse(
            videos=list(result.videos),
            cached=False,
            cache_timestamp=_millis(entry.created_at),
            errors=list(result.errors),
        )

    async def refresh_feeds(self) -> RefreshResponse:
        """Re-aggregate all feeds and overwrite the cached copy.

        When every source fails the existing cache entry is kept and the
        response reports failure.
        """
        logger.info("Refreshing feeds, bypassing cache")
        try:
            result = await self._aggregate()
        except SubscriptionsError as e:
            return RefreshResponse(success=False, error=str(e), timestamp=_millis())

        if result.failed:
            logger.error("Refresh failed: all %d feed sources failed", len(result.errors))
            return RefreshResponse(
                success=False,
                error="Failed to refresh feeds",
                errors=list(result.errors),
                timestamp=_millis(),
            )

        self.cache.set(self.cache_key, result.videos, self.ttl)
        logger.info("Cache updated with %d fresh videos", len(result.videos))
        return RefreshResponse(
            success=True,
            message="Feeds refreshed successfully",
            videos=list(result.videos),
            errors=list(result.errors),
            timestamp=_millis(),
        )

    def cache_info(self) -> CacheInfoResponse:
        return CacheInfoResponse(
            success=True, cache_info=self.cache.cache_info(), timestamp=_millis()
        )

    def clear_cache(self) -> ClearCacheResponse:
        self.cache.clear()
        logger.info("Cache cleared")
        return ClearCacheResponse(
            success=True, message="Cache cleared successfully", timestamp=_millis()
        )
