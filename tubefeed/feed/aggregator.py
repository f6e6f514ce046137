"""Feed aggregator for merging YouTube RSS feeds from many sources."""

import asyncio
import logging
from collections.abc import Sequence
from typing import Protocol

from pydantic import BaseModel, ConfigDict

from tubefeed.errors import FetchError
from tubefeed.rss.models import FetchedFeed, VideoRecord
from tubefeed.rss.normalize import normalize_item

logger = logging.getLogger(__name__)


class Fetcher(Protocol):
    async def fetch(self, source: str) -> FetchedFeed: ...


class SourceError(BaseModel):
    """Why one source contributed nothing to an aggregation."""

    model_config = ConfigDict(frozen=True)

    source: str
    error: str


class AggregationResult(BaseModel):
    """Merged videos from all sources plus any per-source failures."""

    model_config = ConfigDict(frozen=True)

    videos: tuple[VideoRecord, ...] = ()
    errors: tuple[SourceError, ...] = ()
    succeeded: int = 0

    @property
    def failed(self) -> bool:
        """True when there were sources and every one of them failed.

        A source that returned an empty feed still counts as a success.
        """
        return self.succeeded == 0 and bool(self.errors)


def normalize_feed(feed: FetchedFeed) -> list[VideoRecord]:
    """Normalize every item of a fetched feed.

    Items are tagged with the feed's own title, or the source identifier
    when the feed has none.
    """
    label = feed.title or feed.source
    return [normalize_item(item, label) for item in feed.items]


async def aggregate_feeds(
    sources: Sequence[str], fetcher: Fetcher
) -> AggregationResult:
    """Fetch all sources concurrently and merge them into one sorted list.

    This function:
    1. Fetches every source at once and waits for all of them to settle
    2. Normalizes the items of each successful feed
    3. Records an error for each failed source instead of raising
    4. Sorts everything by publish date descending (stable, so ties keep
       the order they were fetched in)

    Args:
        sources: Channel IDs or feed URLs
        fetcher: Object used to fetch a single source

    Returns:
        An AggregationResult; never raises for per-source failures
    """
    results = await asyncio.gather(
        *(fetcher.fetch(source) for source in sources), return_exceptions=True
    )

    videos: list[VideoRecord] = []
    errors: list[SourceError] = []
    succeeded = 0
    for source, result in zip(sources, results):
        if isinstance(result, FetchError):
            logger.warning("Skipping source %s: %s", source, result.cause)
            errors.append(SourceError(source=source, error=str(result.cause)))
        elif isinstance(result, Exception):
            logger.error("Unexpected error fetching %s", source, exc_info=result)
            errors.append(SourceError(source=source, error=repr(result)))
        elif isinstance(result, BaseException):
            raise result
        else:
            try:
                videos.extend(normalize_feed(result))
            except Exception as e:
                logger.error("Could not normalize feed %s", source, exc_info=e)
                errors.append(SourceError(source=source, error=repr(e)))
            else:
                succeeded += 1

    videos.sort(key=lambda v: v.publish_date, reverse=True)
    logger.info(
        "Aggregated %d videos from %d sources (%d failed)",
        len(videos),
        len(sources),
        len(errors),
    )
    return AggregationResult(
        videos=tuple(videos), errors=tuple(errors), succeeded=succeeded
    )
