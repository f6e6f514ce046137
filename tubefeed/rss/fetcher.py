"""Feed retrieval over HTTP."""

import asyncio
import logging

import feedparser
import httpx

from tubefeed.errors import FetchError

from .models import FetchedFeed, RawItem

logger = logging.getLogger(__name__)

YOUTUBE_FEED_URL = "https://www.youtube.com/feeds/videos.xml?channel_id={channel_id}"

HEADERS = {
    "User-Agent": "tubefeed/1.0",
    "Accept": "application/atom+xml, application/rss+xml, application/xml, text/xml",
}


def feed_url(source: str) -> str:
    """Build the feed URL for a source.

    Full URLs are used as-is, anything else is treated as a YouTube
    channel ID.
    """
    source = source.strip()
    if source.startswith(("http://", "https://")):
        return source
    return YOUTUBE_FEED_URL.format(channel_id=source)


class FeedFetcher:
    """Fetches and parses one feed at a time.

    A shared ``httpx.AsyncClient`` may be passed in; otherwise a client is
    opened per request.
    """

    def __init__(self, timeout: float = 15.0, client: httpx.AsyncClient | None = None):
        self._timeout = timeout
        self._client = client

    async def _get(self, url: str) -> httpx.Response:
        if self._client is not None:
            return await self._client.get(url, headers=HEADERS)
        async with httpx.AsyncClient(
            timeout=self._timeout, follow_redirects=True
        ) as client:
            return await client.get(url, headers=HEADERS)

    async def fetch(self, source: str) -> FetchedFeed:
        """Retrieve and parse a single feed.

        Args:
            source: YouTube channel ID or feed URL

        Returns:
            The feed title and its raw entries

        Raises:
            FetchError: On transport errors, non-2xx responses, or a body
                that could not be parsed as a feed
        """
        url = feed_url(source)
        logger.debug("Fetching feed %s from %s", source, url)

        try:
            response = await self._get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise FetchError(source, f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise FetchError(source, e) from e

        # Parsing is CPU-bound; keep it off the event loop
        parsed = await asyncio.to_thread(feedparser.parse, response.content)
        if parsed.bozo and not parsed.entries and not parsed.feed:
            raise FetchError(source, parsed.get("bozo_exception", "unparseable feed"))

        title = parsed.feed.get("title") or None
        items = [RawItem.from_entry(entry) for entry in parsed.entries]
        logger.info("Parsed feed %s: %d items", source, len(items))
        return FetchedFeed(source=source.strip(), title=title, items=items)
