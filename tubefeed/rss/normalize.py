"""Normalization of raw feed entries into VideoRecord objects.

Everything in here is total: malformed or missing fields fall back to a
default instead of raising.
"""

import logging
import re
from collections.abc import Mapping
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any

from .models import RawItem, VideoRecord

logger = logging.getLogger(__name__)

PLACEHOLDER_THUMBNAIL = (
    "https://via.placeholder.com/320x180/cccccc/666666?text=No+Thumbnail"
)

# Highest quality first. Only the first tier is ever used: the image host
# is not probed to see which sizes exist.
THUMBNAIL_TIERS = ("maxresdefault", "hqdefault", "mqdefault", "sddefault")

# Tried in order, first match wins
VIDEO_ID_PATTERNS = (
    re.compile(r"[?&]v=([^&]+)"),
    re.compile(r"/shorts/([^/?&]+)"),
    re.compile(r"/embed/([^/?&]+)"),
    re.compile(r"/watch\?v=([^&]+)"),
)

_TRAILING_GMT = re.compile(r"\s+GMT$")


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _try_parse(value: str) -> datetime | None:
    """Parse an ISO 8601 or RFC 2822 timestamp, or return None."""
    value = value.strip()
    if not value:
        return None
    try:
        return _as_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))
    except (ValueError, OverflowError):
        # Offsets at the edge of the calendar overflow when converted to UTC
        pass
    try:
        return _as_utc(parsedate_to_datetime(value))
    except (TypeError, ValueError, IndexError, OverflowError):
        return None


def parse_date(value: str | None) -> datetime:
    """Parse a feed publish date, falling back to the current time.

    Args:
        value: The raw date string from the feed entry, if any

    Returns:
        A timezone-aware UTC datetime. Never raises.
    """
    if not value:
        logger.debug("No publish date on entry, using current time")
        return _now()

    parsed = _try_parse(value)
    if parsed is not None:
        return parsed

    parsed = _try_parse(_TRAILING_GMT.sub("", value))
    if parsed is not None:
        logger.debug("Parsed date %r after dropping GMT suffix", value)
        return parsed

    logger.warning("Failed to parse date string %r, using current time", value)
    return _now()


def _thumbnail_url(value: Any) -> str | None:
    """Pull the url out of a thumbnail list or a single thumbnail mapping."""
    if isinstance(value, list):
        value = value[0] if value else None
    if isinstance(value, Mapping):
        url = value.get("url")
        if isinstance(url, str) and url:
            return url
    return None


def extract_video_id(link: str | None) -> str | None:
    """Extract a YouTube video ID from a watch, shorts or embed URL."""
    if not link:
        return None
    for pattern in VIDEO_ID_PATTERNS:
        match = pattern.search(link)
        if match:
            return match.group(1)
    return None


def thumbnail_candidates(video_id: str) -> list[str]:
    """Thumbnail URLs for a video, highest quality first."""
    return [f"https://img.youtube.com/vi/{video_id}/{tier}.jpg" for tier in THUMBNAIL_TIERS]


def resolve_thumbnail(item: RawItem) -> str:
    """Pick the best thumbnail URL for an item.

    Resolution order:
    1. ``media:thumbnail`` inside ``media:group``
    2. A top-level ``media:thumbnail``
    3. A URL synthesized from the video ID in the item's link
    4. A placeholder image
    """
    if item.media_group:
        url = _thumbnail_url(item.media_group.get("media_thumbnail"))
        if url:
            return url

    url = _thumbnail_url(item.media_thumbnail)
    if url:
        return url

    video_id = extract_video_id(item.link)
    if video_id:
        return thumbnail_candidates(video_id)[0]

    logger.info(
        "No thumbnail found for %r (link=%r, media_group=%s, media_thumbnail=%s)",
        item.title,
        item.link,
        item.media_group is not None,
        item.media_thumbnail is not None,
    )
    return PLACEHOLDER_THUMBNAIL


def normalize_item(item: RawItem, source_label: str) -> VideoRecord:
    """Convert a raw feed entry into a VideoRecord.

    Args:
        item: The raw entry from the feed parser
        source_label: Channel name to tag the record with

    Returns:
        A fully populated VideoRecord
    """
    return VideoRecord(
        title=item.title or "Untitled",
        link=item.link or "",
        thumbnail=resolve_thumbnail(item),
        channel=source_label,
        publish_date=parse_date(item.pub_date),
        description=item.content_snippet or item.content or "",
    )
