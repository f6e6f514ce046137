"""Pydantic models for feed items."""

from collections.abc import Mapping
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys for the JSON API."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class VideoRecord(CamelModel):
    """A single normalized video, ready to be served to clients."""

    model_config = ConfigDict(frozen=True)

    title: str
    link: str
    thumbnail: str
    channel: str
    publish_date: datetime
    description: str = ""


class RawItem(BaseModel):
    """A loosely-typed feed entry as it comes out of the feed parser.

    Every field is optional. Only the normalizer reads these.
    """

    title: str | None = None
    link: str | None = None
    pub_date: str | None = None
    media_group: dict[str, Any] | None = None
    media_thumbnail: list[dict[str, Any]] | dict[str, Any] | None = None
    content: str | None = None
    content_snippet: str | None = None

    @classmethod
    def from_entry(cls, entry: Mapping[str, Any]) -> "RawItem":
        """Build a raw item from a feedparser entry."""
        content = entry.get("content")
        if isinstance(content, list):
            content = "".join(
                part.get("value", "") for part in content if isinstance(part, Mapping)
            )
        return cls(
            title=_text(entry.get("title")),
            link=_text(entry.get("link")),
            pub_date=_text(entry.get("published") or entry.get("updated")),
            media_group=_mapping(entry.get("media_group")),
            media_thumbnail=_thumbnails(entry.get("media_thumbnail")),
            content=_text(content),
            content_snippet=_text(entry.get("summary")),
        )


class FetchedFeed(BaseModel):
    """The parsed contents of one feed source."""

    source: str
    title: str | None = None
    items: list[RawItem] = []


def _text(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _mapping(value: Any) -> dict[str, Any] | None:
    return dict(value) if isinstance(value, Mapping) else None


def _thumbnails(value: Any) -> list[dict[str, Any]] | dict[str, Any] | None:
    if isinstance(value, Mapping):
        return dict(value)
    if isinstance(value, list):
        return [dict(v) for v in value if isinstance(v, Mapping)]
    return None
