"""Tests for feed aggregator functionality."""

import asyncio
from unittest.mock import patch

import pytest

from tubefeed.feed import aggregate_feeds, normalize_feed
from tubefeed.rss.models import FetchedFeed, RawItem
from tubefeed.rss.normalize import normalize_item

from tests.fakes import FakeFetcher, failing, make_feed


class TestNormalizeFeed:
    """Tests for normalize_feed function."""

    def test_channel_from_feed_title(self):
        feed = make_feed("UC_a", "2024-01-15T12:00:00Z", title="Channel A")
        assert [v.channel for v in normalize_feed(feed)] == ["Channel A"]

    def test_channel_falls_back_to_source(self):
        feed = make_feed("UC_a", "2024-01-15T12:00:00Z")
        assert [v.channel for v in normalize_feed(feed)] == ["UC_a"]


class TestAggregateFeeds:
    """Tests for aggregate_feeds function."""

    @pytest.mark.asyncio
    async def test_no_sources(self):
        result = await aggregate_feeds([], FakeFetcher({}))
        assert result.videos == ()
        assert result.errors == ()
        assert result.failed is False

    @pytest.mark.asyncio
    async def test_partial_failure_keeps_other_sources(self):
        """Sources A (2 items), B (fails), C (1 item) give 3 items and 1 error."""
        fetcher = FakeFetcher(
            {
                "A": make_feed("A", "2024-01-15T12:00:00Z", "2024-01-13T12:00:00Z"),
                "B": failing("B", "HTTP 404"),
                "C": make_feed("C", "2024-01-14T12:00:00Z"),
            }
        )

        result = await aggregate_feeds(["A", "B", "C"], fetcher)

        assert [v.title for v in result.videos] == [
            "A video 0",  # Jan 15
            "C video 0",  # Jan 14
            "A video 1",  # Jan 13
        ]
        assert len(result.errors) == 1
        assert result.errors[0].source == "B"
        assert result.errors[0].error == "HTTP 404"
        assert result.failed is False
        assert sorted(fetcher.calls) == ["A", "B", "C"]

    @pytest.mark.asyncio
    async def test_all_sources_failing(self):
        fetcher = FakeFetcher({"A": failing("A"), "B": failing("B")})

        result = await aggregate_feeds(["A", "B"], fetcher)

        assert result.videos == ()
        assert [e.source for e in result.errors] == ["A", "B"]
        assert result.failed is True

    @pytest.mark.asyncio
    async def test_unexpected_exception_is_recorded(self):
        fetcher = FakeFetcher(
            {"A": RuntimeError("boom"), "B": make_feed("B", "2024-01-14T12:00:00Z")}
        )

        result = await aggregate_feeds(["A", "B"], fetcher)

        assert len(result.videos) == 1
        assert result.errors[0].source == "A"
        assert "boom" in result.errors[0].error

    @pytest.mark.asyncio
    async def test_ties_keep_source_order(self):
        same = "2024-01-15T12:00:00Z"
        fetcher = FakeFetcher(
            {
                "A": make_feed("A", same, same),
                "B": make_feed("B", same),
            }
        )

        result = await aggregate_feeds(["A", "B"], fetcher)

        assert [v.title for v in result.videos] == [
            "A video 0",
            "A video 1",
            "B video 0",
        ]

    @pytest.mark.asyncio
    async def test_mixed_date_formats_sort_together(self):
        feed = FetchedFeed(
            source="A",
            items=[
                RawItem(title="rfc", pub_date="Sun, 14 Jan 2024 12:00:00 GMT"),
                RawItem(title="iso", pub_date="2024-01-15T12:00:00+00:00"),
                RawItem(title="naive", pub_date="2024-01-13T12:00:00"),
            ],
        )

        result = await aggregate_feeds(["A"], FakeFetcher({"A": feed}))

        assert [v.title for v in result.videos] == ["iso", "rfc", "naive"]

    @pytest.mark.asyncio
    async def test_fetches_run_concurrently(self):
        """A slow source does not hold up the start of the others."""
        started: list[str] = []
        release = asyncio.Event()

        class SlowFetcher:
            async def fetch(self, source):
                started.append(source)
                await release.wait()
                return make_feed(source, "2024-01-15T12:00:00Z")

        task = asyncio.create_task(aggregate_feeds(["A", "B", "C"], SlowFetcher()))
        for _ in range(10):
            await asyncio.sleep(0)
        assert sorted(started) == ["A", "B", "C"]

        release.set()
        result = await task
        assert len(result.videos) == 3

    @pytest.mark.asyncio
    async def test_out_of_range_date_does_not_drop_other_sources(self):
        fetcher = FakeFetcher(
            {
                "A": make_feed("A", "9999-12-31T23:59:59-01:00"),
                "B": make_feed("B", "2024-01-14T12:00:00Z"),
            }
        )

        result = await aggregate_feeds(["A", "B"], fetcher)

        assert sorted(v.title for v in result.videos) == ["A video 0", "B video 0"]
        assert result.errors == ()
        assert result.succeeded == 2

    @pytest.mark.asyncio
    async def test_normalization_failure_is_recorded_per_source(self):
        fetcher = FakeFetcher(
            {
                "A": make_feed("A", "2024-01-15T12:00:00Z"),
                "B": make_feed("B", "2024-01-14T12:00:00Z"),
            }
        )
        real_normalize = normalize_item

        def broken_for_a(item, label):
            if label == "A":
                raise RuntimeError("bad item")
            return real_normalize(item, label)

        with patch("tubefeed.feed.aggregator.normalize_item", side_effect=broken_for_a):
            result = await aggregate_feeds(["A", "B"], fetcher)

        assert [v.title for v in result.videos] == ["B video 0"]
        assert [e.source for e in result.errors] == ["A"]
        assert "bad item" in result.errors[0].error
        assert result.succeeded == 1
        assert result.failed is False

    @pytest.mark.asyncio
    async def test_empty_feed_counts_as_success(self):
        fetcher = FakeFetcher(
            {"A": FetchedFeed(source="A", items=[]), "B": failing("B")}
        )

        result = await aggregate_feeds(["A", "B"], fetcher)

        assert result.videos == ()
        assert [e.source for e in result.errors] == ["B"]
        assert result.succeeded == 1
        assert result.failed is False
