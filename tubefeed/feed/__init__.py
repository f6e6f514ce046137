"""Feed aggregation module for YouTube RSS feeds."""

from .aggregator import AggregationResult, SourceError, aggregate_feeds, normalize_feed

__all__ = ["AggregationResult", "SourceError", "aggregate_feeds", "normalize_feed"]
