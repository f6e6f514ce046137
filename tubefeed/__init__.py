"""YouTube subscription feed aggregator."""
