"""Exception types raised by the feed pipeline."""


class FeedError(Exception):
    """Base class for feed aggregator errors."""


class FetchError(FeedError):
    """A single feed source could not be retrieved or parsed.

    Recoverable: the aggregator records it and carries on with the
    remaining sources.
    """

    def __init__(self, source: str, cause: object):
        self.source = source
        self.cause = cause
        super().__init__(f"Failed to fetch feed {source}: {cause}")


class SubscriptionsError(FeedError):
    """The subscriptions file is missing or malformed."""
