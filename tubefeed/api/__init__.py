"""API routers for the feed aggregator."""

from tubefeed.api.routes_feeds import router as feeds_router
from tubefeed.api.routes_health import router as health_router

__all__ = ["feeds_router", "health_router"]
