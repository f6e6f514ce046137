"""FastAPI dependencies for API routers."""

from fastapi import Request

from tubefeed.service import FeedService


def get_feed_service(request: Request) -> FeedService:
    """Dependency for FastAPI routes to get the application's feed service.

    The service is created by the application lifespan and lives on
    ``app.state``.
    """
    return request.app.state.feed_service
