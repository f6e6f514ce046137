"""YouTube Feed Aggregator - Main application entry point."""

from contextlib import asynccontextmanager
from functools import partial
from pathlib import Path

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.middleware.base import BaseHTTPMiddleware

from tubefeed.api import feeds_router, health_router
from tubefeed.cache import TTLCache
from tubefeed.config import get_settings
from tubefeed.logging import setup_logging
from tubefeed.rss.fetcher import FeedFetcher
from tubefeed.service import FeedService
from tubefeed.subscriptions import load_subscriptions


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware to add security headers to all responses."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        # Prevent MIME type sniffing
        response.headers["X-Content-Type-Options"] = "nosniff"

        # Prevent clickjacking attacks
        response.headers["X-Frame-Options"] = "DENY"

        # Thumbnails come from img.youtube.com and the placeholder host
        response.headers["Content-Security-Policy"] = (
            "default-src 'self'; "
            "script-src 'self' 'unsafe-inline'; "
            "style-src 'self' 'unsafe-inline'; "
            "img-src 'self' data: https:; "
            "connect-src 'self'; "
            "frame-ancestors 'none'"
        )
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the feed service on startup and stop the cache sweeper on shutdown."""
    settings = get_settings()
    cache = TTLCache(
        default_ttl=settings.feed_cache_ttl_seconds,
        sweep_interval=settings.cache_sweep_interval_seconds,
    )

    async with httpx.AsyncClient(
        timeout=settings.fetch_timeout_seconds, follow_redirects=True
    ) as client:
        app.state.feed_service = FeedService(
            cache=cache,
            fetcher=FeedFetcher(client=client),
            load_sources=partial(load_subscriptions, settings.subscriptions_file),
            ttl=settings.feed_cache_ttl_seconds,
        )
        cache.start()
        try:
            yield
        finally:
            await cache.stop()
            del app.state.feed_service


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    setup_logging()

    app = FastAPI(
        title="YouTube Feed Aggregator",
        description="Merged, cached feed of YouTube channel RSS subscriptions",
        version="1.0.0",
        lifespan=lifespan,
    )

    # Configure rate limiting
    limiter = Limiter(key_func=get_remote_address)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    app.add_middleware(SecurityHeadersMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_origin],
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Accept"],
    )

    app.include_router(health_router)
    app.include_router(feeds_router)

    # Mount static files (built frontend) if static directory exists
    static_dir = Path(__file__).parent / "static"
    if static_dir.exists():
        app.mount("/static", StaticFiles(directory=str(static_dir)), name="static")

    return app


app = create_app()


def main():
    """Entry point for running the application."""
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=get_settings().env == "dev",
    )


if __name__ == "__main__":
    main()
