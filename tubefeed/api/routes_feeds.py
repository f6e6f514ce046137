"""Feed endpoints for the aggregator API."""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.util import get_remote_address

from tubefeed.api.dependencies import get_feed_service
from tubefeed.service import (
    CacheInfoResponse,
    ClearCacheResponse,
    FeedResponse,
    FeedService,
    RefreshResponse,
)

router = APIRouter(prefix="/api/feeds", tags=["feeds"])
limiter = Limiter(key_func=get_remote_address)


@router.get("", response_model=FeedResponse, response_model_exclude_none=True)
@limiter.limit("120/minute")
async def get_feeds(
    request: Request,
    service: FeedService = Depends(get_feed_service),
):
    """
    Aggregated feed of all subscribed channels, newest first.

    Served from the cache while it is fresh; otherwise every subscription
    is fetched again and the cache is refilled.

    Returns:
        JSON response with:
            - videos: List of videos
            - cached: Whether the videos came from the cache
            - cacheTimestamp: When the videos were fetched (epoch ms)
            - error: Present when nothing could be fetched
    """
    return await service.get_feeds()


@router.post(
    "/refresh", response_model=RefreshResponse, response_model_exclude_none=True
)
@limiter.limit("30/minute")
async def refresh_feeds(
    request: Request,
    service: FeedService = Depends(get_feed_service),
):
    """
    Fetch all feeds now, ignoring the cache, and store the result.

    Responds with 500 if the refresh failed; the previous cache entry is
    left untouched in that case.
    """
    result = await service.refresh_feeds()
    if not result.success:
        return JSONResponse(
            status_code=500,
            content=result.model_dump(mode="json", by_alias=True, exclude_none=True),
        )
    return result


@router.get("/cache", response_model=CacheInfoResponse)
async def get_cache_info(service: FeedService = Depends(get_feed_service)):
    """Report cache size, keys and entry statistics."""
    return service.cache_info()


@router.delete("/cache", response_model=ClearCacheResponse)
async def clear_cache(service: FeedService = Depends(get_feed_service)):
    """Drop every cached entry."""
    return service.clear_cache()
