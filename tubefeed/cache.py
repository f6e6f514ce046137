"""In-memory TTL cache for aggregated feeds.

Nothing here survives a restart. Expired entries are evicted whenever they
are read, and a background task sweeps the rest periodically.
"""

import asyncio
import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from pydantic import Field

from tubefeed.rss.models import CamelModel, VideoRecord

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 15 * 60
SWEEP_INTERVAL_SECONDS = 5 * 60


@dataclass(frozen=True)
class CacheEntry:
    data: tuple[VideoRecord, ...]
    created_at: float
    ttl: float

    def is_valid(self, now: float) -> bool:
        return now - self.created_at <= self.ttl


class CacheStats(CamelModel):
    total_entries: int
    valid_entries: int
    expired_entries: int
    total_videos: int
    default_ttl: float = Field(alias="defaultTTL")


class CacheInfo(CamelModel):
    size: int
    keys: list[str]
    stats: CacheStats


class TTLCache:
    """Maps keys to lists of videos that expire after a TTL.

    Args:
        default_ttl: TTL in seconds used when ``set`` is not given one
        sweep_interval: Seconds between background sweeps
        clock: Returns the current time in seconds since the epoch
    """

    def __init__(
        self,
        default_ttl: float = DEFAULT_TTL_SECONDS,
        sweep_interval: float = SWEEP_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self.default_ttl = default_ttl
        self.sweep_interval = sweep_interval
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._sweeper: asyncio.Task | None = None

    def set(
        self, key: str, data: Sequence[VideoRecord], ttl: float | None = None
    ) -> CacheEntry:
        """Store data under key, replacing any existing entry."""
        entry = CacheEntry(
            data=tuple(data),
            created_at=self._clock(),
            ttl=self.default_ttl if ttl is None else ttl,
        )
        self._entries[key] = entry
        return entry

    def get_entry(self, key: str) -> CacheEntry | None:
        """Return the entry for key if it has not expired.

        An expired entry is evicted as a side effect.
        """
        entry = self._entries.get(key)
        if entry is None:
            return None
        if not entry.is_valid(self._clock()):
            del self._entries[key]
            return None
        return entry

    def get(self, key: str) -> tuple[VideoRecord, ...] | None:
        """Return the cached data for key, or None on a miss."""
        entry = self.get_entry(key)
        return entry.data if entry is not None else None

    def has(self, key: str) -> bool:
        return self.get(key) is not None

    def clear(self) -> None:
        self._entries.clear()

    def cache_info(self) -> CacheInfo:
        """Describe the cache contents without evicting anything."""
        now = self._clock()
        valid = expired = total_videos = 0
        for entry in self._entries.values():
            if entry.is_valid(now):
                valid += 1
                total_videos += len(entry.data)
            else:
                expired += 1

        return CacheInfo(
            size=len(self._entries),
            keys=list(self._entries),
            stats=CacheStats(
                total_entries=len(self._entries),
                valid_entries=valid,
                expired_entries=expired,
                total_videos=total_videos,
                default_ttl=self.default_ttl,
            ),
        )

    def sweep(self) -> int:
        """Evict every expired entry and return how many were removed."""
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if not entry.is_valid(now)]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.info("Cleaned up %d expired cache entries", len(expired))
        return len(expired)

    # Background sweep

    @property
    def running(self) -> bool:
        return self._sweeper is not None and not self._sweeper.done()

    def start(self) -> None:
        """Start the periodic sweep task. Must be called from a running loop."""
        if self.running:
            return
        self._sweeper = asyncio.create_task(self._sweep_forever())

    async def stop(self) -> None:
        """Cancel the sweep task and wait for it to finish."""
        if self._sweeper is None:
            return
        self._sweeper.cancel()
        try:
            await self._sweeper
        except asyncio.CancelledError:
            pass
        self._sweeper = None

    async def _sweep_forever(self) -> None:
        while True:
            await asyncio.sleep(self.sweep_interval)
            try:
                self.sweep()
            except Exception:
                logger.exception("Cache sweep failed")
