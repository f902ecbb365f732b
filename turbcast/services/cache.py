"""In-memory TTL caches for basic and full forecasts.

Nothing is persisted; a restart starts cold. Every map operation runs under
a ``threading.Lock`` and never awaits, so the lock is never held across a
suspension point.
"""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from turbcast.contracts.cache import CacheMetrics
from turbcast.contracts.forecast import BasicForecast, Forecast

logger = logging.getLogger(__name__)

T = TypeVar("T")

Clock = Callable[[], float]


@dataclass
class CacheEntry(Generic[T]):
    value: T
    stored_at: float
    last_accessed_at: float
    hit_count: int = 0


class TTLCache(Generic[T]):
    """Size-bounded TTL cache with least-recently-accessed eviction.

    Expired entries are dropped when touched by ``get`` and in bulk by
    ``sweep``. ``max_size`` is enforced on every ``put``.
    """

    def __init__(
        self,
        name: str,
        ttl_seconds: float,
        max_size: int = 500,
        clock: Clock = time.monotonic,
    ):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self.name = name
        self.ttl_seconds = ttl_seconds
        self.max_size = max_size
        self._clock = clock
        self._entries: dict[str, CacheEntry[T]] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0
        self._expirations = 0

    def _is_expired(self, entry: CacheEntry[T], now: float) -> bool:
        return now - entry.stored_at > self.ttl_seconds

    def get(self, key: str) -> T | None:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and self._is_expired(entry, now):
                del self._entries[key]
                self._expirations += 1
                entry = None
            if entry is None:
                self._misses += 1
                return None
            entry.last_accessed_at = now
            entry.hit_count += 1
            self._hits += 1
            return entry.value

    def put(self, key: str, value: T) -> None:
        now = self._clock()
        with self._lock:
            self._entries[key] = CacheEntry(value=value, stored_at=now, last_accessed_at=now)
            self._evict_locked(self.max_size)

    def sweep(self) -> int:
        """Remove every expired entry. Returns how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [k for k, e in self._entries.items() if self._is_expired(e, now)]
            for key in expired:
                del self._entries[key]
            self._expirations += len(expired)
        if expired:
            logger.debug("%s cache: swept %d expired entries", self.name, len(expired))
        return len(expired)

    def evict_if_over_capacity(self, max_size: int) -> int:
        """Drop least-recently-accessed entries until at most ``max_size`` remain."""
        with self._lock:
            return self._evict_locked(max_size)

    def _evict_locked(self, max_size: int) -> int:
        overflow = len(self._entries) - max_size
        if overflow <= 0:
            return 0
        victims = sorted(self._entries.items(), key=lambda kv: kv[1].last_accessed_at)[:overflow]
        for key, _entry in victims:
            del self._entries[key]
        self._evictions += overflow
        logger.debug("%s cache: evicted %d entries over capacity", self.name, overflow)
        return overflow

    def clear(self) -> int:
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
            return count

    def metrics(self) -> CacheMetrics:
        with self._lock:
            return CacheMetrics(
                name=self.name,
                hits=self._hits,
                misses=self._misses,
                total_requests=self._hits + self._misses,
                size=len(self._entries),
                max_size=self.max_size,
                ttl_seconds=self.ttl_seconds,
                evictions=self._evictions,
                expirations=self._expirations,
            )

    def __contains__(self, key: object) -> bool:
        """Fresh-entry check that leaves metrics and access times alone."""
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)  # type: ignore[arg-type]
            return entry is not None and not self._is_expired(entry, now)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class ForecastCache:
    """The basic and full forecast tiers plus their background sweeper."""

    def __init__(
        self,
        basic_ttl_s: float = 30 * 60,
        full_ttl_s: float = 5 * 60,
        max_entries: int = 500,
        sweep_interval_s: float = 10 * 60,
        clock: Clock = time.monotonic,
    ):
        self.basic: TTLCache[BasicForecast] = TTLCache("basic", basic_ttl_s, max_entries, clock)
        self.full: TTLCache[Forecast] = TTLCache("full", full_ttl_s, max_entries, clock)
        self._sweep_interval_s = sweep_interval_s
        self._sweeper: asyncio.Task | None = None

    def start(self) -> None:
        """Start the periodic sweep on the running loop. Idempotent."""
        if self._sweeper is None or self._sweeper.done():
            self._sweeper = asyncio.create_task(self._sweep_forever(), name="forecast-cache-sweeper")

    async def stop(self) -> None:
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
            await asyncio.sleep(self._sweep_interval_s)
            try:
                self.sweep()
            except Exception:
                logger.exception("Cache sweep failed")

    def sweep(self) -> int:
        removed = self.basic.sweep() + self.full.sweep()
        if removed:
            logger.info("Cache sweep removed %d expired forecasts", removed)
        return removed

    def clear(self) -> int:
        return self.basic.clear() + self.full.clear()

    def metrics(self) -> dict[str, CacheMetrics]:
        return {"basic": self.basic.metrics(), "full": self.full.metrics()}
