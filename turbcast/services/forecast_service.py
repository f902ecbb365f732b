"""Forecast orchestration.

Pipeline for a full forecast:
1. Resolve the route (provider fallback chain)
2. Split it into segments
3. Fetch nearby turbulence reports (one PIREP request)
4. Score each segment and the route as a whole
5. Cache the result

``get_basic`` stops after step 1 and schedules the rest in the background.
Concurrent requests for the same (tier, flight) share one computation.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

import httpx

from turbcast.config import Settings
from turbcast.contracts.enums import CacheTier
from turbcast.contracts.flight import FLIGHT_NUMBER_PATTERN, normalize_flight_number
from turbcast.contracts.forecast import BasicForecast, DataProvenance, Forecast, RouteSummary
from turbcast.errors import IncompleteDataError, InternalError, ValidationError
from turbcast.services.cache import ForecastCache
from turbcast.services.narrative import build_summary
from turbcast.services.pireps.pirep_client import PirepClient
from turbcast.services.route.aerodatabox import AeroDataBoxProvider
from turbcast.services.route.flightaware import FlightAwareProvider
from turbcast.services.route.resolver import Resolution, RouteResolver
from turbcast.services.route.static_table import StaticRouteProvider
from turbcast.services.segmenter import RouteSegmenter
from turbcast.services.severity import degraded_segment, overall_severity, score_route

logger = logging.getLogger(__name__)

T = TypeVar("T")

InflightKey = tuple[CacheTier, str]


def validate_flight_number(flight_number: str) -> str:
    """Normalize and check a flight number.

    Raises:
        ValidationError: if it is not 2-3 letters followed by 1-4 digits.
    """
    key = normalize_flight_number(flight_number or "")
    if not FLIGHT_NUMBER_PATTERN.match(key):
        raise ValidationError(flight_number)
    return key


class ForecastService:
    """Owns the caches, the in-flight map, and the forecast pipeline.

    Construct once per process. ``start()`` begins the cache sweeper and
    ``shutdown()`` releases everything the service owns.
    """

    def __init__(
        self,
        resolver: RouteResolver,
        pireps: PirepClient,
        cache: ForecastCache | None = None,
        segmenter: RouteSegmenter | None = None,
        segment_count: int = 6,
        max_report_distance_km: float = 200.0,
        background_concurrency: int = 8,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.resolver = resolver
        self.pireps = pireps
        self.cache = cache or ForecastCache()
        self.segmenter = segmenter or RouteSegmenter()
        self._segment_count = segment_count
        self._max_report_distance_km = max_report_distance_km
        self._http_client = http_client
        self._inflight: dict[InflightKey, asyncio.Task] = {}
        self._background: dict[str, asyncio.Task] = {}
        self._background_slots = asyncio.Semaphore(background_concurrency)

    @classmethod
    def from_settings(cls, settings: Settings) -> ForecastService:
        """Wire the production providers around one shared HTTP client."""
        client = httpx.AsyncClient(timeout=settings.upstream_timeout_s)
        resolver = RouteResolver(
            [
                AeroDataBoxProvider(
                    settings.aerodatabox_api_key, settings.aerodatabox_host, http_client=client
                ),
                FlightAwareProvider(
                    settings.flightaware_api_key, settings.flightaware_base_url, http_client=client
                ),
                StaticRouteProvider(),
            ]
        )
        return cls(
            resolver=resolver,
            pireps=PirepClient(http_client=client, base_url=settings.pirep_url),
            cache=ForecastCache(
                basic_ttl_s=settings.basic_cache_ttl_s,
                full_ttl_s=settings.full_cache_ttl_s,
                max_entries=settings.cache_max_entries,
                sweep_interval_s=settings.cache_sweep_interval_s,
            ),
            segment_count=settings.segment_count,
            max_report_distance_km=settings.max_report_distance_km,
            background_concurrency=settings.background_concurrency,
            http_client=client,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        self.cache.start()

    async def shutdown(self) -> None:
        await self.cache.stop()
        pending = [*self._background.values(), *self._inflight.values()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        if self._http_client is not None:
            await self._http_client.aclose()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def get_basic(self, flight_number: str) -> BasicForecast:
        """Route-only forecast, fast. Returns the full one if already cached.

        Raises:
            ValidationError: malformed flight number.
            NotFoundError: no provider knows the flight.
        """
        key = validate_flight_number(flight_number)

        full = self.cache.full.get(key)
        if full is not None:
            logger.debug("Full cache hit for %s on basic lookup", key)
            return full

        basic = self.cache.basic.get(key)
        if basic is not None:
            logger.debug("Basic cache hit for %s", key)
            self._schedule_full(key, None)
            return basic

        resolution = await self._dedup(CacheTier.BASIC, key, lambda: self._resolve(key))
        basic = self._basic_from(key, resolution)
        self.cache.basic.put(key, basic)
        self._schedule_full(key, resolution)
        return basic

    async def get_full(self, flight_number: str) -> Forecast:
        """Complete forecast, computed (or joined) if not cached.

        Raises:
            ValidationError: malformed flight number.
            NotFoundError: no provider knows the flight.
        """
        key = validate_flight_number(flight_number)

        full = self.cache.full.get(key)
        if full is not None:
            logger.debug("Full cache hit for %s", key)
            return full

        return await self._dedup(CacheTier.FULL, key, lambda: self._compute_full(key, None))

    def clear_cache(self) -> int:
        cleared = self.cache.clear()
        logger.info("Cleared %d cached forecasts", cleared)
        return cleared

    def metrics(self) -> dict:
        return {**self.cache.metrics(), "in_flight": len(self._inflight)}

    def is_in_flight(self, tier: CacheTier, flight_number: str) -> bool:
        return (tier, normalize_flight_number(flight_number)) in self._inflight

    # ------------------------------------------------------------------
    # De-duplication
    # ------------------------------------------------------------------

    def _start_or_join(
        self, tier: CacheTier, key: str, factory: Callable[[], Awaitable[T]]
    ) -> asyncio.Task:
        slot = (tier, key)
        task = self._inflight.get(slot)
        if task is not None:
            logger.debug("Joining in-flight %s computation for %s", tier.value, key)
            return task

        task = asyncio.ensure_future(factory())
        self._inflight[slot] = task

        def _release(done: asyncio.Task) -> None:
            if self._inflight.get(slot) is done:
                del self._inflight[slot]
            if not done.cancelled() and done.exception() is not None:
                logger.debug("%s computation for %s failed: %s", tier.value, key, done.exception())

        task.add_done_callback(_release)
        return task

    async def _dedup(self, tier: CacheTier, key: str, factory: Callable[[], Awaitable[T]]) -> T:
        # shield: a waiter giving up must not cancel the shared computation
        return await asyncio.shield(self._start_or_join(tier, key, factory))

    # ------------------------------------------------------------------
    # Background upgrade
    # ------------------------------------------------------------------

    def _schedule_full(self, key: str, resolution: Resolution | None) -> None:
        if key in self._background or key in self.cache.full:
            return
        if (CacheTier.FULL, key) in self._inflight:
            return
        task = asyncio.create_task(self._upgrade(key, resolution), name=f"upgrade-{key}")
        self._background[key] = task

        def _forget(done: asyncio.Task) -> None:
            if self._background.get(key) is done:
                del self._background[key]

        task.add_done_callback(_forget)

    async def _upgrade(self, key: str, resolution: Resolution | None) -> None:
        async with self._background_slots:
            try:
                await self._dedup(
                    CacheTier.FULL, key, lambda: self._compute_full(key, resolution)
                )
            except Exception:
                logger.exception("Background forecast for %s failed", key)

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    async def _resolve(self, key: str) -> Resolution:
        return await self.resolver.resolve(key)

    def _basic_from(self, key: str, resolution: Resolution) -> BasicForecast:
        route = resolution.route
        return BasicForecast(
            flight_number=key,
            route=RouteSummary(origin=route.origin.iata, destination=route.destination.iata),
            flight_info=route,
            provenance=DataProvenance(
                route_source=route.source, providers_tried=resolution.providers_tried
            ),
        )

    async def _compute_full(self, key: str, resolution: Resolution | None) -> Forecast:
        if resolution is None:
            resolution = await self._resolve(key)
        route = resolution.route

        try:
            segments = self.segmenter.segment(route, self._segment_count)
        except IncompleteDataError as exc:
            logger.warning("%s; returning degraded forecast", exc)
            scored = [degraded_segment(route)]
            summary: list[str] = []
            observation_count = 0
            observation_source = "none"
        else:
            nearby = await self.pireps.reports_near(segments, self._max_report_distance_km)
            scored = score_route(segments, nearby)
            summary = build_summary(route, segments, scored)
            observation_count = len(nearby)
            observation_source = "pireps"

        if not scored:
            raise InternalError(f"Forecast for {key} has no segments")

        forecast = Forecast(
            flight_number=key,
            route=RouteSummary(origin=route.origin.iata, destination=route.destination.iata),
            flight_info=route,
            provenance=DataProvenance(
                route_source=route.source,
                observation_source=observation_source,
                observation_count=observation_count,
                providers_tried=resolution.providers_tried,
            ),
            overall_severity=overall_severity(s.severity for s in scored),
            segments=scored,
            summary=summary,
        )
        self.cache.full.put(key, forecast)
        logger.info(
            "Forecast for %s ready: %s over %d segments (%d reports)",
            key,
            forecast.overall_severity.value,
            len(scored),
            observation_count,
        )
        return forecast
