"""Turbcast data contracts: Pydantic v2 models for flight turbulence forecasts.

Data lifetime
-------------

**Cached in process memory** (lost on restart):
- ``BasicForecast``: route and schedule, basic tier
- ``Forecast``: route plus per-segment severity, full tier

**Transient** (one forecast computation only):
- ``FlightRoute``: resolved by the route provider chain
- ``RouteSegment``: generated from the route endpoints
- ``TurbulenceObservation`` / ``NearbyObservation``: PIREPs near the route

Calculated (never stored)
-------------------------
- ``CacheMetrics``: counters exposed by the cache endpoints
- ``ProviderResult``: per-provider outcome inside the resolver
"""

from turbcast.contracts.enums import CacheTier, FlightStatus, Severity
from turbcast.contracts.common import ContractModel, Coordinate
from turbcast.contracts.result import ProviderError, ProviderResult
from turbcast.contracts.flight import (
    FLIGHT_NUMBER_PATTERN,
    Aircraft,
    Airline,
    Airport,
    FlightRoute,
    Schedule,
    ScheduleTime,
    normalize_flight_number,
)
from turbcast.contracts.forecast import (
    BasicForecast,
    DataProvenance,
    Forecast,
    ForecastSegment,
    NearbyObservation,
    RouteSegment,
    RouteSummary,
    TurbulenceObservation,
)
from turbcast.contracts.cache import CacheMetrics

__all__ = [
    # Enums
    "CacheTier",
    "FlightStatus",
    "Severity",
    # Common
    "ContractModel",
    "Coordinate",
    # Result
    "ProviderError",
    "ProviderResult",
    # Flight
    "FLIGHT_NUMBER_PATTERN",
    "Aircraft",
    "Airline",
    "Airport",
    "FlightRoute",
    "Schedule",
    "ScheduleTime",
    "normalize_flight_number",
    # Forecast
    "BasicForecast",
    "DataProvenance",
    "Forecast",
    "ForecastSegment",
    "NearbyObservation",
    "RouteSegment",
    "RouteSummary",
    "TurbulenceObservation",
    # Cache
    "CacheMetrics",
]
