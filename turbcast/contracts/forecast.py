"""Forecast models: route segments, observations, and the forecasts built from them.

``RouteSegment``, ``TurbulenceObservation`` and ``NearbyObservation`` are
transient: they live for one forecast computation only.
``BasicForecast`` and ``Forecast`` are what the cache stores and callers get.
"""

from datetime import datetime, timezone

from pydantic import Field

from turbcast.contracts.common import ContractModel, Coordinate
from turbcast.contracts.enums import Severity
from turbcast.contracts.flight import FlightRoute


class RouteSegment(ContractModel):
    """A time-and-space sub-leg of a route, the unit of forecast granularity."""

    id: str
    start: Coordinate
    end: Coordinate
    label: str
    start_time: datetime
    end_time: datetime
    altitude_ft: int = Field(..., ge=0)


class TurbulenceObservation(ContractModel):
    """A PIREP-style point report of turbulence."""

    id: str
    coordinates: Coordinate
    altitude_ft: int = Field(..., ge=0)
    intensity: Severity
    observed_at: datetime
    aircraft_type: str | None = None
    raw: str | None = None


class NearbyObservation(ContractModel):
    """An observation paired with its nearest route segment."""

    observation: TurbulenceObservation
    distance_km: float = Field(..., ge=0)
    segment_index: int = Field(..., ge=0)


class ForecastSegment(ContractModel):
    label: str
    severity: Severity
    altitude_ft: int = Field(..., ge=0)
    probability: float = Field(..., ge=0, le=1)
    report_count: int = Field(default=0, ge=0)


class RouteSummary(ContractModel):
    origin: str
    destination: str


class DataProvenance(ContractModel):
    """Where the data in a forecast came from."""

    route_source: str
    observation_source: str = "none"
    observation_count: int = Field(default=0, ge=0)
    providers_tried: list[str] = Field(default_factory=list)


class BasicForecast(ContractModel):
    """Route and schedule only, returned before turbulence scoring finishes."""

    flight_number: str
    route: RouteSummary
    flight_info: FlightRoute
    provenance: DataProvenance
    generated_at: datetime = Field(default_factory=lambda: datetime.now(tz=timezone.utc))
    is_partial: bool = True


class Forecast(BasicForecast):
    """Complete forecast: per-segment severity plus the overall worst case."""

    overall_severity: Severity = Severity.SMOOTH
    segments: list[ForecastSegment] = Field(default_factory=list)
    summary: list[str] = Field(default_factory=list)
    is_partial: bool = False
