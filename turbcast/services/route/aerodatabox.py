"""AeroDataBox (RapidAPI) route provider."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

import httpx

from turbcast.contracts.common import Coordinate
from turbcast.contracts.enums import FlightStatus
from turbcast.contracts.flight import (
    Aircraft,
    Airline,
    Airport,
    FlightRoute,
    Schedule,
    ScheduleTime,
)
from turbcast.errors import UpstreamTransientError
from turbcast.services.http import fetch_json
from turbcast.services.route.airports import make_airport
from turbcast.services.route.base import RouteProvider, distance_fields

logger = logging.getLogger(__name__)

_STATUS_MAP = {
    "unknown": FlightStatus.UNKNOWN,
    "expected": FlightStatus.SCHEDULED,
    "scheduled": FlightStatus.SCHEDULED,
    "delayed": FlightStatus.SCHEDULED,
    "checkin": FlightStatus.SCHEDULED,
    "boarding": FlightStatus.SCHEDULED,
    "gateclosed": FlightStatus.SCHEDULED,
    "departed": FlightStatus.LIVE,
    "enroute": FlightStatus.LIVE,
    "approaching": FlightStatus.LIVE,
    "diverted": FlightStatus.LIVE,
    "arrived": FlightStatus.LANDED,
    "landed": FlightStatus.LANDED,
    "canceled": FlightStatus.CANCELLED,
    "cancelled": FlightStatus.CANCELLED,
    "canceleduncertain": FlightStatus.CANCELLED,
}


class AeroDataBoxProvider(RouteProvider):
    """Resolves flights through ``GET /flights/number/{flight_number}``."""

    name = "aerodatabox"

    def __init__(
        self,
        api_key: str,
        host: str = "aerodatabox.p.rapidapi.com",
        http_client: httpx.AsyncClient | None = None,
    ):
        self._api_key = api_key
        self._host = host
        self._client = http_client or httpx.AsyncClient(timeout=10.0)

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    async def fetch_route(self, flight_number: str) -> FlightRoute | None:
        payload = await fetch_json(
            self._client,
            self.name,
            f"https://{self._host}/flights/number/{flight_number}",
            params={"withAircraftImage": "false", "withLocation": "false"},
            headers={"x-rapidapi-key": self._api_key, "x-rapidapi-host": self._host},
        )

        flights = _unwrap(payload)
        if not flights:
            return None
        return _parse_flight(flight_number, flights[0])


def _unwrap(payload: Any) -> list[dict]:
    """Return the list of flight records, whatever the envelope.

    Raises:
        UpstreamTransientError: when the body is an error envelope.
    """
    if isinstance(payload, list):
        return [f for f in payload if isinstance(f, dict)]
    if isinstance(payload, dict):
        data = payload.get("data")
        if isinstance(data, list):
            return [f for f in data if isinstance(f, dict)]
        if "error" in payload or "message" in payload:
            reason = payload.get("error") or payload.get("message")
            raise UpstreamTransientError("aerodatabox", str(reason), code="provider_error")
        if "departure" in payload and "arrival" in payload:
            return [payload]
    raise UpstreamTransientError("aerodatabox", "unexpected response shape", code="invalid_json")


def _parse_flight(flight_number: str, raw: dict) -> FlightRoute:
    departure = raw.get("departure") or {}
    arrival = raw.get("arrival") or {}
    origin = _parse_airport(departure.get("airport") or {})
    destination = _parse_airport(arrival.get("airport") or {})
    if origin is None or destination is None:
        raise UpstreamTransientError(
            "aerodatabox", "flight data is missing airport codes", code="incomplete_route"
        )

    airline = raw.get("airline") or {}
    aircraft = raw.get("aircraft") or {}
    distance = raw.get("greatCircleDistance") or {}
    km = distance.get("km")

    return FlightRoute(
        flight_number=flight_number,
        origin=origin,
        destination=destination,
        airline=Airline(
            name=airline.get("name") or "Unknown",
            iata=airline.get("iata"),
            icao=airline.get("icao"),
        ),
        aircraft=Aircraft(model=aircraft.get("model"), registration=aircraft.get("reg")),
        status=map_status(raw.get("status")),
        schedule=Schedule(
            departure=_parse_schedule_time(departure),
            arrival=_parse_schedule_time(arrival),
        ),
        source="aerodatabox",
        **_distance(km, distance),
    )


def _parse_airport(raw: dict) -> Airport | None:
    iata = raw.get("iata")
    if not iata or len(iata) != 3:
        return None

    coordinates = None
    location = raw.get("location")
    if isinstance(location, dict) and location.get("lat") is not None and location.get("lon") is not None:
        coordinates = Coordinate(latitude=location["lat"], longitude=location["lon"])

    return make_airport(iata, icao=raw.get("icao"), name=raw.get("name"), coordinates=coordinates)


def _parse_schedule_time(raw: dict) -> ScheduleTime:
    scheduled = raw.get("scheduledTime")
    if isinstance(scheduled, dict):
        scheduled = scheduled.get("utc")
    # Older API versions used flat scheduledTimeUtc
    scheduled = scheduled or raw.get("scheduledTimeUtc")
    return ScheduleTime(
        scheduled_utc=parse_utc(scheduled),
        terminal=raw.get("terminal"),
        gate=raw.get("gate"),
    )


def _distance(km: float | None, raw: dict) -> dict[str, float | None]:
    fields = distance_fields(km)
    if km is not None:
        fields["distance_miles"] = raw.get("mile", fields["distance_miles"])
        fields["distance_nm"] = raw.get("nm", fields["distance_nm"])
    return fields


def map_status(status: str | None) -> FlightStatus:
    """Map an AeroDataBox status string to a ``FlightStatus``."""
    if not status:
        return FlightStatus.UNKNOWN
    return _STATUS_MAP.get(status.replace(" ", "").lower(), FlightStatus.UNKNOWN)


def parse_utc(value: str | None) -> datetime | None:
    """Parse ``2025-06-15 14:30Z``-style timestamps; None when unparsable."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.debug("Unparsable AeroDataBox timestamp: %r", value)
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)
