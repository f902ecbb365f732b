"""FlightAware AeroAPI route provider.

AeroAPI returns airport codes without coordinates, so endpoints are located
through the offline airport table. ``route_distance`` is in statute miles.
"""

from __future__ import annotations

import logging

import httpx

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
from turbcast.services.route.aerodatabox import parse_utc
from turbcast.services.route.airports import airport_coordinates, make_airport
from turbcast.services.route.base import RouteProvider, distance_fields, geodata_distance_km

logger = logging.getLogger(__name__)

MILES_TO_KM = 1.609344


class FlightAwareProvider(RouteProvider):
    """Resolves flights through ``GET {base_url}/flights/{flight_number}``."""

    name = "flightaware"

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://aeroapi.flightaware.com/aeroapi",
        http_client: httpx.AsyncClient | None = None,
    ):
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._client = http_client or httpx.AsyncClient(timeout=10.0)

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    async def fetch_route(self, flight_number: str) -> FlightRoute | None:
        try:
            payload = await fetch_json(
                self._client,
                self.name,
                f"{self._base_url}/flights/{flight_number}",
                headers={"x-apikey": self._api_key, "Accept": "application/json"},
            )
        except UpstreamTransientError as exc:
            if exc.code == "rate_limited":
                logger.warning("FlightAware rate limit hit while resolving %s", flight_number)
            raise

        if not isinstance(payload, dict):
            raise UpstreamTransientError(self.name, "unexpected response shape", code="invalid_json")
        flights = payload.get("flights") or []
        if not flights:
            return None
        return _parse_flight(flight_number, flights[0])


def _parse_flight(flight_number: str, raw: dict) -> FlightRoute:
    origin = _parse_airport(raw.get("origin") or {})
    destination = _parse_airport(raw.get("destination") or {})
    if origin is None or destination is None:
        raise UpstreamTransientError(
            "flightaware", "flight data is missing airport codes", code="incomplete_route"
        )

    km = geodata_distance_km(origin, destination)
    if raw.get("route_distance"):
        km = float(raw["route_distance"]) * MILES_TO_KM

    return FlightRoute(
        flight_number=flight_number,
        origin=origin,
        destination=destination,
        airline=Airline(
            name=raw.get("operator") or "Unknown",
            iata=raw.get("operator_iata"),
            icao=raw.get("operator_icao"),
        ),
        aircraft=Aircraft(model=raw.get("aircraft_type"), registration=raw.get("registration")),
        status=derive_status(raw),
        schedule=Schedule(
            departure=ScheduleTime(
                scheduled_utc=parse_utc(raw.get("scheduled_out")),
                terminal=raw.get("terminal_origin"),
                gate=raw.get("gate_origin"),
            ),
            arrival=ScheduleTime(
                scheduled_utc=parse_utc(raw.get("scheduled_in")),
                terminal=raw.get("terminal_destination"),
                gate=raw.get("gate_destination"),
            ),
        ),
        source="flightaware",
        **distance_fields(km),
    )


def _parse_airport(raw: dict) -> Airport | None:
    iata = raw.get("code_iata")
    if not iata or len(iata) != 3:
        return None
    return make_airport(
        iata,
        icao=raw.get("code_icao"),
        name=raw.get("name"),
        coordinates=airport_coordinates(iata),
    )


def derive_status(raw: dict) -> FlightStatus:
    """Status from the progress timestamps; the first that applies wins."""
    if raw.get("cancelled"):
        return FlightStatus.CANCELLED
    if raw.get("actual_in"):
        return FlightStatus.LANDED
    if raw.get("actual_off") or raw.get("actual_out"):
        return FlightStatus.LIVE
    return FlightStatus.SCHEDULED
