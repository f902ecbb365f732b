"""Tests for the FlightAware provider with mocked HTTP responses."""

from __future__ import annotations

import httpx
import pytest

from turbcast.contracts.enums import FlightStatus
from turbcast.services.route.flightaware import FlightAwareProvider, derive_status

SAMPLE_FLIGHT = {
    "ident": "AAL100",
    "operator": "AAL",
    "operator_iata": "AA",
    "operator_icao": "AAL",
    "registration": "N101NN",
    "aircraft_type": "A321",
    "cancelled": False,
    "origin": {"code": "KJFK", "code_icao": "KJFK", "code_iata": "JFK", "name": "John F Kennedy Intl"},
    "destination": {"code": "KLAX", "code_icao": "KLAX", "code_iata": "LAX", "name": "Los Angeles Intl"},
    "route_distance": 2475,
    "scheduled_out": "2026-03-15T12:00:00Z",
    "scheduled_in": "2026-03-15T18:10:00Z",
    "actual_out": None,
    "actual_off": None,
    "actual_in": None,
    "terminal_origin": "8",
    "gate_destination": "41A",
}


def _provider(handler) -> FlightAwareProvider:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return FlightAwareProvider(api_key="fa-key", http_client=client)


class TestFlightAwareProvider:
    async def test_parses_first_flight(self):
        seen = {}

        def handler(req: httpx.Request) -> httpx.Response:
            seen["path"] = req.url.path
            seen["key"] = req.headers.get("x-apikey")
            return httpx.Response(200, json={"flights": [SAMPLE_FLIGHT, {**SAMPLE_FLIGHT, "ident": "other"}]})

        result = await _provider(handler).resolve("AAL100")

        assert result.success
        route = result.data
        assert seen["path"] == "/aeroapi/flights/AAL100"
        assert seen["key"] == "fa-key"
        assert route.origin.iata == "JFK"
        assert route.destination.name == "Los Angeles Intl"
        assert route.airline.iata == "AA"
        assert route.aircraft.model == "A321"
        assert route.status == FlightStatus.SCHEDULED
        assert route.distance_miles == pytest.approx(2475, abs=0.1)
        assert route.schedule.departure.terminal == "8"
        assert route.source == "flightaware"

    async def test_coordinates_from_airport_table(self):
        result = await _provider(lambda req: httpx.Response(200, json={"flights": [SAMPLE_FLIGHT]})).resolve("AAL100")
        route = result.data
        assert route.has_geodata
        assert route.origin.coordinates.latitude == 40.6413

    async def test_unknown_airport_has_no_coordinates(self):
        flight = {
            **SAMPLE_FLIGHT,
            "destination": {"code_icao": "PGUM", "code_iata": "GUM", "name": "Guam Intl"},
        }
        result = await _provider(lambda req: httpx.Response(200, json={"flights": [flight]})).resolve("AAL100")
        assert result.success
        assert not result.data.has_geodata

    async def test_no_flights(self):
        result = await _provider(lambda req: httpx.Response(200, json={"flights": []})).resolve("AAL100")
        assert not result.success
        assert result.error.code == "not_found"

    async def test_rate_limited(self, caplog):
        result = await _provider(lambda req: httpx.Response(429, json={"title": "Too Many Requests"})).resolve("AAL100")
        assert not result.success
        assert result.error.code == "rate_limited"
        assert "rate limit" in caplog.text

    async def test_non_object_body(self):
        result = await _provider(lambda req: httpx.Response(200, json=["nope"])).resolve("AAL100")
        assert not result.success
        assert result.error.code == "invalid_json"


class TestDeriveStatus:
    def test_cancelled_first(self):
        assert derive_status({"cancelled": True, "actual_in": "x"}) == FlightStatus.CANCELLED

    def test_landed(self):
        assert derive_status({"actual_in": "2026-03-15T18:00:00Z"}) == FlightStatus.LANDED

    def test_live(self):
        assert derive_status({"actual_out": "2026-03-15T12:05:00Z"}) == FlightStatus.LIVE
        assert derive_status({"actual_off": "2026-03-15T12:20:00Z"}) == FlightStatus.LIVE

    def test_scheduled(self):
        assert derive_status({}) == FlightStatus.SCHEDULED
