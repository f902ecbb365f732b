"""Tests for flight route contracts."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from turbcast.contracts.common import Coordinate
from turbcast.contracts.enums import FlightStatus
from turbcast.contracts.flight import (
    FLIGHT_NUMBER_PATTERN,
    Airport,
    FlightRoute,
    Schedule,
    ScheduleTime,
    normalize_flight_number,
)


def _airport(iata: str, with_coordinates: bool = True) -> Airport:
    return Airport(
        iata=iata,
        coordinates=Coordinate(latitude=40.0, longitude=-73.0) if with_coordinates else None,
    )


class TestCoordinate:
    def test_bounds(self):
        with pytest.raises(ValidationError):
            Coordinate(latitude=91.0, longitude=0.0)
        with pytest.raises(ValidationError):
            Coordinate(latitude=0.0, longitude=-181.0)

    def test_immutable(self):
        c = Coordinate(latitude=1.0, longitude=2.0)
        with pytest.raises(ValidationError):
            c.latitude = 5.0


class TestAirport:
    def test_iata_length(self):
        with pytest.raises(ValidationError):
            Airport(iata="JFKX")

    def test_coordinates_optional(self):
        assert Airport(iata="JFK").coordinates is None


class TestFlightRoute:
    def test_defaults(self):
        route = FlightRoute(
            flight_number="AA100",
            origin=_airport("JFK"),
            destination=_airport("LAX"),
            source="static",
        )
        assert route.status == FlightStatus.UNKNOWN
        assert route.airline.name == "Unknown"
        assert route.label == "JFK → LAX"
        assert route.has_geodata

    def test_without_geodata(self):
        route = FlightRoute(
            flight_number="AA100",
            origin=_airport("JFK", with_coordinates=False),
            destination=_airport("LAX"),
            source="static",
        )
        assert not route.has_geodata

    def test_serialization(self):
        route = FlightRoute(
            flight_number="AA100",
            origin=_airport("JFK"),
            destination=_airport("LAX"),
            schedule=Schedule(
                departure=ScheduleTime(
                    scheduled_utc=datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc), terminal="8"
                )
            ),
            source="aerodatabox",
        )
        data = route.to_json()
        assert data["status"] == "unknown"
        assert data["schedule"]["departure"]["scheduled_utc"].startswith("2026-03-15T12:00:00")
        assert "distance_km" not in data
        assert FlightRoute.model_validate(data) == route


class TestFlightNumber:
    def test_normalize(self):
        assert normalize_flight_number("  aa100 ") == "AA100"

    @pytest.mark.parametrize("fn,ok", [("AA100", True), ("JBU1290", True), ("A100", False), ("AA", False)])
    def test_pattern(self, fn, ok):
        assert bool(FLIGHT_NUMBER_PATTERN.match(fn)) is ok
