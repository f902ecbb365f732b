"""Flight route models: what a route provider resolves a flight number to.

A ``FlightRoute`` is built once per request by the route resolver and never
mutated afterwards; a newer resolution replaces it.
"""

from datetime import datetime
import re

from pydantic import Field

from turbcast.contracts.common import ContractModel, Coordinate
from turbcast.contracts.enums import FlightStatus

FLIGHT_NUMBER_PATTERN = re.compile(r"^[A-Z]{2,3}\d{1,4}$")


def normalize_flight_number(flight_number: str) -> str:
    """Uppercase and trim a flight number; the cache key for every tier."""
    return flight_number.strip().upper()


class Airport(ContractModel):
    """An airport endpoint. Some providers omit coordinates."""

    iata: str = Field(..., min_length=3, max_length=3)
    icao: str | None = Field(default=None, min_length=4, max_length=4)
    name: str = ""
    coordinates: Coordinate | None = None


class Airline(ContractModel):
    name: str = "Unknown"
    iata: str | None = None
    icao: str | None = None


class Aircraft(ContractModel):
    model: str | None = None
    registration: str | None = None


class ScheduleTime(ContractModel):
    """Scheduled time at one end of the flight."""

    scheduled_utc: datetime | None = None
    terminal: str | None = None
    gate: str | None = None


class Schedule(ContractModel):
    departure: ScheduleTime = Field(default_factory=ScheduleTime)
    arrival: ScheduleTime = Field(default_factory=ScheduleTime)


class FlightRoute(ContractModel):
    """A resolved flight: endpoints, operator, status and schedule."""

    flight_number: str
    origin: Airport
    destination: Airport
    airline: Airline = Field(default_factory=Airline)
    aircraft: Aircraft = Field(default_factory=Aircraft)
    status: FlightStatus = FlightStatus.UNKNOWN
    distance_km: float | None = Field(default=None, ge=0)
    distance_miles: float | None = Field(default=None, ge=0)
    distance_nm: float | None = Field(default=None, ge=0)
    schedule: Schedule = Field(default_factory=Schedule)
    source: str = Field(..., description="Name of the provider that resolved the route")

    @property
    def has_geodata(self) -> bool:
        """True when both endpoints carry coordinates."""
        return (
            self.origin.coordinates is not None
            and self.destination.coordinates is not None
        )

    @property
    def label(self) -> str:
        return f"{self.origin.iata} → {self.destination.iata}"
