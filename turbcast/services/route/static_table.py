"""Offline last-resort route provider.

Knows a handful of well-known flights. Unknown flights are reported as not
found; no route is ever invented.
"""

from __future__ import annotations

from turbcast.contracts.enums import FlightStatus
from turbcast.contracts.flight import Airline, FlightRoute
from turbcast.errors import UpstreamTransientError
from turbcast.services.route.airports import lookup_airport
from turbcast.services.route.base import RouteProvider, distance_fields, geodata_distance_km

# flight number: (origin IATA, destination IATA, airline name, airline IATA)
KNOWN_FLIGHTS: dict[str, tuple[str, str, str, str]] = {
    "JBU1290": ("ILM", "BOS", "JetBlue Airways", "B6"),
    "AAL111": ("ORD", "LAX", "American Airlines", "AA"),
    "AA111": ("ORD", "LAX", "American Airlines", "AA"),
    "AAL100": ("JFK", "LHR", "American Airlines", "AA"),
    "AA100": ("JFK", "LHR", "American Airlines", "AA"),
    "UAL456": ("SFO", "JFK", "United Airlines", "UA"),
    "UA456": ("SFO", "JFK", "United Airlines", "UA"),
    "DAL789": ("ATL", "LAX", "Delta Air Lines", "DL"),
    "DL789": ("ATL", "LAX", "Delta Air Lines", "DL"),
    "SWA123": ("DEN", "LAS", "Southwest Airlines", "WN"),
    "WN123": ("DEN", "LAS", "Southwest Airlines", "WN"),
    "FFT456": ("MIA", "ORD", "Frontier Airlines", "F9"),
}


class StaticRouteProvider(RouteProvider):
    name = "static"

    def __init__(self, flights: dict[str, tuple[str, str, str, str]] | None = None):
        self._flights = KNOWN_FLIGHTS if flights is None else flights

    async def fetch_route(self, flight_number: str) -> FlightRoute | None:
        entry = self._flights.get(flight_number)
        if entry is None:
            return None

        origin_iata, destination_iata, airline_name, airline_iata = entry
        origin = lookup_airport(origin_iata)
        destination = lookup_airport(destination_iata)
        if origin is None or destination is None:
            raise UpstreamTransientError(
                self.name, f"airport table has no entry for {flight_number}", code="incomplete_route"
            )

        return FlightRoute(
            flight_number=flight_number,
            origin=origin,
            destination=destination,
            airline=Airline(name=airline_name, iata=airline_iata),
            status=FlightStatus.SCHEDULED,
            source=self.name,
            **distance_fields(geodata_distance_km(origin, destination)),
        )
