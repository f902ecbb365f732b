"""Route provider interface.

A provider turns a flight number into a ``FlightRoute``. Providers never
raise for upstream trouble: every failure comes back as a failed
``ProviderResult`` so the resolver can move on to the next provider.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod

from pydantic import ValidationError as PydanticValidationError

from turbcast.contracts.flight import Airport, FlightRoute
from turbcast.contracts.result import ProviderResult
from turbcast.errors import UpstreamTransientError
from turbcast.services.geo import haversine_km, km_to_miles, km_to_nm


class RouteProvider(ABC):
    """One source of flight route data."""

    name: str = "provider"

    @property
    def is_configured(self) -> bool:
        """False when the provider lacks credentials and should be skipped."""
        return True

    async def resolve(self, flight_number: str) -> ProviderResult[FlightRoute]:
        """Look up a flight; never raises for upstream failures."""
        started = time.perf_counter()

        def elapsed() -> float:
            return round((time.perf_counter() - started) * 1000, 1)

        try:
            route = await self.fetch_route(flight_number)
        except UpstreamTransientError as exc:
            return ProviderResult.fail(self.name, exc.code, exc.reason, duration_ms=elapsed())
        except PydanticValidationError as exc:
            return ProviderResult.fail(
                self.name,
                "provider_error",
                f"unusable payload: {exc.error_count()} invalid fields",
                duration_ms=elapsed(),
            )

        if route is None:
            return ProviderResult.fail(
                self.name, "not_found", f"no data for {flight_number}", duration_ms=elapsed()
            )
        return ProviderResult.ok(self.name, route, duration_ms=elapsed())

    @abstractmethod
    async def fetch_route(self, flight_number: str) -> FlightRoute | None:
        """Return the route, None when the provider does not know the flight.

        Raises:
            UpstreamTransientError: on any transport, status, or parse failure.
        """


def distance_fields(km: float | None) -> dict[str, float | None]:
    """``distance_*`` keyword arguments for a ``FlightRoute``."""
    if km is None:
        return {"distance_km": None, "distance_miles": None, "distance_nm": None}
    return {
        "distance_km": round(km, 1),
        "distance_miles": km_to_miles(km),
        "distance_nm": km_to_nm(km),
    }


def geodata_distance_km(origin: Airport, destination: Airport) -> float | None:
    if origin.coordinates is None or destination.coordinates is None:
        return None
    return haversine_km(origin.coordinates, destination.coordinates)
