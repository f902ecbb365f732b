"""Split a route into contiguous time-and-space segments."""

from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone

from turbcast.contracts.flight import FlightRoute
from turbcast.contracts.forecast import RouteSegment
from turbcast.errors import IncompleteDataError
from turbcast.services.geo import haversine_km, interpolate

MIN_SEGMENTS = 1
MAX_SEGMENTS = 10
DEFAULT_SEGMENTS = 6

AVERAGE_GROUNDSPEED_KMH = 804.672  # 500 mph
MIN_FLIGHT_DURATION = timedelta(minutes=30)

CRUISE_ALTITUDE_FT = 35_000
CLIMB_DESCENT_ALTITUDE_FT = 20_000


def estimate_duration(distance_km: float) -> timedelta:
    """Block time at the average groundspeed, never under the minimum."""
    return max(MIN_FLIGHT_DURATION, timedelta(hours=distance_km / AVERAGE_GROUNDSPEED_KMH))


def altitude_for_index(index: int, count: int) -> int:
    """Climb/cruise/descent profile.

    With three or more segments, the first and last ``ceil(10%)`` segments
    are flown at climb/descent altitude; everything else at cruise.
    """
    if count < 3:
        return CRUISE_ALTITUDE_FT
    edge = math.ceil(0.1 * count)
    if index < edge or index >= count - edge:
        return CLIMB_DESCENT_ALTITUDE_FT
    return CRUISE_ALTITUDE_FT


class RouteSegmenter:
    def __init__(self, default_count: int = DEFAULT_SEGMENTS):
        self._default_count = default_count

    def segment(
        self,
        route: FlightRoute,
        desired_segment_count: int | None = None,
        start_time: datetime | None = None,
    ) -> list[RouteSegment]:
        """Build ``n`` contiguous segments from origin to destination.

        ``n`` is clamped to [1, 10]. Waypoints are linearly interpolated and
        the flight window is split evenly, so segment ``i`` ends exactly where
        and when segment ``i + 1`` starts.

        Raises:
            IncompleteDataError: if either endpoint has no coordinates.
        """
        origin = route.origin.coordinates
        destination = route.destination.coordinates
        if origin is None or destination is None:
            missing = [
                a.iata for a in (route.origin, route.destination) if a.coordinates is None
            ]
            raise IncompleteDataError(route.flight_number, missing)

        n = desired_segment_count if desired_segment_count is not None else self._default_count
        n = max(MIN_SEGMENTS, min(MAX_SEGMENTS, n))

        start = start_time or datetime.now(tz=timezone.utc)
        duration = estimate_duration(haversine_km(origin, destination))

        waypoints = [interpolate(origin, destination, i / n) for i in range(n + 1)]
        boundaries = [start + duration * i / n for i in range(n + 1)]

        return [
            RouteSegment(
                id=f"segment_{i + 1}",
                start=waypoints[i],
                end=waypoints[i + 1],
                label=f"{route.label} ({i + 1}/{n})",
                start_time=boundaries[i],
                end_time=boundaries[i + 1],
                altitude_ft=altitude_for_index(i, n),
            )
            for i in range(n)
        ]
