"""Great-circle and point-to-segment distance helpers.

All functions are pure and total over finite coordinates.
"""

from __future__ import annotations

import math
from collections.abc import Iterable

from turbcast.contracts.common import Coordinate

EARTH_RADIUS_KM = 6371.0
KM_TO_NM = 0.539957
KM_TO_MI = 0.621371


def haversine_km(a: Coordinate, b: Coordinate) -> float:
    """Return great-circle distance in **kilometres**."""
    lat1_r, lon1_r = math.radians(a.latitude), math.radians(a.longitude)
    lat2_r, lon2_r = math.radians(b.latitude), math.radians(b.longitude)

    dlat = lat2_r - lat1_r
    dlon = lon2_r - lon1_r

    h = (
        math.sin(dlat / 2) ** 2
        + math.cos(lat1_r) * math.cos(lat2_r) * math.sin(dlon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return EARTH_RADIUS_KM * c


def distance_to_segment_km(point: Coordinate, start: Coordinate, end: Coordinate) -> float:
    """Minimum distance in km from ``point`` to the segment ``start``-``end``.

    The projection is done in degree space and clamped to [0, 1], so the
    closest point lies on the segment rather than the infinite line. The
    distance to that closest point is great-circle.
    """
    abx = end.latitude - start.latitude
    aby = end.longitude - start.longitude
    ab_sq = abx * abx + aby * aby
    if ab_sq == 0:
        return haversine_km(point, start)

    apx = point.latitude - start.latitude
    apy = point.longitude - start.longitude
    t = max(0.0, min(1.0, (apx * abx + apy * aby) / ab_sq))
    closest = Coordinate(
        latitude=start.latitude + t * abx,
        longitude=start.longitude + t * aby,
    )
    return haversine_km(point, closest)


def interpolate(a: Coordinate, b: Coordinate, fraction: float) -> Coordinate:
    """Linear interpolation between two coordinates; exact at 0 and 1."""
    if fraction <= 0:
        return a
    if fraction >= 1:
        return b
    return Coordinate(
        latitude=a.latitude + (b.latitude - a.latitude) * fraction,
        longitude=a.longitude + (b.longitude - a.longitude) * fraction,
    )


def bounding_box(
    points: Iterable[Coordinate], buffer_deg: float = 2.0
) -> tuple[float, float, float, float] | None:
    """Return ``(min_lon, min_lat, max_lon, max_lat)`` around ``points``.

    The box is padded by ``buffer_deg`` and clamped to valid ranges.
    Returns None for an empty input.
    """
    lats: list[float] = []
    lons: list[float] = []
    for p in points:
        lats.append(p.latitude)
        lons.append(p.longitude)
    if not lats:
        return None

    return (
        max(-180.0, min(lons) - buffer_deg),
        max(-90.0, min(lats) - buffer_deg),
        min(180.0, max(lons) + buffer_deg),
        min(90.0, max(lats) + buffer_deg),
    )


def km_to_nm(km: float) -> float:
    return round(km * KM_TO_NM, 1)


def km_to_miles(km: float) -> float:
    return round(km * KM_TO_MI, 1)
