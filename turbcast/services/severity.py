"""Turn nearby observations into per-segment and overall severity."""

from __future__ import annotations

import functools
from collections import defaultdict
from collections.abc import Iterable, Sequence

from turbcast.contracts.enums import Severity
from turbcast.contracts.flight import FlightRoute
from turbcast.contracts.forecast import ForecastSegment, NearbyObservation, RouteSegment
from turbcast.services.segmenter import CRUISE_ALTITUDE_FT

OBSERVED_ALTITUDE_FLOOR_FT = 25_000

# severity: (base, per-report boost, cap)
_PROBABILITY_TIERS: dict[Severity, tuple[float, float, float]] = {
    Severity.LIGHT: (0.3, 0.1, 0.5),
    Severity.MODERATE: (0.5, 0.1, 0.7),
    Severity.SEVERE: (0.7, 0.05, 0.9),
}


def probability_for(severity: Severity, count: int) -> float:
    """Tier base plus a per-report boost, capped per tier. Smooth is always 0."""
    tier = _PROBABILITY_TIERS.get(severity)
    if tier is None or count <= 0:
        return 0.0
    base, boost, cap = tier
    return round(min(base + boost * count, cap), 2)


def score_segment(segment: RouteSegment, nearby: Sequence[NearbyObservation]) -> ForecastSegment:
    """Score one segment from the observations matched to it.

    The worst report sets the severity; among equally bad reports the most
    recent one is used. Reports below cruise levels do not set the altitude.
    """
    if not nearby:
        return ForecastSegment(
            label=segment.label,
            severity=Severity.SMOOTH,
            altitude_ft=segment.altitude_ft,
            probability=0.0,
        )

    worst = max(
        (n.observation for n in nearby),
        key=lambda obs: (obs.intensity.rank, obs.observed_at.timestamp()),
    )
    altitude = segment.altitude_ft
    if worst.altitude_ft >= OBSERVED_ALTITUDE_FLOOR_FT:
        altitude = int(round(worst.altitude_ft / 100.0)) * 100

    # only turbulence reports feed the boost; NEG/SMTH ones never raise it
    turbulent = sum(1 for n in nearby if n.observation.intensity is not Severity.SMOOTH)
    return ForecastSegment(
        label=segment.label,
        severity=worst.intensity,
        altitude_ft=altitude,
        probability=probability_for(worst.intensity, turbulent),
        report_count=len(nearby),
    )


def overall_severity(severities: Iterable[Severity]) -> Severity:
    """Worst severity in one pass; the first of equal severities wins."""
    return functools.reduce(
        lambda worst, s: s if s.rank > worst.rank else worst,
        severities,
        Severity.SMOOTH,
    )


def score_route(
    segments: Sequence[RouteSegment], nearby: Iterable[NearbyObservation]
) -> list[ForecastSegment]:
    """Score every segment, each against the reports nearest to it."""
    by_segment: dict[int, list[NearbyObservation]] = defaultdict(list)
    for n in nearby:
        by_segment[n.segment_index].append(n)
    return [score_segment(seg, by_segment.get(i, [])) for i, seg in enumerate(segments)]


def degraded_segment(route: FlightRoute) -> ForecastSegment:
    """Placeholder for a route that cannot be segmented (no coordinates)."""
    return ForecastSegment(
        label=route.label,
        severity=Severity.SMOOTH,
        altitude_ft=CRUISE_ALTITUDE_FT,
        probability=0.0,
    )
