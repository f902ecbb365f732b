"""Plain-text timeline for a scored route."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from turbcast.contracts.enums import Severity
from turbcast.contracts.flight import FlightRoute
from turbcast.contracts.forecast import ForecastSegment, RouteSegment

_PHRASES = {
    Severity.SMOOTH: "Calm skies",
    Severity.LIGHT: "Light turbulence possible",
    Severity.MODERATE: "Moderate turbulence likely",
    Severity.SEVERE: "Severe turbulence expected",
}


def _clock(ts: datetime) -> str:
    return ts.strftime("%H:%M")


def build_summary(
    route: FlightRoute,
    segments: Sequence[RouteSegment],
    scored: Sequence[ForecastSegment],
) -> list[str]:
    """Takeoff line, one line per segment, landing line.

    Times are UTC. Returns an empty list when there is no timeline to tell.
    """
    if not segments or len(segments) != len(scored):
        return []

    lines = [f"Takeoff from {route.origin.iata} at {_clock(segments[0].start_time)} UTC."]
    for seg, result in zip(segments, scored):
        minutes = max(1, round((seg.end_time - seg.start_time).total_seconds() / 60))
        lines.append(
            f"{_clock(seg.start_time)}: {_PHRASES[result.severity]} for the next {minutes} minutes."
        )
    lines.append(f"Landing at {route.destination.iata} at {_clock(segments[-1].end_time)} UTC.")
    return lines
