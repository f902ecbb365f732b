"""Enumerations shared across all Turbcast contracts."""

from enum import Enum


class FlightStatus(str, Enum):
    """Operational status of a flight as reported by a route provider."""
    SCHEDULED = "scheduled"
    LIVE = "live"
    LANDED = "landed"
    CANCELLED = "cancelled"
    UNKNOWN = "unknown"


class Severity(str, Enum):
    """Turbulence intensity, totally ordered smooth < light < moderate < severe."""
    SMOOTH = "smooth"
    LIGHT = "light"
    MODERATE = "moderate"
    SEVERE = "severe"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    Severity.SMOOTH: 0,
    Severity.LIGHT: 1,
    Severity.MODERATE: 2,
    Severity.SEVERE: 3,
}


class CacheTier(str, Enum):
    """Forecast cache tiers."""
    BASIC = "basic"
    FULL = "full"
