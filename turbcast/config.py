"""Runtime configuration loaded from environment variables.

A ``.env`` file at the project root is loaded first, so local development
needs no exported variables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

AERODATABOX_DEFAULT_HOST = "aerodatabox.p.rapidapi.com"
FLIGHTAWARE_DEFAULT_URL = "https://aeroapi.flightaware.com/aeroapi"
PIREP_DEFAULT_URL = "https://aviationweather.gov/api/data/pirep"


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    return int(raw)


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    return float(raw)


@dataclass(frozen=True)
class Settings:
    """Engine settings. Defaults match production behaviour."""

    aerodatabox_api_key: str = ""
    aerodatabox_host: str = AERODATABOX_DEFAULT_HOST
    flightaware_api_key: str = ""
    flightaware_base_url: str = FLIGHTAWARE_DEFAULT_URL
    pirep_url: str = PIREP_DEFAULT_URL

    upstream_timeout_s: float = 10.0
    segment_count: int = 6
    max_report_distance_km: float = 200.0

    basic_cache_ttl_s: float = 30 * 60
    full_cache_ttl_s: float = 5 * 60
    cache_max_entries: int = 500
    cache_sweep_interval_s: float = 10 * 60
    background_concurrency: int = 8

    cors_origins: list[str] = field(default_factory=lambda: ["http://localhost:3000"])
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> Settings:
        """Build settings from the process environment (after loading ``.env``)."""
        load_dotenv()
        return cls(
            aerodatabox_api_key=os.environ.get("AERODATABOX_API_KEY", ""),
            aerodatabox_host=os.environ.get("AERODATABOX_HOST", AERODATABOX_DEFAULT_HOST),
            flightaware_api_key=os.environ.get("FLIGHTAWARE_API_KEY", ""),
            flightaware_base_url=os.environ.get("FLIGHTAWARE_BASE_URL", FLIGHTAWARE_DEFAULT_URL),
            pirep_url=os.environ.get("PIREP_URL", PIREP_DEFAULT_URL),
            upstream_timeout_s=_env_float("UPSTREAM_TIMEOUT_S", 10.0),
            segment_count=_env_int("SEGMENT_COUNT", 6),
            max_report_distance_km=_env_float("MAX_REPORT_DISTANCE_KM", 200.0),
            basic_cache_ttl_s=_env_float("BASIC_CACHE_TTL_S", 30 * 60),
            full_cache_ttl_s=_env_float("FULL_CACHE_TTL_S", 5 * 60),
            cache_max_entries=_env_int("CACHE_MAX_ENTRIES", 500),
            cache_sweep_interval_s=_env_float("CACHE_SWEEP_INTERVAL_S", 10 * 60),
            background_concurrency=_env_int("BACKGROUND_CONCURRENCY", 8),
            cors_origins=os.environ.get("CORS_ORIGINS", "http://localhost:3000").split(","),
            log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        )
