"""NOAA Aviation Weather Center PIREP client.

One request per forecast computation: the feed is queried for the route's
bounding box, and reports are matched to segments client-side. Any failure
yields an empty list, which scores as smooth air.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from datetime import datetime, timezone
from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from turbcast.contracts.common import Coordinate
from turbcast.contracts.enums import Severity
from turbcast.contracts.forecast import NearbyObservation, RouteSegment, TurbulenceObservation
from turbcast.errors import UpstreamTransientError
from turbcast.services.geo import bounding_box, distance_to_segment_km
from turbcast.services.http import fetch_json

logger = logging.getLogger(__name__)

BASE_URL = "https://aviationweather.gov/api/data/pirep"
DEFAULT_MAX_DISTANCE_KM = 200.0
BBOX_BUFFER_DEG = 2.0

BBox = tuple[float, float, float, float]

_INTENSITY_MAP = {
    "NEG": Severity.SMOOTH,
    "SMTH": Severity.SMOOTH,
    "LGT": Severity.LIGHT,
    "LGT-MOD": Severity.LIGHT,
    "MOD": Severity.MODERATE,
    "MOD-SEV": Severity.MODERATE,
    "SEV": Severity.SEVERE,
    "SEV-EXTM": Severity.SEVERE,
    "EXTM": Severity.SEVERE,
    "EXT": Severity.SEVERE,
}


class PirepClient:
    """Async client for turbulence pilot reports."""

    def __init__(self, http_client: httpx.AsyncClient | None = None, base_url: str = BASE_URL):
        self._client = http_client or httpx.AsyncClient(timeout=10.0)
        self._base_url = base_url

    async def fetch_observations(self, bbox: BBox | None = None) -> list[TurbulenceObservation]:
        """Fetch turbulence reports, optionally limited to ``bbox``.

        ``bbox`` is ``(min_lon, min_lat, max_lon, max_lat)``. If the bbox
        query is rejected the global feed is tried once. Never raises for
        upstream failures.
        """
        params: dict[str, Any] = {"format": "json"}
        if bbox is not None:
            params["bbox"] = ",".join(str(round(v, 4)) for v in bbox)

        try:
            payload = await fetch_json(self._client, "pireps", self._base_url, params=params)
        except UpstreamTransientError as exc:
            if bbox is None or exc.code not in ("http_status", "rate_limited"):
                logger.warning("PIREP feed unavailable: %s", exc.reason)
                return []
            logger.info("PIREP bbox query rejected (%s), retrying without bbox", exc.reason)
            try:
                payload = await fetch_json(
                    self._client, "pireps", self._base_url, params={"format": "json"}
                )
            except UpstreamTransientError as retry_exc:
                logger.warning("PIREP feed unavailable: %s", retry_exc.reason)
                return []

        observations = [
            obs for obs in (parse_report(raw) for raw in _iter_reports(payload)) if obs is not None
        ]
        logger.debug("PIREP feed returned %d turbulence observations", len(observations))
        return observations

    async def reports_near(
        self,
        segments: Sequence[RouteSegment],
        max_distance_km: float = DEFAULT_MAX_DISTANCE_KM,
    ) -> list[NearbyObservation]:
        """Observations within ``max_distance_km`` of any segment.

        Each result carries its distance to, and the index of, the nearest
        segment.
        """
        if not segments:
            return []
        points = [s.start for s in segments] + [segments[-1].end]
        observations = await self.fetch_observations(bounding_box(points, BBOX_BUFFER_DEG))
        return match_to_segments(observations, segments, max_distance_km)


def match_to_segments(
    observations: Iterable[TurbulenceObservation],
    segments: Sequence[RouteSegment],
    max_distance_km: float,
) -> list[NearbyObservation]:
    nearby: list[NearbyObservation] = []
    for obs in observations:
        distance, index = min(
            (distance_to_segment_km(obs.coordinates, seg.start, seg.end), i)
            for i, seg in enumerate(segments)
        )
        if distance <= max_distance_km:
            nearby.append(
                NearbyObservation(observation=obs, distance_km=distance, segment_index=index)
            )
    return nearby


def _iter_reports(payload: Any) -> Iterable[dict]:
    """Flatten the shapes the feed has been seen to return.

    A bare list, an object of lists, or a GeoJSON FeatureCollection.
    """
    if isinstance(payload, list):
        items: list[Any] = payload
    elif isinstance(payload, dict):
        items = []
        for value in payload.values():
            if isinstance(value, list):
                items.extend(value)
    else:
        return

    for item in items:
        if not isinstance(item, dict):
            continue
        if item.get("type") == "Feature" and isinstance(item.get("properties"), dict):
            yield _flatten_feature(item)
        else:
            yield item


def _flatten_feature(feature: dict) -> dict:
    props = dict(feature["properties"])
    geometry = feature.get("geometry") or {}
    coords = geometry.get("coordinates")
    if isinstance(coords, list) and len(coords) >= 2:
        props.setdefault("lon", coords[0])
        props.setdefault("lat", coords[1])
    return props


def map_intensity(code: Any) -> Severity | None:
    """Map a PIREP turbulence intensity code; None when absent or unknown."""
    if not isinstance(code, str) or not code.strip():
        return None
    return _INTENSITY_MAP.get(code.strip().upper())


def parse_report(raw: dict) -> TurbulenceObservation | None:
    """Parse one PIREP; None when it carries no usable turbulence report.

    A malformed record is skipped rather than failing the whole feed.
    """
    try:
        return _build_observation(raw)
    except (PydanticValidationError, TypeError, ValueError, OverflowError, OSError) as exc:
        logger.debug("Skipping malformed PIREP %r: %s", raw.get("rawOb"), exc)
        return None


def _build_observation(raw: dict) -> TurbulenceObservation | None:
    intensity = map_intensity(raw.get("tbInt1")) or map_intensity(raw.get("tbInt2"))
    if intensity is None:
        return None

    lat, lon = raw.get("lat"), raw.get("lon")
    if lat is None or lon is None:
        return None

    station = raw.get("icaoId") or "PIREP"
    return TurbulenceObservation(
        id=f"{station}-{raw.get('obsTime')}",
        coordinates=Coordinate(latitude=float(lat), longitude=float(lon)),
        altitude_ft=max(0, int(float(raw.get("fltLvl") or 0) * 100)),
        intensity=intensity,
        observed_at=_parse_obs_time(raw.get("obsTime")),
        aircraft_type=raw.get("acType"),
        raw=raw.get("rawOb"),
    )


def _parse_obs_time(value: Any) -> datetime:
    """``obsTime`` is epoch seconds; some mirrors send ISO 8601.

    Raises:
        ValueError, OverflowError, OSError: out-of-range epoch values.
    """
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            pass
    return datetime.now(tz=timezone.utc)
