"""Operational cache endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from turbcast.api.deps import get_forecast_service
from turbcast.services.forecast_service import ForecastService

router = APIRouter(prefix="/cache", tags=["cache"])


@router.get("/clear")
async def clear_cache(
    service: ForecastService = Depends(get_forecast_service),
) -> dict:
    return {"cleared": service.clear_cache()}


@router.get("/metrics")
async def cache_metrics(
    service: ForecastService = Depends(get_forecast_service),
) -> dict:
    metrics = service.metrics()
    return {
        "basic": metrics["basic"].to_json(),
        "full": metrics["full"].to_json(),
        "in_flight": metrics["in_flight"],
    }
