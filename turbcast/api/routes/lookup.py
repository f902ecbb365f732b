"""Forecast lookup endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import AliasChoices, BaseModel, Field

from turbcast.api.deps import get_forecast_service
from turbcast.errors import NotFoundError, ValidationError
from turbcast.services.forecast_service import ForecastService

router = APIRouter(prefix="/lookup", tags=["lookup"])


class LookupRequest(BaseModel):
    flight_number: str = Field(
        ..., validation_alias=AliasChoices("flight_number", "flightNumber")
    )


def _not_found_detail(exc: NotFoundError) -> dict:
    return {
        "error": "flight_not_found",
        "message": str(exc),
        "flight_number": exc.flight_number,
        "providers_tried": exc.providers_tried,
    }


@router.post("")
async def lookup_basic(
    body: LookupRequest,
    service: ForecastService = Depends(get_forecast_service),
) -> dict:
    """Basic forecast now; the full one is computed in the background."""
    try:
        forecast = await service.get_basic(body.flight_number)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail={"error": "invalid_flight_number", "message": str(exc)})
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=_not_found_detail(exc))
    return forecast.to_json()


@router.get("/{flight_number}")
async def lookup_full(
    flight_number: str,
    service: ForecastService = Depends(get_forecast_service),
) -> dict:
    """Full forecast; waits for the computation if it is not cached yet."""
    try:
        forecast = await service.get_full(flight_number)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail={"error": "invalid_flight_number", "message": str(exc)})
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=_not_found_detail(exc))
    return forecast.to_json()
