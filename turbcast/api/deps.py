"""FastAPI dependency injection wiring."""

from __future__ import annotations

from fastapi import Request

from turbcast.services.forecast_service import ForecastService


# ------------------------------------------------------------------
# Forecast service (singleton from app.state)
# ------------------------------------------------------------------


def get_forecast_service(request: Request) -> ForecastService:
    return request.app.state.forecast_service
