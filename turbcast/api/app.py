"""FastAPI application factory."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from turbcast.api.deps import get_forecast_service
from turbcast.api.routes import cache, lookup
from turbcast.config import Settings
from turbcast.errors import TurbcastError
from turbcast.services.forecast_service import ForecastService

settings = Settings.from_env()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logging.getLogger("httpx").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the forecast service on startup and release it on shutdown."""
    logger = logging.getLogger(__name__)

    service = ForecastService.from_settings(settings)
    service.start()
    configured = [p.name for p in service.resolver.providers if p.is_configured]
    logger.info("Forecast service started; route providers: %s", ", ".join(configured))

    app.state.forecast_service = service
    try:
        yield
    finally:
        await service.shutdown()
        logger.info("Forecast service stopped")


app = FastAPI(
    title="Turbcast API",
    description="Turbulence forecasts by flight number",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(lookup.router, prefix="/api")
app.include_router(cache.router, prefix="/api")


@app.exception_handler(TurbcastError)
async def unhandled_engine_error(request: Request, exc: TurbcastError) -> JSONResponse:
    logging.getLogger(__name__).error("Unhandled engine error on %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=500,
        content={"detail": {"error": "internal_error", "message": "Forecast could not be computed"}},
    )


@app.get("/api/health")
async def health(service: ForecastService = Depends(get_forecast_service)):
    metrics = service.metrics()
    return {
        "status": "ok",
        "providers": service.resolver.provider_names,
        "cached_basic": metrics["basic"].size,
        "cached_full": metrics["full"].size,
        "in_flight": metrics["in_flight"],
    }
