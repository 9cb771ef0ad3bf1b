"""
FastAPI entrypoint.

This file focuses on:
- routing
- request/response handling
- wiring together Settings + DB + provider client + cleanup janitor

Run with:
    uvicorn --factory forecast_service.main:create_app
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import date, datetime, time
from typing import List, Optional

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from . import __version__
from .crud import count_forecasts
from .db import get_db, init_db, make_engine, make_session_factory
from .errors import StoreUnavailable, WeatherError
from .logging_config import configure_logging
from .scheduler import CleanupScheduler
from .schemas import DatabaseHealth, ForecastRecordOut, HealthOut
from .service import ForecastService
from .settings import Settings
from .weather_clients import OpenWeatherClient

logger = logging.getLogger(__name__)

router = APIRouter()


# -------------------------
# Dependencies
# -------------------------

def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_client(request: Request) -> OpenWeatherClient:
    return request.app.state.client


def get_service(
    db: Session = Depends(get_db),
    client: OpenWeatherClient = Depends(get_client),
    settings: Settings = Depends(get_settings),
) -> ForecastService:
    """One pipeline per request, bound to the request's session."""
    return ForecastService(
        db,
        client,
        window_days=settings.forecast_window_days,
        min_days=settings.min_forecast_days,
    )


def to_http_error(e: WeatherError) -> HTTPException:
    """Store failures are 503, provider failures (unavailable or malformed) are 502."""
    if isinstance(e, StoreUnavailable):
        return HTTPException(status_code=503, detail=str(e))
    return HTTPException(status_code=502, detail=str(e))


# -------------------------
# Forecast APIs
# -------------------------

@router.get("/api/weather/{city}", response_model=List[ForecastRecordOut])
async def api_forecast(
    city: str,
    lang: Optional[str] = Query(None, min_length=2, max_length=8),
    service: ForecastService = Depends(get_service),
    settings: Settings = Depends(get_settings),
):
    """
    Forecast for a city:
    - served from the database when it covers enough days
    - otherwise fetched from OpenWeatherMap and stored first
    - 3-hourly records for the first day, one summary per later day
    """
    try:
        return await service.get_transformed_forecast(city, lang or settings.default_lang)
    except WeatherError as e:
        logger.warning("Forecast for %s failed: %s", city, e)
        raise to_http_error(e)


@router.get("/api/weather/{city}/range", response_model=List[ForecastRecordOut])
def api_forecast_range(
    city: str,
    start_date: date,
    end_date: date,
    service: ForecastService = Depends(get_service),
):
    """Stored records between two dates (whole days, inclusive). Never calls the provider."""
    if end_date < start_date:
        raise HTTPException(status_code=400, detail="Invalid date range: end_date must be >= start_date.")

    start = datetime.combine(start_date, time.min)
    end = datetime.combine(end_date, time.max)
    try:
        return service.get_forecast_in_range(city, start, end)
    except StoreUnavailable as e:
        raise to_http_error(e)


# -------------------------
# Health
# -------------------------

@router.get("/api/health", response_model=HealthOut)
def api_health(db: Session = Depends(get_db)):
    """200 when the database answers, 503 otherwise."""
    timestamp = int(datetime.now().timestamp() * 1000)
    try:
        count = count_forecasts(db)
    except StoreUnavailable as e:
        body = HealthOut(
            status="DOWN",
            timestamp=timestamp,
            database=DatabaseHealth(status="DOWN", message=f"Database connection failed: {e.__cause__ or e}"),
        )
        return JSONResponse(status_code=503, content=body.model_dump())

    return HealthOut(
        status="UP",
        timestamp=timestamp,
        database=DatabaseHealth(status="UP", message="Database connection successful", record_count=count),
    )


# -------------------------
# App factory
# -------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings: Settings = app.state.settings

    engine = make_engine(settings.database_url)
    try:
        init_db(engine)
        app.state.engine = engine
        app.state.session_factory = make_session_factory(engine)

        # Startup cleanup; a failing database here should stop the app.
        janitor = CleanupScheduler(app.state.session_factory)
        janitor.run_once("Startup")
        if settings.cleanup_enabled:
            janitor.start()
        app.state.janitor = janitor

        yield

        await janitor.stop()
    finally:
        engine.dispose()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings()
    configure_logging(settings.log_level, json_logs=settings.json_logs)

    app = FastAPI(title=settings.app_name, version=__version__, lifespan=lifespan)

    # API client (constructed once, configured explicitly).
    app.state.settings = settings
    app.state.client = OpenWeatherClient(settings.provider_config())

    app.include_router(router)
    return app
