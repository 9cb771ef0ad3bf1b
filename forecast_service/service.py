"""
Forecast pipeline.

A request for a city runs, in order:

1. decide: are the stored rows for the next days good enough?
2. fetch_and_persist: if not, pull a fresh forecast and store it
3. transform_forecasts: reshape into the tiered view

plus the two side operations the HTTP layer and the janitor use:
a raw range read and the retention cleanup.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, time, timedelta
from typing import Any, Callable, Dict, List, Optional

from pydantic import ValidationError
from sqlalchemy.orm import Session

from . import crud, models
from .errors import MalformedProviderPayload, ProviderUnavailable
from .schemas import ProviderForecast
from .transform import transform_forecasts
from .weather_clients import OpenWeatherClient

logger = logging.getLogger(__name__)

# Format of the provider's per-entry "dt_txt" field
PROVIDER_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

DEFAULT_LANG = "en"
DEFAULT_WINDOW_DAYS = 5
DEFAULT_MIN_DAYS = 5


@dataclass(frozen=True)
class Freshness:
    """Outcome of looking at the stored rows for one city."""
    records: List[models.ForecastRecord]
    distinct_days: int
    sufficient: bool


def map_provider_payload(payload: Dict[str, Any]) -> List[models.ForecastRecord]:
    """
    Turn an OpenWeatherMap forecast payload into unsaved records.

    All-or-nothing: one bad entry fails the whole payload.
    """
    try:
        forecast = ProviderForecast.model_validate(payload)
    except ValidationError as e:
        raise MalformedProviderPayload(f"Unexpected forecast payload: {e}") from e

    records = []
    for entry in forecast.list:
        try:
            forecast_time = datetime.strptime(entry.dt_txt, PROVIDER_TIME_FORMAT)
        except ValueError as e:
            raise MalformedProviderPayload(f"Bad forecast timestamp {entry.dt_txt!r}") from e

        weather = entry.weather[0]
        records.append(
            models.ForecastRecord(
                city=forecast.city.name,
                forecast_time=forecast_time,
                temperature=entry.main.temp,
                min_temperature=entry.main.temp_min,
                max_temperature=entry.main.temp_max,
                humidity=entry.main.humidity,
                description=weather.description,
                icon_code=weather.icon,
            )
        )
    return records


class ForecastService:
    """
    The decide / fetch / transform pipeline for one unit of work.

    Built per request (or per cleanup run) around one DB session.
    The cleanup and range read never touch the provider, so `client`
    may be left out there.
    `now` is injectable so tests can pin the clock.
    """

    def __init__(
        self,
        db: Session,
        client: Optional[OpenWeatherClient] = None,
        *,
        window_days: int = DEFAULT_WINDOW_DAYS,
        min_days: int = DEFAULT_MIN_DAYS,
        now: Callable[[], datetime] = datetime.now,
    ):
        self.db = db
        self.client = client
        self.window_days = window_days
        self.min_days = min_days
        self.now = now

    # -------------------------
    # Freshness
    # -------------------------

    def decide(self, city: str) -> Freshness:
        """
        Look at stored rows in [now, now + window_days).

        Sufficient only when there are rows and they span at least
        min_days calendar dates. Store errors propagate.
        """
        start = self.now()
        end = start + timedelta(days=self.window_days)

        records = [r for r in crud.find_forecasts(self.db, city, start, end) if r.forecast_time < end]
        distinct_days = len({r.forecast_time.date() for r in records})
        sufficient = bool(records) and distinct_days >= self.min_days

        logger.debug(
            "Freshness for %s: %d rows over %d days, sufficient=%s",
            city, len(records), distinct_days, sufficient,
        )
        return Freshness(records=records, distinct_days=distinct_days, sufficient=sufficient)

    # -------------------------
    # Ingestion
    # -------------------------

    async def fetch_and_persist(self, city: str, lang: str = DEFAULT_LANG) -> List[models.ForecastRecord]:
        """
        Fetch a fresh forecast and store every timestep.

        Always inserts; existing rows for the same slots stay in place
        until the cleanup removes them.
        """
        if self.client is None:
            raise ProviderUnavailable("No forecast provider configured")

        logger.info("Fetching forecast for %s (lang=%s)", city, lang)
        payload = await self.client.forecast(city, lang)
        if payload is None:
            raise ProviderUnavailable("Failed to fetch weather data from OpenWeatherMap API")

        records = map_provider_payload(payload)
        saved = crud.save_all(self.db, records)
        logger.info("Stored %d forecast rows for %s", len(saved), city)
        return saved

    # -------------------------
    # Reads
    # -------------------------

    async def get_or_fetch_forecast(self, city: str, lang: str = DEFAULT_LANG) -> List[models.ForecastRecord]:
        """Stored rows when sufficient, otherwise a freshly fetched set (never merged)."""
        freshness = self.decide(city)
        if freshness.sufficient:
            return freshness.records

        logger.info(
            "Cached forecast for %s covers %d/%d days, refreshing",
            city, freshness.distinct_days, self.min_days,
        )
        return await self.fetch_and_persist(city, lang)

    async def get_transformed_forecast(self, city: str, lang: str = DEFAULT_LANG) -> List[models.ForecastRecord]:
        """3-hourly records for the first day, one summary for each later day."""
        return transform_forecasts(await self.get_or_fetch_forecast(city, lang))

    def get_forecast_in_range(self, city: str, start: datetime, end: datetime) -> List[models.ForecastRecord]:
        """Raw stored rows; never calls the provider."""
        return crud.find_forecasts(self.db, city, start, end)

    # -------------------------
    # Retention
    # -------------------------

    def cleanup(self) -> int:
        """Delete every row whose forecast_time is before today 00:00."""
        start_of_day = datetime.combine(self.now().date(), time.min)
        return crud.delete_older_than(self.db, start_of_day)
