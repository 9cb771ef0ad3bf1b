"""Shared fixtures: in-memory database, record factory, fake provider."""

import sqlite3
from datetime import datetime
from typing import Any, Dict, List, Optional

import pytest
from sqlalchemy import event
from sqlalchemy.pool import StaticPool

from forecast_service.db import init_db, make_engine, make_session_factory
from forecast_service.models import ForecastRecord

# Fixed clock used by service/scheduler tests
NOW = datetime(2026, 10, 19, 10, 30)


class FakeOpenWeatherClient:
    """Stands in for OpenWeatherClient; records every call."""

    def __init__(self, payload: Any = None, error: Optional[Exception] = None):
        self.payload = payload
        self.error = error
        self.calls: List[tuple] = []

    async def forecast(self, city: str, lang: str):
        self.calls.append((city, lang))
        if self.error is not None:
            raise self.error
        return self.payload


def provider_entry(
    dt_txt: str,
    temp: float = 20.5,
    temp_min: float = 18.0,
    temp_max: float = 22.0,
    humidity: int = 65,
    conditions: Optional[List[Dict[str, Any]]] = None,
) -> Dict[str, Any]:
    """One OpenWeatherMap 3-hour step, shaped like the real API."""
    if conditions is None:
        conditions = [{"id": 800, "main": "Clear", "description": "Clear sky", "icon": "01d"}]
    return {
        "dt": int(datetime.strptime(dt_txt, "%Y-%m-%d %H:%M:%S").timestamp()),
        "main": {
            "temp": temp,
            "feels_like": temp - 0.5,
            "temp_min": temp_min,
            "temp_max": temp_max,
            "pressure": 1013,
            "sea_level": 1013,
            "grnd_level": 1008,
            "humidity": humidity,
            "temp_kf": 0.0,
        },
        "weather": conditions,
        "clouds": {"all": 0},
        "wind": {"speed": 3.1, "deg": 240, "gust": 5.2},
        "visibility": 10000,
        "pop": 0.0,
        "sys": {"pod": "d"},
        "dt_txt": dt_txt,
    }


def provider_payload(entries: List[Dict[str, Any]], city: str = "Berlin") -> Dict[str, Any]:
    return {
        "cod": "200",
        "message": 0,
        "cnt": len(entries),
        "list": entries,
        "city": {
            "id": 2950159,
            "name": city,
            "coord": {"lat": 52.5244, "lon": 13.4105},
            "country": "DE",
            "population": 1000000,
            "timezone": 7200,
            "sunrise": 1760851200,
            "sunset": 1760889600,
        },
    }


@pytest.fixture
def engine():
    engine = make_engine("sqlite://", poolclass=StaticPool)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def db(session_factory):
    with session_factory() as session:
        yield session


@pytest.fixture
def make_record():
    """Factory for unsaved ForecastRecord rows with sensible defaults."""

    def _make(forecast_time: datetime, **overrides) -> ForecastRecord:
        values = dict(
            city="Berlin",
            forecast_time=forecast_time,
            temperature=20.5,
            min_temperature=18.0,
            max_temperature=22.0,
            humidity=65,
            description="Clear sky",
            icon_code="01d",
        )
        values.update(overrides)
        return ForecastRecord(**values)

    return _make


@pytest.fixture
def store(db):
    """Persist records directly, bypassing the service."""

    def _store(*records: ForecastRecord) -> List[ForecastRecord]:
        db.add_all(records)
        db.commit()
        return list(records)

    return _store


@pytest.fixture
def fail_statement(engine):
    """Make every SQL statement starting with the given verb fail at the driver."""
    listeners = []

    def _fail(verb: str) -> None:
        def before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
            if statement.lstrip().upper().startswith(verb.upper()):
                raise sqlite3.OperationalError("database is locked")

        event.listen(engine, "before_cursor_execute", before_cursor_execute)
        listeners.append(before_cursor_execute)

    yield _fail

    for listener in listeners:
        event.remove(engine, "before_cursor_execute", listener)
