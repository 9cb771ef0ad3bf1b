"""
Store operations for forecast rows.

Why keep these separate from the service?
- the service stays about decisions, not queries
- every SQLAlchemy failure is turned into StoreUnavailable in one place
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from . import models
from .errors import StoreUnavailable

logger = logging.getLogger(__name__)


def find_forecasts(db: Session, city: str, start: datetime, end: datetime) -> List[models.ForecastRecord]:
    """Rows for one city with start <= forecast_time <= end, oldest first."""
    try:
        return (
            db.query(models.ForecastRecord)
            .filter(models.ForecastRecord.city == city)
            .filter(models.ForecastRecord.forecast_time >= start)
            .filter(models.ForecastRecord.forecast_time <= end)
            .order_by(models.ForecastRecord.forecast_time, models.ForecastRecord.created_at)
            .all()
        )
    except SQLAlchemyError as e:
        logger.error("Forecast lookup failed for %s: %s", city, e)
        raise StoreUnavailable(f"Could not read forecasts for {city!r}") from e


def save_all(db: Session, records: Iterable[models.ForecastRecord]) -> List[models.ForecastRecord]:
    """
    Insert all records in one transaction and return them with ids assigned.

    Rows already covering the same (city, forecast_time) are left alone;
    nothing is upserted.
    """
    records = list(records)
    try:
        db.add_all(records)
        db.commit()
        for record in records:
            db.refresh(record)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Saving %d forecast rows failed: %s", len(records), e)
        raise StoreUnavailable("Could not save forecasts") from e
    return records


def delete_older_than(db: Session, cutoff: datetime) -> int:
    """Bulk delete rows with forecast_time < cutoff, returning the row count."""
    try:
        deleted = (
            db.query(models.ForecastRecord)
            .filter(models.ForecastRecord.forecast_time < cutoff)
            .delete(synchronize_session=False)
        )
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Deleting forecasts before %s failed: %s", cutoff, e)
        raise StoreUnavailable("Could not delete old forecasts") from e
    return deleted


def count_forecasts(db: Session) -> int:
    try:
        return db.query(models.ForecastRecord).count()
    except SQLAlchemyError as e:
        raise StoreUnavailable("Could not count forecasts") from e
