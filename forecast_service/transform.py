"""
Tiered forecast view.

OpenWeather's forecast has ~40 data points (3-hour steps). Callers want
detail for today and one card per day after that, so:

- the earliest day keeps every 3-hour record, untouched
- every later day collapses into one synthesized summary at local noon

Pure functions, no I/O. Summary statistics are truncated, not rounded.
"""

from __future__ import annotations

from collections import Counter
from datetime import date, datetime, time
from typing import Dict, Iterable, List, Sequence, TypeVar

from . import models

T = TypeVar("T")

SUMMARY_TIME = time(12, 0)


def truncate2(value: float) -> float:
    """Cut a value to 2 decimals (toward zero): 15.3612 -> 15.36, -1.239 -> -1.23."""
    return int(value * 100) / 100


def most_common(values: Iterable[T]) -> T:
    """Most frequent value; on a tie the one seen first wins."""
    # Counter.most_common keeps first-encounter order among equal counts.
    return Counter(values).most_common(1)[0][0]


def group_by_day(records: Iterable[models.ForecastRecord]) -> Dict[date, List[models.ForecastRecord]]:
    """Group by calendar date of forecast_time, keeping input order inside each day."""
    grouped: Dict[date, List[models.ForecastRecord]] = {}
    for record in records:
        grouped.setdefault(record.forecast_time.date(), []).append(record)
    return grouped


def create_daily_summary(records: Sequence[models.ForecastRecord], day: date) -> models.ForecastRecord:
    """
    Build one unsaved record describing a whole day.

    - temperature: mean, truncated to 2 decimals
    - humidity: mean, truncated to an int
    - min/max temperature: extreme of the day, truncated to 2 decimals
    - description/icon: most frequent value
    """
    count = len(records)
    avg_temperature = sum(r.temperature for r in records) / count
    avg_humidity = sum(r.humidity for r in records) / count

    return models.ForecastRecord(
        city=records[0].city,
        forecast_time=datetime.combine(day, SUMMARY_TIME),
        temperature=truncate2(avg_temperature),
        min_temperature=truncate2(min(r.min_temperature for r in records)),
        max_temperature=truncate2(max(r.max_temperature for r in records)),
        humidity=int(avg_humidity),
        description=most_common(r.description for r in records),
        icon_code=most_common(r.icon_code for r in records),
    )


def transform_forecasts(records: Iterable[models.ForecastRecord]) -> List[models.ForecastRecord]:
    """
    Full detail for the earliest day, one summary for each later day.

    len(result) == records on the earliest day + number of later days.
    Input records are returned as-is, never modified.
    """
    grouped = group_by_day(records)
    if not grouped:
        return []

    first_day, *later_days = sorted(grouped)

    result = list(grouped[first_day])
    for day in later_days:
        result.append(create_daily_summary(grouped[day], day))
    return result
