"""
ORM models.

One row per provider timestep per city. Rows are written in bulk by
every provider fetch and removed only by the retention cleanup.
"""

import uuid
from datetime import datetime

from sqlalchemy import String, Integer, Float, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from .db import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class ForecastRecord(Base):
    __tablename__ = "weather_data"

    # Assigned on insert. Daily summaries built in memory keep id=None.
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)

    # Canonical name as resolved by the provider, used as the lookup key
    city: Mapped[str] = mapped_column(String(255), index=True, nullable=False)

    # The time the forecast describes (not when it was fetched)
    forecast_time: Mapped[datetime] = mapped_column(DateTime, index=True, nullable=False)

    temperature: Mapped[float] = mapped_column(Float, nullable=False)
    min_temperature: Mapped[float] = mapped_column(Float, nullable=False)
    max_temperature: Mapped[float] = mapped_column(Float, nullable=False)
    humidity: Mapped[int] = mapped_column(Integer, nullable=False)

    description: Mapped[str] = mapped_column(String(255), nullable=False)
    icon_code: Mapped[str] = mapped_column(String(16), nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, nullable=False)

    def __repr__(self) -> str:
        return (
            f"ForecastRecord(id={self.id!r}, city={self.city!r}, "
            f"forecast_time={self.forecast_time!r}, temperature={self.temperature!r})"
        )
