"""
Pydantic schemas.

Two groups:
- the OpenWeatherMap 5-day/3-hour forecast payload (only the fields we map)
- the contract of our REST endpoints
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import List, Optional


# -------------------------
# Provider payload
# -------------------------

class ProviderMain(BaseModel):
    """Temperature/humidity block of one timestep."""
    temp: float
    temp_min: float
    temp_max: float
    humidity: int


class ProviderCondition(BaseModel):
    """One condition tag. A timestep may carry several; we use the first."""
    id: Optional[int] = None
    main: Optional[str] = None
    description: str
    icon: str


class ProviderEntry(BaseModel):
    """One 3-hour timestep."""
    dt: int
    # "yyyy-MM-dd HH:mm:ss", local to the provider's clock, no offset
    dt_txt: str
    main: ProviderMain
    weather: List[ProviderCondition] = Field(..., min_length=1)


class ProviderCity(BaseModel):
    """The provider's canonical resolution of the queried city."""
    name: str
    country: Optional[str] = None
    timezone: Optional[int] = None


class ProviderForecast(BaseModel):
    cod: Optional[str] = None
    cnt: Optional[int] = None
    list: List[ProviderEntry]
    city: ProviderCity


# -------------------------
# API output
# -------------------------

class ForecastRecordOut(BaseModel):
    """
    One forecast point as returned by the API.

    Daily summaries are built in memory, so they have no id or created_at.
    """
    id: Optional[str] = None
    city: str
    forecast_time: datetime
    temperature: float
    min_temperature: float
    max_temperature: float
    humidity: int
    description: str
    icon_code: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class DatabaseHealth(BaseModel):
    status: str
    message: str
    record_count: Optional[int] = None


class HealthOut(BaseModel):
    status: str
    timestamp: int
    database: DatabaseHealth
