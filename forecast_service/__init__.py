"""Cached multi-day city weather forecasts backed by SQLite and OpenWeatherMap."""

__version__ = "0.1.0"
