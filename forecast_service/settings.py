from dataclasses import dataclass

from pydantic_settings import BaseSettings, SettingsConfigDict


@dataclass(frozen=True)
class ProviderConfig:
    """
    Everything the OpenWeatherMap client needs, handed to it at construction.

    The client never reads the environment itself.
    """
    api_key: str
    base_url: str = "https://api.openweathermap.org"
    units: str = "metric"
    timeout_s: float = 10.0


class Settings(BaseSettings):
    """
    Centralized configuration.

    Loaded from:
    - environment variables
    - .env file (if present)

    One instance is built by create_app() and passed down explicitly;
    there is no module-level settings object.
    """
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Required key (the app should fail fast if missing)
    openweathermap_api_key: str

    openweathermap_base_url: str = "https://api.openweathermap.org"
    openweathermap_units: str = "metric"
    provider_timeout_s: float = 10.0

    # Language used by GET /api/weather/{city} when the caller sends none
    default_lang: str = "en"

    # SQLite file path (simple local persistence)
    sqlite_path: str = "forecasts.sqlite3"

    # Cached data is served only if it covers this many distinct days
    # inside a window of this many days from now.
    forecast_window_days: int = 5
    min_forecast_days: int = 5

    # Daily janitor that removes forecasts for past days
    cleanup_enabled: bool = True

    log_level: str = "INFO"
    json_logs: bool = False

    app_name: str = "City Forecast Service"

    @property
    def database_url(self) -> str:
        return f"sqlite:///{self.sqlite_path}"

    def provider_config(self) -> ProviderConfig:
        return ProviderConfig(
            api_key=self.openweathermap_api_key,
            base_url=self.openweathermap_base_url,
            units=self.openweathermap_units,
            timeout_s=self.provider_timeout_s,
        )
