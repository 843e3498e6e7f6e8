"""Application configuration using Pydantic Settings."""
from zoneinfo import ZoneInfo

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # MongoDB
    mongodb_url: str = "mongodb://localhost:27017"
    mongodb_db_name: str = "timesheets"

    # Timesheets
    default_hourly_rate: float = 25.0
    timezone: str = "UTC"

    # Logging
    log_level: str = "INFO"
    json_logs: bool = False

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    debug: bool = False

    # CORS
    cors_origins: str = "http://localhost:3000,http://localhost:8000"

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def tzinfo(self) -> ZoneInfo:
        """Timezone used to assign entries to calendar days."""
        return ZoneInfo(self.timezone)


settings = Settings()
