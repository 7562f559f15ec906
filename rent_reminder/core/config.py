"""Application configuration and settings."""

from functools import lru_cache
from typing import Optional

import pytz
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from rent_reminder import __version__


class Settings(BaseSettings):
    """Application settings."""

    # Service Configuration
    service_name: str = Field(default="rent-reminder")
    service_version: str = Field(default=__version__)
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")
    api_prefix: str = Field(default="/api/v1")

    # Database Configuration
    database_url: str = Field(default="sqlite:///./tenants.db")
    database_ssl_require: bool = Field(default=False)
    startup_retry_attempts: int = Field(default=3, ge=1)

    # Command Configuration
    command_prefix: str = Field(default="!")

    # Payment day calculation
    move_in_timezone: str = Field(default="America/Lima")
    move_in_year: Optional[int] = Field(default=None, ge=1900, le=9999)

    # Reminder Scheduler
    reminder_enabled: bool = Field(default=True)
    reminder_timezone: str = Field(default="America/Bogota")
    reminder_hour: int = Field(default=9, ge=0, le=23)
    reminder_minute: int = Field(default=0, ge=0, le=59)
    reminder_dedupe: bool = Field(default=False)
    reminder_misfire_grace_seconds: int = Field(default=3600, ge=1)

    # Notification channel
    channel_webhook_url: Optional[str] = Field(default=None)
    channel_id: Optional[str] = Field(default=None)
    channel_timeout: float = Field(default=10.0, gt=0)

    @field_validator("move_in_timezone", "reminder_timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        try:
            pytz.timezone(v)
        except pytz.UnknownTimeZoneError:
            raise ValueError(f"Unknown timezone: {v}")
        return v

    @field_validator("database_url")
    @classmethod
    def normalize_database_url(cls, v: str) -> str:
        # Hosted PostgreSQL providers still hand out the legacy scheme
        if v.startswith("postgres://"):
            return "postgresql://" + v[len("postgres://"):]
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {v}")
        return level

    model_config = {
        "env_file": ".env",
        "case_sensitive": False,
        "extra": "ignore",
    }


@lru_cache()
def get_settings() -> Settings:
    """Get application settings."""
    return Settings()
