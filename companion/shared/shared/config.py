"""Configuration management using Pydantic Settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Redis (preference store + host pub/sub)
    redis_url: str = "redis://redis:6379"

    # Inter-service auth
    service_auth_token: str = ""

    # Reminder persistence
    reminders_key: str = "reminders"
    reminders_changed_channel: str = "reminders:changed"
    reminders_activity_channel: str = "reminders:activity"
    # JSON array used when the key has never been written
    default_reminders: str = "[]"

    # Host telemetry channels
    telemetry_channel: str = "ride:telemetry"
    user_profile_channel: str = "ride:user_profile"
    ride_profile_channel: str = "ride:active_profile"

    # Due windows: how long after crossing a threshold a reminder stays highlighted
    due_window_seconds: float = 60.0
    due_window_meters: float = 100.0

    # Delay before "no reminders" / "device status" notices are shown
    status_grace_seconds: float = 1.0

    # Color theme used to resolve reminder color tags ("light" or "dark")
    theme: str = "light"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
