"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"


class Settings(BaseSettings):
    """Relay configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    host: str = Field(default="0.0.0.0", description="Interface the server binds to")
    port: int = Field(default=3001, description="Port the websocket server listens on", gt=0)
    heartbeat_interval_seconds: float = Field(
        default=30.0,
        description="Seconds between liveness probes sent to every connection",
        gt=0,
    )
    queue_backend: Literal["file", "database"] = Field(
        default="file",
        description="Backend used to persist pending notifications",
    )
    queue_file_path: str = Field(
        default="pending_notifications.json",
        description="Location of the JSON file used by the file queue backend",
        min_length=1,
    )
    database_url: str = Field(
        default="sqlite:///pending_notifications.db",
        description="SQLAlchemy URL used by the database queue backend",
        min_length=1,
    )
    allow_wildcard_broadcast: bool = Field(
        default=True,
        description="Whether a broadcast without filter attributes reaches every client",
    )
    app_timezone: str = Field(
        default="UTC",
        description="Timezone used to stamp pending notifications",
    )
    log_level: str = Field(default="INFO", description="Root logging level")


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
