"""Application configuration management."""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Centralised application settings derived from environment variables."""

    database_url: str = Field(
        default="sqlite:///./data/dao_notifications.db",
        description="SQLAlchemy-compatible database URL.",
    )
    debug: bool = Field(default=False)

    log_level: str = Field(default="INFO")
    log_dir: Path = Field(default=Path("logs"))

    admin_email: str | None = Field(
        default=None,
        description="Administrator always copied on project notifications.",
    )
    notification_scope: str = Field(
        default="team",
        description="'team' scopes recipients to the project, 'all' notifies every active user.",
    )

    smtp_host: str | None = None
    smtp_port: int = Field(default=587, ge=1, le=65535)
    smtp_user: str | None = None
    smtp_password: str | None = None
    smtp_from: str | None = None
    smtp_from_name: str = Field(default="")
    smtp_disable: bool = Field(default=False)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        valid = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}
        upper = value.upper()
        if upper not in valid:
            raise ValueError(f"LOG_LEVEL must be one of {', '.join(sorted(valid))}")
        return upper

    @field_validator("notification_scope")
    @classmethod
    def normalize_scope(cls, value: str) -> str:
        lowered = value.strip().lower()
        if lowered not in {"team", "all"}:
            raise ValueError("NOTIFICATION_SCOPE must be 'team' or 'all'")
        return lowered


@lru_cache()
def get_settings() -> Settings:
    """Return cached settings instance so it can be reused across the app."""

    settings = Settings()
    settings.log_dir.mkdir(parents=True, exist_ok=True)
    return settings


def load_settings() -> Settings:
    """Re-read settings from the environment, bypassing the cache.

    Used for values that operators may change while the process runs
    (admin address, recipient scope, SMTP switches).
    """

    return Settings()
