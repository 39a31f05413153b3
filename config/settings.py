"""Application settings and configuration management."""
from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or defaults."""

    DB_PATH: str = Field(default="data/portal.db")

    DEBOUNCE_SECONDS: float = Field(default=1.5, gt=0.0)
    SUBMISSION_THRESHOLD: float = Field(default=80.0, ge=0.0, le=100.0)
    MIN_ANSWER_LENGTH: int = Field(default=50, ge=0)
    INVITATION_TTL_DAYS: int = Field(default=7, ge=1)
    SESSION_IDLE_SECONDS: float = Field(default=1800.0, gt=0.0)

    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/portal.jsonl"
    LOG_MAX_BYTES: int = Field(default=5_242_880, ge=1024)
    LOG_BACKUP_COUNT: int = Field(default=5, ge=0)

    PORTAL_BASE_URL: str = "http://localhost:5173"

    SMTP_HOST: str = ""
    SMTP_PORT: int = 587
    SMTP_USERNAME: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_FROM: str = ""
    SMTP_FROM_NAME: str = "Interview Portal"
    SMTP_USE_TLS: bool = True
    SMTP_TIMEOUT_SECONDS: int = Field(default=12, ge=1, le=60)

    model_config = SettingsConfigDict(env_file=".env", validate_assignment=True, extra="ignore")


settings = Settings()
