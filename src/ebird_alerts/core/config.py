from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    environment: str = "dev"

    database_url: str = "sqlite:///./ebird_alerts.db"
    redis_url: str = "redis://localhost:6379/0"

    mail_backend: Literal["gmail", "local"] = "local"

    gmail_api_base_url: str = "https://gmail.googleapis.com/gmail/v1"
    gmail_user_id: str = "me"
    gmail_access_token: str | None = None
    gmail_query: str = "is:unread"
    gmail_timeout_s: float = 10.0

    local_mailbox_path: Path = Path(".local_mailbox")

    ingest_max_workers: int = 4
    ingest_interval_seconds: int | None = None

    cors_allow_origins: str = "*"


settings = Settings()
