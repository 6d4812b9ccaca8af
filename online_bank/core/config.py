from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "Online Bank API"
    database_url: str = "sqlite:///online_bank.db"
    log_level: str = "INFO"
    lock_timeout_seconds: float = 5.0
    transaction_retries: int = 3
    retry_backoff_seconds: float = 0.05
    cors_origins: list[str] = ["*"]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="LEDGER_",
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
