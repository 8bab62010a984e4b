"""Application configuration — reads from environment variables and an optional .env file."""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Mock backend settings, overridable through PROMPTMOCK_* variables."""

    host: str = "127.0.0.1"
    port: int = 8787
    log_level: str = "INFO"
    api_prefix: str = ""
    tenant_header: str = "x-tenant-id"
    default_page_size: int = 20
    default_actor: str = "e2e-user"
    seed: bool = True
    # Nested failure budget, e.g. {"dashboard": {"tenant_acme": 1}}
    failures: dict[str, Any] = {}

    model_config = SettingsConfigDict(
        env_prefix="PROMPTMOCK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
