"""Configuration management for the URL shortener application.

This module provides centralized configuration management using Pydantic BaseSettings
with environment variable support and caching for performance.

Flow Diagram — get_settings()
=============================
::
    ┌─────────────┐
    │  Call get_  │
    │  settings() │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ Check cache  │
    │ (lru_cache)  │
    └──────┬──────┘
    HIT?  │
    ┌─────┴─────┐
    │ NO         │ YES
    ▼            ▼
┌─────────┐  ┌─────────┐
│ Read env│  │ Return  │
│ + .env  │  │ cached  │
│ validate│  │ value   │
└─────────┘  └─────────┘

How to Use
===========
**Step 1 — Import**::
    from shortener.config import get_settings

**Step 2 — Get settings**::
    settings = get_settings()
    db_url = settings.DATABASE_URL

**Step 3 — Override in tests**::
    settings = Settings(DATABASE_URL="sqlite+aiosqlite:///tmp/test.db", HTTP_PASSWORD="secret")
    app = create_app(settings)

Key Behaviours
===============
- Settings are cached after first access for performance.
- Environment variables override defaults automatically.
- HTTP_PASSWORD has no default; a missing value raises ValidationError.
- ALIAS_LENGTH is capped at the alias column width (ALIAS_MAX_LENGTH).
- ALIAS_LENGTH and ALIAS_MAX_ATTEMPTS trade collision probability against
  latency under contention, so both are operator-tunable.

Classes:
    Settings:  Pydantic model for all configuration values.
"""

__all__ = ["Settings", "get_settings"]

from functools import lru_cache

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from shortener.alias import DEFAULT_ALIAS_LENGTH
from shortener.enums import AppEnv
from shortener.models import ALIAS_MAX_LENGTH
from shortener.storage import DEFAULT_MAX_ATTEMPTS


class Settings(BaseSettings):
    APP_NAME: str = "url-shortener"
    APP_ENV: AppEnv = AppEnv.LOCAL

    # Storage
    DATABASE_URL: str = "sqlite+aiosqlite:///./storage.db"
    DATABASE_ECHO: bool = False

    # Alias allocation
    ALIAS_LENGTH: int = Field(DEFAULT_ALIAS_LENGTH, gt=0, le=ALIAS_MAX_LENGTH)
    ALIAS_MAX_ATTEMPTS: int = Field(DEFAULT_MAX_ATTEMPTS, gt=0)

    # HTTP adapter
    REQUEST_TIMEOUT_SECONDS: float = Field(4.0, gt=0)
    HTTP_USER: str = "admin"
    HTTP_PASSWORD: SecretStr

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
