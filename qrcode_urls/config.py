"""Configuration management for the QR code URL generator.

This module provides centralized configuration management using Pydantic BaseSettings
with environment variable, ``.env`` and ``appsettings.json`` support, cached for reuse.

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
│ Merge   │  │ Return  │
│ sources │  │ cached  │
│ & check │  │ value   │
└─────────┘  └─────────┘

Source Priority
===============
::
    init kwargs > environment > .env > appsettings.json > secrets dir

How to Use
===========
**Step 1 — Import**::
    from qrcode_urls.config import get_settings

**Step 2 — Get settings**::
    settings = get_settings()
    db_url = settings.DATABASE_URL

**Step 3 — Override from appsettings.json**::
    {"DATABASE_URL": "postgresql+asyncpg://qr:qr@localhost:5432/qr"}

Key Behaviours
===============
- Settings are cached after first access.
- Environment variables override file values.
- A missing ``appsettings.json`` is not an error.
- Out-of-range values raise ValidationError at startup.

Classes:
    Settings:  Pydantic model for all configuration values.

"""

__all__ = ["Settings", "get_settings"]

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    JsonConfigSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from qrcode_urls.urls import DEFAULT_BASE_PATH

DEFAULT_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"

# Matches String(16) on UrlRecord.code
MAX_CODE_LENGTH = 16


class Settings(BaseSettings):
    APP_NAME: str = "qrcode-url-generator"
    APP_ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    # PostgreSQL
    DATABASE_URL: str = "postgresql+asyncpg://qrcodes:qrcodes@db:5432/qrcodes"
    DATABASE_ECHO: bool = False

    # Code / URL config
    URL_BASE_PATH: str = DEFAULT_BASE_PATH
    CODE_LENGTH: int = Field(10, ge=1, le=MAX_CODE_LENGTH)
    CODE_ALPHABET: str = DEFAULT_ALPHABET
    CODE_MAX_RETRIES: int = Field(1000, ge=1)

    model_config = SettingsConfigDict(
        env_file=".env",
        json_file="appsettings.json",
        case_sensitive=True,
        extra="ignore",
    )

    @field_validator("CODE_ALPHABET")
    @classmethod
    def validate_alphabet(cls, v: str) -> str:
        if not v:
            raise ValueError("Code alphabet must not be empty")
        if len(set(v)) != len(v):
            raise ValueError("Code alphabet must not contain duplicate symbols")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            JsonConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
