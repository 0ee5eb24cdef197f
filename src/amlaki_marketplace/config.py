"""Application configuration via pydantic-settings.

Reads from .env file or AMLAKI_-prefixed environment variables. Policy
constants used by the domain layer (default currency, media limits,
commission caps) live here so they can be tuned per market without code
changes.

Usage:
    from amlaki_marketplace.config import get_settings
    settings = get_settings()
    print(settings.default_currency)
"""

from __future__ import annotations

from decimal import Decimal
from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central configuration for the marketplace lifecycle core."""

    model_config = SettingsConfigDict(
        env_prefix="AMLAKI_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # --- Application ---
    app_env: Literal["development", "staging", "production"] = "development"
    app_log_level: str = "INFO"
    json_logs: bool = False

    # --- Money ---
    default_currency: str = Field(default="IRR", min_length=1)

    # --- Agent policy ---
    max_agent_commission_percent: Decimal = Field(default=Decimal("95"), ge=0, le=100)

    # --- Listing policy ---
    max_media_items: int = Field(default=50, gt=0)
    listing_code_min_length: int = Field(default=3, gt=0)
    listing_code_max_length: int = Field(default=16, gt=0)

    @field_validator("default_currency")
    @classmethod
    def _normalize_currency(cls, value: str) -> str:
        return value.strip().upper()

    @model_validator(mode="after")
    def _check_code_bounds(self) -> Settings:
        if self.listing_code_min_length > self.listing_code_max_length:
            raise ValueError("listing_code_min_length must not exceed listing_code_max_length")
        return self

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached singleton of the application settings."""
    return Settings()
