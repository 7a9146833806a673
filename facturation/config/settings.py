"""
Application settings with Pydantic v2 validation.

Loads configuration from environment variables and ``.env``. Billing
defaults are validated up front so a bad deployment fails at startup
rather than on the first invoice.
"""

import re
from decimal import Decimal
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from facturation import __version__

_CURRENCY_RE = re.compile(r"^[A-Z]{3}$")
_PREFIX_RE = re.compile(r"^[A-Z0-9]{1,10}$")


class StorageSettings(BaseSettings):
    """SQLite location and pool sizing."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    data_dir: Path = Path("data")
    db_name: str = "facturation.db"

    pool_size: int = Field(default=5, ge=1)
    busy_timeout: int = Field(default=30000, ge=0, description="SQLite busy timeout, ms")
    acquire_timeout: float = Field(
        default=10.0, gt=0, description="Seconds to wait for a pooled connection"
    )

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_name


class APISettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="API_")

    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    cors_origins: list[str] = ["*"]


class BillingSettings(BaseSettings):
    """Invoicing defaults and workflow scheduling."""

    model_config = SettingsConfigDict(env_prefix="BILLING_")

    default_tax_rate: Decimal = Decimal("20")
    default_currency: str = "EUR"
    default_due_days: int = Field(default=30, ge=0)
    invoice_number_prefix: str = "INV"

    # 0 disables the background overdue sweep
    overdue_sweep_interval_seconds: int = Field(default=0, ge=0)

    history_page_limit: int = Field(default=100, ge=1)

    @field_validator("default_tax_rate")
    @classmethod
    def check_tax_rate(cls, v: Decimal) -> Decimal:
        if v < 0 or v > 100:
            raise ValueError("default_tax_rate must be between 0 and 100")
        return v

    @field_validator("default_currency")
    @classmethod
    def check_currency(cls, v: str) -> str:
        v = v.strip().upper()
        if not _CURRENCY_RE.match(v):
            raise ValueError("default_currency must be a three-letter ISO 4217 code")
        return v

    @field_validator("invoice_number_prefix")
    @classmethod
    def check_prefix(cls, v: str) -> str:
        v = v.strip().upper()
        if not _PREFIX_RE.match(v):
            raise ValueError("invoice_number_prefix must be 1-10 letters or digits")
        return v


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "Facturation"
    app_version: str = __version__
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Sub-settings
    storage: StorageSettings = Field(default_factory=StorageSettings)
    api: APISettings = Field(default_factory=APISettings)
    billing: BillingSettings = Field(default_factory=BillingSettings)

    @model_validator(mode="after")
    def check_production_debug(self) -> "Settings":
        if self.environment == "production" and self.api.debug:
            raise ValueError("API debug mode cannot be enabled in production")
        return self


_settings: Settings | None = None


def get_settings() -> Settings:
    """Settings singleton, loaded from the environment on first call."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next call reloads them."""
    global _settings
    _settings = None
