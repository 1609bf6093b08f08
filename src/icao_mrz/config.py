"""
Configuration for MRZ parsing and serialization.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from icao_mrz.logging_config import DEFAULT_LOG_FORMAT


class MRZSettings(BaseSettings):
    """Settings read from ``MRZ_*`` environment variables or a ``.env`` file."""

    model_config = SettingsConfigDict(env_prefix="MRZ_", env_file=".env", extra="ignore")

    # Logging configuration
    service_name: str = Field(default="icao-mrz", description="Name used in log records")
    log_level: str = Field(default="INFO", description="Logging level, or OFF")
    log_format: str = Field(
        default=DEFAULT_LOG_FORMAT,
        description="Log format string, or 'json'",
    )

    # Century resolution for two-digit years
    birth_year_tolerance: int = Field(
        default=0, ge=0, description="Years past the current year a birth date may resolve to"
    )
    expiry_year_lookback: int = Field(
        default=50, ge=0, le=99, description="Years before the current year an expiry date may resolve to"
    )

    # Serialization
    line_separator: str = Field(default="\n", description="Separator placed between MRZ rows")


@lru_cache
def get_settings() -> MRZSettings:
    """Return the process-wide settings instance."""
    return MRZSettings()
