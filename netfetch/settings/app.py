"""Application settings powered by Pydantic BaseSettings."""

import logging

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from netfetch.fetch.config import FetchConfig
from netfetch.fetch.constants import (
    DEFAULT_MAX_REDIRECTS,
    DEFAULT_MAX_RESPONSE_SIZE_BYTES,
)


class AppSettings(BaseSettings):
    """Centralized environment configuration."""

    model_config = SettingsConfigDict(
        env_prefix="NETFETCH_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    max_redirects: int = Field(default=DEFAULT_MAX_REDIRECTS, ge=0, le=20)
    timeout_seconds: float = Field(default=30.0, ge=1.0, le=300.0)
    user_agent: str = Field(default="netfetch/1.0", min_length=1, max_length=500)
    max_response_size_bytes: int = Field(
        default=DEFAULT_MAX_RESPONSE_SIZE_BYTES, ge=1024, le=100 * 1024 * 1024
    )
    log_level: str = Field(default="INFO")
    log_json: bool = Field(default=True)

    def to_fetch_config(self) -> FetchConfig:
        """Build the fetch configuration from these settings."""
        return FetchConfig(
            max_redirects=self.max_redirects,
            timeout_seconds=self.timeout_seconds,
            user_agent=self.user_agent,
            max_response_size_bytes=self.max_response_size_bytes,
        )

    def log_level_value(self) -> int:
        """Resolve ``log_level`` to a logging level number, INFO if unknown."""
        level = logging.getLevelName(self.log_level.upper())
        return level if isinstance(level, int) else logging.INFO


def get_settings() -> AppSettings:
    """Get a settings instance."""
    return AppSettings()
