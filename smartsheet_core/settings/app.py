"""Client settings powered by Pydantic BaseSettings."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from smartsheet_core.http.constants import DEFAULT_MAX_RETRY_DURATION_SECONDS


class ClientSettings(BaseSettings):
    """Centralized environment configuration."""

    model_config = SettingsConfigDict(
        env_prefix="", case_sensitive=False, env_file=".env", env_file_encoding="utf-8"
    )

    api_host: str | None = Field(default=None, validation_alias="SMARTSHEET_API_HOST")
    access_token: str | None = Field(
        default=None, validation_alias="SMARTSHEET_ACCESS_TOKEN"
    )
    max_retry_duration_seconds: float = Field(
        default=DEFAULT_MAX_RETRY_DURATION_SECONDS,
        ge=0,
        validation_alias="SMARTSHEET_MAX_RETRY_DURATION_SECONDS",
    )
    log_level: Literal["error", "warn", "info", "verbose", "debug", "silly"] = Field(
        default="info", validation_alias="SMARTSHEET_LOG_LEVEL"
    )
    log_format: Literal["json", "console"] | None = Field(
        default=None, validation_alias="SMARTSHEET_LOG_FORMAT"
    )

    @property
    def max_retry_duration_millis(self) -> int:
        """Retry budget in milliseconds."""
        return int(self.max_retry_duration_seconds * 1000)


def get_settings() -> ClientSettings:
    """Get a settings instance."""
    return ClientSettings()
