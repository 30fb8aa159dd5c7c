"""Pydantic settings loaded from the environment (and .env when present)."""
from functools import lru_cache

from pydantic import AliasChoices, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_DEFAULT_EXTERNAL_API_URL = "https://api.latotravelapp.com"


class Settings(BaseSettings):
    """Settings for the proxy server and the client-side core.

    ``api_bearer_token`` is the server-side credential used to call the
    external trips API; it may be unset, in which case the proxy routes
    answer 500 instead of failing at startup.
    """

    external_api_url: str = _DEFAULT_EXTERNAL_API_URL
    api_bearer_token: str | None = None
    # Falls back to external_api_url
    client_api_url: str = Field(
        default="", validation_alias=AliasChoices("LATO_API_URL", "client_api_url")
    )
    database_url: str = "sqlite:///lato.db"
    log_level: str = "INFO"
    upstream_timeout_seconds: float = 15.0
    upstream_max_retries: int = Field(default=2, ge=0)
    upstream_retry_backoff_seconds: float = 1.0
    presence_poll_seconds: float = 30.0

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("api_bearer_token")
    @classmethod
    def _blank_token_is_unset(cls, value: str | None) -> str | None:
        return value or None

    @model_validator(mode="after")
    def _default_client_url(self) -> "Settings":
        if not self.client_api_url:
            self.client_api_url = self.external_api_url
        return self


@lru_cache
def get_settings() -> Settings:
    """Get the process-wide settings instance."""
    return Settings()
