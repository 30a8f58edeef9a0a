"""Application configuration."""
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Session store (Redis)
    redis_url: str = "redis://127.0.0.1:6379/0"
    session_prefix: str = "telephony:sess:"
    session_ttl_seconds: int = Field(default=7200, gt=0)
    redis_socket_timeout_seconds: float = 2.0

    # Output format used when a request carries no ?provider= hint
    # (twilio, plivo, sinch or json). Unset means neutral JSON.
    default_provider_mode: Optional[str] = None

    # Logging
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


settings = Settings()
