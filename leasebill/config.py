"""Application configuration from environment variables."""

import logging
from typing import Optional

from pydantic import ConfigDict, Field
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Pydantic loads values from:
    1. OS environment variables (at instantiation time)
    2. .env file in the working directory
    """

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str = Field(
        default="sqlite:///./leasebill.db",
        description="SQLAlchemy connection string",
    )
    database_echo: bool = Field(default=False, description="Log SQL queries")

    # Authentication
    scheduler_secret: str | None = Field(
        default=None,
        description="Shared secret sent by the scheduler in X-Scheduler-Secret",
    )
    jwt_secret: str = Field(
        default="change-me-in-production-please-use-32+-bytes",
        description="HMAC key for interactive user tokens",
    )
    jwt_algorithm: str = Field(default="HS256", description="JWT signing algorithm")

    # Payments
    stripe_secret_key: str | None = Field(default=None, description="Stripe API key")
    stripe_currency: str = Field(default="usd", description="Currency for payment intents")

    # Billing
    billing_batch_size: int = Field(
        default=10,
        ge=1,
        description="Maximum number of leases billed concurrently",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_file: str = Field(default="logs/server.log", description="Server log file")

    # API
    api_title: str = Field(default="LeaseBill API", description="API title")
    api_version: str = Field(default="0.1.0", description="API version")


_settings_instance: Optional[Settings] = None


def get_settings() -> Settings:
    """Get or create the settings instance.

    Lazy so that environment variables set by tests or the CLI are picked up.
    """
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
        logger.debug("Settings loaded: database_url=%s", _settings_instance.database_url)
    return _settings_instance


def reset_settings() -> None:
    """Drop the cached settings so the next access re-reads the environment."""
    global _settings_instance
    _settings_instance = None


__all__ = ["Settings", "get_settings", "reset_settings"]
