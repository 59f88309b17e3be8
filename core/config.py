"""
Configuration Management Module

This module handles loading, validating, and providing access to application configuration
from environment variables (.env file).

Uses Pydantic Settings for automatic validation and type conversion.

Key Features:
- Loads configuration from .env file
- Seeds the preference store (default currencies, polling interval)
- Controls network behaviour (timeouts, retries) and the HTTP surface
- Handles optional settings with sensible defaults

Usage:
    from core.config import settings

    print(settings.default_exchange)
    print(settings.update_interval)
"""

from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """
    Application Settings

    Values are automatically loaded from environment variables or .env file.

    Attributes:
        log_level: Logging level name
        default_exchange: Exchange site polled at startup (e.g. "bitstamp")
        default_base_currency: Initial preferred base currency code
        default_quote_currency: Initial preferred quote currency code
        update_interval: Seconds between two price fetches
        request_timeout: Timeout in seconds for a single HTTP attempt
        max_retries: HTTP attempts per request before giving up
        locale: Locale used for the quote-currency hint ("" = system locale)
        preferences_file: JSON file for persisted preferences ("" = in-memory)
        app_host: Host address for the FastAPI server
        app_port: Port number for the FastAPI server
        cors_origins: Comma-separated list of allowed CORS origins
    """

    # ============================================
    # Logging
    # ============================================

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    # ============================================
    # Ticker Defaults
    # ============================================

    default_exchange: str = Field(
        default="bitstamp",
        description="Exchange site selected at startup"
    )

    default_base_currency: str = Field(
        default="BTC",
        description="Preferred base currency code until the user picks one"
    )

    default_quote_currency: str = Field(
        default="USD",
        description="Preferred quote currency code until the user picks one"
    )

    update_interval: int = Field(
        default=30,
        description="Polling interval in seconds"
    )

    locale: str = Field(
        default="",
        description="Locale such as en_US used to guess a quote currency (empty = system)"
    )

    preferences_file: str = Field(
        default="",
        description="Path of the JSON preference file (empty = keep preferences in memory)"
    )

    # ============================================
    # Network
    # ============================================

    request_timeout: int = Field(
        default=10,
        description="Timeout for a single HTTP attempt in seconds"
    )

    max_retries: int = Field(
        default=3,
        description="Maximum HTTP attempts per exchange request"
    )

    # ============================================
    # HTTP Surface
    # ============================================

    app_host: str = Field(
        default="0.0.0.0",
        description="FastAPI server host address"
    )

    app_port: int = Field(
        default=8000,
        description="FastAPI server port"
    )

    cors_origins: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        description="Comma-separated list of allowed CORS origins"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=False
    )

    @property
    def cors_origins_list(self) -> List[str]:
        """
        Convert comma-separated CORS origins string to a list.

        Example:
            >>> settings.cors_origins_list
            ['http://localhost:3000', 'http://localhost:5173']
        """
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def request_budget(self) -> float:
        """
        Time allowed for one discovery or fetch, covering every HTTP attempt
        plus the backoff between attempts (0.5s, 1.0s, ...).

        Example:
            >>> Settings(request_timeout=10, max_retries=3).request_budget
            31.5
        """
        backoff = sum(0.5 * (attempt + 1) for attempt in range(self.max_retries - 1))
        return self.request_timeout * self.max_retries + backoff


settings = Settings()


def validate_configuration() -> None:
    """
    Validate critical configuration settings on application startup.

    Raises:
        ValueError: If a setting is missing or invalid
    """
    # Deferred imports: logging.py imports this module
    from core.logging import logger
    from core.currency import currency_for_code
    from core.exchange_interface import ExchangeSite

    for field_name in ("default_base_currency", "default_quote_currency"):
        code = getattr(settings, field_name)
        if currency_for_code(code) is None:
            raise ValueError(
                f"Unknown currency '{code}' in {field_name.upper()}. "
                f"Please update .env"
            )

    if settings.update_interval <= 0:
        raise ValueError(f"UPDATE_INTERVAL must be a positive number of seconds, got {settings.update_interval}")

    if settings.request_timeout <= 0:
        raise ValueError(f"REQUEST_TIMEOUT must be positive, got {settings.request_timeout}")

    if settings.max_retries < 1:
        raise ValueError(f"MAX_RETRIES must be at least 1, got {settings.max_retries}")

    if ExchangeSite.build(settings.default_exchange) is None:
        available = ", ".join(site.name.lower() for site in ExchangeSite)
        raise ValueError(
            f"Unknown DEFAULT_EXCHANGE '{settings.default_exchange}'. "
            f"Must be one of: {available}"
        )

    if not (1 <= settings.app_port <= 65535):
        raise ValueError(f"Invalid port number: {settings.app_port}. Must be between 1 and 65535")

    valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    if settings.log_level.upper() not in valid_log_levels:
        raise ValueError(
            f"Invalid LOG_LEVEL: '{settings.log_level}'. "
            f"Must be one of: {', '.join(valid_log_levels)}"
        )

    logger.info("Configuration validated successfully")
    logger.info(f"Default exchange: {settings.default_exchange}")
    logger.info(f"Default pair: {settings.default_base_currency.upper()}/{settings.default_quote_currency.upper()}")
    logger.info(f"Update interval: {settings.update_interval}s")
    logger.info(f"Preferences: {settings.preferences_file or 'In-Memory'}")
