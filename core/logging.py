"""
Unified Logging Configuration

This module sets up a centralized logging system for the ticker.
All modules should import and use the logger from this module instead of
using print() statements.

Usage:
    from core.logging import logger, get_logger

    logger.info("Ticker started")

    log = get_logger(__name__)
    log.debug("Fetching price")

Log Levels used across the project:
    DEBUG    - Request/response details, stale completions being dropped
    INFO     - Engine lifecycle (start, stop, matrix loaded, exchange switched)
    WARNING  - Failed discovery or price fetch (polling continues)
    ERROR    - Observer callbacks that raised, requests that exhausted retries

Configuration:
    Log level is controlled by the LOG_LEVEL setting in .env file.
"""

import logging
import sys
from typing import Optional


def setup_logging(
    log_level: str = "INFO",
    log_format: Optional[str] = None,
    include_timestamp: bool = True,
    include_module: bool = True
) -> logging.Logger:
    """
    Configure and return the application logger.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Custom log format string (uses default if None)
        include_timestamp: Include timestamp in log messages
        include_module: Include logger name in log messages

    Returns:
        logging.Logger: Configured "cointicker" logger

    Example:
        >>> logger = setup_logging(log_level="DEBUG")
        >>> logger.info("Ticker started")
        2024-01-01 12:00:00 [INFO] cointicker: Ticker started
    """
    if log_format is None:
        format_parts = []

        if include_timestamp:
            format_parts.append("%(asctime)s")

        format_parts.append("[%(levelname)s]")

        if include_module:
            format_parts.append("%(name)s:")

        format_parts.append("%(message)s")

        log_format = " ".join(format_parts)

    level = getattr(logging, log_level.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format=log_format,
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True
    )

    logger = logging.getLogger("cointicker")
    logger.setLevel(level)

    return logger


# ============================================
# Initialize Logger with Settings
# ============================================

try:
    from core.config import settings
    log_level = settings.log_level
except ImportError:
    log_level = "INFO"

logger = setup_logging(log_level=log_level)


# ============================================
# Convenience Functions
# ============================================

def get_logger(name: str) -> logging.Logger:
    """
    Get a child logger of "cointicker" for a specific module.

    Args:
        name: Name for the logger (typically __name__)

    Returns:
        logging.Logger: Logger instance, e.g. "cointicker.core.exchange_engine"
    """
    return logging.getLogger(f"cointicker.{name}")


# ============================================
# Log Helper Functions
# ============================================

def log_api_request(exchange: str, endpoint: str, params: dict = None) -> None:
    """
    Log an outgoing exchange request with consistent formatting.

    Example:
        >>> log_api_request("kraken", "/0/public/Ticker", {"pair": "XXBTZUSD"})
        [DEBUG] API Request: kraken /0/public/Ticker | Params: {'pair': 'XXBTZUSD'}
    """
    if params:
        logger.debug(f"API Request: {exchange} {endpoint} | Params: {params}")
    else:
        logger.debug(f"API Request: {exchange} {endpoint}")


def log_api_response(exchange: str, endpoint: str, status: int, response_time: float = None) -> None:
    """
    Log an exchange response with status and timing information.

    Example:
        >>> log_api_response("bitstamp", "/api/v2/ticker/btcusd/", 200, 0.342)
        [DEBUG] API Response: bitstamp /api/v2/ticker/btcusd/ | Status: 200 | Time: 0.342s
    """
    time_str = f" | Time: {response_time:.3f}s" if response_time else ""
    logger.debug(f"API Response: {exchange} {endpoint} | Status: {status}{time_str}")


def log_price_update(exchange: str, base: str, quote: str, price: Optional[float]) -> None:
    """Log a price notification; absent prices are logged as 'n/a'."""
    price_str = f"{price:,.8g}" if price is not None else "n/a"
    logger.debug(f"Price: {exchange} {base}/{quote} = {price_str}")


logger.debug("Logging system initialized")
