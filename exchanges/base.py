"""
REST Exchange Base

Common plumbing for exchange integrations backed by a public REST API:
one ExchangeAPIClient per integration, closed on shutdown, and a health
check against a cheap endpoint.
"""

from typing import Any, Dict, Optional

from core.exchange_interface import ExchangeInterface
from core.logging import get_logger
from exchanges.http_client import ExchangeAPIClient


class RestExchange(ExchangeInterface):
    """
    ExchangeInterface with a lazily connected REST client.

    Class Attributes:
        BASE_URL: API root of the exchange
        HEALTH_PATH: Lightweight endpoint used by health_check()
    """

    BASE_URL: str
    HEALTH_PATH: str = "/"

    def __init__(self, client: Optional[ExchangeAPIClient] = None):
        self.client = client or ExchangeAPIClient(self.name, self.BASE_URL)
        self.logger = get_logger(f"exchanges.{self.name}")

    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self.client.get(path, params)

    async def initialize(self) -> None:
        self.client._ensure_session()
        self.logger.debug(f"{self.name} client ready")

    async def shutdown(self) -> None:
        try:
            await self.client.close()
        except Exception as e:
            self.logger.error(f"Error closing {self.name} client: {e}")

    async def health_check(self) -> bool:
        try:
            await self._get(self.HEALTH_PATH)
            return True
        except Exception as e:
            self.logger.warning(f"{self.name} health check failed: {e}")
            return False

    @staticmethod
    def _parse_price(value: Any) -> Optional[float]:
        """Convert a JSON price field to float; missing or empty values yield None."""
        if value is None or value == "":
            return None
        try:
            return float(value)
        except (TypeError, ValueError):
            raise ValueError(f"Unparsable price: {value!r}")
