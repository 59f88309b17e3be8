"""
GDAX (Coinbase Exchange) Integration

Endpoints Used:
    - GET /products                   - Listed products with base/quote currency
    - GET /products/{BASE-QUOTE}/ticker - Latest trade, field "price"

API Documentation:
    https://docs.cloud.coinbase.com/exchange/reference
"""

from typing import Optional

from core.currency import Currency
from core.currency_matrix import CurrencyMatrix, matrix_from_codes
from core.exchange_interface import ExchangeSite
from exchanges.base import RestExchange


class GDAXExchange(RestExchange):
    """Coinbase Exchange, formerly GDAX."""

    site = ExchangeSite.GDAX
    BASE_URL = "https://api.exchange.coinbase.com"
    HEALTH_PATH = "/time"

    async def discover_currency_matrix(self) -> Optional[CurrencyMatrix]:
        data = await self._get("/products")
        if not isinstance(data, list):
            raise ValueError(f"Unexpected GDAX products payload: {type(data).__name__}")

        pairs = [
            (product["base_currency"], product["quote_currency"])
            for product in data
            if not product.get("trading_disabled", False)
            and product.get("status", "online") == "online"
        ]
        return matrix_from_codes(pairs)

    async def fetch_price(self, base: Currency, quote: Currency) -> Optional[float]:
        data = await self._get(f"/products/{base.code}-{quote.code}/ticker")
        return self._parse_price(data.get("price"))
