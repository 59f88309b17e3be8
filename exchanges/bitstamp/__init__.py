"""
Bitstamp Exchange Integration

Endpoints Used:
    - GET /api/v2/trading-pairs-info/ - Tradable pairs ("BTC/USD", trading status)
    - GET /api/v2/ticker/{pair}/      - Latest ticker, field "last"

API Documentation:
    https://www.bitstamp.net/api/
"""

from typing import Optional

from core.currency import Currency
from core.currency_matrix import CurrencyMatrix, matrix_from_codes
from core.exchange_interface import ExchangeSite
from exchanges.base import RestExchange


class BitstampExchange(RestExchange):
    """Bitstamp spot markets."""

    site = ExchangeSite.BITSTAMP
    BASE_URL = "https://www.bitstamp.net"
    HEALTH_PATH = "/api/v2/trading-pairs-info/"

    async def discover_currency_matrix(self) -> Optional[CurrencyMatrix]:
        data = await self._get("/api/v2/trading-pairs-info/")
        if not isinstance(data, list):
            raise ValueError(f"Unexpected Bitstamp pairs payload: {type(data).__name__}")

        pairs = []
        for info in data:
            if info.get("trading", "Enabled") != "Enabled":
                continue
            name = info.get("name", "")
            if "/" not in name:
                continue
            base_code, quote_code = name.split("/", 1)
            pairs.append((base_code, quote_code))

        return matrix_from_codes(pairs)

    async def fetch_price(self, base: Currency, quote: Currency) -> Optional[float]:
        symbol = f"{base.code}{quote.code}".lower()
        data = await self._get(f"/api/v2/ticker/{symbol}/")
        return self._parse_price(data.get("last"))
