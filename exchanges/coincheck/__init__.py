"""
Coincheck Exchange Integration

Coincheck has no pair listing endpoint on its public API, so the tradable
pairs are a fixed list.

Endpoints Used:
    - GET /api/ticker?pair=btc_jpy - Latest ticker, field "last"
"""

from typing import Optional

from core.currency import Currency
from core.currency_matrix import CurrencyMatrix, matrix_from_codes
from core.exchange_interface import ExchangeSite
from exchanges.base import RestExchange


class CoincheckExchange(RestExchange):
    """Coincheck (Japan), JPY markets."""

    site = ExchangeSite.COINCHECK
    BASE_URL = "https://coincheck.com"
    HEALTH_PATH = "/api/ticker"

    PAIRS = [
        ("BTC", "JPY"),
        ("ETH", "JPY"),
        ("ETC", "JPY"),
        ("LTC", "JPY"),
        ("BCH", "JPY"),
        ("XRP", "JPY"),
    ]

    async def discover_currency_matrix(self) -> Optional[CurrencyMatrix]:
        return matrix_from_codes(self.PAIRS)

    async def fetch_price(self, base: Currency, quote: Currency) -> Optional[float]:
        pair = f"{base.code}_{quote.code}".lower()
        data = await self._get("/api/ticker", {"pair": pair})
        return self._parse_price(data.get("last"))
