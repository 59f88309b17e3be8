"""
Korbit Exchange Integration

Endpoints Used:
    - GET /v1/ticker?currency_pair=btc_krw - Latest ticker, field "last"

The KRW markets are a fixed list.
"""

from typing import Optional

from core.currency import Currency
from core.currency_matrix import CurrencyMatrix, matrix_from_codes
from core.exchange_interface import ExchangeSite
from exchanges.base import RestExchange


class KorbitExchange(RestExchange):
    """Korbit (South Korea), KRW markets."""

    site = ExchangeSite.KORBIT
    BASE_URL = "https://api.korbit.co.kr"
    HEALTH_PATH = "/v1/ticker"

    PAIRS = [
        ("BTC", "KRW"),
        ("ETH", "KRW"),
        ("ETC", "KRW"),
        ("XRP", "KRW"),
        ("BCH", "KRW"),
        ("LTC", "KRW"),
    ]

    async def discover_currency_matrix(self) -> Optional[CurrencyMatrix]:
        return matrix_from_codes(self.PAIRS)

    async def fetch_price(self, base: Currency, quote: Currency) -> Optional[float]:
        pair = f"{base.code}_{quote.code}".lower()
        data = await self._get("/v1/ticker", {"currency_pair": pair})
        return self._parse_price(data.get("last"))
