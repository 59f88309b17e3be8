"""
Kraken Exchange Integration

Kraken names Bitcoin "XBT" and uses its own pair identifiers ("XXBTZUSD").
Discovery remembers the identifier of every pair so that fetch_price can
query the ticker with it.

Endpoints Used:
    - GET /0/public/AssetPairs       - Pairs; "wsname" holds "XBT/USD"
    - GET /0/public/Ticker?pair=...  - Ticker; last trade price in "c"[0]

Every response is wrapped as {"error": [...], "result": {...}}; a non-empty
error list is treated as a failure.
"""

from typing import Any, Dict, Optional, Tuple

from core.currency import Currency
from core.currency_matrix import CurrencyMatrix, matrix_from_codes
from core.exchange_interface import ExchangeSite
from exchanges.base import RestExchange


class KrakenExchange(RestExchange):
    """Kraken spot markets."""

    site = ExchangeSite.KRAKEN
    BASE_URL = "https://api.kraken.com"
    HEALTH_PATH = "/0/public/Time"

    def __init__(self, client=None):
        super().__init__(client)
        self._pair_names: Dict[Tuple[str, str], str] = {}

    async def _result(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        data = await self._get(path, params)
        errors = data.get("error") or []
        if errors:
            raise ValueError(f"Kraken error on {path}: {', '.join(errors)}")
        return data.get("result") or {}

    async def discover_currency_matrix(self) -> Optional[CurrencyMatrix]:
        result = await self._result("/0/public/AssetPairs")

        pair_names: Dict[Tuple[str, str], str] = {}
        for pair_name, info in result.items():
            # Dark-pool pairs (".d") have no wsname
            wsname = info.get("wsname")
            if not wsname or "/" not in wsname:
                continue
            base_code, quote_code = wsname.split("/", 1)
            pair_names.setdefault((base_code.upper(), quote_code.upper()), pair_name)

        self._pair_names = pair_names
        return matrix_from_codes(pair_names.keys())

    async def fetch_price(self, base: Currency, quote: Currency) -> Optional[float]:
        pair_name = self._pair_names.get((base.code, quote.code), f"{base.code}{quote.code}")
        result = await self._result("/0/public/Ticker", {"pair": pair_name})
        if not result:
            return None

        ticker = result.get(pair_name) or next(iter(result.values()))
        last_trade = ticker.get("c") or []
        return self._parse_price(last_trade[0] if last_trade else None)
