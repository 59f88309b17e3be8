"""
Currency Catalog

This module defines the known currencies and the lookups the rest of the
system uses to turn ticker codes and locales into Currency values.

Identity:
    A Currency is identified by its code only. Two Currency values with the
    same code are equal and hash the same, whatever their display name.

Lookups never raise; an unknown code or unmapped locale yields None.

Usage:
    from core.currency import currency_for_code, currency_for_locale

    btc = currency_for_code("btc")          # Currency(code='BTC', ...)
    eur = currency_for_locale("de_DE.UTF-8")  # Currency(code='EUR', ...)
"""

import locale as _locale
from typing import Dict, FrozenSet, Iterable, List, Optional
from pydantic import BaseModel, ConfigDict, Field


class Currency(BaseModel):
    """
    Immutable currency value.

    Attributes:
        code: Unique ticker code in uppercase (e.g. "BTC", "USD")
        display_name: Human readable name (e.g. "Bitcoin")
        locales: ISO-3166 region codes whose users most likely quote in this currency
    """

    model_config = ConfigDict(frozen=True)

    code: str = Field(..., description="Unique ticker code", examples=["BTC", "USD"])
    display_name: str = Field(..., description="Human readable name", examples=["Bitcoin"])
    locales: FrozenSet[str] = Field(
        default_factory=frozenset,
        description="Region codes mapped to this currency"
    )

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Currency):
            return self.code == other.code
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.code)

    def __str__(self) -> str:
        return self.code


# Bitcoin and its Kraken ticker alias are pinned first among base currencies
BITCOIN_CODES: FrozenSet[str] = frozenset({"BTC", "XBT"})

_EUROZONE = frozenset({
    "AT", "BE", "CY", "DE", "EE", "ES", "FI", "FR", "GR", "HR",
    "IE", "IT", "LT", "LU", "LV", "MT", "NL", "PT", "SI", "SK",
})


def _build_catalog(currencies: Iterable[Currency]) -> Dict[str, Currency]:
    catalog: Dict[str, Currency] = {}
    for currency in currencies:
        catalog[currency.code] = currency
    return catalog


_CATALOG: Dict[str, Currency] = _build_catalog([
    # Crypto
    Currency(code="BTC", display_name="Bitcoin"),
    Currency(code="XBT", display_name="Bitcoin"),
    Currency(code="ETH", display_name="Ethereum"),
    Currency(code="ETC", display_name="Ethereum Classic"),
    Currency(code="LTC", display_name="Litecoin"),
    Currency(code="BCH", display_name="Bitcoin Cash"),
    Currency(code="XRP", display_name="Ripple"),
    Currency(code="USDT", display_name="Tether"),
    Currency(code="USDC", display_name="USD Coin"),
    # Fiat
    Currency(code="USD", display_name="US Dollar", locales=frozenset({"US", "PR", "EC", "SV", "PA"})),
    Currency(code="EUR", display_name="Euro", locales=_EUROZONE),
    Currency(code="GBP", display_name="British Pound", locales=frozenset({"GB", "IM", "JE", "GG"})),
    Currency(code="JPY", display_name="Japanese Yen", locales=frozenset({"JP"})),
    Currency(code="KRW", display_name="South Korean Won", locales=frozenset({"KR"})),
    Currency(code="CNY", display_name="Chinese Yuan", locales=frozenset({"CN"})),
    Currency(code="CAD", display_name="Canadian Dollar", locales=frozenset({"CA"})),
    Currency(code="AUD", display_name="Australian Dollar", locales=frozenset({"AU"})),
    Currency(code="CHF", display_name="Swiss Franc", locales=frozenset({"CH", "LI"})),
    Currency(code="RUB", display_name="Russian Ruble", locales=frozenset({"RU"})),
])


def all_currencies() -> List[Currency]:
    """Return every known currency in catalog order."""
    return list(_CATALOG.values())


def currency_for_code(code: Optional[str]) -> Optional[Currency]:
    """
    Look up a currency by ticker code (case-insensitive).

    Returns:
        The matching Currency, or None when the code is empty or unknown
    """
    if not code:
        return None
    return _CATALOG.get(code.strip().upper())


def region_from_locale(locale_name: Optional[str]) -> Optional[str]:
    """
    Extract the region part of a locale identifier.

    Accepts POSIX and BCP-47 style identifiers, with or without encoding
    and modifier suffixes.

    Example:
        >>> region_from_locale("de_DE.UTF-8")
        'DE'
        >>> region_from_locale("en-GB")
        'GB'
        >>> region_from_locale("C") is None
        True
    """
    if not locale_name:
        return None

    name = locale_name.split(".", 1)[0].split("@", 1)[0]
    parts = name.replace("-", "_").split("_")
    if len(parts) < 2:
        return None

    region = parts[-1].upper()
    if len(region) != 2 or not region.isalpha():
        return None
    return region


def currency_for_locale(locale_name: Optional[str]) -> Optional[Currency]:
    """
    Best-guess currency for a system locale.

    Returns:
        The first catalog currency that claims the locale's region, or None
    """
    region = region_from_locale(locale_name)
    if region is None:
        return None

    for currency in _CATALOG.values():
        if region in currency.locales:
            return currency
    return None


def system_locale() -> Optional[str]:
    """Return the interpreter's current locale name (e.g. "en_US"), if any."""
    language_code, _ = _locale.getlocale()
    return language_code
