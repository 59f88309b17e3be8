"""
Exchange Interface — Capability Set for All Exchanges

This module defines the two things every exchange integration must provide
to the polling engine:

    - discover_currency_matrix(): which base/quote pairs the exchange trades
    - fetch_price(base, quote): the latest price for one pair

Everything else (lifecycle, timers, currency selection, cancellation) lives
in core.exchange_engine and is shared by all exchanges.

Design Philosophy:
    "Program to an interface, not an implementation"

    The engine works with ExchangeInterface, not a specific exchange. Adding
    an exchange means writing one class and registering its site in
    core.exchange_registry.

Example:
    class BitstampExchange(ExchangeInterface):
        site = ExchangeSite.BITSTAMP

        async def discover_currency_matrix(self):
            ...

        async def fetch_price(self, base, quote):
            ...
"""

from abc import ABC, abstractmethod
from enum import IntEnum
from typing import Optional, Union

from core.currency import Currency
from core.currency_matrix import CurrencyMatrix


class ExchangeSite(IntEnum):
    """
    Supported exchange sites.

    The numeric values are stable identifiers and are safe to persist.
    """

    BITSTAMP = 210
    COINCHECK = 235
    GDAX = 240
    KORBIT = 245
    KRAKEN = 250

    @property
    def index(self) -> int:
        return self.value

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @classmethod
    def build(cls, value: Union["ExchangeSite", int, str, None]) -> Optional["ExchangeSite"]:
        """
        Resolve a site from an enum member, numeric index or name.

        Names are matched case-insensitively against both the enum name and
        the display name. Unknown values yield None.

        Example:
            >>> ExchangeSite.build(250)
            <ExchangeSite.KRAKEN: 250>
            >>> ExchangeSite.build("gdax")
            <ExchangeSite.GDAX: 240>
            >>> ExchangeSite.build("mtgox") is None
            True
        """
        if isinstance(value, cls):
            return value

        if isinstance(value, bool) or value is None:
            return None

        if isinstance(value, int):
            try:
                return cls(value)
            except ValueError:
                return None

        if isinstance(value, str):
            key = value.strip()
            if key.isdigit():
                return cls.build(int(key))
            key = key.lower()
            for site in cls:
                if key in (site.name.lower(), site.display_name.lower()):
                    return site

        return None


_DISPLAY_NAMES = {
    ExchangeSite.BITSTAMP: "Bitstamp",
    ExchangeSite.COINCHECK: "Coincheck",
    ExchangeSite.GDAX: "GDAX",
    ExchangeSite.KORBIT: "Korbit",
    ExchangeSite.KRAKEN: "Kraken",
}


class ExchangeInterface(ABC):
    """
    Abstract Base Class for Exchange Integrations

    Class Attributes:
        site: The ExchangeSite this integration serves

    Abstract Methods (MUST be implemented by all exchanges):
        - discover_currency_matrix: List tradable base/quote pairs
        - fetch_price: Latest price for one pair

    Optional Methods (can be overridden):
        - initialize: Setup connections, sessions, etc.
        - shutdown: Release network resources
        - health_check: Verify the exchange API is reachable

    Both abstract methods may raise on network or parsing errors; the engine
    converts any exception into an absent result.
    """

    site: ExchangeSite

    @property
    def name(self) -> str:
        """Lowercase identifier, e.g. "kraken"."""
        return self.site.name.lower()

    @abstractmethod
    async def discover_currency_matrix(self) -> Optional[CurrencyMatrix]:
        """
        Discover the pairs this exchange trades.

        Returns:
            CurrencyMatrix, or None if the exchange lists no usable pair

        Notes:
            - Build the result with core.currency_matrix helpers so that
              unknown codes are skipped and duplicates removed
        """
        ...

    @abstractmethod
    async def fetch_price(self, base: Currency, quote: Currency) -> Optional[float]:
        """
        Fetch the latest traded price of base denominated in quote.

        Args:
            base: Currency being priced
            quote: Currency the price is expressed in

        Returns:
            Price as float, or None if the exchange reported no price
        """
        ...

    async def initialize(self) -> None:
        """
        Prepare network resources. Called once before the engine starts.
        Default implementation does nothing.
        """
        pass

    async def shutdown(self) -> None:
        """Release network resources. Should not raise."""
        pass

    async def health_check(self) -> bool:
        """Return True if the exchange API looks reachable."""
        return True

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(site='{self.name}')>"
