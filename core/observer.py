"""
Exchange Observer

The callback contract a consumer (UI, API service, CLI) implements to follow
an ExchangeEngine. Both callbacks run on the engine's event loop, in the order
the underlying events happened.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional

from core.currency_matrix import CurrencyMatrix

if TYPE_CHECKING:
    from core.exchange_engine import ExchangeEngine


class ExchangeObserver(ABC):
    """Receives currency-matrix and price notifications from an engine."""

    @abstractmethod
    def on_currency_matrix_loaded(self, engine: "ExchangeEngine", matrix: CurrencyMatrix) -> None:
        """
        Called once per discovery cycle, after base and quote have been selected
        and before the first price of that cycle.
        """
        ...

    @abstractmethod
    def on_price_updated(self, engine: "ExchangeEngine", price: Optional[float]) -> None:
        """
        Called with the latest price, or None when no price is available yet
        or the last fetch failed. None is never used to mean zero.
        """
        ...
