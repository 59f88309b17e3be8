"""
Ticker Service

The application-side observer of the exchange engine. It owns the currently
selected exchange, remembers the latest price, and publishes every
notification on the event bus under the "ticker" topic. Tradable pairs are
always read from the engine, so a failed rediscovery never shows stale pairs.

Switching exchanges releases the old engine (stop + close) before the new
one is started, so no notification from the old exchange can arrive after
the switch.
"""

from datetime import datetime, timezone
from typing import Optional

from core.currency import currency_for_code
from core.currency_matrix import CurrencyMatrix
from core.exchange_engine import ExchangeEngine
from core.exchange_interface import ExchangeSite
from core.exchange_registry import ExchangeRegistry, SiteLike
from core.logging import get_logger
from core.observer import ExchangeObserver
from core.schemas import (
    CurrencyInfo,
    ExchangeInfo,
    MatrixEvent,
    PriceEvent,
    TickerSnapshot,
    matrix_to_pairs,
)
from services.event_bus import EventBus, bus as default_bus

TICKER_TOPIC = "ticker"


class TickerService(ExchangeObserver):
    """
    Observer that tracks one active exchange engine.

    Attributes:
        registry: Builds engines for exchange sites
        bus: Event bus receiving "ticker" events
        engine: The active engine, if any
    """

    def __init__(self, registry: ExchangeRegistry, bus: Optional[EventBus] = None):
        self.registry = registry
        self.bus = bus or default_bus
        self.engine: Optional[ExchangeEngine] = None
        self.price: Optional[float] = None
        self.updated_at: Optional[datetime] = None
        self._logger = get_logger(__name__)

    # ============================================
    # ExchangeObserver
    # ============================================

    def on_currency_matrix_loaded(self, engine: ExchangeEngine, matrix: CurrencyMatrix) -> None:
        if engine is not self.engine:
            return

        event = MatrixEvent(
            exchange=engine.exchange.name,
            base=engine.base_currency.code,
            quote=engine.quote_currency.code,
            pairs=matrix_to_pairs(matrix),
        )
        self.bus.publish(TICKER_TOPIC, event.model_dump(mode="json"))

    def on_price_updated(self, engine: ExchangeEngine, price: Optional[float]) -> None:
        if engine is not self.engine:
            return

        self.price = price
        self.updated_at = datetime.now(timezone.utc)
        event = PriceEvent(
            exchange=engine.exchange.name,
            base=engine.base_currency.code if engine.base_currency else None,
            quote=engine.quote_currency.code if engine.quote_currency else None,
            price=price,
            timestamp=self.updated_at,
        )
        self.bus.publish(TICKER_TOPIC, event.model_dump(mode="json"))

    # ============================================
    # Commands
    # ============================================

    async def select_exchange(self, site: SiteLike) -> bool:
        """
        Switch to another exchange and start polling it.

        Returns:
            False if the site is unknown (the current exchange keeps running)
        """
        engine = self.registry.build(site, self)
        if engine is None:
            return False

        await self._release_engine()
        self.engine = engine
        self._logger.info(f"Switched to {engine.site.display_name}")
        await engine.exchange.initialize()
        engine.start()
        return True

    def select_currencies(self, base: str, quote: Optional[str] = None) -> None:
        """
        Select a base currency (and optionally a quote) and restart polling.

        Raises:
            RuntimeError: If no exchange is active
            ValueError: If a code is unknown or the pair is not traded
        """
        if self.engine is None:
            raise RuntimeError("No exchange selected")

        base_currency = currency_for_code(base)
        if base_currency is None:
            raise ValueError(f"Unknown currency '{base}'")
        quote_currency = None
        if quote:
            quote_currency = currency_for_code(quote)
            if quote_currency is None:
                raise ValueError(f"Unknown currency '{quote}'")

        self.engine.set_currency_pair(base_currency, quote_currency)

        # Selections were persisted as defaults, so rediscovery keeps them
        self.engine.reset()

    def select_update_interval(self, seconds: int) -> None:
        """
        Change the polling interval. The next armed timer uses it.

        Raises:
            ValueError: If seconds is not positive (pydantic ValidationError)
        """
        preferences = self.engine.preferences if self.engine is not None else self.registry.preferences
        preferences.update_interval = seconds
        self._logger.info(f"Update interval set to {seconds}s")

    def snapshot(self) -> TickerSnapshot:
        engine = self.engine
        if engine is None:
            return TickerSnapshot(update_interval=self.registry.preferences.update_interval)

        return TickerSnapshot(
            exchange=exchange_info(engine.site),
            state=engine.state.value,
            base=CurrencyInfo.from_currency(engine.base_currency) if engine.base_currency else None,
            quote=CurrencyInfo.from_currency(engine.quote_currency) if engine.quote_currency else None,
            price=self.price,
            updated_at=self.updated_at,
            pairs=matrix_to_pairs(engine.currency_matrix),
            update_interval=engine.preferences.update_interval,
        )

    async def shutdown(self) -> None:
        await self._release_engine()

    async def _release_engine(self) -> None:
        engine, self.engine = self.engine, None
        self.price = None
        self.updated_at = None
        if engine is not None:
            self._logger.info(f"Releasing {engine.site.display_name}")
            await engine.close()


def exchange_info(site: ExchangeSite) -> ExchangeInfo:
    return ExchangeInfo(site=site.name.lower(), index=site.index, display_name=site.display_name)
