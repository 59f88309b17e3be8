"""
Exchange Engine — Polling State Machine

The engine drives one exchange integration:

    start()  -> "no price yet" notification, then currency discovery
    discovery done -> select base/quote, notify matrix, poll
    poll     -> fetch price, notify, arm a single-shot timer
    timer    -> poll again
    stop()   -> cancel in-flight requests and the timer

States:
    IDLE     no timer armed, nothing in flight
    POLLING  timer armed, or discovery / fetch in flight

A failed fetch is not a state: it is reported as a None price and the timer
is armed as usual, so polling heals itself on the next cycle.

Concurrency:
    All public methods are synchronous and must be called on the event loop
    that owns the engine. Discovery and fetches run as asyncio tasks on that
    loop; the timer is a loop.call_later() handle. Every task and timer
    callback captures the generation current when it was scheduled; stop()
    bumps the generation so late completions are dropped without notifying
    the observer or re-arming the timer.

Example:
    >>> engine = ExchangeEngine(KrakenExchange(), observer, preferences)
    >>> engine.start()
    >>> ...
    >>> await engine.close()
"""

import asyncio
from enum import Enum
from typing import List, Mapping, Optional, Sequence, Set

from core.config import settings
from core.currency import Currency, currency_for_code, currency_for_locale, system_locale
from core.currency_matrix import CurrencyMatrix, normalize_currency_matrix, sort_base_currencies
from core.exchange_interface import ExchangeInterface, ExchangeSite
from core.logging import get_logger, log_price_update
from core.observer import ExchangeObserver
from storage.preferences import PreferenceStore

logger = get_logger(__name__)


class EngineState(str, Enum):
    IDLE = "idle"
    POLLING = "polling"


class ExchangeEngine:
    """
    Lifecycle, currency selection and polling for one exchange.

    Attributes:
        exchange: The ExchangeInterface providing discovery and price fetches
        observer: Receives matrix and price notifications
        preferences: Source of default currencies and the polling interval;
                     written back after every currency selection
        locale: Locale used as a quote-currency hint

    Selection rules:
        Base:  preferred base if traded, else first of the available bases
               (Bitcoin pinned first, then by display name).
        Quote: preferred quote if traded against the base, else the locale's
               currency if traded, else the first quote in matrix order.
    """

    def __init__(
        self,
        exchange: ExchangeInterface,
        observer: ExchangeObserver,
        preferences: PreferenceStore,
        locale: Optional[str] = None,
        request_timeout: Optional[float] = None
    ):
        self.exchange = exchange
        self.observer = observer
        self.preferences = preferences
        self.locale = locale if locale is not None else (settings.locale or system_locale())
        self.request_timeout = request_timeout or settings.request_budget

        self._currency_matrix: Optional[CurrencyMatrix] = None
        self._base_currency: Optional[Currency] = None
        self._quote_currency: Optional[Currency] = None

        self._requests: Set[asyncio.Task] = set()
        self._timer: Optional[asyncio.TimerHandle] = None
        self._generation = 0

    # ============================================
    # Read-only State
    # ============================================

    @property
    def site(self) -> ExchangeSite:
        return self.exchange.site

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def state(self) -> EngineState:
        if self._timer is not None or self._requests:
            return EngineState.POLLING
        return EngineState.IDLE

    @property
    def currency_matrix(self) -> Optional[CurrencyMatrix]:
        if self._currency_matrix is None:
            return None
        return {base: list(quotes) for base, quotes in self._currency_matrix.items()}

    @property
    def base_currency(self) -> Optional[Currency]:
        return self._base_currency

    @property
    def quote_currency(self) -> Optional[Currency]:
        return self._quote_currency

    @property
    def available_base_currencies(self) -> List[Currency]:
        if self._currency_matrix is None:
            return []
        return sort_base_currencies(self._currency_matrix.keys())

    @property
    def available_quote_currencies(self) -> List[Currency]:
        if self._currency_matrix is None or self._base_currency is None:
            return []
        return list(self._currency_matrix.get(self._base_currency, []))

    # ============================================
    # Lifecycle
    # ============================================

    def start(self) -> None:
        """
        Announce "no price yet" and start currency discovery.

        Must be called from a coroutine or callback running on the event loop.
        A running engine is stopped first, so only one poll loop ever exists.
        """
        loop = asyncio.get_running_loop()
        if self.state is EngineState.POLLING:
            self.stop()

        logger.info(f"Starting {self.exchange.name} (generation {self._generation})")

        self._notify_price(None)
        self._spawn(loop, self._discover(self._generation), "discover")

    def stop(self) -> None:
        """
        Cancel every in-flight request and the pending timer.

        Calling stop() on an idle engine does nothing.
        """
        if self.state is EngineState.IDLE:
            logger.debug(f"{self.exchange.name} already idle")
            return

        self._generation += 1

        for task in list(self._requests):
            task.cancel()
        self._requests.clear()

        self._cancel_request_timer()

        logger.info(f"Stopped {self.exchange.name} (generation {self._generation})")

    def reset(self) -> None:
        """Stop, then start again with a fresh discovery."""
        self.stop()
        self.start()

    async def close(self) -> None:
        """Stop polling and release the exchange's network resources."""
        self.stop()
        await self.exchange.shutdown()

    # ============================================
    # Currency Selection
    # ============================================

    def set_currency_matrix(self, matrix: Optional[Mapping[Currency, Sequence[Currency]]]) -> None:
        """
        Install a discovered currency matrix.

        Selects base and quote, notifies the observer, then polls immediately.
        An empty or missing matrix clears the previous selection and leaves the
        engine without currencies and idle.
        """
        generation = self._generation
        normalized = normalize_currency_matrix(matrix)
        if normalized is None:
            logger.warning(f"{self.exchange.name} lists no tradable pairs; staying idle")
            self._currency_matrix = None
            self._base_currency = None
            self._quote_currency = None
            self._cancel_request_timer()
            return

        self._currency_matrix = normalized
        self._select_base_currency()

        logger.info(
            f"{self.exchange.name} currency matrix loaded: {len(normalized)} base currencies, "
            f"selected {self._base_currency}/{self._quote_currency}"
        )
        self._notify_currency_matrix()
        if generation != self._generation:
            # The observer stopped or reset the engine
            return
        self._poll()

    def set_base_currency(self, currency: Currency) -> None:
        """
        Select a base currency and reselect the quote currency for it.

        Raises:
            ValueError: If a matrix is installed and does not trade currency
        """
        if self._currency_matrix is not None and currency not in self._currency_matrix:
            raise ValueError(f"{self.exchange.name} does not trade {currency} as a base currency")

        self._base_currency = currency
        if self._currency_matrix is not None:
            self._select_quote_currency()

        self.preferences.default_base_currency = currency.code

    def set_quote_currency(self, currency: Currency) -> None:
        """
        Select a quote currency for the current base.

        Raises:
            ValueError: If a matrix is installed and the pair is not traded
        """
        if self._currency_matrix is not None and currency not in self.available_quote_currencies:
            raise ValueError(
                f"{self.exchange.name} does not trade {self._base_currency}/{currency}"
            )

        self._quote_currency = currency
        self.preferences.default_quote_currency = currency.code

    def set_currency_pair(self, base: Currency, quote: Optional[Currency] = None) -> None:
        """
        Select base and quote together. Nothing changes unless the whole pair
        is valid; without a quote, the quote is reselected for the new base.

        Raises:
            ValueError: If a matrix is installed and the pair is not traded
        """
        if self._currency_matrix is not None:
            if base not in self._currency_matrix:
                raise ValueError(f"{self.exchange.name} does not trade {base} as a base currency")
            if quote is not None and quote not in self._currency_matrix[base]:
                raise ValueError(f"{self.exchange.name} does not trade {base}/{quote}")

        self.set_base_currency(base)
        if quote is not None:
            self.set_quote_currency(quote)

    def _select_base_currency(self) -> None:
        available = self.available_base_currencies
        preferred = currency_for_code(self.preferences.default_base_currency)

        if preferred is not None and preferred in available:
            self.set_base_currency(preferred)
        else:
            self.set_base_currency(available[0])

    def _select_quote_currency(self) -> None:
        available = self._currency_matrix[self._base_currency]
        preferred = currency_for_code(self.preferences.default_quote_currency)

        if preferred is not None and preferred in available:
            self.set_quote_currency(preferred)
            return

        locale_currency = currency_for_locale(self.locale)
        if locale_currency is not None and locale_currency in available:
            self.set_quote_currency(locale_currency)
        else:
            self.set_quote_currency(available[0])

    # ============================================
    # Polling
    # ============================================

    def _spawn(self, loop: asyncio.AbstractEventLoop, coro, label: str) -> asyncio.Task:
        task = loop.create_task(coro, name=f"{self.exchange.name}-{label}-{self._generation}")
        self._requests.add(task)
        task.add_done_callback(self._requests.discard)
        return task

    async def _discover(self, generation: int) -> None:
        try:
            matrix = await asyncio.wait_for(
                self.exchange.discover_currency_matrix(),
                timeout=self.request_timeout
            )
        except Exception as e:
            logger.warning(f"{self.exchange.name} currency discovery failed: {e!r}")
            matrix = None

        if generation != self._generation:
            logger.debug(f"Dropping stale discovery result from generation {generation}")
            return

        self.set_currency_matrix(matrix)

    def _poll(self) -> None:
        self._spawn(asyncio.get_running_loop(), self._fetch_price(self._generation), "fetch")

    async def _fetch_price(self, generation: int) -> None:
        base, quote = self._base_currency, self._quote_currency
        try:
            price = await asyncio.wait_for(
                self.exchange.fetch_price(base, quote),
                timeout=self.request_timeout
            )
        except Exception as e:
            logger.warning(f"{self.exchange.name} price fetch for {base}/{quote} failed: {e!r}")
            price = None

        if generation != self._generation:
            logger.debug(f"Dropping stale price from generation {generation}")
            return

        log_price_update(self.exchange.name, str(base), str(quote), price)
        self._notify_price(price)
        if generation != self._generation:
            return
        self._start_request_timer(generation)

    def _cancel_request_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _start_request_timer(self, generation: int) -> None:
        self._cancel_request_timer()

        interval = self.preferences.update_interval
        self._timer = asyncio.get_running_loop().call_later(
            interval, self._on_request_timer_fired, generation
        )
        logger.debug(f"Next {self.exchange.name} fetch in {interval}s")

    def _on_request_timer_fired(self, generation: int) -> None:
        if generation != self._generation:
            return

        self._timer = None
        self._poll()

    # ============================================
    # Observer Notifications
    # ============================================

    def _notify_price(self, price: Optional[float]) -> None:
        try:
            self.observer.on_price_updated(self, price)
        except Exception:
            logger.exception(f"Observer failed handling price update from {self.exchange.name}")

    def _notify_currency_matrix(self) -> None:
        try:
            self.observer.on_currency_matrix_loaded(self, self.currency_matrix)
        except Exception:
            logger.exception(f"Observer failed handling currency matrix from {self.exchange.name}")

    def __repr__(self) -> str:
        return (
            f"<ExchangeEngine(site='{self.exchange.name}', state='{self.state.value}', "
            f"pair={self._base_currency}/{self._quote_currency})>"
        )
