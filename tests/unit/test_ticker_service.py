"""
Unit Tests for the Ticker Service

The service is wired to a registry whose Kraken slot builds a FakeExchange,
so engines run on the test loop without network access.

Run with:
    pytest tests/unit/test_ticker_service.py -v
"""

import asyncio

import pytest
import pytest_asyncio

from core.currency import currency_for_code
from core.exchange_engine import EngineState
from core.exchange_interface import ExchangeSite
from core.exchange_registry import ExchangeRegistry
from services.event_bus import EventBus
from services.ticker_service import TICKER_TOPIC, TickerService
from storage.preferences import InMemoryPreferenceStore
from tests.fakes import FakeExchange, settle


def c(code):
    return currency_for_code(code)


def drain(queue):
    events = []
    while not queue.empty():
        events.append(queue.get_nowait())
    return events


@pytest.fixture
def exchanges():
    return []


@pytest.fixture
def registry(exchanges):
    registry = ExchangeRegistry(preferences=InMemoryPreferenceStore())

    def factory():
        exchange = FakeExchange({c("BTC"): [c("USD"), c("EUR")], c("ETH"): [c("USD")]})
        exchanges.append(exchange)
        return exchange

    registry.register(ExchangeSite.KRAKEN, factory)
    return registry


@pytest_asyncio.fixture
async def service(registry):
    service = TickerService(registry, bus=EventBus())
    yield service
    await service.shutdown()


class TestSelectExchange:

    @pytest.mark.asyncio
    async def test_publishes_price_then_matrix_then_price(self, service, exchanges):
        queue = service.bus.subscribe(TICKER_TOPIC)

        assert await service.select_exchange("kraken") is True
        await settle()
        exchanges[0].resolve(27000.5)
        await settle()

        events = drain(queue)
        assert [e["type"] for e in events] == ["price", "matrix", "price"]
        assert events[0]["price"] is None
        assert events[1]["base"] == "BTC"
        assert events[1]["quote"] == "USD"
        assert [p["base"]["code"] for p in events[1]["pairs"]] == ["BTC", "ETH"]
        assert events[2]["price"] == 27000.5
        assert events[2]["exchange"] == "kraken"

    @pytest.mark.asyncio
    async def test_unknown_site_keeps_current_engine(self, service):
        await service.select_exchange("kraken")
        engine = service.engine

        assert await service.select_exchange("mtgox") is False
        assert service.engine is engine

    @pytest.mark.asyncio
    async def test_exchange_is_initialized_before_start(self, service, exchanges):
        await service.select_exchange("kraken")

        assert exchanges[0].initialized is True

    @pytest.mark.asyncio
    async def test_switch_releases_previous_engine(self, service, exchanges):
        await service.select_exchange("kraken")
        await settle()
        old_engine = service.engine

        await service.select_exchange(250)

        assert old_engine.state is EngineState.IDLE
        assert exchanges[0].shutdown_called is True
        assert service.engine is not old_engine

    @pytest.mark.asyncio
    async def test_notifications_from_stale_engine_are_ignored(self, service, exchanges):
        await service.select_exchange("kraken")
        await settle()
        old_engine = service.engine
        await service.select_exchange("kraken")
        queue = service.bus.subscribe(TICKER_TOPIC)

        service.on_price_updated(old_engine, 1.0)

        assert drain(queue) == []
        assert service.price is None


class TestSelectCurrencies:

    @pytest.mark.asyncio
    async def test_requires_active_exchange(self, service):
        with pytest.raises(RuntimeError):
            service.select_currencies("BTC")

    @pytest.mark.asyncio
    async def test_unknown_code_raises(self, service):
        await service.select_exchange("kraken")
        await settle()

        with pytest.raises(ValueError):
            service.select_currencies("NOPE")
        with pytest.raises(ValueError):
            service.select_currencies("BTC", "NOPE")

    @pytest.mark.asyncio
    async def test_untraded_pair_changes_nothing(self, service, exchanges, registry):
        await service.select_exchange("kraken")
        await settle()
        queue = service.bus.subscribe(TICKER_TOPIC)

        with pytest.raises(ValueError):
            service.select_currencies("ETH", "EUR")
        await settle()

        assert service.engine.base_currency == c("BTC")
        assert service.engine.quote_currency == c("USD")
        assert registry.preferences.default_base_currency == "BTC"
        assert registry.preferences.default_quote_currency == "USD"
        assert exchanges[0].discover_calls == 1
        assert exchanges[0].fetch_calls == [(c("BTC"), c("USD"))]
        assert drain(queue) == []

    @pytest.mark.asyncio
    async def test_selection_survives_rediscovery(self, service, exchanges, registry):
        await service.select_exchange("kraken")
        await settle()

        service.select_currencies("btc", "eur")
        await settle()

        assert exchanges[0].discover_calls == 2
        assert service.engine.base_currency == c("BTC")
        assert service.engine.quote_currency == c("EUR")
        assert exchanges[0].fetch_calls[-1] == (c("BTC"), c("EUR"))
        assert registry.preferences.default_quote_currency == "EUR"


class TestSnapshot:

    @pytest.mark.asyncio
    async def test_idle_snapshot(self, service):
        snapshot = service.snapshot()
        assert snapshot.exchange is None
        assert snapshot.state == "idle"
        assert snapshot.pairs == []
        assert snapshot.update_interval == 30

    @pytest.mark.asyncio
    async def test_polling_snapshot(self, service, exchanges):
        await service.select_exchange("kraken")
        await settle()
        exchanges[0].resolve(31000.0)
        await settle()

        snapshot = service.snapshot()

        assert snapshot.exchange.site == "kraken"
        assert snapshot.exchange.index == 250
        assert snapshot.state == "polling"
        assert snapshot.base.code == "BTC"
        assert snapshot.quote.code == "USD"
        assert snapshot.price == 31000.0
        assert snapshot.updated_at is not None
        assert len(snapshot.pairs) == 2

    @pytest.mark.asyncio
    async def test_shutdown_clears_state(self, service, exchanges):
        await service.select_exchange("kraken")
        await settle()

        await service.shutdown()

        assert service.engine is None
        assert service.snapshot().exchange is None
        assert exchanges[0].shutdown_called is True

    @pytest.mark.asyncio
    async def test_failed_rediscovery_shows_no_stale_pairs(self, service, exchanges):
        await service.select_exchange("kraken")
        await settle()
        exchanges[0].discovery_error = RuntimeError("exchange down")

        service.engine.reset()
        await settle()

        snapshot = service.snapshot()
        assert snapshot.state == "idle"
        assert snapshot.base is None
        assert snapshot.quote is None
        assert snapshot.pairs == []


class TestSelectUpdateInterval:

    @pytest.mark.asyncio
    async def test_next_timer_uses_new_interval(self, service, exchanges, registry):
        await service.select_exchange("kraken")
        await settle()

        service.select_update_interval(5)
        exchanges[0].resolve(100.0)
        await settle()

        loop = asyncio.get_running_loop()
        timer = service.engine._timer
        assert timer is not None
        assert timer.when() - loop.time() == pytest.approx(5, abs=1)
        assert registry.preferences.update_interval == 5
        assert service.snapshot().update_interval == 5

    @pytest.mark.asyncio
    async def test_without_exchange_updates_registry_preferences(self, service, registry):
        service.select_update_interval(12)
        assert registry.preferences.update_interval == 12

    @pytest.mark.asyncio
    @pytest.mark.parametrize("seconds", [0, -1])
    async def test_non_positive_interval_is_rejected(self, service, registry, seconds):
        with pytest.raises(ValueError):
            service.select_update_interval(seconds)
        assert registry.preferences.update_interval == 30
