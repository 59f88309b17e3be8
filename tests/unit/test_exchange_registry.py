"""
Unit Tests for ExchangeSite and the Exchange Registry

Run with:
    pytest tests/unit/test_exchange_registry.py -v
"""

import pytest

from core.exchange_engine import EngineState, ExchangeEngine
from core.exchange_interface import ExchangeInterface, ExchangeSite
from core.exchange_registry import ExchangeRegistry, get_registry
from exchanges.bitstamp import BitstampExchange
from exchanges.kraken import KrakenExchange
from storage.preferences import InMemoryPreferenceStore
from tests.fakes import FakeExchange, RecordingObserver


@pytest.fixture
def registry():
    return ExchangeRegistry(preferences=InMemoryPreferenceStore())


class TestExchangeSite:

    def test_stable_indexes(self):
        assert ExchangeSite.BITSTAMP.index == 210
        assert ExchangeSite.COINCHECK.index == 235
        assert ExchangeSite.GDAX.index == 240
        assert ExchangeSite.KORBIT.index == 245
        assert ExchangeSite.KRAKEN.index == 250

    @pytest.mark.parametrize("value,expected", [
        (ExchangeSite.GDAX, ExchangeSite.GDAX),
        (250, ExchangeSite.KRAKEN),
        ("250", ExchangeSite.KRAKEN),
        ("bitstamp", ExchangeSite.BITSTAMP),
        ("Coincheck", ExchangeSite.COINCHECK),
        (" KORBIT ", ExchangeSite.KORBIT),
    ])
    def test_build_resolves_site(self, value, expected):
        assert ExchangeSite.build(value) is expected

    @pytest.mark.parametrize("value", [None, 0, 220, "btce", "", True])
    def test_build_unknown_is_none(self, value):
        assert ExchangeSite.build(value) is None

    def test_display_names(self):
        assert ExchangeSite.GDAX.display_name == "GDAX"
        assert ExchangeSite.KRAKEN.display_name == "Kraken"


class TestExchangeInterface:

    def test_cannot_instantiate_abstract_interface(self):
        with pytest.raises(TypeError):
            ExchangeInterface()

    def test_name_derives_from_site(self):
        assert FakeExchange().name == "kraken"


class TestExchangeRegistry:

    def test_every_site_is_registered(self, registry):
        assert set(registry.list_sites()) == set(ExchangeSite)
        assert len(registry) == len(ExchangeSite)

    def test_build_returns_idle_engine(self, registry):
        observer = RecordingObserver()
        engine = registry.build("kraken", observer)

        assert isinstance(engine, ExchangeEngine)
        assert isinstance(engine.exchange, KrakenExchange)
        assert engine.observer is observer
        assert engine.state is EngineState.IDLE
        assert engine.preferences is registry.preferences

    def test_build_by_index(self, registry):
        engine = registry.build(210, RecordingObserver())
        assert isinstance(engine.exchange, BitstampExchange)

    def test_build_creates_fresh_instances(self, registry):
        first = registry.build(ExchangeSite.GDAX, RecordingObserver())
        second = registry.build(ExchangeSite.GDAX, RecordingObserver())
        assert first is not second
        assert first.exchange is not second.exchange

    def test_build_unknown_site_returns_none(self, registry):
        assert registry.build("mtgox", RecordingObserver()) is None
        assert registry.build(999, RecordingObserver()) is None

    def test_build_with_overrides(self, registry):
        preferences = InMemoryPreferenceStore()
        engine = registry.build("gdax", RecordingObserver(), preferences=preferences, locale="ja_JP")
        assert engine.preferences is preferences
        assert engine.locale == "ja_JP"

    def test_register_replaces_factory(self, registry):
        registry.register(ExchangeSite.KRAKEN, FakeExchange)
        engine = registry.build("kraken", RecordingObserver())
        assert isinstance(engine.exchange, FakeExchange)

    def test_get_registry_is_a_singleton(self):
        assert get_registry() is get_registry()
        assert isinstance(get_registry(), ExchangeRegistry)

    def test_has_site(self, registry):
        assert registry.has_site("kraken")
        assert registry.has_site(245)
        assert not registry.has_site("btcchina")
