"""
Exchange Registry — Factory for Exchange Engines

Maps every supported ExchangeSite to its exchange integration and builds a
ready-to-start ExchangeEngine bound to an observer.

Architecture Pattern:
    Registry/Factory:
    - The registry knows which class serves which site
    - Callers ask for a site (enum, numeric index or name)
    - The registry returns an ExchangeEngine wrapping a fresh integration,
      or None for an unknown site

Example Usage:
    registry = get_registry()
    engine = registry.build("kraken", observer)
    if engine is not None:
        engine.start()

    # Adding a new exchange:
    # 1. Add a member to ExchangeSite
    # 2. Implement ExchangeInterface for it under exchanges/
    # 3. Map it in ExchangeRegistry.__init__
"""

from typing import Callable, Dict, List, Optional, Union

from core.config import settings
from core.exchange_engine import ExchangeEngine
from core.exchange_interface import ExchangeInterface, ExchangeSite
from core.logging import logger
from core.observer import ExchangeObserver
from storage.preferences import PreferenceStore, build_preference_store

ExchangeFactory = Callable[[], ExchangeInterface]
SiteLike = Union[ExchangeSite, int, str]


class ExchangeRegistry:
    """
    Central registry of exchange integrations.

    Attributes:
        preferences: Preference store shared by every engine built here,
                     unless build() is given another one
    """

    def __init__(self, preferences: Optional[PreferenceStore] = None):
        # Import here to avoid circular imports
        from exchanges.bitstamp import BitstampExchange
        from exchanges.coincheck import CoincheckExchange
        from exchanges.gdax import GDAXExchange
        from exchanges.korbit import KorbitExchange
        from exchanges.kraken import KrakenExchange

        self.preferences = preferences or build_preference_store(settings)

        self._factories: Dict[ExchangeSite, ExchangeFactory] = {
            ExchangeSite.BITSTAMP: BitstampExchange,
            ExchangeSite.COINCHECK: CoincheckExchange,
            ExchangeSite.GDAX: GDAXExchange,
            ExchangeSite.KORBIT: KorbitExchange,
            ExchangeSite.KRAKEN: KrakenExchange,
        }

        logger.info(
            f"ExchangeRegistry initialized with {len(self._factories)} exchange(s): "
            f"{', '.join(site.display_name for site in self._factories)}"
        )

    def register(self, site: ExchangeSite, factory: ExchangeFactory) -> None:
        """Map a site to a factory, replacing any existing mapping."""
        self._factories[site] = factory
        logger.debug(f"Registered {site.display_name}")

    def has_site(self, site: SiteLike) -> bool:
        resolved = ExchangeSite.build(site)
        return resolved is not None and resolved in self._factories

    def list_sites(self) -> List[ExchangeSite]:
        return list(self._factories.keys())

    def build(
        self,
        site: SiteLike,
        observer: ExchangeObserver,
        preferences: Optional[PreferenceStore] = None,
        locale: Optional[str] = None
    ) -> Optional[ExchangeEngine]:
        """
        Build an engine for a site.

        Args:
            site: ExchangeSite, numeric index (e.g. 250) or name (e.g. "kraken")
            observer: Receives the engine's notifications
            preferences: Overrides the registry's preference store
            locale: Overrides the configured/system locale

        Returns:
            A new, not yet started ExchangeEngine, or None if the site is unknown
        """
        resolved = ExchangeSite.build(site)
        if resolved is None or resolved not in self._factories:
            available = ", ".join(s.name.lower() for s in self._factories)
            logger.warning(f"Exchange '{site}' not supported. Available: {available}")
            return None

        exchange = self._factories[resolved]()
        logger.debug(f"Built engine for {resolved.display_name}")
        return ExchangeEngine(
            exchange,
            observer,
            preferences or self.preferences,
            locale=locale
        )

    def __repr__(self) -> str:
        return f"<ExchangeRegistry(sites={[s.name.lower() for s in self._factories]})>"

    def __len__(self) -> int:
        return len(self._factories)


_registry: Optional[ExchangeRegistry] = None


def get_registry() -> ExchangeRegistry:
    """Return the process-wide registry, creating it on first use."""
    global _registry
    if _registry is None:
        _registry = ExchangeRegistry()
        logger.debug("Created global ExchangeRegistry instance")
    return _registry
