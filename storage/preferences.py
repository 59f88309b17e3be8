"""
Preference Store

Holds the user's ticker preferences: preferred base currency, preferred quote
currency and the polling interval. The engine reads these every time it
selects currencies or arms its timer, and writes the currency codes back after
every successful selection.

Two implementations:
    - InMemoryPreferenceStore: process lifetime only (tests, ephemeral runs)
    - JsonPreferenceStore: persisted to a JSON file on every change

Usage:
    from storage.preferences import build_preference_store
    from core.config import settings

    preferences = build_preference_store(settings)
    preferences.default_quote_currency = "EUR"
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, Field, ValidationError, field_validator

from core.config import Settings
from core.logging import get_logger

logger = get_logger(__name__)


class TickerPreferences(BaseModel):
    """
    Validated preference values.

    Attributes:
        default_base_currency: Preferred base currency code
        default_quote_currency: Preferred quote currency code
        update_interval: Seconds between two price fetches (positive)
    """

    default_base_currency: str = Field(default="BTC", min_length=1)
    default_quote_currency: str = Field(default="USD", min_length=1)
    update_interval: int = Field(default=30, gt=0)

    @field_validator("default_base_currency", "default_quote_currency")
    @classmethod
    def validate_code(cls, v: str) -> str:
        """Currency codes are stored uppercase"""
        return v.strip().upper()

    @classmethod
    def from_settings(cls, settings: Settings) -> "TickerPreferences":
        return cls(
            default_base_currency=settings.default_base_currency,
            default_quote_currency=settings.default_quote_currency,
            update_interval=settings.update_interval,
        )


class PreferenceStore(ABC):
    """
    Key-value access to the ticker preferences.

    Subclasses provide _load() and _save(); setters validate through
    TickerPreferences and raise pydantic.ValidationError on bad values.
    """

    def __init__(self, defaults: Optional[TickerPreferences] = None):
        self._defaults = defaults or TickerPreferences()

    @abstractmethod
    def _load(self) -> TickerPreferences:
        ...

    @abstractmethod
    def _save(self, preferences: TickerPreferences) -> None:
        ...

    def snapshot(self) -> TickerPreferences:
        """Return a copy of the current preferences."""
        return self._load().model_copy()

    def _update(self, **changes) -> None:
        current = self._load()
        updated = TickerPreferences.model_validate({**current.model_dump(), **changes})
        if updated != current:
            self._save(updated)

    @property
    def default_base_currency(self) -> str:
        return self._load().default_base_currency

    @default_base_currency.setter
    def default_base_currency(self, code: str) -> None:
        self._update(default_base_currency=code)

    @property
    def default_quote_currency(self) -> str:
        return self._load().default_quote_currency

    @default_quote_currency.setter
    def default_quote_currency(self, code: str) -> None:
        self._update(default_quote_currency=code)

    @property
    def update_interval(self) -> int:
        return self._load().update_interval

    @update_interval.setter
    def update_interval(self, seconds: int) -> None:
        self._update(update_interval=seconds)


class InMemoryPreferenceStore(PreferenceStore):
    """Preferences kept in memory for the lifetime of the process."""

    def __init__(self, defaults: Optional[TickerPreferences] = None):
        super().__init__(defaults)
        self._preferences = self._defaults.model_copy()

    def _load(self) -> TickerPreferences:
        return self._preferences

    def _save(self, preferences: TickerPreferences) -> None:
        self._preferences = preferences


class JsonPreferenceStore(PreferenceStore):
    """
    Preferences persisted to a JSON file.

    The file is read once and rewritten on every change. A missing or corrupt
    file falls back to the defaults.
    """

    def __init__(self, path: Union[str, Path], defaults: Optional[TickerPreferences] = None):
        super().__init__(defaults)
        self.path = Path(path)
        self._preferences = self._read()

    def _read(self) -> TickerPreferences:
        if not self.path.exists():
            logger.debug(f"No preference file at {self.path}, using defaults")
            return self._defaults.model_copy()

        try:
            return TickerPreferences.model_validate_json(self.path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as e:
            logger.warning(f"Ignoring unreadable preference file {self.path}: {e}")
            return self._defaults.model_copy()

    def _load(self) -> TickerPreferences:
        return self._preferences

    def _save(self, preferences: TickerPreferences) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(preferences.model_dump_json(indent=2), encoding="utf-8")
        self._preferences = preferences
        logger.debug(f"Preferences saved to {self.path}")


def build_preference_store(settings: Settings) -> PreferenceStore:
    """Pick the preference store configured in settings."""
    defaults = TickerPreferences.from_settings(settings)
    if settings.preferences_file:
        return JsonPreferenceStore(settings.preferences_file, defaults=defaults)
    return InMemoryPreferenceStore(defaults=defaults)
