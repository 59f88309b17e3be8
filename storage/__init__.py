"""
Storage Package

Handles persistence of user preferences.

Current implementation:
- In-memory preference store
- JSON file preference store (PREFERENCES_FILE in .env)
"""

from storage.preferences import (
    PreferenceStore,
    InMemoryPreferenceStore,
    JsonPreferenceStore,
    TickerPreferences,
    build_preference_store,
)

__all__ = [
    "PreferenceStore",
    "InMemoryPreferenceStore",
    "JsonPreferenceStore",
    "TickerPreferences",
    "build_preference_store",
]
