"""
Test Suite

Unit tests for the ticker backend.

Structure:
- tests/fakes.py: Scripted exchange and recording observers
- tests/unit/: Tests for individual components (engine, currencies,
  preferences, exchange parsing, service, API)

Uses pytest with pytest-asyncio for testing async functionality.
No test touches the network.
"""
