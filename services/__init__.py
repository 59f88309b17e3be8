"""
Services Package

Application-side consumers of the exchange engine:
- ticker_service: Observer tracking the active exchange
- event_bus: Fan-out of ticker events to WebSocket clients
"""
