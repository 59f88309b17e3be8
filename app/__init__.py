"""
FastAPI Application Package

Entry point for the ticker API: REST endpoints to choose an exchange and a
currency pair, and a WebSocket stream of price updates.
"""
