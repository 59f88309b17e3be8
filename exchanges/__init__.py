"""
Exchange Integrations Package

Each supported exchange has its own subpackage whose __init__.py holds the
class implementing ExchangeInterface (currency discovery + price fetch).

Shared pieces:
- http_client.py: aiohttp REST client with retry logic
- base.py: RestExchange, the common base of every integration
"""
