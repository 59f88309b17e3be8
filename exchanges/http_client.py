"""
Exchange REST Client

Async HTTP client shared by all exchange integrations. It handles:
- Lazily opened aiohttp session (one per exchange integration)
- Retry on rate limits (429, 418, 503) and timeouts
- Request/response logging

Parsing is left to the exchange modules; this client only returns JSON.

Usage:
    client = ExchangeAPIClient("bitstamp", "https://www.bitstamp.net")
    data = await client.get("/api/v2/ticker/btcusd/")
    await client.close()

    # or
    async with ExchangeAPIClient("kraken", "https://api.kraken.com") as client:
        data = await client.get("/0/public/AssetPairs")
"""

import asyncio
import time
from typing import Any, Dict, Optional

import aiohttp

from core.config import settings
from core.logging import get_logger, log_api_request, log_api_response


class ExchangeAPIClient:
    """
    Async HTTP client for one exchange's public REST API.

    Attributes:
        exchange: Exchange name used in log lines
        base_url: API root, without trailing slash
        max_retries: Attempts per request
        session: aiohttp ClientSession, created on first request
    """

    RETRY_STATUSES = (429, 418, 503)

    def __init__(
        self,
        exchange: str,
        base_url: str,
        max_retries: Optional[int] = None,
        timeout: Optional[float] = None
    ):
        self.exchange = exchange
        self.base_url = base_url.rstrip("/")
        self.max_retries = max_retries or settings.max_retries
        self.timeout = timeout or settings.request_timeout
        self.logger = get_logger(__name__)
        self.session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def _ensure_session(self) -> aiohttp.ClientSession:
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(
                headers={"Accept": "application/json", "User-Agent": "cointicker"}
            )
            self.logger.debug(f"{self.exchange} session created")
        return self.session

    async def close(self) -> None:
        if self.session is not None and not self.session.closed:
            await self.session.close()
            self.logger.debug(f"{self.exchange} session closed")
        self.session = None

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        GET a JSON document with retry logic.

        Args:
            path: Endpoint path (e.g. "/api/v2/ticker/btcusd/")
            params: Optional query parameters

        Returns:
            Decoded JSON response

        Raises:
            RuntimeError: If the request fails after all attempts

        Retry delay: 0.5s * (attempt + 1) on rate limits and timeouts, with no
        delay after the last attempt.
        """
        session = self._ensure_session()
        url = f"{self.base_url}{path}"
        log_api_request(self.exchange, path, params)

        for attempt in range(self.max_retries):
            started = time.monotonic()
            try:
                async with session.get(
                    url,
                    params=params,
                    timeout=aiohttp.ClientTimeout(total=self.timeout)
                ) as resp:
                    log_api_response(self.exchange, path, resp.status, time.monotonic() - started)

                    if resp.status == 200:
                        return await resp.json(content_type=None)

                    if resp.status in self.RETRY_STATUSES:
                        self.logger.warning(
                            f"Rate limited (HTTP {resp.status}) on {self.exchange} {path} "
                            f"(attempt {attempt + 1}/{self.max_retries})"
                        )
                        await self._backoff(attempt)
                        continue

                    text = await resp.text()
                    self.logger.error(f"HTTP {resp.status} on {self.exchange} {path}: {text[:200]}")
                    break

            except asyncio.TimeoutError:
                self.logger.warning(
                    f"Timeout on {self.exchange} {path} (attempt {attempt + 1}/{self.max_retries})"
                )
                await self._backoff(attempt)

            except aiohttp.ClientError as e:
                self.logger.warning(
                    f"Request failed on {self.exchange} {path}: {e} (attempt {attempt + 1}/{self.max_retries})"
                )
                await self._backoff(attempt)

        raise RuntimeError(f"Failed to fetch {url} after {self.max_retries} attempts")

    async def _backoff(self, attempt: int) -> None:
        """Sleep 0.5s * (attempt + 1) before the next attempt; never after the last."""
        if attempt < self.max_retries - 1:
            await asyncio.sleep(0.5 * (attempt + 1))
