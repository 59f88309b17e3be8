"""
Unit Tests for the Exchange REST Client

The aiohttp session is replaced by a scripted fake so retry handling can be
checked without network access.

Run with:
    pytest tests/unit/test_http_client.py -v
"""

import asyncio

import aiohttp
import pytest

from exchanges import http_client
from exchanges.http_client import ExchangeAPIClient


class FakeResponse:
    def __init__(self, status, payload=None):
        self.status = status
        self._payload = payload

    async def json(self, content_type=None):
        return self._payload

    async def text(self):
        return str(self._payload)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return False


class FakeSession:
    """Returns (or raises) the scripted outcomes in order."""

    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.requests = []
        self.closed = False

    def get(self, url, params=None, timeout=None):
        self.requests.append((url, params))
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    async def close(self):
        self.closed = True


@pytest.fixture
def no_sleep(monkeypatch):
    delays = []

    async def instant(delay):
        delays.append(delay)
    monkeypatch.setattr(http_client.asyncio, "sleep", instant)
    return delays


def make_client(outcomes, max_retries=3):
    client = ExchangeAPIClient("test", "https://api.example.com/", max_retries=max_retries, timeout=1)
    client.session = FakeSession(outcomes)
    return client


class TestExchangeAPIClient:

    @pytest.mark.asyncio
    async def test_success_returns_json(self):
        client = make_client([FakeResponse(200, {"last": "1.0"})])

        data = await client.get("/ticker", {"pair": "btcusd"})

        assert data == {"last": "1.0"}
        assert client.session.requests == [("https://api.example.com/ticker", {"pair": "btcusd"})]

    @pytest.mark.asyncio
    async def test_rate_limit_is_retried(self, no_sleep):
        client = make_client([FakeResponse(429), FakeResponse(200, [1, 2])])

        assert await client.get("/pairs") == [1, 2]
        assert len(client.session.requests) == 2

    @pytest.mark.asyncio
    async def test_timeouts_and_client_errors_are_retried(self, no_sleep):
        client = make_client([
            asyncio.TimeoutError(),
            aiohttp.ClientConnectionError("reset"),
            FakeResponse(200, {"ok": True}),
        ])

        assert await client.get("/x") == {"ok": True}

    @pytest.mark.asyncio
    async def test_gives_up_after_max_retries(self, no_sleep):
        client = make_client([FakeResponse(503), FakeResponse(503)], max_retries=2)

        with pytest.raises(RuntimeError):
            await client.get("/x")
        assert no_sleep == [0.5]

    @pytest.mark.asyncio
    async def test_no_backoff_after_last_timeout(self, no_sleep):
        client = make_client([asyncio.TimeoutError(), asyncio.TimeoutError(), asyncio.TimeoutError()])

        with pytest.raises(RuntimeError):
            await client.get("/x")
        assert no_sleep == [0.5, 1.0]

    @pytest.mark.asyncio
    async def test_other_http_errors_are_not_retried(self):
        client = make_client([FakeResponse(404, "not found"), FakeResponse(200, {})])

        with pytest.raises(RuntimeError):
            await client.get("/missing")
        assert len(client.session.requests) == 1

    @pytest.mark.asyncio
    async def test_close_releases_session(self):
        client = make_client([])
        session = client.session

        await client.close()

        assert session.closed is True
        assert client.session is None
