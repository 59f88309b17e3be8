"""
FastAPI Application - Crypto Price Ticker API

Exposes the exchange polling engine over REST and WebSocket: pick an
exchange, pick a currency pair, read the latest price or stream updates.

Usage:
    uvicorn app.main:app --reload --host 0.0.0.0 --port 8000

Docs:
    - Swagger: http://localhost:8000/docs
    - ReDoc: http://localhost:8000/redoc
"""

from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import FastAPI, HTTPException, Request, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware

from core.config import settings, validate_configuration
from core.currency import all_currencies
from core.exchange_registry import get_registry
from core.logging import logger
from core.schemas import CurrencyInfo, CurrencySelection, ExchangeInfo, IntervalSelection, TickerSnapshot
from services.ticker_service import TICKER_TOPIC, TickerService, exchange_info


def create_app(service: Optional[TickerService] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        service: Pre-built ticker service. When omitted, the lifespan builds
                 one from settings and starts polling the default exchange.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("=== Ticker Starting ===")
        owned = service is None
        if owned:
            validate_configuration()
            app.state.service = TickerService(get_registry())
            await app.state.service.select_exchange(settings.default_exchange)
        else:
            app.state.service = service
        logger.info("=== Started Successfully ===")

        yield

        logger.info("=== Shutting Down ===")
        try:
            await app.state.service.shutdown()
            logger.info("=== Shutdown Complete ===")
        except Exception as e:
            logger.error(f"Shutdown error: {e}")

    app = FastAPI(
        title="CoinTicker API",
        description=(
            "Live cryptocurrency prices polled from a selectable exchange.\n\n"
            "## REST Endpoints\n"
            "- `GET /exchanges` - Supported exchanges\n"
            "- `GET /currencies` - Known currencies\n"
            "- `GET /ticker` - Current exchange, pair, price and tradable pairs\n"
            "- `PUT /ticker/exchange/{site}` - Switch exchange (name or index)\n"
            "- `PUT /ticker/currencies` - Select base (and optionally quote) currency\n"
            "- `PUT /ticker/interval` - Change the polling interval in seconds\n\n"
            "## WebSocket\n"
            "- `ws://{host}/ws/ticker` - `matrix` and `price` events as JSON"
        ),
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc"
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"]
    )

    # ============================================
    # System Endpoints
    # ============================================

    @app.get("/", tags=["System"])
    async def root():
        """API information."""
        return {
            "name": "CoinTicker API",
            "version": "1.0.0",
            "docs": "/docs",
        }

    @app.get("/health", tags=["System"])
    async def health_check(request: Request):
        """Health of the active exchange API and number of stream clients."""
        service: TickerService = request.app.state.service
        subscribers = service.bus.subscriber_count(TICKER_TOPIC)
        engine = service.engine
        if engine is None:
            return {"status": "idle", "exchange": None, "subscribers": subscribers}

        healthy = await engine.exchange.health_check()
        return {
            "status": "healthy" if healthy else "degraded",
            "exchange": engine.exchange.name,
            "subscribers": subscribers,
        }

    @app.get("/exchanges", response_model=List[ExchangeInfo], tags=["System"])
    async def list_exchanges(request: Request):
        """List supported exchanges."""
        registry = request.app.state.service.registry
        return [exchange_info(site) for site in registry.list_sites()]

    @app.get("/currencies", response_model=List[CurrencyInfo], tags=["System"])
    async def list_currencies():
        """List every known currency."""
        return [CurrencyInfo.from_currency(c) for c in all_currencies()]

    # ============================================
    # Ticker Endpoints
    # ============================================

    @app.get("/ticker", response_model=TickerSnapshot, tags=["Ticker"])
    async def get_ticker(request: Request):
        """Current exchange, selected pair and latest price."""
        return request.app.state.service.snapshot()

    @app.put("/ticker/exchange/{site}", response_model=TickerSnapshot, tags=["Ticker"])
    async def select_exchange(site: str, request: Request):
        """Switch to another exchange (e.g. `kraken` or `250`)."""
        service: TickerService = request.app.state.service
        if not await service.select_exchange(site):
            raise HTTPException(status_code=404, detail=f"Exchange '{site}' is not supported")
        return service.snapshot()

    @app.put("/ticker/currencies", response_model=TickerSnapshot, tags=["Ticker"])
    async def select_currencies(selection: CurrencySelection, request: Request):
        """Select the base currency and, optionally, the quote currency."""
        service: TickerService = request.app.state.service
        try:
            service.select_currencies(selection.base, selection.quote)
        except RuntimeError as e:
            raise HTTPException(status_code=409, detail=str(e))
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return service.snapshot()

    @app.put("/ticker/interval", response_model=TickerSnapshot, tags=["Ticker"])
    async def select_update_interval(selection: IntervalSelection, request: Request):
        """Change the polling interval; applies from the next scheduled fetch."""
        service: TickerService = request.app.state.service
        try:
            service.select_update_interval(selection.update_interval)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return service.snapshot()

    # ============================================
    # WebSocket Stream
    # ============================================

    @app.websocket("/ws/ticker")
    async def websocket_ticker(websocket: WebSocket):
        """
        Stream ticker events.

        Example:
            ws://localhost:8000/ws/ticker
        """
        service: TickerService = websocket.app.state.service
        await websocket.accept()
        logger.info("WS connected: ticker")
        queue = service.bus.subscribe(TICKER_TOPIC)
        try:
            await websocket.send_json({"type": "snapshot", **service.snapshot().model_dump(mode="json")})
            while True:
                event = await queue.get()
                await websocket.send_json(event)
        except WebSocketDisconnect:
            logger.info("WS disconnected: ticker")
        finally:
            service.bus.unsubscribe(TICKER_TOPIC, queue)
            logger.info("WS ended: ticker")

    return app


app = create_app()
