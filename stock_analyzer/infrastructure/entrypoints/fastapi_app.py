"""
FastAPI entry point and Composition Root.

Wires the provider adapters, normalizers and use cases at startup (in the
lifespan, so importing this module has no side effects), then exposes the
four core operations over HTTP. Every route delegates to a use case; domain
errors map onto status codes in one handler (ValidationError 400,
NotFoundError 404, UpstreamError 502).

Run locally:
    uvicorn stock_analyzer.infrastructure.entrypoints.fastapi_app:app --reload --port 5000
"""

import dataclasses
import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from stock_analyzer.application.normalizers.quote_normalizer import QuoteNormalizer
from stock_analyzer.application.use_cases.resolve_history import ResolveHistoryUseCase
from stock_analyzer.application.use_cases.resolve_market_snapshot import (
    ResolveMarketSnapshotUseCase,
)
from stock_analyzer.application.use_cases.resolve_quote import ResolveQuoteUseCase
from stock_analyzer.application.use_cases.search_symbols import SearchSymbolsUseCase
from stock_analyzer.domain.errors import (
    MarketDataError,
    NotFoundError,
    UpstreamError,
    ValidationError,
)
from stock_analyzer.domain.ports.market_data_port import IMarketDataProvider
from stock_analyzer.infrastructure.config.settings import MarketDataSettings
from stock_analyzer.infrastructure.market_data.yahoo_http_adapter import YahooFinanceHttpProvider
from stock_analyzer.infrastructure.market_data.yfinance_adapter import YFinanceMarketDataProvider
from stock_analyzer.infrastructure.observability.logging_config import configure_logging

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (NotFoundError, 404),
    (UpstreamError, 502),
)


def build_provider(
    name: str, settings: MarketDataSettings, client: httpx.AsyncClient
) -> IMarketDataProvider:
    if name == "yfinance":
        return YFinanceMarketDataProvider(timeout=settings.http_timeout_seconds)
    return YahooFinanceHttpProvider(client, base_url=settings.yahoo_base_url)


def create_app(
    settings: Optional[MarketDataSettings] = None,
    provider: Optional[IMarketDataProvider] = None,
    batch_provider: Optional[IMarketDataProvider] = None,
    bootstrap: bool = False,
) -> FastAPI:
    """Build the app. *provider*/*batch_provider* override the configured adapters.

    Nothing is read or opened here: settings, the shared httpx client and the
    use cases are built when the lifespan starts and live on ``app.state``.
    With *bootstrap* the lifespan first loads ``.env`` and configures logging.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if bootstrap:
            load_dotenv()
        resolved = settings or MarketDataSettings.from_env()
        if bootstrap:
            configure_logging(resolved.log_level, resolved.log_format)

        async with httpx.AsyncClient(
            timeout=resolved.http_timeout_seconds,
            headers={"User-Agent": resolved.http_user_agent},
        ) as client:
            primary = provider or build_provider(resolved.provider, resolved, client)
            secondary = batch_provider or build_provider(
                resolved.batch_quote_provider, resolved, client
            )
            app.state.http_client = client
            app.state.quote_uc = ResolveQuoteUseCase(
                primary, QuoteNormalizer.with_full_chain(secondary)
            )
            app.state.history_uc = ResolveHistoryUseCase(primary)
            app.state.search_uc = SearchSymbolsUseCase(primary)
            app.state.snapshot_uc = ResolveMarketSnapshotUseCase(
                primary,
                universe=resolved.universe,
                max_concurrency=resolved.max_concurrency,
                fetch_timeout=resolved.fetch_timeout_seconds,
            )
            logger.info(
                "Market data API ready",
                extra={"provider": resolved.provider, "universe_size": len(resolved.universe)},
            )
            yield

    app = FastAPI(title="Stock Analyzer Market Data API", lifespan=lifespan)

    @app.exception_handler(MarketDataError)
    async def market_data_error_handler(_: Request, exc: MarketDataError) -> JSONResponse:
        status = next((code for kind, code in _STATUS_BY_ERROR if isinstance(exc, kind)), 500)
        return JSONResponse(status_code=status, content={"error": exc.message, "code": exc.code})

    @app.get("/api/stocks/quote/{symbol}")
    async def get_quote(symbol: str, request: Request):
        return dataclasses.asdict(await request.app.state.quote_uc.execute(symbol))

    @app.get("/api/stocks/historical/{symbol}")
    async def get_historical(symbol: str, request: Request, interval: str = "daily"):
        candles = await request.app.state.history_uc.execute(symbol, interval)
        return [dataclasses.asdict(candle) for candle in candles]

    @app.get("/api/stocks/search/{query}")
    async def search(query: str, request: Request):
        matches = await request.app.state.search_uc.execute(query)
        return [dataclasses.asdict(match) for match in matches]

    @app.get("/api/stocks/market-overview")
    async def market_overview(request: Request):
        snapshot = await request.app.state.snapshot_uc.execute()
        return {
            "top_gainers": [dataclasses.asdict(q) for q in snapshot.gainers],
            "top_losers": [dataclasses.asdict(q) for q in snapshot.losers],
        }

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


app = create_app(bootstrap=True)
