"""
Infrastructure adapter: yfinance -> IMarketDataProvider.
All yfinance-specific details (Ticker.fast_info, history(), Tickers, Search)
are confined here; the rest of the codebase depends only on IMarketDataProvider.
yfinance negotiates Yahoo's cookie/crumb itself, which makes it the default
source for the batch-quote fallback. Its calls block, so each runs in a worker
thread.
"""

import asyncio
import logging
from typing import Any, Callable, Optional, TypeVar

import yfinance as yf

from stock_analyzer.domain.entities.provider_payloads import (
    RawBatchQuote,
    RawOhlcvRecord,
    RawQuotePayload,
    RawSearchMatch,
    RawSeriesPayload,
)
from stock_analyzer.domain.errors import MarketDataError, NotFoundError, UpstreamError
from stock_analyzer.domain.ports.market_data_port import IMarketDataProvider

logger = logging.getLogger(__name__)

T = TypeVar("T")

_SEARCH_MAX_RESULTS = 10


class YFinanceMarketDataProvider(IMarketDataProvider):
    """Fetches market data from Yahoo Finance via the yfinance library."""

    def __init__(self, timeout: float = 10.0) -> None:
        self._timeout = timeout

    async def fetch_quote_raw(
        self, symbol: str, include_close_series: bool = True
    ) -> RawQuotePayload:
        def _load() -> RawQuotePayload:
            ticker = yf.Ticker(symbol)
            fast_info = ticker.fast_info
            price = _fast_info_value(fast_info, "last_price")
            timestamps: list[int] = []
            closes: list[Optional[float]] = []
            if include_close_series:
                history = ticker.history(period="5d", interval="1d", timeout=self._timeout)
                timestamps = [int(ts.timestamp()) for ts in history.index]
                closes = [_cell(row, "Close") for _, row in history.iterrows()]

            if price is None and not closes:
                raise NotFoundError(symbol, "yfinance returned no price or history")

            return RawQuotePayload(
                symbol=symbol,
                regular_market_price=price,
                previous_close=_fast_info_value(fast_info, "previous_close"),
                regular_market_open=_fast_info_value(fast_info, "open"),
                regular_market_day_high=_fast_info_value(fast_info, "day_high"),
                regular_market_day_low=_fast_info_value(fast_info, "day_low"),
                regular_market_volume=_fast_info_value(fast_info, "last_volume"),
                currency=_fast_info_value(fast_info, "currency"),
                close_timestamps=timestamps,
                close_series=closes,
            )

        return await self._run(symbol, _load)

    async def fetch_series_raw(
        self, symbol: str, granularity: str, lookback: str
    ) -> RawSeriesPayload:
        def _load() -> RawSeriesPayload:
            history = yf.Ticker(symbol).history(
                period=lookback, interval=granularity, timeout=self._timeout
            )
            if history.empty:
                raise NotFoundError(symbol, "yfinance returned no history")

            records = {
                date.strftime("%Y-%m-%d"): RawOhlcvRecord(
                    open=_cell(row, "Open"),
                    high=_cell(row, "High"),
                    low=_cell(row, "Low"),
                    close=_cell(row, "Close"),
                    volume=_cell(row, "Volume"),
                )
                for date, row in history.iterrows()
            }
            return RawSeriesPayload(symbol=symbol, dated_records=records)

        return await self._run(symbol, _load)

    async def fetch_search_raw(self, query: str) -> list[RawSearchMatch]:
        def _load() -> list[RawSearchMatch]:
            search = yf.Search(
                query,
                max_results=_SEARCH_MAX_RESULTS,
                news_count=0,
                timeout=self._timeout,
            )
            return [
                RawSearchMatch(
                    symbol=item.get("symbol"),
                    shortname=item.get("shortname"),
                    longname=item.get("longname"),
                    quote_type=item.get("quoteType"),
                    market=item.get("market") or item.get("exchDisp"),
                    currency=item.get("currency"),
                )
                for item in search.quotes or []
                if isinstance(item, dict)
            ]

        return await self._run(query, _load)

    async def fetch_batch_quote_raw(self, symbols: list[str]) -> list[RawBatchQuote]:
        def _load() -> list[RawBatchQuote]:
            tickers = yf.Tickers(" ".join(symbols)).tickers
            return [
                RawBatchQuote(
                    symbol=symbol,
                    regular_market_price=_fast_info_value(ticker.fast_info, "last_price"),
                    regular_market_previous_close=_fast_info_value(
                        ticker.fast_info, "previous_close"
                    ),
                )
                for symbol, ticker in tickers.items()
            ]

        return await self._run(",".join(symbols), _load)

    async def _run(self, subject: str, load: Callable[[], T]) -> T:
        try:
            return await asyncio.to_thread(load)
        except MarketDataError:
            raise
        except Exception as exc:
            logger.warning("yfinance call for %s failed: %r", subject, exc)
            raise UpstreamError(f"yfinance call for {subject!r} failed: {exc}") from exc


def _fast_info_value(fast_info: Any, name: str) -> Optional[Any]:
    # FastInfo computes fields lazily and raises on symbols Yahoo cannot price.
    try:
        return getattr(fast_info, name, None)
    except (KeyError, TypeError, ValueError, IndexError):
        return None


def _cell(row: Any, column: str) -> Optional[float]:
    value = row.get(column)
    return None if value is None else float(value)
