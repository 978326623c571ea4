"""In-memory IMarketDataProvider used across the test suite."""

import asyncio
from typing import Optional, Union

from stock_analyzer.domain.entities.provider_payloads import (
    RawBatchQuote,
    RawQuotePayload,
    RawSearchMatch,
    RawSeriesPayload,
)
from stock_analyzer.domain.errors import NotFoundError
from stock_analyzer.domain.ports.market_data_port import IMarketDataProvider


class FakeMarketDataProvider(IMarketDataProvider):
    def __init__(
        self,
        quotes: Optional[dict[str, Union[RawQuotePayload, Exception]]] = None,
        series: Optional[Union[RawSeriesPayload, Exception]] = None,
        search: Optional[Union[list[RawSearchMatch], Exception]] = None,
        batch: Optional[Union[list[RawBatchQuote], Exception]] = None,
        delays: Optional[dict[str, float]] = None,
    ) -> None:
        self.quotes = quotes or {}
        self.series = series
        self.search = search or []
        self.batch = batch or []
        self.delays = delays or {}
        self.calls: list[tuple] = []
        self.in_flight = 0
        self.peak_in_flight = 0

    async def fetch_quote_raw(
        self, symbol: str, include_close_series: bool = True
    ) -> RawQuotePayload:
        self.calls.append(("quote", symbol) if include_close_series else ("quote-meta", symbol))
        self.in_flight += 1
        self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(symbol, 0))
            outcome = self.quotes.get(symbol)
        finally:
            self.in_flight -= 1
        if outcome is None:
            raise NotFoundError(symbol)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    async def fetch_series_raw(
        self, symbol: str, granularity: str, lookback: str
    ) -> RawSeriesPayload:
        self.calls.append(("series", symbol, granularity, lookback))
        if self.series is None:
            raise NotFoundError(symbol)
        if isinstance(self.series, Exception):
            raise self.series
        return self.series

    async def fetch_search_raw(self, query: str) -> list[RawSearchMatch]:
        self.calls.append(("search", query))
        if isinstance(self.search, Exception):
            raise self.search
        return self.search

    async def fetch_batch_quote_raw(self, symbols: list[str]) -> list[RawBatchQuote]:
        self.calls.append(("batch", tuple(symbols)))
        if isinstance(self.batch, Exception):
            raise self.batch
        return self.batch


def raw_quote(symbol: str, price: float, previous_close: Optional[float] = None, **kwargs) -> RawQuotePayload:
    return RawQuotePayload(
        symbol=symbol,
        regular_market_price=price,
        previous_close=previous_close,
        **kwargs,
    )
