"""
Infrastructure adapter: Yahoo Finance HTTP API -> IMarketDataProvider.
All Yahoo endpoint paths, query parameters and JSON field names are confined
here; the rest of the codebase only sees the Raw* payload types.

Endpoints:
    /v8/finance/chart/{symbol}   current-price meta plus OHLCV arrays
    /v1/finance/search           symbol directory search
    /v7/finance/quote            batch quotes (previous-close fallback only)
"""

import logging
from typing import Any, Optional

import httpx

from stock_analyzer.domain.entities.provider_payloads import (
    RawBatchQuote,
    RawQuotePayload,
    RawSearchMatch,
    RawSeriesPayload,
)
from stock_analyzer.domain.errors import NotFoundError, UpstreamError
from stock_analyzer.domain.ports.market_data_port import IMarketDataProvider

logger = logging.getLogger(__name__)

# Five daily bars guarantee the prior session's close is in the payload.
_QUOTE_CHART_PARAMS = {"interval": "1d", "range": "5d"}
# A one-day chart is the only range whose meta carries previousClose.
_META_ONLY_CHART_PARAMS = {"interval": "1d", "range": "1d"}
_SEARCH_QUOTES_COUNT = 10


class YahooFinanceHttpProvider(IMarketDataProvider):
    """Fetches raw market data from Yahoo Finance over a shared httpx.AsyncClient."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str = "https://query1.finance.yahoo.com",
    ) -> None:
        self._client = client
        self._base_url = base_url.rstrip("/")

    async def fetch_quote_raw(
        self, symbol: str, include_close_series: bool = True
    ) -> RawQuotePayload:
        params = _QUOTE_CHART_PARAMS if include_close_series else _META_ONLY_CHART_PARAMS
        result = await self._chart(symbol, params)
        meta = result["meta"]
        quote = _first_quote_block(result)
        return RawQuotePayload(
            symbol=meta.get("symbol") or symbol,
            regular_market_price=meta.get("regularMarketPrice"),
            previous_close=meta.get("previousClose") or meta.get("regularMarketPreviousClose"),
            regular_market_open=meta.get("regularMarketOpen"),
            regular_market_day_high=meta.get("regularMarketDayHigh"),
            regular_market_day_low=meta.get("regularMarketDayLow"),
            regular_market_volume=meta.get("regularMarketVolume"),
            regular_market_time=meta.get("regularMarketTime"),
            gmt_offset=int(meta.get("gmtoffset") or 0),
            currency=meta.get("currency"),
            close_timestamps=list(result.get("timestamp") or []),
            close_series=list(quote.get("close") or []),
        )

    async def fetch_series_raw(
        self, symbol: str, granularity: str, lookback: str
    ) -> RawSeriesPayload:
        result = await self._chart(symbol, {"interval": granularity, "range": lookback})
        meta = result["meta"]
        quote = _first_quote_block(result)
        timestamps = result.get("timestamp")
        return RawSeriesPayload(
            symbol=meta.get("symbol") or symbol,
            timestamps=list(timestamps) if timestamps is not None else None,
            opens=list(quote.get("open") or []),
            highs=list(quote.get("high") or []),
            lows=list(quote.get("low") or []),
            closes=list(quote.get("close") or []),
            volumes=list(quote.get("volume") or []),
            gmt_offset=int(meta.get("gmtoffset") or 0),
        )

    async def fetch_search_raw(self, query: str) -> list[RawSearchMatch]:
        payload = await self._get_json(
            "/v1/finance/search",
            {"q": query, "quotesCount": _SEARCH_QUOTES_COUNT, "newsCount": 0},
        )
        quotes = payload.get("quotes") if isinstance(payload, dict) else None
        if quotes is None:
            return []
        if not isinstance(quotes, list):
            raise UpstreamError("Malformed Yahoo search payload: 'quotes' is not a list")
        return [
            RawSearchMatch(
                symbol=item.get("symbol"),
                shortname=item.get("shortname"),
                longname=item.get("longname"),
                quote_type=item.get("quoteType"),
                market=item.get("market") or item.get("exchDisp"),
                currency=item.get("currency"),
            )
            for item in quotes
            if isinstance(item, dict)
        ]

    async def fetch_batch_quote_raw(self, symbols: list[str]) -> list[RawBatchQuote]:
        payload = await self._get_json("/v7/finance/quote", {"symbols": ",".join(symbols)})
        response = payload.get("quoteResponse") if isinstance(payload, dict) else None
        if not isinstance(response, dict):
            raise UpstreamError("Malformed Yahoo quote payload: missing 'quoteResponse'")
        return [
            RawBatchQuote(
                symbol=item.get("symbol"),
                regular_market_price=item.get("regularMarketPrice"),
                regular_market_previous_close=item.get("regularMarketPreviousClose"),
            )
            for item in response.get("result") or []
            if isinstance(item, dict)
        ]

    async def _chart(self, symbol: str, params: dict[str, Any]) -> dict[str, Any]:
        payload = await self._get_json(f"/v8/finance/chart/{symbol}", params, symbol=symbol)
        chart = payload.get("chart") if isinstance(payload, dict) else None
        if not isinstance(chart, dict):
            raise UpstreamError(f"Malformed Yahoo chart payload for {symbol!r}")
        results = chart.get("result") or []
        result = results[0] if results else None
        if not isinstance(result, dict) or not isinstance(result.get("meta"), dict):
            raise NotFoundError(symbol, "provider returned no chart meta")
        return result

    async def _get_json(
        self,
        path: str,
        params: dict[str, Any],
        symbol: Optional[str] = None,
    ) -> Any:
        """GET *path* once and decode JSON.

        A 404 is reported as NotFoundError when the call is keyed by *symbol*;
        every other failure becomes UpstreamError.
        """
        url = f"{self._base_url}{path}"
        try:
            response = await self._client.get(url, params=params)
        except httpx.HTTPError as exc:
            raise UpstreamError(f"Yahoo request to {path} failed: {exc!r}") from exc

        status = response.status_code
        if status == 404 and symbol is not None:
            raise NotFoundError(symbol, "provider responded 404")
        if status == 429:
            logger.warning("Yahoo rate limit hit on %s", path)
            raise UpstreamError(f"Yahoo rate limited request to {path}", status_code=429)
        if status >= 400:
            raise UpstreamError(f"Yahoo responded HTTP {status} for {path}", status_code=status)

        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamError(f"Yahoo returned non-JSON body for {path}") from exc


def _first_quote_block(result: dict[str, Any]) -> dict[str, Any]:
    indicators = result.get("indicators")
    if not isinstance(indicators, dict):
        return {}
    blocks = indicators.get("quote") or []
    return blocks[0] if blocks and isinstance(blocks[0], dict) else {}
