"""
Port (interface) for upstream market-data providers.
Infrastructure adapters (YahooFinanceHttpProvider, YFinanceMarketDataProvider)
must implement this interface. Each call is a single attempt; adapters never
retry.
"""

from abc import ABC, abstractmethod

from stock_analyzer.domain.entities.provider_payloads import (
    RawBatchQuote,
    RawQuotePayload,
    RawSearchMatch,
    RawSeriesPayload,
)


class IMarketDataProvider(ABC):
    @abstractmethod
    async def fetch_quote_raw(
        self, symbol: str, include_close_series: bool = True
    ) -> RawQuotePayload:
        """Fetch current-price metadata plus a short daily close series.

        With *include_close_series* False the adapter may skip the series and
        must instead favour a payload whose previous-close field is populated.

        Raises:
            NotFoundError: the provider has no chart/meta for *symbol*.
            UpstreamError: transport, rate-limit or malformed-payload failure.
        """
        ...

    @abstractmethod
    async def fetch_series_raw(
        self, symbol: str, granularity: str, lookback: str
    ) -> RawSeriesPayload:
        """Fetch OHLCV bars of *granularity* (e.g. '1d') covering *lookback* (e.g. '1mo')."""
        ...

    @abstractmethod
    async def fetch_search_raw(self, query: str) -> list[RawSearchMatch]: ...

    @abstractmethod
    async def fetch_batch_quote_raw(self, symbols: list[str]) -> list[RawBatchQuote]:
        """Secondary quote lookup; only the previous-close fallback chain uses it."""
        ...
