"""
Use-case: resolve historical OHLCV candles for a given symbol.
Depends only on Domain ports and entities plus the application normalizers.
"""

from typing import Optional, Union

from stock_analyzer.application.normalizers.series_normalizer import (
    SeriesNormalizer,
    provider_window,
)
from stock_analyzer.application.validation import normalize_symbol, parse_interval
from stock_analyzer.domain.entities.market_data import Candle, Interval
from stock_analyzer.domain.ports.market_data_port import IMarketDataProvider


class ResolveHistoryUseCase:
    def __init__(
        self,
        provider: IMarketDataProvider,
        normalizer: Optional[SeriesNormalizer] = None,
    ) -> None:
        self._provider = provider
        self._normalizer = normalizer or SeriesNormalizer()

    async def execute(
        self,
        symbol: str,
        interval: Union[str, Interval] = Interval.DAILY,
    ) -> list[Candle]:
        """Fetch candles for *symbol*, oldest first.

        Args:
            symbol:   Ticker symbol (case-insensitive).
            interval: daily (1-day bars over 1 month), weekly (1-week bars over
                      3 months) or monthly (1-month bars over 1 year).

        Raises:
            ValidationError: if *symbol* or *interval* is malformed.
            NotFoundError:   the provider has no series for *symbol*.
            UpstreamError:   transport, rate-limit or payload failure.
        """
        normalized = normalize_symbol(symbol)
        granularity, lookback = provider_window(parse_interval(interval))
        raw = await self._provider.fetch_series_raw(normalized, granularity, lookback)
        return self._normalizer.normalize(raw)
