"""
Quote normalization: RawQuotePayload -> Quote.

The previous close is resolved by an ordered list of resolver strategies.
Each resolver returns a candidate value (or None); the first candidate that is
a positive number wins and later resolvers are never called. The default chain
is:

    1. ReportedPreviousClose      provider's own previous-close field
    2. CloseSeriesPreviousClose   prior session close from the embedded daily series
    3. BatchQuotePreviousClose    secondary batch-quote lookup (one extra round-trip)
    4. OpenPriceApproximation     the day's open, flagged as approximate

If every resolver comes back empty the previous close stays None and both
change fields are 0.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional, Sequence

from stock_analyzer.application.normalizers.numbers import (
    as_float,
    int_or_none,
    positive_or_none,
)
from stock_analyzer.application.normalizers.series_normalizer import exchange_day
from stock_analyzer.domain.entities.market_data import PreviousCloseSource, Quote
from stock_analyzer.domain.entities.provider_payloads import RawQuotePayload
from stock_analyzer.domain.errors import MarketDataError, NotFoundError
from stock_analyzer.domain.ports.market_data_port import IMarketDataProvider

logger = logging.getLogger(__name__)

# Tolerance when matching the last series close against the live price.
_PRICE_MATCH_TOLERANCE = 1e-6


class PreviousCloseResolver(ABC):
    source: PreviousCloseSource
    is_approximate: bool = False

    @abstractmethod
    async def resolve(self, raw: RawQuotePayload) -> Optional[float]: ...


class ReportedPreviousClose(PreviousCloseResolver):
    source = PreviousCloseSource.REPORTED

    async def resolve(self, raw: RawQuotePayload) -> Optional[float]:
        return raw.previous_close


class CloseSeriesPreviousClose(PreviousCloseResolver):
    """Prior-session close taken from the chart's embedded daily closes.

    Needs at least two usable points. When the newest bar belongs to the
    session the live price comes from, the bar before it is the previous
    close; otherwise the newest bar already is.
    """

    source = PreviousCloseSource.CLOSE_SERIES

    async def resolve(self, raw: RawQuotePayload) -> Optional[float]:
        points = _close_points(raw)
        if len(points) < 2:
            return None
        last_ts, last_close = points[-1]
        if _is_current_session(raw, last_ts, last_close):
            return points[-2][1]
        return last_close


class BatchQuotePreviousClose(PreviousCloseResolver):
    source = PreviousCloseSource.BATCH_QUOTE

    def __init__(self, provider: IMarketDataProvider) -> None:
        self._provider = provider

    async def resolve(self, raw: RawQuotePayload) -> Optional[float]:
        symbol = (raw.symbol or "").upper()
        try:
            matches = await self._provider.fetch_batch_quote_raw([symbol])
        except MarketDataError as exc:
            logger.warning(
                "Batch quote fallback failed for %s: %s", symbol, exc,
                extra={"symbol": symbol, "error_code": exc.code},
            )
            return None
        for match in matches:
            if (match.symbol or "").upper() == symbol:
                return match.regular_market_previous_close
        return None


class OpenPriceApproximation(PreviousCloseResolver):
    source = PreviousCloseSource.OPEN_APPROXIMATION
    is_approximate = True

    async def resolve(self, raw: RawQuotePayload) -> Optional[float]:
        return raw.regular_market_open


def compute_change(price: float, previous_close: Optional[float]) -> tuple[float, float]:
    """Return ``(change, change_percent)`` rounded to 2 decimals; zeros when unresolved."""
    if previous_close is None or previous_close <= 0:
        return 0.0, 0.0
    change = price - previous_close
    return round(change, 2), round(change / previous_close * 100, 2)


class QuoteNormalizer:
    def __init__(self, resolvers: Sequence[PreviousCloseResolver]) -> None:
        self._resolvers = list(resolvers)

    @classmethod
    def with_full_chain(cls, secondary_provider: IMarketDataProvider) -> "QuoteNormalizer":
        return cls(
            [
                ReportedPreviousClose(),
                CloseSeriesPreviousClose(),
                BatchQuotePreviousClose(secondary_provider),
                OpenPriceApproximation(),
            ]
        )

    @classmethod
    def reported_only(cls) -> "QuoteNormalizer":
        """Tier-1-only chain used where throughput matters more than completeness."""
        return cls([ReportedPreviousClose()])

    async def normalize(self, raw: RawQuotePayload) -> Quote:
        """Map *raw* into a Quote.

        Raises:
            NotFoundError: the payload has no symbol or no positive price.
        """
        price = positive_or_none(raw.regular_market_price)
        if not raw.symbol or price is None:
            raise NotFoundError(raw.symbol or "<unknown>", "payload has no symbol/price")

        previous_close, resolver = await self._resolve_previous_close(raw)
        change, change_percent = compute_change(price, previous_close)

        return Quote(
            symbol=raw.symbol.upper(),
            price=price,
            previous_close=previous_close,
            change=change,
            change_percent=change_percent,
            volume=int_or_none(raw.regular_market_volume),
            open=as_float(raw.regular_market_open),
            high=as_float(raw.regular_market_day_high),
            low=as_float(raw.regular_market_day_low),
            currency=raw.currency,
            previous_close_source=(
                resolver.source if resolver else PreviousCloseSource.UNRESOLVED
            ),
            is_approximate=bool(resolver and resolver.is_approximate),
        )

    async def _resolve_previous_close(
        self, raw: RawQuotePayload
    ) -> tuple[Optional[float], Optional[PreviousCloseResolver]]:
        for resolver in self._resolvers:
            value = positive_or_none(await resolver.resolve(raw))
            if value is None:
                continue
            if resolver.is_approximate:
                logger.info(
                    "Previous close for %s approximated by %s=%s",
                    raw.symbol, resolver.source.value, value,
                    extra={"symbol": raw.symbol, "tier": resolver.source.value},
                )
            else:
                logger.debug(
                    "Previous close for %s resolved by %s=%s",
                    raw.symbol, resolver.source.value, value,
                    extra={"symbol": raw.symbol, "tier": resolver.source.value},
                )
            return value, resolver
        logger.debug("Previous close for %s unresolved", raw.symbol)
        return None, None


def _close_points(raw: RawQuotePayload) -> list[tuple[Optional[int], float]]:
    aligned = len(raw.close_timestamps) == len(raw.close_series)
    points = []
    for index, close in enumerate(raw.close_series):
        value = positive_or_none(close)
        if value is None:
            continue
        ts = raw.close_timestamps[index] if aligned else None
        points.append((ts, value))
    return points


def _is_current_session(raw: RawQuotePayload, last_ts: Optional[int], last_close: float) -> bool:
    if last_ts is not None and raw.regular_market_time:
        return exchange_day(last_ts, raw.gmt_offset) == exchange_day(
            raw.regular_market_time, raw.gmt_offset
        )
    price = as_float(raw.regular_market_price)
    return price is not None and abs(last_close - price) <= _PRICE_MATCH_TOLERANCE
