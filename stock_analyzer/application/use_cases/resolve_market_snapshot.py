"""
Use-case: build the ranked gainers/losers snapshot over a fixed symbol universe.

One quote fetch per symbol is dispatched concurrently (bounded by a semaphore,
each call under its own timeout). Every outcome is collected before ranking;
a failed symbol is logged and left out, never raised. Each fetch uses the
Tier-1-only quote normalizer, trading completeness for throughput, so
the close series is not requested.
"""

import asyncio
import logging
from typing import Iterable, Optional, Sequence

from stock_analyzer.application.normalizers.quote_normalizer import QuoteNormalizer
from stock_analyzer.application.validation import normalize_symbol
from stock_analyzer.domain.entities.market_data import MarketSnapshot, RankedQuote
from stock_analyzer.domain.ports.market_data_port import IMarketDataProvider

logger = logging.getLogger(__name__)

SNAPSHOT_LIST_LIMIT = 5


def rank_snapshot(
    quotes: Sequence[RankedQuote], limit: int = SNAPSHOT_LIST_LIMIT
) -> MarketSnapshot:
    """Partition *quotes* (in fetch order) into gainers and losers.

    Quotes are sorted by change_percent descending; the sort is stable so equal
    values keep fetch order. Losers are read from the ascending end of that
    same ordering. Zero-change quotes appear in neither list.
    """
    ordered = sorted(quotes, key=lambda q: q.change_percent, reverse=True)
    gainers = [q for q in ordered if q.change_percent > 0][:limit]
    losers = [q for q in reversed(ordered) if q.change_percent < 0][:limit]
    return MarketSnapshot(gainers=gainers, losers=losers)


class ResolveMarketSnapshotUseCase:
    def __init__(
        self,
        provider: IMarketDataProvider,
        universe: Iterable[str],
        max_concurrency: int = 4,
        fetch_timeout: Optional[float] = 10.0,
        normalizer: Optional[QuoteNormalizer] = None,
    ) -> None:
        """
        Args:
            provider:        IMarketDataProvider used for every per-symbol fetch.
            universe:        Symbols to rank, in fetch order (from configuration).
            max_concurrency: Upper bound on in-flight upstream calls.
            fetch_timeout:   Seconds allowed per upstream call; None disables it.
            normalizer:      Defaults to the Tier-1-only QuoteNormalizer.
        """
        self._provider = provider
        self._universe = [normalize_symbol(symbol) for symbol in universe]
        self._max_concurrency = max(1, max_concurrency)
        self._fetch_timeout = fetch_timeout
        self._normalizer = normalizer or QuoteNormalizer.reported_only()

    async def execute(self) -> MarketSnapshot:
        """Return the snapshot; an empty one when nothing could be fetched."""
        semaphore = asyncio.Semaphore(self._max_concurrency)
        outcomes = await asyncio.gather(
            *(self._fetch_ranked(symbol, semaphore) for symbol in self._universe),
            return_exceptions=True,
        )

        ranked: list[RankedQuote] = []
        for symbol, outcome in zip(self._universe, outcomes):
            if isinstance(outcome, BaseException):
                logger.warning(
                    "Excluding %s from market snapshot: %s: %s",
                    symbol, type(outcome).__name__, outcome,
                    extra={"symbol": symbol},
                )
                continue
            ranked.append(outcome)

        logger.info(
            "Market snapshot fetched %d/%d symbols", len(ranked), len(self._universe)
        )
        return rank_snapshot(ranked)

    async def _fetch_ranked(self, symbol: str, semaphore: asyncio.Semaphore) -> RankedQuote:
        async with semaphore:
            raw = await asyncio.wait_for(
                self._provider.fetch_quote_raw(symbol, include_close_series=False),
                timeout=self._fetch_timeout,
            )
        quote = await self._normalizer.normalize(raw)
        return RankedQuote(
            ticker=quote.symbol,
            price=quote.price,
            change_amount=quote.change,
            change_percent=quote.change_percent,
            volume=quote.volume,
        )
