"""
Use-case: resolve the current quote for a given symbol.
Depends only on Domain ports and entities plus the application normalizers.
"""

from stock_analyzer.application.normalizers.quote_normalizer import QuoteNormalizer
from stock_analyzer.application.validation import normalize_symbol
from stock_analyzer.domain.entities.market_data import Quote
from stock_analyzer.domain.ports.market_data_port import IMarketDataProvider


class ResolveQuoteUseCase:
    def __init__(
        self,
        provider: IMarketDataProvider,
        normalizer: QuoteNormalizer,
    ) -> None:
        """
        Args:
            provider:   Primary IMarketDataProvider (chart/meta source).
            normalizer: QuoteNormalizer, normally built with the full fallback chain.
        """
        self._provider = provider
        self._normalizer = normalizer

    async def execute(self, symbol: str) -> Quote:
        """Fetch and normalize the quote for *symbol* (uppercased).

        Raises:
            ValidationError: if *symbol* is blank or malformed.
            NotFoundError:   the provider has no data for *symbol*.
            UpstreamError:   transport, rate-limit or payload failure.
        """
        raw = await self._provider.fetch_quote_raw(normalize_symbol(symbol))
        return await self._normalizer.normalize(raw)
