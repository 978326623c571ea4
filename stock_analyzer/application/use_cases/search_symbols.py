"""
Use-case: search the provider's symbol directory.
Depends only on Domain ports and entities plus the application normalizers.
"""

from stock_analyzer.application.normalizers.search_normalizer import normalize_matches
from stock_analyzer.application.validation import validate_query
from stock_analyzer.domain.entities.market_data import SymbolMatch
from stock_analyzer.domain.ports.market_data_port import IMarketDataProvider


class SearchSymbolsUseCase:
    def __init__(self, provider: IMarketDataProvider) -> None:
        self._provider = provider

    async def execute(self, query: str) -> list[SymbolMatch]:
        """Return symbol matches for *query* in provider order.

        Raises:
            ValidationError: if *query* is blank or too long.
            UpstreamError:   transport, rate-limit or payload failure.
        """
        return normalize_matches(await self._provider.fetch_search_raw(validate_query(query)))
