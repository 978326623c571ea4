"""Search normalization: RawSearchMatch -> SymbolMatch (field renaming only)."""

from typing import Iterable

from stock_analyzer.domain.entities.market_data import SymbolMatch
from stock_analyzer.domain.entities.provider_payloads import RawSearchMatch


def normalize_matches(raw_matches: Iterable[RawSearchMatch]) -> list[SymbolMatch]:
    # Entries without a symbol (news/lookup hits) cannot be addressed later.
    return [
        SymbolMatch(
            symbol=raw.symbol,
            name=raw.shortname or raw.longname,
            instrument_type=raw.quote_type,
            market=raw.market,
            currency=raw.currency,
        )
        for raw in raw_matches
        if raw.symbol
    ]
