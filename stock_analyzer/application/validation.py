"""
Caller-input validation shared by the use cases.
Raises ValidationError (a ValueError) for malformed symbols, intervals and queries.
"""

import re
from typing import Union

from stock_analyzer.domain.entities.market_data import Interval
from stock_analyzer.domain.errors import ValidationError

# Equities, dotted class shares, ^indices, BTC-USD style pairs and ES=F futures.
_SYMBOL_RE = re.compile(r"^[A-Z0-9^][A-Z0-9.\-=^]{0,14}$")
_MAX_QUERY_LENGTH = 100

_INTERVAL_ALIASES = {
    "daily": Interval.DAILY,
    "1d": Interval.DAILY,
    "weekly": Interval.WEEKLY,
    "1wk": Interval.WEEKLY,
    "monthly": Interval.MONTHLY,
    "1mo": Interval.MONTHLY,
}


def normalize_symbol(symbol: str) -> str:
    """Return *symbol* stripped and upper-cased, with any leading '$' removed."""
    if not symbol or not symbol.strip():
        raise ValidationError("symbol must be a non-empty string")
    cleaned = symbol.strip().upper().lstrip("$")
    if not _SYMBOL_RE.match(cleaned):
        raise ValidationError(f"symbol has an unsupported format: {symbol!r}")
    return cleaned


def parse_interval(interval: Union[str, Interval]) -> Interval:
    if isinstance(interval, Interval):
        return interval
    resolved = _INTERVAL_ALIASES.get((interval or "").strip().lower())
    if resolved is None:
        raise ValidationError(
            f"interval must be one of daily, weekly, monthly; got {interval!r}"
        )
    return resolved


def validate_query(query: str) -> str:
    if not query or not query.strip():
        raise ValidationError("query must be a non-empty string")
    cleaned = query.strip()
    if len(cleaned) > _MAX_QUERY_LENGTH:
        raise ValidationError(f"query must be at most {_MAX_QUERY_LENGTH} characters")
    return cleaned
