"""
Canonical market-data entities returned by the core.
Zero external dependencies. Pure Python dataclasses only; every instance is
built fresh per call and never persisted.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional


class Interval(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class PreviousCloseSource(str, Enum):
    """Which resolution tier produced a quote's previous close."""

    REPORTED = "reported"
    CLOSE_SERIES = "close_series"
    BATCH_QUOTE = "batch_quote"
    OPEN_APPROXIMATION = "open_approximation"
    UNRESOLVED = "unresolved"


@dataclass(frozen=True)
class Quote:
    symbol: str
    price: float
    previous_close: Optional[float]
    change: float
    change_percent: float
    volume: Optional[int]
    open: Optional[float]
    high: Optional[float]
    low: Optional[float]
    currency: Optional[str] = None
    previous_close_source: PreviousCloseSource = PreviousCloseSource.UNRESOLVED
    is_approximate: bool = False


@dataclass(frozen=True)
class Candle:
    date: date
    open: float
    high: float
    low: float
    close: float
    volume: int


@dataclass(frozen=True)
class RankedQuote:
    ticker: str
    price: float
    change_amount: float
    change_percent: float
    volume: Optional[int]


@dataclass(frozen=True)
class MarketSnapshot:
    gainers: list[RankedQuote] = field(default_factory=list)
    losers: list[RankedQuote] = field(default_factory=list)


@dataclass(frozen=True)
class SymbolMatch:
    symbol: str
    name: Optional[str]
    instrument_type: Optional[str]
    market: Optional[str]
    currency: Optional[str]
