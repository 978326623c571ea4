"""
Raw, provider-shaped payloads returned by IMarketDataProvider adapters.
Every field is optional: upstream responses are routinely partial, and the
normalizers decide what a missing or non-positive value means. Nothing outside
the normalizers should read these types.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class RawQuotePayload:
    symbol: Optional[str]
    regular_market_price: Optional[float]
    previous_close: Optional[float] = None
    regular_market_open: Optional[float] = None
    regular_market_day_high: Optional[float] = None
    regular_market_day_low: Optional[float] = None
    regular_market_volume: Optional[int] = None
    regular_market_time: Optional[int] = None
    gmt_offset: int = 0
    currency: Optional[str] = None
    # Recent daily bars embedded in the chart response, oldest first.
    close_timestamps: list[int] = field(default_factory=list)
    close_series: list[Optional[float]] = field(default_factory=list)


@dataclass(frozen=True)
class RawOhlcvRecord:
    open: Optional[float] = None
    high: Optional[float] = None
    low: Optional[float] = None
    close: Optional[float] = None
    volume: Optional[float] = None


@dataclass(frozen=True)
class RawSeriesPayload:
    """Either parallel arrays keyed by ``timestamps`` or ``dated_records``."""

    symbol: Optional[str]
    timestamps: Optional[list[int]] = None
    opens: list[Optional[float]] = field(default_factory=list)
    highs: list[Optional[float]] = field(default_factory=list)
    lows: list[Optional[float]] = field(default_factory=list)
    closes: list[Optional[float]] = field(default_factory=list)
    volumes: list[Optional[float]] = field(default_factory=list)
    gmt_offset: int = 0
    # ISO calendar day (YYYY-MM-DD) -> record.
    dated_records: Optional[dict[str, RawOhlcvRecord]] = None


@dataclass(frozen=True)
class RawSearchMatch:
    symbol: Optional[str]
    shortname: Optional[str] = None
    longname: Optional[str] = None
    quote_type: Optional[str] = None
    market: Optional[str] = None
    currency: Optional[str] = None


@dataclass(frozen=True)
class RawBatchQuote:
    symbol: Optional[str]
    regular_market_price: Optional[float] = None
    regular_market_previous_close: Optional[float] = None
