"""
Historical series normalization: RawSeriesPayload -> ordered list[Candle].

Accepts both payload shapes adapters produce: parallel arrays indexed by epoch
timestamps, or records keyed by ISO calendar day. Rows without a positive
close are dropped; other missing OHLCV fields default to 0.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Optional

from stock_analyzer.application.normalizers.numbers import float_or_zero, positive_or_none
from stock_analyzer.domain.entities.market_data import Candle, Interval
from stock_analyzer.domain.entities.provider_payloads import RawOhlcvRecord, RawSeriesPayload
from stock_analyzer.domain.errors import NotFoundError, UpstreamError

# Logical interval -> (provider bar granularity, lookback window).
INTERVAL_TABLE: dict[Interval, tuple[str, str]] = {
    Interval.DAILY: ("1d", "1mo"),
    Interval.WEEKLY: ("1wk", "3mo"),
    Interval.MONTHLY: ("1mo", "1y"),
}


def provider_window(interval: Interval) -> tuple[str, str]:
    return INTERVAL_TABLE[interval]


def exchange_day(epoch_seconds: int, gmt_offset: int = 0) -> date:
    """Calendar day of *epoch_seconds* in the exchange's local time."""
    moment = datetime.fromtimestamp(epoch_seconds, tz=timezone.utc)
    return (moment + timedelta(seconds=gmt_offset)).date()


class SeriesNormalizer:
    def normalize(self, raw: RawSeriesPayload) -> list[Candle]:
        """Return candles ordered oldest first, one per calendar day.

        Raises:
            NotFoundError: the payload carries no time axis at all.
            UpstreamError: a date-keyed record has an unparseable key.
        """
        if raw.timestamps is not None:
            candles = self._from_parallel_arrays(raw)
        elif raw.dated_records is not None:
            candles = self._from_dated_records(raw)
        else:
            raise NotFoundError(raw.symbol or "<unknown>", "payload has no time axis")

        # Upstream occasionally repeats the live session; the later row wins.
        by_day: dict[date, Candle] = {}
        for candle in candles:
            by_day[candle.date] = candle
        return [by_day[day] for day in sorted(by_day)]

    def _from_parallel_arrays(self, raw: RawSeriesPayload) -> list[Candle]:
        candles = []
        for index, ts in enumerate(raw.timestamps or []):
            candle = _build_candle(
                exchange_day(int(ts), raw.gmt_offset),
                RawOhlcvRecord(
                    open=_at(raw.opens, index),
                    high=_at(raw.highs, index),
                    low=_at(raw.lows, index),
                    close=_at(raw.closes, index),
                    volume=_at(raw.volumes, index),
                ),
            )
            if candle is not None:
                candles.append(candle)
        return candles

    def _from_dated_records(self, raw: RawSeriesPayload) -> list[Candle]:
        candles = []
        for key, record in (raw.dated_records or {}).items():
            try:
                day = date.fromisoformat(str(key)[:10])
            except ValueError as exc:
                raise UpstreamError(f"Malformed series date {key!r} for {raw.symbol!r}") from exc
            candle = _build_candle(day, record)
            if candle is not None:
                candles.append(candle)
        return candles


def _at(values: list[Optional[float]], index: int) -> Optional[float]:
    return values[index] if index < len(values) else None


def _build_candle(day: date, record: RawOhlcvRecord) -> Optional[Candle]:
    close = positive_or_none(record.close)
    if close is None:
        return None
    return Candle(
        date=day,
        open=float_or_zero(record.open),
        high=float_or_zero(record.high),
        low=float_or_zero(record.low),
        close=close,
        volume=int(float_or_zero(record.volume)),
    )
