import pytest

from fakes import FakeMarketDataProvider, raw_quote
from stock_analyzer.application.normalizers.quote_normalizer import QuoteNormalizer
from stock_analyzer.application.use_cases.resolve_history import ResolveHistoryUseCase
from stock_analyzer.application.use_cases.resolve_quote import ResolveQuoteUseCase
from stock_analyzer.application.use_cases.search_symbols import SearchSymbolsUseCase
from stock_analyzer.application.validation import normalize_symbol, parse_interval
from stock_analyzer.domain.entities.market_data import Interval, SymbolMatch
from stock_analyzer.domain.entities.provider_payloads import RawSearchMatch, RawSeriesPayload
from stock_analyzer.domain.errors import NotFoundError, UpstreamError, ValidationError


def _quote_use_case(provider: FakeMarketDataProvider) -> ResolveQuoteUseCase:
    return ResolveQuoteUseCase(provider, QuoteNormalizer.with_full_chain(provider))


@pytest.mark.asyncio
async def test_resolve_quote_normalizes_symbol() -> None:
    provider = FakeMarketDataProvider(quotes={"BRK.B": raw_quote("BRK.B", 410.0, 400.0)})

    quote = await _quote_use_case(provider).execute("  brk.b ")

    assert provider.calls == [("quote", "BRK.B")]
    assert quote.change == 10.0


@pytest.mark.asyncio
@pytest.mark.parametrize("symbol", ["", "   ", "AA PL", "AAPL;DROP", "X" * 20])
async def test_resolve_quote_rejects_malformed_symbols(symbol: str) -> None:
    provider = FakeMarketDataProvider()

    with pytest.raises(ValidationError):
        await _quote_use_case(provider).execute(symbol)
    assert provider.calls == []


@pytest.mark.asyncio
async def test_resolve_quote_propagates_provider_errors() -> None:
    provider = FakeMarketDataProvider(quotes={"AAPL": UpstreamError("rate limited", status_code=429)})

    with pytest.raises(NotFoundError):
        await _quote_use_case(provider).execute("ZZZZ")
    with pytest.raises(UpstreamError) as excinfo:
        await _quote_use_case(provider).execute("AAPL")
    assert excinfo.value.code == "RATE_LIMITED"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "interval, window",
    [
        ("daily", ("1d", "1mo")),
        ("WEEKLY", ("1wk", "3mo")),
        ("1mo", ("1mo", "1y")),
        (Interval.MONTHLY, ("1mo", "1y")),
    ],
)
async def test_resolve_history_maps_interval(interval, window) -> None:
    provider = FakeMarketDataProvider(
        series=RawSeriesPayload(symbol="AAPL", timestamps=[1717425000], closes=[190.0])
    )

    candles = await ResolveHistoryUseCase(provider).execute("aapl", interval)

    assert provider.calls == [("series", "AAPL", *window)]
    assert len(candles) == 1


@pytest.mark.asyncio
async def test_resolve_history_rejects_unknown_interval() -> None:
    provider = FakeMarketDataProvider()

    with pytest.raises(ValidationError):
        await ResolveHistoryUseCase(provider).execute("AAPL", "hourly")
    assert provider.calls == []


@pytest.mark.asyncio
async def test_resolve_history_propagates_not_found() -> None:
    with pytest.raises(NotFoundError):
        await ResolveHistoryUseCase(FakeMarketDataProvider()).execute("AAPL")


@pytest.mark.asyncio
async def test_search_maps_matches() -> None:
    provider = FakeMarketDataProvider(
        search=[
            RawSearchMatch(
                symbol="AAPL",
                shortname="Apple Inc.",
                quote_type="EQUITY",
                market="us_market",
                currency="USD",
            ),
            RawSearchMatch(symbol="APLE", longname="Apple Hospitality REIT, Inc."),
            RawSearchMatch(symbol=None, shortname="news item"),
        ]
    )

    matches = await SearchSymbolsUseCase(provider).execute(" apple ")

    assert provider.calls == [("search", "apple")]
    assert matches == [
        SymbolMatch("AAPL", "Apple Inc.", "EQUITY", "us_market", "USD"),
        SymbolMatch("APLE", "Apple Hospitality REIT, Inc.", None, None, None),
    ]


@pytest.mark.asyncio
async def test_search_validates_query_and_propagates_upstream() -> None:
    with pytest.raises(ValidationError):
        await SearchSymbolsUseCase(FakeMarketDataProvider()).execute("  ")
    with pytest.raises(ValidationError):
        await SearchSymbolsUseCase(FakeMarketDataProvider()).execute("a" * 101)
    with pytest.raises(UpstreamError):
        await SearchSymbolsUseCase(FakeMarketDataProvider(search=UpstreamError("down"))).execute("apple")


@pytest.mark.parametrize(
    "raw, expected",
    [("$tsla", "TSLA"), ("^gspc", "^GSPC"), ("btc-usd", "BTC-USD"), ("es=f", "ES=F")],
)
def test_normalize_symbol_accepts_special_formats(raw: str, expected: str) -> None:
    assert normalize_symbol(raw) == expected


def test_validation_error_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        parse_interval("yearly")
