"""
Domain error taxonomy for market-data resolution.
Zero external dependencies. Adapters translate library exceptions into these.
"""

from typing import Optional


class MarketDataError(Exception):
    """Base class for every error raised by the market-data core."""

    def __init__(self, message: str, code: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class NotFoundError(MarketDataError):
    """The provider has no data for the requested identifier."""

    def __init__(self, symbol: str, reason: Optional[str] = None) -> None:
        message = f"No market data available for symbol: {symbol!r}"
        if reason:
            message += f" ({reason})"
        super().__init__(message, code="NOT_FOUND")
        self.symbol = symbol
        self.reason = reason


class UpstreamError(MarketDataError):
    """Transport failure, rate limiting or a malformed provider payload."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        code = "RATE_LIMITED" if status_code == 429 else "UPSTREAM"
        super().__init__(message, code=code)
        self.status_code = status_code


class ValidationError(MarketDataError, ValueError):
    """Malformed caller input (symbol, interval or query shape)."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="VALIDATION")
