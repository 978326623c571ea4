"""
Runtime configuration read from environment variables.
The composition root calls load_dotenv() first, so a local .env file works
the same as exported variables.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from stock_analyzer.domain.errors import ValidationError
from stock_analyzer.infrastructure.observability.logging_config import LOG_FORMATS

PROVIDER_NAMES = ("yahoo_http", "yfinance")

DEFAULT_UNIVERSE = ("AAPL", "MSFT", "GOOGL", "AMZN", "NVDA", "META", "TSLA", "JPM")
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
)


@dataclass(frozen=True)
class MarketDataSettings:
    yahoo_base_url: str = "https://query1.finance.yahoo.com"
    provider: str = "yahoo_http"
    batch_quote_provider: str = "yfinance"
    universe: tuple[str, ...] = DEFAULT_UNIVERSE
    max_concurrency: int = 4
    fetch_timeout_seconds: float = 10.0
    http_timeout_seconds: float = 10.0
    http_user_agent: str = DEFAULT_USER_AGENT
    log_level: str = "INFO"
    log_format: str = "json"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "MarketDataSettings":
        """Build settings from *environ* (defaults to os.environ).

        Raises:
            ValidationError: a numeric value does not parse or a provider name is unknown.
        """
        env = os.environ if environ is None else environ
        defaults = cls()

        universe = tuple(
            symbol.strip().upper()
            for symbol in env.get("MARKET_UNIVERSE", ",".join(defaults.universe)).split(",")
            if symbol.strip()
        )
        return cls(
            yahoo_base_url=env.get("YAHOO_BASE_URL", defaults.yahoo_base_url).rstrip("/"),
            provider=_choice(env, "MARKET_DATA_PROVIDER", defaults.provider, PROVIDER_NAMES),
            batch_quote_provider=_choice(
                env, "MARKET_BATCH_QUOTE_PROVIDER", defaults.batch_quote_provider, PROVIDER_NAMES
            ),
            universe=universe,
            max_concurrency=int(_number(env, "MARKET_MAX_CONCURRENCY", defaults.max_concurrency)),
            fetch_timeout_seconds=_number(
                env, "MARKET_FETCH_TIMEOUT_SECONDS", defaults.fetch_timeout_seconds
            ),
            http_timeout_seconds=_number(
                env, "HTTP_TIMEOUT_SECONDS", defaults.http_timeout_seconds
            ),
            http_user_agent=env.get("HTTP_USER_AGENT", defaults.http_user_agent),
            log_level=env.get("LOG_LEVEL", defaults.log_level).upper(),
            log_format=_choice(env, "LOG_FORMAT", defaults.log_format, LOG_FORMATS),
        )


def _number(env: Mapping[str, str], key: str, default: float) -> float:
    raw = env.get(key)
    if raw is None or not raw.strip():
        return float(default)
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValidationError(f"{key} must be a number, got {raw!r}") from exc
    if value <= 0:
        raise ValidationError(f"{key} must be positive, got {raw!r}")
    return value


def _choice(env: Mapping[str, str], key: str, default: str, allowed: tuple[str, ...]) -> str:
    name = env.get(key, default).strip().lower()
    if name not in allowed:
        raise ValidationError(f"{key} must be one of {', '.join(allowed)}, got {name!r}")
    return name
