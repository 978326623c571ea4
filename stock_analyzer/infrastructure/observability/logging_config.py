"""
Process-wide logging setup for the market-data service.

Modules log through ``logging.getLogger(__name__)`` and may attach context with
``extra={"symbol": ..., "tier": ...}``; the formatter lifts those keys into
the emitted record. Only the composition root calls configure_logging().
"""

import json
import logging
import sys
import time
from typing import Any

LOG_FORMATS = ("json", "text")

_HANDLER_NAME = "stock_analyzer"
_NOISY_LOGGERS = ("httpx", "httpcore", "yfinance", "peewee")
# Attributes every LogRecord carries; anything else arrived through ``extra``.
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}


def record_context(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in vars(record).items()
        if key not in _RECORD_ATTRS and not key.startswith("_")
    }


class MarketDataJsonFormatter(logging.Formatter):
    """One JSON object per line: severity, origin, event text and context fields."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "time": time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(record.created))
            + f".{int(record.msecs):03d}Z",
            "severity": record.levelname,
            "logger": record.name,
            "location": f"{record.module}:{record.lineno}",
            "event": record.getMessage(),
        }
        entry.update(record_context(record))
        if record.exc_info:
            entry["error"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class MarketDataTextFormatter(logging.Formatter):
    """Human-readable single line with context appended as key=value pairs."""

    def __init__(self) -> None:
        super().__init__("%(asctime)s %(levelname)-7s %(name)s: %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = record_context(record)
        if context:
            line += " " + " ".join(f"{key}={value}" for key, value in sorted(context.items()))
        return line


def configure_logging(level: str = "INFO", fmt: str = "json") -> logging.Handler:
    """Install (or replace) the service's stderr handler on the root logger.

    Handlers owned by other code (pytest's capture, uvicorn's) are left in place.
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(
        MarketDataTextFormatter() if fmt == "text" else MarketDataJsonFormatter()
    )

    root = logging.getLogger()
    for existing in list(root.handlers):
        if existing.get_name() == _HANDLER_NAME:
            root.removeHandler(existing)
    root.addHandler(handler)
    level_value = logging.getLevelName(level.upper())
    root.setLevel(level_value if isinstance(level_value, int) else logging.INFO)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return handler
