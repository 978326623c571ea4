"""Numeric coercion helpers shared by the normalizers."""

import math
from typing import Any, Optional


def as_float(value: Any) -> Optional[float]:
    """Return *value* as a finite float, or None when missing, NaN or not numeric."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def positive_or_none(value: Any) -> Optional[float]:
    number = as_float(value)
    return number if number is not None and number > 0 else None


def float_or_zero(value: Any) -> float:
    number = as_float(value)
    return number if number is not None else 0.0


def int_or_none(value: Any) -> Optional[int]:
    number = as_float(value)
    return int(number) if number is not None else None
