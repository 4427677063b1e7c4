"""Scalar coercion rules shared by the profiler, the query engine and chart preparation."""
import math
import numbers
from typing import Any


def is_missing(value: Any) -> bool:
    """None, empty string and NaN all count as an absent cell."""
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, float):
        return math.isnan(value)
    return False


def to_number(value: Any) -> float:
    """
    Coerce a cell to float, returning NaN when it is not numeric.

    Booleans map to 1/0, numeric strings are parsed after trimming,
    and missing cells are NaN (never 0).
    """
    if value is None:
        return math.nan
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, numbers.Number):
        try:
            return float(value)
        except (TypeError, ValueError):
            return math.nan
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return math.nan
        try:
            return float(text)
        except ValueError:
            return math.nan
    return math.nan


def is_numeric(value: Any) -> bool:
    return not math.isnan(to_number(value))


def stringify(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
