"""Shared utilities for the residuals dashboard."""

from __future__ import annotations

import math
from typing import Any, Iterable, Mapping

import pandas as pd


def ensure_dataframe(records: Iterable[Mapping] | pd.DataFrame) -> pd.DataFrame:
    """Ensure the input payload is normalised to a :class:`pandas.DataFrame`."""

    if isinstance(records, pd.DataFrame):
        return records.copy()

    return pd.DataFrame(list(records))


def parse_lenient_decimal(value: Any) -> float:
    """Convert a raw field value to ``float``, resolving anything unusable to ``0.0``.

    Missing, blank, non-numeric and non-finite inputs all map to zero; no
    exception ever escapes.
    """

    if value is None:
        return 0.0
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return number


def lenient_numeric(series: pd.Series) -> pd.Series:
    """Apply :func:`parse_lenient_decimal` to every value of ``series``."""

    return series.map(parse_lenient_decimal).astype(float)


def format_currency(value: float, currency: str = "$") -> str:
    """Return a human-readable currency string."""

    if value is None or pd.isna(value):
        value = 0.0
    sign = "-" if value < 0 else ""
    return f"{sign}{currency}{abs(value):,.2f}"


def format_currency_short(value: float, currency: str = "$") -> str:
    """Abbreviate large amounts to ``K``/``M`` for KPI tiles."""

    if value is None or pd.isna(value):
        return f"{currency}0"
    sign = "-" if value < 0 else ""
    if abs(value) >= 1_000_000:
        return f"{sign}{currency}{abs(value) / 1_000_000:.2f}M"
    if abs(value) >= 1_000:
        return f"{sign}{currency}{abs(value) / 1_000:.0f}K"
    return format_currency(value, currency)


def format_number(value: float) -> str:
    if value is None or pd.isna(value):
        return "0"
    return f"{round(value):,}"


def format_delta(value: float | None, *, percentage: bool = True) -> str:
    """Signed delta label; ``None`` renders as ``N/A``."""

    if value is None:
        return "N/A"
    prefix = "+" if value >= 0 else ""
    if percentage:
        return f"{prefix}{value:.1f}%"
    return f"{prefix}{format_number(value)}"
