"""Aggregation primitives shared by every downstream calculation."""

from __future__ import annotations

import pandas as pd

from . import utils


def sum_field(records: pd.DataFrame, field: str) -> float:
    if records.empty or field not in records:
        return 0.0
    return float(utils.lenient_numeric(records[field]).sum())


def unique_count(records: pd.DataFrame, field: str = "merchant_id") -> int:
    """Count distinct non-empty values of ``field``."""

    if records.empty or field not in records:
        return 0
    values = records[field].dropna().astype(str).str.strip()
    return int(values.loc[values != ""].nunique())


def unique_values(records: pd.DataFrame, field: str = "merchant_id") -> set[str]:
    if records.empty or field not in records:
        return set()
    values = records[field].dropna().astype(str).str.strip()
    return set(values.loc[values != ""])


def average(total: float, count: float) -> float:
    if not count:
        return 0.0
    return float(total / count)


def top_n(records: pd.DataFrame, field: str, n: int, *, ascending: bool = False) -> pd.DataFrame:
    """Stable sort on ``field`` (descending by default) truncated to ``n`` rows."""

    if records.empty:
        return records.copy()
    ranked = records.assign(_sort_key=utils.lenient_numeric(records[field]))
    ranked = ranked.sort_values("_sort_key", ascending=ascending, kind="mergesort")
    return ranked.drop(columns="_sort_key").head(n)


def group_sum(records: pd.DataFrame, key: str, value: str) -> pd.Series:
    """Per-key sums, keys in first-seen order."""

    if records.empty:
        return pd.Series(dtype=float)
    values = utils.lenient_numeric(records[value])
    return values.groupby(records[key], sort=False).sum().astype(float)


def percent_change(current: float, previous: float) -> float:
    """``(current - previous) / |previous| * 100``; zero when ``previous`` is zero."""

    if not previous:
        return 0.0
    return float((current - previous) * 100.0 / abs(previous))
