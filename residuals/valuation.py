"""Multiple-based portfolio valuation.

A base multiple is picked from the average residual per merchant, then reduced
for merchant attrition (latest period only) and for revenue concentration in
the top 20% of earning merchants. The adjusted multiple never drops below
``MULTIPLE_FLOOR``; three price bands are spread ``BAND_SPREAD`` turns either
side of it.
"""

from __future__ import annotations

from typing import Literal, TypedDict, Union

import numpy as np
import pandas as pd

from .aggregate import average, percent_change, sum_field, unique_count, unique_values
from .records import FilterContext, Portfolio, TOTAL_PERIOD

# (lower bound on average residual per merchant, multiple); checked top-down.
BASE_MULTIPLE_TIERS: tuple[tuple[float, int], ...] = (
    (50_000.0, 32),
    (25_000.0, 28),
    (10_000.0, 23),
    (5_000.0, 20),
    (2_000.0, 17),
)
DEFAULT_BASE_MULTIPLE = 15

# (lower bound on monthly attrition %, penalty)
ATTRITION_PENALTY_TIERS: tuple[tuple[float, int], ...] = (
    (10.0, 5),
    (7.0, 3),
    (5.0, 2),
    (3.0, 1),
)

# (exclusive lower bound on top-20% share, penalty)
CONCENTRATION_PENALTY_TIERS: tuple[tuple[float, int], ...] = (
    (60.0, 2),
    (50.0, 1),
)

TOP_SHARE = 0.2
MULTIPLE_FLOOR = 10
BAND_SPREAD = 3


class PriceBand(TypedDict):
    multiple: int
    value: float


class ValuationUnavailable(TypedDict):
    available: Literal[False]
    active_merchants: int
    negative_merchants: int


class ValuationBreakdown(TypedDict):
    available: Literal[True]
    total_residual: float
    active_merchants: int
    negative_merchants: int
    avg_per_merchant: float
    base_multiple: int
    attrition_rate: float | None
    lost_merchants: int | None
    previous_merchants: int | None
    attrition_penalty: int
    concentration_pct: float
    concentration_penalty: int
    adjusted_multiple: int
    conservative: PriceBand
    market: PriceBand
    premium: PriceBand
    growth_rate: float | None


Valuation = Union[ValuationBreakdown, ValuationUnavailable]


def base_multiple(avg_per_merchant: float) -> int:
    for lower_bound, multiple in BASE_MULTIPLE_TIERS:
        if avg_per_merchant >= lower_bound:
            return multiple
    return DEFAULT_BASE_MULTIPLE


def attrition(current: pd.DataFrame, previous: pd.DataFrame) -> tuple[int, int, float]:
    """Return ``(lost, previous_count, rate_pct)`` for MIDs that disappeared."""

    prev_ids = unique_values(previous, "merchant_id")
    curr_ids = unique_values(current, "merchant_id")
    lost = len(prev_ids - curr_ids)
    rate = lost * 100.0 / len(prev_ids) if prev_ids else 0.0
    return lost, len(prev_ids), rate


def attrition_penalty(rate_pct: float) -> int:
    for lower_bound, penalty in ATTRITION_PENALTY_TIERS:
        if rate_pct >= lower_bound:
            return penalty
    return 0


def concentration_pct(records: pd.DataFrame, total_residual: float) -> float:
    """Share of ``total_residual`` earned by the top 20% of positive-residual records."""

    positive = records.loc[records["net_residual"] > 0, "net_residual"]
    if positive.empty or not total_residual:
        return 0.0
    ranked = positive.sort_values(ascending=False, kind="mergesort")
    # Rounded first so 15 * 0.2 gives 3, not 4.
    top_count = int(np.ceil(round(len(ranked) * TOP_SHARE, 9)))
    return float(ranked.head(top_count).sum() * 100.0 / total_residual)


def concentration_penalty(pct: float) -> int:
    for lower_bound, penalty in CONCENTRATION_PENALTY_TIERS:
        if pct > lower_bound:
            return penalty
    return 0


def adjusted_multiple(base: int, *penalties: int) -> int:
    return max(base - sum(penalties), MULTIPLE_FLOOR)


def negative_count(records: pd.DataFrame) -> int:
    if records.empty:
        return 0
    return int((records["net_residual"] < 0).sum())


def unavailable(records: pd.DataFrame) -> ValuationUnavailable:
    return {
        "available": False,
        "active_merchants": unique_count(records, "merchant_id"),
        "negative_merchants": negative_count(records),
    }


def estimate_valuation(
    current: pd.DataFrame,
    previous: pd.DataFrame | None = None,
    *,
    include_attrition: bool = False,
) -> ValuationBreakdown:
    """Value a single period of residuals.

    ``include_attrition`` should only be set for the latest period; attrition is
    measured backwards from there and never from an arbitrary month.
    """

    total = sum_field(current, "net_residual")
    active = unique_count(current, "merchant_id")
    avg = average(total, active)
    base = base_multiple(avg)

    has_previous = previous is not None and not previous.empty

    lost: int | None = None
    prev_count: int | None = None
    rate: float | None = None
    a_penalty = 0
    if include_attrition and has_previous:
        lost, prev_count, rate = attrition(current, previous)
        a_penalty = attrition_penalty(rate)

    c_pct = concentration_pct(current, total)
    c_penalty = concentration_penalty(c_pct)
    multiple = adjusted_multiple(base, a_penalty, c_penalty)

    growth = percent_change(total, sum_field(previous, "net_residual")) if has_previous else None

    return {
        "available": True,
        "total_residual": total,
        "active_merchants": active,
        "negative_merchants": negative_count(current),
        "avg_per_merchant": avg,
        "base_multiple": base,
        "attrition_rate": rate,
        "lost_merchants": lost,
        "previous_merchants": prev_count,
        "attrition_penalty": a_penalty,
        "concentration_pct": c_pct,
        "concentration_penalty": c_penalty,
        "adjusted_multiple": multiple,
        "conservative": {"multiple": multiple - BAND_SPREAD, "value": total * (multiple - BAND_SPREAD)},
        "market": {"multiple": multiple, "value": total * multiple},
        "premium": {"multiple": multiple + BAND_SPREAD, "value": total * (multiple + BAND_SPREAD)},
        "growth_rate": growth,
    }


def value_portfolio(portfolio: Portfolio, context: FilterContext) -> Valuation:
    """Valuation for the filter context; the Total view only gets diagnostic counts."""

    current = portfolio.current_records(context)
    if context.period == TOTAL_PERIOD:
        return unavailable(current)
    return estimate_valuation(
        current,
        portfolio.previous_records(context),
        include_attrition=portfolio.is_latest(context.period),
    )
