"""Headline KPIs and period-over-period deltas."""

from __future__ import annotations

from typing import TypedDict

import pandas as pd

from .aggregate import average, percent_change, sum_field, unique_count


class KpiValues(TypedDict):
    total_residual: float
    active_merchants: int
    avg_per_merchant: float
    total_volume: float


class KpiDeltas(TypedDict):
    residual_pct: float | None
    merchants: int | None
    avg_pct: float | None
    volume_pct: float | None


class KpiPayload(TypedDict):
    current: KpiValues
    previous: KpiValues | None
    deltas: KpiDeltas
    has_comparison: bool


NO_DELTAS: KpiDeltas = {
    "residual_pct": None,
    "merchants": None,
    "avg_pct": None,
    "volume_pct": None,
}


def headline_values(records: pd.DataFrame) -> KpiValues:
    total_residual = sum_field(records, "net_residual")
    active = unique_count(records, "merchant_id")
    return {
        "total_residual": total_residual,
        "active_merchants": active,
        "avg_per_merchant": average(total_residual, active),
        "total_volume": sum_field(records, "sales_volume"),
    }


def calculate_kpis(current: pd.DataFrame, previous: pd.DataFrame | None = None) -> KpiPayload:
    """Compute the four headline KPIs and, when a comparison exists, their deltas.

    A missing or empty previous period yields ``None`` deltas, which the UI
    renders as "N/A" rather than as a zero change.
    """

    now = headline_values(current)
    if previous is None or previous.empty:
        return {
            "current": now,
            "previous": None,
            "deltas": dict(NO_DELTAS),  # type: ignore[typeddict-item]
            "has_comparison": False,
        }

    before = headline_values(previous)
    deltas: KpiDeltas = {
        "residual_pct": percent_change(now["total_residual"], before["total_residual"]),
        "merchants": now["active_merchants"] - before["active_merchants"],
        "avg_pct": percent_change(now["avg_per_merchant"], before["avg_per_merchant"]),
        "volume_pct": percent_change(now["total_volume"], before["total_volume"]),
    }
    return {
        "current": now,
        "previous": before,
        "deltas": deltas,
        "has_comparison": True,
    }
