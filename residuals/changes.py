"""Month-over-month residual swing detection for merchants present in both periods."""

from __future__ import annotations

from typing import TypedDict

import pandas as pd

from .aggregate import percent_change

CHANGE_THRESHOLD_PCT = 30.0


class ResidualChange(TypedDict):
    merchant_id: str
    merchant_name: str
    agent: str
    previous_residual: float
    current_residual: float
    percent_change: float


class ChangeReport(TypedDict):
    available: bool
    changes: list[ResidualChange]


def detect_residual_changes(
    current: pd.DataFrame,
    previous: pd.DataFrame | None,
    *,
    threshold_pct: float = CHANGE_THRESHOLD_PCT,
) -> ChangeReport:
    """List merchants whose net residual moved by at least ``threshold_pct``.

    Merchants new this period, or with a zero previous residual, are not
    reported. Without a previous period the report is marked unavailable.
    """

    if previous is None or previous.empty:
        return {"available": False, "changes": []}

    # Duplicate MIDs: the last previous-period row wins.
    baseline = dict(zip(previous["merchant_id"], previous["net_residual"]))

    changes: list[ResidualChange] = []
    for row in current.itertuples(index=False):
        prev_value = baseline.get(row.merchant_id)
        if prev_value is None or prev_value == 0:
            continue
        change = percent_change(row.net_residual, prev_value)
        if abs(change) < threshold_pct:
            continue
        changes.append(
            {
                "merchant_id": str(row.merchant_id),
                "merchant_name": str(row.merchant_name),
                "agent": str(row.agent),
                "previous_residual": float(prev_value),
                "current_residual": float(row.net_residual),
                "percent_change": float(change),
            }
        )

    changes.sort(key=lambda item: abs(item["percent_change"]), reverse=True)
    return {"available": True, "changes": changes}
