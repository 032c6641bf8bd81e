"""Headline KPI calculations."""

from __future__ import annotations

import pandas as pd
import pytest
from residuals import kpis, records


def _frame(rows: list[dict]) -> pd.DataFrame:
    return records.normalize_frame(rows)


CURRENT = [
    {"MID": "A", "Rep": "X", "Net Residual": "100", "Sales Volume": "1000"},
    {"MID": "B", "Rep": "X", "Net Residual": "-50", "Sales Volume": "500"},
]
PREVIOUS = [{"MID": "A", "Rep": "X", "Net Residual": "80", "Sales Volume": "800"}]


def test_calculate_kpis_with_previous_period() -> None:
    payload = kpis.calculate_kpis(_frame(CURRENT), _frame(PREVIOUS))

    current = payload["current"]
    assert current["total_residual"] == pytest.approx(50.0)
    assert current["active_merchants"] == 2
    assert current["avg_per_merchant"] == pytest.approx(25.0)
    assert current["total_volume"] == pytest.approx(1500.0)

    assert payload["has_comparison"] is True
    assert payload["previous"] is not None
    assert payload["previous"]["active_merchants"] == 1

    deltas = payload["deltas"]
    assert deltas["merchants"] == 1
    assert deltas["residual_pct"] == pytest.approx(-37.5)
    assert deltas["avg_pct"] == pytest.approx((25.0 - 80.0) / 80.0 * 100)
    assert deltas["volume_pct"] == pytest.approx(87.5)


@pytest.mark.parametrize("previous", [None, []])
def test_calculate_kpis_without_comparison_reports_not_applicable(previous) -> None:
    prev_frame = None if previous is None else _frame(previous)
    payload = kpis.calculate_kpis(_frame(CURRENT), prev_frame)

    assert payload["has_comparison"] is False
    assert payload["previous"] is None
    assert all(value is None for value in payload["deltas"].values())


def test_zero_change_is_distinct_from_not_applicable() -> None:
    payload = kpis.calculate_kpis(_frame(PREVIOUS), _frame(PREVIOUS))
    assert payload["deltas"]["residual_pct"] == 0.0
    assert payload["deltas"]["merchants"] == 0


def test_calculate_kpis_on_empty_records() -> None:
    payload = kpis.calculate_kpis(_frame([]))
    assert payload["current"] == {
        "total_residual": 0.0,
        "active_merchants": 0,
        "avg_per_merchant": 0.0,
        "total_volume": 0.0,
    }
