"""Month-over-month residual swing detection."""

from __future__ import annotations

import pandas as pd
import pytest
from residuals import changes, records


def _frame(rows: list[dict]) -> pd.DataFrame:
    return records.normalize_frame(rows)


def test_no_previous_period_is_unavailable() -> None:
    report = changes.detect_residual_changes(_frame([{"MID": "A", "Net Residual": "10"}]), None)
    assert report == {"available": False, "changes": []}


def test_threshold_is_inclusive_at_thirty_percent() -> None:
    previous = _frame([{"MID": "A", "Net Residual": "100"}, {"MID": "B", "Net Residual": "100"}])
    current = _frame([{"MID": "A", "Net Residual": "129"}, {"MID": "B", "Net Residual": "130"}])

    report = changes.detect_residual_changes(current, previous)

    assert report["available"] is True
    assert [c["merchant_id"] for c in report["changes"]] == ["B"]
    assert report["changes"][0]["percent_change"] == pytest.approx(30.0)


def test_zero_baseline_and_new_merchants_are_excluded() -> None:
    previous = _frame([{"MID": "A", "Net Residual": "0"}])
    current = _frame([{"MID": "A", "Net Residual": "500"}, {"MID": "N", "Net Residual": "900"}])

    report = changes.detect_residual_changes(current, previous)

    assert report["available"] is True
    assert report["changes"] == []


def test_changes_sorted_by_magnitude_with_details() -> None:
    previous = _frame(
        [
            {"MID": "A", "Net Residual": "100"},
            {"MID": "B", "Net Residual": "-200"},
            {"MID": "C", "Net Residual": "50"},
        ]
    )
    current = _frame(
        [
            {"MID": "A", "DBA": "Alpha", "Rep": "X", "Net Residual": "60"},
            {"MID": "B", "DBA": "Beta", "Rep": "Y", "Net Residual": "100"},
            {"MID": "C", "DBA": "Gamma", "Rep": "Z", "Net Residual": "150"},
        ]
    )

    report = changes.detect_residual_changes(current, previous)

    assert [c["merchant_id"] for c in report["changes"]] == ["C", "B", "A"]
    beta = report["changes"][1]
    assert beta == {
        "merchant_id": "B",
        "merchant_name": "Beta",
        "agent": "Y",
        "previous_residual": -200.0,
        "current_residual": 100.0,
        "percent_change": pytest.approx(150.0),
    }
    assert report["changes"][2]["percent_change"] == pytest.approx(-40.0)


def test_duplicate_previous_mid_uses_last_row() -> None:
    previous = _frame([{"MID": "A", "Net Residual": "10"}, {"MID": "A", "Net Residual": "100"}])
    current = _frame([{"MID": "A", "Net Residual": "120"}])

    report = changes.detect_residual_changes(current, previous)

    assert report["changes"] == []


def test_end_to_end_scenario_has_no_changes() -> None:
    current = _frame(
        [
            {"MID": "A", "Rep": "X", "Net Residual": "100", "Sales Volume": "1000"},
            {"MID": "B", "Rep": "X", "Net Residual": "-50", "Sales Volume": "500"},
        ]
    )
    previous = _frame([{"MID": "A", "Rep": "X", "Net Residual": "80"}])

    report = changes.detect_residual_changes(current, previous)

    assert report == {"available": True, "changes": []}
