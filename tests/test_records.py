"""Record normalisation, filtering and period resolution."""

from __future__ import annotations

import dataclasses

import pandas as pd
import pytest
from residuals import records, utils


def _portfolio() -> records.Portfolio:
    october = [
        {"MID": "A", "DBA": "Alpha", "Rep": "X", "Net Residual": "80"},
        {"MID": "C", "DBA": "Gamma", "Rep": "Y", "Net Residual": "40"},
    ]
    november = [
        {"MID": "A", "DBA": "Alpha", "Rep": "X", "Net Residual": "100"},
        {"MID": "B", "DBA": "Beta", "Rep": "X", "Net Residual": "-50"},
        {"MID": "D", "DBA": "Delta", "Rep": "Z", "Net Residual": "10"},
    ]
    return records.Portfolio.from_periods([("October", october), ("November", november)])


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (None, 0.0),
        ("", 0.0),
        ("   ", 0.0),
        ("n/a", 0.0),
        ("nan", 0.0),
        ("inf", 0.0),
        (float("nan"), 0.0),
        ("12.5", 12.5),
        (" -7 ", -7.0),
        (3, 3.0),
    ],
)
def test_parse_lenient_decimal(raw, expected) -> None:
    assert utils.parse_lenient_decimal(raw) == expected


def test_normalize_frame_maps_source_headers_and_defaults() -> None:
    raw = pd.DataFrame(
        [
            {"DBA": "Alpha", "MID": " A1 ", "Rep": "Dana", "Sales Volume": "1000", "Net Residual": "12.5"},
            {"DBA": "", "MID": "B2", "Rep": "", "Sales Volume": "oops", "Net Residual": ""},
        ]
    )
    df = records.normalize_frame(raw)

    assert list(df.columns) == records.RECORD_COLUMNS
    assert len(df) == 2
    assert df.loc[0, "merchant_id"] == "A1"
    assert df.loc[1, "agent"] == records.UNKNOWN_AGENT
    assert df["sales_volume"].tolist() == [1000.0, 0.0]
    assert df["net_residual"].tolist() == [12.5, 0.0]
    # Columns absent from the report default to zero.
    assert df["gross_profit"].tolist() == [0.0, 0.0]
    assert df["transaction_count"].tolist() == [0.0, 0.0]


def test_normalize_frame_accepts_merchant_records() -> None:
    df = records.normalize_frame(
        [records.MerchantRecord(merchant_id="A", agent="X", net_residual=5.0)]
    )
    assert df.loc[0, "merchant_id"] == "A"
    assert df.loc[0, "net_residual"] == 5.0


def test_merchant_record_defines_canonical_layout() -> None:
    record = records.MerchantRecord(merchant_id="9")
    assert list(record.to_dict()) == records.RECORD_COLUMNS
    assert record.agent == records.UNKNOWN_AGENT
    assert records.TEXT_COLUMNS == ("merchant_name", "merchant_id", "agent", "pricing_model")
    assert records.NUMERIC_COLUMNS == ("sales_volume", "transaction_count", "gross_profit", "net_residual")
    with pytest.raises(dataclasses.FrozenInstanceError):
        record.net_residual = 1.0  # type: ignore[misc]


def test_filter_records_all_returns_everything_in_order() -> None:
    df = _portfolio().dataset("November")
    filtered = records.filter_records(df, records.ALL_AGENTS)
    pd.testing.assert_frame_equal(filtered, df)
    assert filtered is not df


def test_filter_records_matches_agent_verbatim() -> None:
    df = _portfolio().dataset("November")
    assert records.filter_records(df, "X")["merchant_id"].tolist() == ["A", "B"]
    assert records.filter_records(df, "x").empty


def test_total_is_chronological_concatenation_without_dedup() -> None:
    portfolio = _portfolio()
    total = portfolio.dataset(records.TOTAL_PERIOD)
    assert total["merchant_id"].tolist() == ["A", "C", "A", "B", "D"]


def test_previous_period_resolution() -> None:
    portfolio = _portfolio()
    assert portfolio.previous_period("November") == "October"
    assert portfolio.previous_period("October") is None
    assert portfolio.previous_period(records.TOTAL_PERIOD) is None
    assert records.resolve_previous_period(portfolio, "October") is None
    assert records.resolve_previous_period(portfolio, records.TOTAL_PERIOD) is None
    previous = records.resolve_previous_period(portfolio, "November")
    assert previous is not None
    assert previous["merchant_id"].tolist() == ["A", "C"]


def test_filter_context_applies_agent_to_both_periods() -> None:
    portfolio = _portfolio()
    context = records.FilterContext(period="November", agent="X")
    assert portfolio.current_records(context)["merchant_id"].tolist() == ["A", "B"]
    previous = portfolio.previous_records(context)
    assert previous is not None
    assert previous["merchant_id"].tolist() == ["A"]
    assert portfolio.previous_records(records.FilterContext(period="October")) is None


def test_portfolio_metadata() -> None:
    portfolio = _portfolio()
    assert portfolio.periods == ["October", "November"]
    assert portfolio.latest_period == "November"
    assert portfolio.is_latest("November")
    assert not portfolio.is_latest(records.TOTAL_PERIOD)
    assert portfolio.period_options() == ["October", "November", records.TOTAL_PERIOD]
    assert portfolio.agents() == ["X", "Y", "Z"]
    assert portfolio.period_totals("X") == [
        {"period": "October", "net_residual": 80.0},
        {"period": "November", "net_residual": 50.0},
    ]


def test_unknown_and_reserved_periods_rejected() -> None:
    with pytest.raises(ValueError):
        _portfolio().dataset("December")
    with pytest.raises(ValueError):
        records.Portfolio.from_periods([(records.TOTAL_PERIOD, [])])
