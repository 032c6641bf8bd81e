"""Tabular export of filtered records."""

from __future__ import annotations

from io import BytesIO

import pandas as pd
from residuals import export, records

ROWS = [
    {
        "DBA": "Alpha Pizza",
        "MID": "A1",
        "Rep": "Dana",
        "Pricing": "Tiered",
        "Sales Volume": "1000",
        "Transaction Count": "40",
        "Gross Profit": "30",
        "Net Residual": "12.5",
    },
    {
        "DBA": "Beta Salon",
        "MID": "B2",
        "Rep": "Eli",
        "Pricing": "Flat Rate",
        "Sales Volume": "200",
        "Transaction Count": "4",
        "Gross Profit": "2",
        "Net Residual": "-3",
    },
]


def test_export_frame_column_order() -> None:
    frame = export.export_frame(records.normalize_frame(ROWS))
    assert list(frame.columns) == ["Merchant", "MID", "Agent", "Pricing", "Volume", "Transactions", "Net Residual"]
    assert frame["MID"].tolist() == ["A1", "B2"]


def test_export_frame_negative_only() -> None:
    frame = export.export_frame(records.normalize_frame(ROWS), negative_only=True)
    assert frame["Merchant"].tolist() == ["Beta Salon"]
    assert frame.index.tolist() == [0]


def test_export_frame_with_gross_profit() -> None:
    frame = export.export_frame(records.normalize_frame(ROWS), include_gross_profit=True)
    assert list(frame.columns)[-2:] == ["Gross Profit", "Net Residual"]
    assert frame["Gross Profit"].tolist() == [30.0, 2.0]


def test_to_csv_bytes_and_filename() -> None:
    payload = export.to_csv_bytes(export.export_frame(records.normalize_frame(ROWS)))
    lines = payload.decode("utf-8").splitlines()
    assert lines[0] == '"Merchant","MID","Agent","Pricing","Volume","Transactions","Net Residual"'
    assert lines[1].startswith('"Alpha Pizza","A1","Dana","Tiered",1000.0')
    assert len(lines) == 3
    assert export.export_filename("negative", "November") == "residuals-negative-November.csv"
    assert export.export_filename("all", "Total") == "residuals-all-Total.csv"


def test_to_excel_bytes_reads_back_with_gross_profit() -> None:
    frame = export.export_frame(records.normalize_frame(ROWS), include_gross_profit=True)

    payload = export.to_excel_bytes(frame)
    restored = pd.read_excel(BytesIO(payload), sheet_name=export.EXCEL_SHEET)

    assert list(restored.columns) == list(frame.columns)
    assert restored["MID"].tolist() == ["A1", "B2"]
    assert restored["Gross Profit"].tolist() == [30.0, 2.0]
    assert restored["Net Residual"].tolist() == [12.5, -3.0]
    assert export.export_filename("detailed", "November", "xlsx") == "residuals-detailed-November.xlsx"
