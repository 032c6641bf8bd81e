"""Tabular export of the filtered records."""

from __future__ import annotations

import csv
from io import BytesIO

import pandas as pd

EXCEL_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
EXCEL_SHEET = "Merchants"

EXPORT_COLUMNS = {
    "merchant_name": "Merchant",
    "merchant_id": "MID",
    "agent": "Agent",
    "pricing_model": "Pricing",
    "sales_volume": "Volume",
    "transaction_count": "Transactions",
    "net_residual": "Net Residual",
}


def export_frame(
    records: pd.DataFrame,
    *,
    negative_only: bool = False,
    include_gross_profit: bool = False,
) -> pd.DataFrame:
    """Rename canonical columns to their export headers, in export order."""

    df = records
    if negative_only:
        df = df.loc[df["net_residual"] < 0]

    columns = dict(EXPORT_COLUMNS)
    if include_gross_profit:
        # Gross profit sits just before net residual.
        net_header = columns.pop("net_residual")
        columns["gross_profit"] = "Gross Profit"
        columns["net_residual"] = net_header
    return df[list(columns)].rename(columns=columns).reset_index(drop=True)


def to_csv_bytes(frame: pd.DataFrame) -> bytes:
    return frame.to_csv(index=False, quoting=csv.QUOTE_NONNUMERIC).encode("utf-8")


def to_excel_bytes(frame: pd.DataFrame, sheet_name: str = EXCEL_SHEET) -> bytes:
    """Convert an export frame to .xlsx bytes for download."""
    output = BytesIO()
    with pd.ExcelWriter(output, engine="xlsxwriter") as writer:
        frame.to_excel(writer, index=False, sheet_name=sheet_name)
    return output.getvalue()


def export_filename(kind: str, period: str, extension: str = "csv") -> str:
    return f"residuals-{kind}-{period}.{extension}".replace(" ", "_")
