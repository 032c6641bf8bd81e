"""Merchant record model, period datasets and the period x agent filter."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from typing import Iterable, Mapping

import pandas as pd

from . import utils

TOTAL_PERIOD = "Total"
ALL_AGENTS = "all"
UNKNOWN_AGENT = "Unknown"

# Source report header -> canonical column.
SOURCE_COLUMNS = {
    "DBA": "merchant_name",
    "MID": "merchant_id",
    "Rep": "agent",
    "Pricing": "pricing_model",
    "Sales Volume": "sales_volume",
    "Transaction Count": "transaction_count",
    "Gross Profit": "gross_profit",
    "Net Residual": "net_residual",
}


@dataclass(frozen=True)
class MerchantRecord:
    """One merchant row of a monthly residual report.

    The field order and defaults double as the canonical column layout that
    :func:`normalize_frame` produces.
    """

    merchant_name: str = ""
    merchant_id: str = ""
    agent: str = UNKNOWN_AGENT
    pricing_model: str = ""
    sales_volume: float = 0.0
    transaction_count: float = 0.0
    gross_profit: float = 0.0
    net_residual: float = 0.0

    def to_dict(self) -> dict[str, object]:
        return asdict(self)


RECORD_COLUMNS = [f.name for f in fields(MerchantRecord)]
RECORD_DEFAULTS = {f.name: f.default for f in fields(MerchantRecord)}
TEXT_COLUMNS = tuple(name for name, default in RECORD_DEFAULTS.items() if isinstance(default, str))
NUMERIC_COLUMNS = tuple(name for name, default in RECORD_DEFAULTS.items() if isinstance(default, float))


@dataclass(frozen=True)
class FilterContext:
    """Selected period and agent; ``agent == "all"`` disables agent filtering."""

    period: str
    agent: str = ALL_AGENTS


def _clean_text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and pd.isna(value):
        return ""
    return str(value).strip()


def normalize_frame(raw: Iterable[Mapping] | pd.DataFrame) -> pd.DataFrame:
    """Map a raw report (or canonical records) onto the canonical columns.

    Numeric fields go through :func:`utils.parse_lenient_decimal`; missing
    columns are created with their defaults. Rows are never dropped.
    """

    if not isinstance(raw, pd.DataFrame):
        raw = [record.to_dict() if isinstance(record, MerchantRecord) else record for record in raw]
    df = utils.ensure_dataframe(raw)
    df.columns = [str(column).strip() for column in df.columns]
    df = df.rename(columns={k: v for k, v in SOURCE_COLUMNS.items() if k in df.columns})

    for column in TEXT_COLUMNS:
        if column not in df:
            df[column] = RECORD_DEFAULTS[column]
        df[column] = df[column].map(_clean_text).astype(object)
    df["agent"] = df["agent"].where(df["agent"] != "", UNKNOWN_AGENT)

    for column in NUMERIC_COLUMNS:
        if column not in df:
            df[column] = RECORD_DEFAULTS[column]
        df[column] = utils.lenient_numeric(df[column])

    return df[RECORD_COLUMNS].reset_index(drop=True)


def filter_records(frame: pd.DataFrame, agent: str = ALL_AGENTS) -> pd.DataFrame:
    """Return the records attributed to ``agent`` (all records for ``"all"``), in order."""

    if agent == ALL_AGENTS:
        return frame.copy()
    return frame.loc[frame["agent"] == agent].copy()


@dataclass(frozen=True)
class Portfolio:
    """Chronologically ordered monthly datasets plus the synthetic Total view."""

    frames: Mapping[str, pd.DataFrame] = field(default_factory=dict)

    @classmethod
    def from_periods(cls, periods: Iterable[tuple[str, Iterable[Mapping] | pd.DataFrame]]) -> "Portfolio":
        frames: dict[str, pd.DataFrame] = {}
        for label, raw in periods:
            if label == TOTAL_PERIOD:
                raise ValueError(f"{TOTAL_PERIOD!r} is reserved for the combined view")
            frames[label] = normalize_frame(raw)
        return cls(frames=frames)

    @property
    def periods(self) -> list[str]:
        return list(self.frames)

    @property
    def latest_period(self) -> str | None:
        return self.periods[-1] if self.frames else None

    def period_options(self) -> list[str]:
        return [*self.periods, TOTAL_PERIOD]

    def dataset(self, period: str) -> pd.DataFrame:
        """Return the records of ``period``; Total concatenates every period without de-duplication."""

        if period == TOTAL_PERIOD:
            if not self.frames:
                return normalize_frame([])
            return pd.concat(list(self.frames.values()), ignore_index=True)
        if period not in self.frames:
            raise ValueError(f"Unknown period {period!r}")
        return self.frames[period].copy()

    def previous_period(self, period: str) -> str | None:
        if period == TOTAL_PERIOD or period not in self.frames:
            return None
        index = self.periods.index(period)
        return self.periods[index - 1] if index > 0 else None

    def is_latest(self, period: str) -> bool:
        return period != TOTAL_PERIOD and period == self.latest_period

    def agents(self) -> list[str]:
        names: set[str] = set()
        for frame in self.frames.values():
            names.update(name for name in frame["agent"] if name)
        return sorted(names)

    def current_records(self, context: FilterContext) -> pd.DataFrame:
        return filter_records(self.dataset(context.period), context.agent)

    def previous_records(self, context: FilterContext) -> pd.DataFrame | None:
        previous = resolve_previous_period(self, context.period)
        if previous is None:
            return None
        return filter_records(previous, context.agent)

    def period_totals(self, agent: str = ALL_AGENTS) -> list[dict[str, float | str]]:
        """Total net residual per concrete period, for the trend chart."""

        return [
            {
                "period": label,
                "net_residual": float(filter_records(frame, agent)["net_residual"].sum()),
            }
            for label, frame in self.frames.items()
        ]


def resolve_previous_period(portfolio: Portfolio, period: str) -> pd.DataFrame | None:
    """Dataset of the period preceding ``period``; ``None`` for the earliest period and Total."""

    label = portfolio.previous_period(period)
    if label is None:
        return None
    return portfolio.dataset(label)
