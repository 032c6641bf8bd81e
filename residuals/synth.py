"""Synthetic monthly residual reports.

The generator produces two deterministic consecutive months in the same column
layout as the processor's master report, including churned and newly boarded
merchants, negative residuals and a handful of large month-over-month swings.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

from .config import DEFAULT_PERIOD_FILES
from .records import Portfolio

DEFAULT_MERCHANTS = 150
DEFAULT_SEED = 7

AGENTS = (
    "Alicia Moreno",
    "Ben Carter",
    "Chloe Nguyen",
    "Dev Patel",
    "Erin Walsh",
    "Frank Ortiz",
    "Grace Kim",
    "House Account",
)
AGENT_WEIGHTS = (0.2, 0.16, 0.14, 0.12, 0.1, 0.1, 0.1, 0.08)

PRICING_MODELS = ("Interchange Plus", "Tiered", "Flat Rate", "Surcharge")

NAME_PREFIXES = (
    "Blue Ridge",
    "Harbor",
    "Maple",
    "Summit",
    "Golden Gate",
    "Riverside",
    "Oak Street",
    "Pioneer",
    "Sunset",
    "Lakeview",
    "Northside",
    "Cedar",
)
NAME_SUFFIXES = (
    "Auto Repair",
    "Dental",
    "Pizza",
    "Coffee Co",
    "Hardware",
    "Salon",
    "Liquors",
    "Pet Supply",
    "Florist",
    "Grill",
    "Veterinary",
    "Fitness",
)

SOURCE_HEADERS = [
    "DBA",
    "MID",
    "Rep",
    "Pricing",
    "Sales Volume",
    "Transaction Count",
    "Gross Profit",
    "Net Residual",
]

MID_PREFIX = "5429"


@dataclass(frozen=True)
class MerchantProfile:
    """Static attributes of a synthetic merchant."""

    mid: str
    dba: str
    rep: str
    pricing: str
    base_volume: float
    avg_ticket: float
    margin_bps: float
    loss_making: bool = False


def _build_profiles(count: int, rng: np.random.Generator, *, offset: int = 0) -> list[MerchantProfile]:
    profiles = []
    for index in range(offset, offset + count):
        dba = f"{rng.choice(NAME_PREFIXES)} {rng.choice(NAME_SUFFIXES)}"
        profiles.append(
            MerchantProfile(
                mid=f"{MID_PREFIX}{index:08d}",
                dba=dba,
                rep=str(rng.choice(AGENTS, p=AGENT_WEIGHTS)),
                pricing=str(rng.choice(PRICING_MODELS)),
                base_volume=float(rng.lognormal(mean=10.8, sigma=1.0)),
                avg_ticket=float(rng.uniform(18.0, 140.0)),
                margin_bps=float(rng.uniform(20.0, 75.0)),
                loss_making=bool(rng.random() < 0.07),
            )
        )
    return profiles


def _month_row(profile: MerchantProfile, rng: np.random.Generator, *, drift: float) -> dict[str, Any]:
    volume = profile.base_volume * drift
    transactions = max(round(volume / profile.avg_ticket), 1)
    gross_profit = volume * profile.margin_bps / 10_000
    if profile.loss_making:
        residual = -float(rng.uniform(5.0, 160.0))
    else:
        residual = gross_profit * float(rng.uniform(0.5, 0.75))
    return {
        "DBA": profile.dba,
        "MID": profile.mid,
        "Rep": profile.rep,
        "Pricing": profile.pricing,
        "Sales Volume": round(volume, 2),
        "Transaction Count": int(transactions),
        "Gross Profit": round(gross_profit, 2),
        "Net Residual": round(residual, 2),
    }


def generate_reports(
    merchants: int = DEFAULT_MERCHANTS,
    *,
    seed: int | None = DEFAULT_SEED,
    churn_rate: float = 0.06,
    new_rate: float = 0.05,
    swing_rate: float = 0.05,
) -> dict[str, pd.DataFrame]:
    """Return two consecutive monthly reports keyed by period label."""

    if merchants <= 0:
        raise ValueError("merchants must be positive")

    rng = np.random.default_rng(seed)
    profiles = _build_profiles(merchants, rng)

    first_rows = [_month_row(p, rng, drift=float(rng.normal(1.0, 0.05))) for p in profiles]

    churned = rng.random(len(profiles)) < churn_rate
    retained = [p for p, lost in zip(profiles, churned) if not lost]
    boarded = _build_profiles(max(int(round(merchants * new_rate)), 1), rng, offset=merchants)

    second_rows = []
    for profile in retained:
        drift = float(rng.normal(1.02, 0.08))
        if rng.random() < swing_rate:
            drift = float(rng.choice([rng.uniform(0.3, 0.6), rng.uniform(1.5, 2.2)]))
        second_rows.append(_month_row(profile, rng, drift=drift))
    second_rows.extend(_month_row(p, rng, drift=float(rng.uniform(0.2, 0.7))) for p in boarded)

    (first_label, _), (second_label, _) = DEFAULT_PERIOD_FILES[:2]
    return {
        first_label: pd.DataFrame(first_rows, columns=SOURCE_HEADERS),
        second_label: pd.DataFrame(second_rows, columns=SOURCE_HEADERS),
    }


def sample_portfolio(merchants: int = DEFAULT_MERCHANTS, *, seed: int | None = DEFAULT_SEED) -> Portfolio:
    return Portfolio.from_periods(generate_reports(merchants, seed=seed).items())


def write_sample_reports(
    *,
    merchants: int = DEFAULT_MERCHANTS,
    seed: int | None = DEFAULT_SEED,
    output_dir: str | Path = Path("data"),
) -> list[Path]:
    """Persist both synthetic months under their configured report names."""

    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    filenames = dict(DEFAULT_PERIOD_FILES)
    written = []
    for label, frame in generate_reports(merchants, seed=seed).items():
        path = output_path / filenames[label]
        frame.to_csv(path, index=False)
        written.append(path)
    return written


def main() -> None:  # pragma: no cover - convenience CLI
    for path in write_sample_reports():
        print(f"Wrote {path}")


if __name__ == "__main__":  # pragma: no cover - module CLI
    main()
