"""Runtime configuration for the residuals dashboard.

Settings come from environment variables; the Streamlit app layers
``st.secrets`` on top when it is available.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

DEFAULT_DATA_DIR = Path("data")

# Chronological order matters: the last entry is the "latest" period.
DEFAULT_PERIOD_FILES: tuple[tuple[str, str], ...] = (
    ("October", "Demo_10_25_Master_Report_cleaned.csv"),
    ("November", "Demo_11_25_Master_Report_cleaned.csv"),
)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class Settings:
    """Where the monthly reports live and how verbose logging is."""

    data_dir: Path = DEFAULT_DATA_DIR
    period_files: tuple[tuple[str, str], ...] = DEFAULT_PERIOD_FILES
    log_level: str = "INFO"

    def period_paths(self) -> list[tuple[str, Path]]:
        return [(label, self.data_dir / filename) for label, filename in self.period_files]


def _parse_periods(raw: str) -> tuple[tuple[str, str], ...]:
    """Parse ``"October=oct.csv,November=nov.csv"`` into ordered pairs."""

    pairs: list[tuple[str, str]] = []
    for chunk in raw.split(","):
        chunk = chunk.strip()
        if not chunk:
            continue
        label, sep, filename = chunk.partition("=")
        if not sep or not label.strip() or not filename.strip():
            raise ValueError(f"Invalid period entry {chunk!r}; expected LABEL=FILE")
        pairs.append((label.strip(), filename.strip()))
    if not pairs:
        raise ValueError("RESIDUALS_PERIODS must name at least one period")
    return tuple(pairs)


def load_settings(overrides: Mapping[str, str] | None = None) -> Settings:
    """Build :class:`Settings` from ``overrides`` first, then the environment."""

    source: dict[str, str] = dict(os.environ)
    if overrides:
        source.update({key: str(value) for key, value in overrides.items() if value})

    data_dir = Path(source.get("RESIDUALS_DATA_DIR", str(DEFAULT_DATA_DIR)))
    periods_raw = source.get("RESIDUALS_PERIODS")
    period_files = _parse_periods(periods_raw) if periods_raw else DEFAULT_PERIOD_FILES
    log_level = source.get("RESIDUALS_LOG_LEVEL", "INFO").upper()

    return Settings(data_dir=data_dir, period_files=period_files, log_level=log_level)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
