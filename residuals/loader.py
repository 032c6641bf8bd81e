"""Read monthly residual reports into a :class:`~residuals.records.Portfolio`."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import IO, Iterable, Union

import pandas as pd

from .config import Settings
from .records import Portfolio, normalize_frame

logger = logging.getLogger(__name__)

ReportSource = Union[str, Path, IO]


class DataLoadError(RuntimeError):
    """Raised when a monthly report cannot be obtained or parsed."""


def read_report(source: ReportSource) -> pd.DataFrame:
    """Parse one report CSV; every cell is read as text and blanks stay blank."""

    try:
        raw = pd.read_csv(source, dtype=str, keep_default_na=False, skipinitialspace=True)
    except FileNotFoundError as exc:
        raise DataLoadError(f"Report not found: {source}") from exc
    except OSError as exc:
        raise DataLoadError(f"Could not read report {source}: {exc}") from exc
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as exc:
        raise DataLoadError(f"Could not parse report {source}: {exc}") from exc
    return normalize_frame(raw)


def load_periods(sources: Iterable[tuple[str, ReportSource]]) -> Portfolio:
    frames: list[tuple[str, pd.DataFrame]] = []
    for label, source in sources:
        frame = read_report(source)
        logger.info("Loaded %s report: %d rows", label, len(frame))
        frames.append((label, frame))
    if not frames:
        raise DataLoadError("No reports configured")
    return Portfolio.from_periods(frames)


def load_portfolio(settings: Settings) -> Portfolio:
    """Load every configured period; any missing report is fatal."""

    try:
        return load_periods(settings.period_paths())
    except DataLoadError:
        logger.exception("Failed to load residual reports from %s", settings.data_dir)
        raise
