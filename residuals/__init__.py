"""Core modules for the residuals portfolio dashboard."""

from . import (
    aggregate,
    changes,
    config,
    export,
    insights,
    kpis,
    loader,
    records,
    synth,
    utils,
    valuation,
    viz,
)

__all__ = [
	"aggregate",
	"changes",
	"config",
	"export",
	"insights",
	"kpis",
	"loader",
	"records",
	"synth",
	"utils",
	"valuation",
	"viz",
]
