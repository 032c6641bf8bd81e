"""Utility script to print the computed dashboard payload for the sample portfolio."""

from __future__ import annotations

import argparse
import json

from residuals import changes, insights, kpis, records, synth, valuation


def main() -> None:
    parser = argparse.ArgumentParser(description="Print KPI, valuation and analytics payloads as JSON")
    parser.add_argument("--period", default=None, help="Period label or 'Total' (default: latest month)")
    parser.add_argument("--agent", default=records.ALL_AGENTS)
    parser.add_argument("--seed", type=int, default=synth.DEFAULT_SEED)
    args = parser.parse_args()

    portfolio = synth.sample_portfolio(seed=args.seed)
    context = records.FilterContext(period=args.period or portfolio.latest_period, agent=args.agent)
    current = portfolio.current_records(context)
    previous = portfolio.previous_records(context)

    payload = {
        "kpis": kpis.calculate_kpis(current, previous),
        "changes": changes.detect_residual_changes(current, previous),
        "valuation": valuation.value_portfolio(portfolio, context),
        "analytics": insights.build_analytics(current, previous),
    }
    print(json.dumps(payload, indent=2))


if __name__ == "__main__":
    main()
