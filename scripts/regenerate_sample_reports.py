"""Regenerate the two synthetic monthly residual reports.

Output: data/Demo_10_25_Master_Report_cleaned.csv and
data/Demo_11_25_Master_Report_cleaned.csv, the file names the dashboard looks
for by default.
"""

from __future__ import annotations

import argparse
from pathlib import Path

from residuals import synth


def main() -> None:
    parser = argparse.ArgumentParser(description="Regenerate synthetic two-month residual reports")
    parser.add_argument("--merchants", type=int, default=synth.DEFAULT_MERCHANTS)
    parser.add_argument("--seed", type=int, default=synth.DEFAULT_SEED)
    parser.add_argument("--output-dir", type=Path, default=Path("data"))
    args = parser.parse_args()

    for path in synth.write_sample_reports(merchants=args.merchants, seed=args.seed, output_dir=args.output_dir):
        print(f"Wrote {path}")


if __name__ == "__main__":
    main()
