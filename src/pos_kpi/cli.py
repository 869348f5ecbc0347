"""CLI wrapper for the KPI engine.

Reads a JSON array of store records, builds the daily history view and prints
it. All computation is in pos_kpi.api.
"""

from __future__ import annotations

import argparse
import json
import logging
from datetime import date
from pathlib import Path

import pandas as pd

from pos_kpi.aggregation.summary import (
    goal_percentage,
    month_to_date_net_sales,
    summarize_period,
    summary_stats,
)
from pos_kpi.api import build_daily_history, history_frame
from pos_kpi.config import EMPLOYEES, EngineConfig
from pos_kpi.masking import DeletionMask


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point.

    Parses command-line arguments, loads records, and prints the daily
    history, a period summary and, with ``--goal``, month-to-date progress.
    """
    parser = argparse.ArgumentParser(description="Print daily sales KPIs from exported records.")
    parser.add_argument("--file", type=str, required=True, help="Path to a JSON array of records.")
    parser.add_argument(
        "--deleted",
        nargs="*",
        default=[],
        help="Record ids deleted in this session (masked before aggregation).",
    )
    parser.add_argument(
        "--employees",
        nargs=2,
        default=list(EMPLOYEES),
        metavar=("FIRST", "SECOND"),
        help=f"The two employee names (default: {' '.join(EMPLOYEES)})",
    )
    parser.add_argument(
        "--no-dedup",
        action="store_true",
        help="Keep every legacy full-day record instead of the first per employee/day.",
    )
    parser.add_argument("--goal", type=float, default=0.0, help="Monthly net sales goal.")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose output")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    path = Path(args.file)
    if not path.exists():
        raise FileNotFoundError(f"Records file not found: {path}")
    records = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(records, list):
        raise ValueError(f"{path} must contain a JSON array of records")

    config = EngineConfig(employees=tuple(args.employees)).validate()
    history = build_daily_history(
        records,
        mask=DeletionMask(args.deleted),
        config=config,
        deduplicate_legacy=not args.no_dedup,
    )
    print(f"[OK] Loaded {len(records)} record(s) covering {len(history)} day(s)")

    if not history:
        return

    with pd.option_context("display.max_rows", None, "display.width", 200):
        print(history_frame(history).to_string(index=False))

    totals = [entry.total for entry in history]
    period = summarize_period(totals, decimals=config.decimals)
    net = summary_stats(totals, "net_sales", decimals=config.decimals)
    print("=" * 60)
    print(f"Net sales: {period.net_sales:.2f} (avg/day {net.avg:.2f}, min {net.min:.2f}, max {net.max:.2f})")
    print(f"Conversion: {period.conversion:.2f}%  Avg ticket: {period.avg_ticket:.2f}")

    if args.goal > 0:
        today = date.today()
        mtd = month_to_date_net_sales(history, today)
        print(f"Month to date: {mtd:.2f} of {args.goal:.2f} ({goal_percentage(mtd, args.goal)}%)")


if __name__ == "__main__":
    main()
