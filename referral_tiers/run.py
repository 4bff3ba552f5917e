#!/usr/bin/env python3
"""
CLI entry point for referral tiering.

Usage:
    # Percentile tiers for all offices, anchored at today
    python -m referral_tiers.run data/monthly_patients.csv --offices data/offices.csv

    # VIP offices on Main St under the fixed thresholds
    python -m referral_tiers.run data/monthly_patients.csv --offices data/offices.csv \\
        --strategy fixed --tier VIP --query "main st" --now 2025-09

    # Per-tier summary with a custom config
    python -m referral_tiers.run data/monthly_patients.csv --config configs/tiers.yaml --summary
"""

import argparse
import sys
from datetime import date

import pandas as pd
from pandera.errors import SchemaError, SchemaErrors

from .aggregator import parse_year_month
from .classifier import TierClassifier
from .config import TierConfig
from .errors import ReferralTierError
from .logger import RunLogger
from .strategies import STRATEGIES

DISPLAY_COLUMNS = [
    "office_id",
    "name",
    "address",
    "l12",
    "r3",
    "mslr",
    "tier",
    "health_score",
    "health_level",
]


def parse_now(value: str) -> pd.Timestamp:
    """Parse --now as YYYY-MM or YYYY-MM-DD."""
    try:
        if len(value) == 7:
            year, month = parse_year_month(value)
            return pd.Timestamp(year=year, month=month, day=1)
        return pd.Timestamp(date.fromisoformat(value))
    except (ReferralTierError, ValueError) as e:
        raise argparse.ArgumentTypeError(f"invalid date {value!r}: {e}") from e


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Referral tiering for campaign targeting",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m referral_tiers.run records.csv --offices offices.csv
  python -m referral_tiers.run records.csv --strategy fixed --tier VIP
  python -m referral_tiers.run records.csv --summary --now 2025-09
        """,
    )

    parser.add_argument(
        "records",
        help="CSV with office_id, year_month, referral_count",
    )
    parser.add_argument(
        "--offices",
        help="CSV with office_id, name, address",
    )
    parser.add_argument(
        "--now",
        type=parse_now,
        default=None,
        help="Anchor month as YYYY-MM or YYYY-MM-DD (default: today)",
    )
    parser.add_argument(
        "--strategy",
        choices=sorted(STRATEGIES),
        default="percentile",
        help="Tier strategy (default: percentile)",
    )
    parser.add_argument(
        "--tier",
        action="append",
        help="Tier to keep (repeatable, default: all)",
    )
    parser.add_argument(
        "--query",
        default="",
        help="Case-insensitive search on office name or address",
    )
    parser.add_argument(
        "--config",
        help="YAML file with TierConfig overrides",
    )
    parser.add_argument(
        "--skip-invalid",
        action="store_true",
        help="Drop records with malformed year_month instead of failing",
    )
    parser.add_argument(
        "--summary",
        action="store_true",
        help="Print per-tier summary instead of the office list",
    )
    parser.add_argument(
        "--logs-dir",
        help="Write a JSON run log to this directory",
    )
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    run_logger = RunLogger(args.logs_dir) if args.logs_dir else None
    now = args.now if args.now is not None else pd.Timestamp.today().normalize()

    try:
        config = TierConfig.from_yaml(args.config) if args.config else None
        classifier = TierClassifier(
            config,
            strategy=args.strategy,
            on_invalid="skip" if args.skip_invalid else "raise",
        )

        records = pd.read_csv(args.records, dtype={"office_id": str, "year_month": str})
        offices = (
            pd.read_csv(args.offices, dtype={"office_id": str})
            if args.offices
            else None
        )

        result = classifier.classify(records, now, offices)
        tier_filter = args.tier or "all"
        selected = result.filter(tier_filter, args.query)
    except (
        ReferralTierError, SchemaError, SchemaErrors, ValueError, TypeError, OSError
    ) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        if run_logger:
            run_logger.log_failure(args.strategy, str(e))
        return 1

    print(f"Strategy: {result.strategy}  Anchor month: {result.anchor_month}")
    counts = ", ".join(f"{tier}: {n}" for tier, n in result.tier_counts().items())
    print(f"Offices: {len(result.df)} ({counts})")
    print()

    if args.summary:
        print(result.summary().to_string())
    elif selected.empty:
        print("No offices match the filters.")
    else:
        columns = [c for c in DISPLAY_COLUMNS if c in selected.columns]
        print(selected[columns].to_string(index=False))

    if run_logger:
        log_path = run_logger.log_run(
            result,
            selected=len(selected),
            filters={"tier": tier_filter, "query": args.query},
        )
        print(f"\nRun log: {log_path}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
