#!/usr/bin/env python3
"""
DQQ Export Analysis
===================
Computes daily DQQ indicators for every active user in a JSON data export
(users + meals collections) and writes the result to a JSON file.

Usage:
    python scripts/analyze_export.py data/export.json --cutoff 2025-04-06
    python scripts/analyze_export.py data/export.json --persist
"""

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from dqq_engine.daily import (  # noqa: E402
    DEFAULT_MIN_DAYS,
    DEFAULT_MIN_MEALS,
    DailySummary,
    analyze_export,
)
from dqq_engine.engine import RULESET_VERSION  # noqa: E402
from dqq_engine.store import DqqResultStore  # noqa: E402
from app.shared.hashing import canonicalize_and_hash  # noqa: E402

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def persist_results(analyzed) -> int:
    """Save every analyzed day through the result store. Returns rows saved."""
    store = DqqResultStore.get_instance()
    if not store.enabled:
        logger.warning("Result store disabled (DATABASE_URL unset or DQQ_STORE_ENABLED=false)")
        return 0

    saved = 0
    for user in analyzed:
        for day in user["days"]:
            summary = DailySummary(
                day=day["day"],
                meal_count=day["meal_count"],
                answers=day["answers"],
                results=day["results"],
                meal_ids=day["meal_ids"],
            )
            output_hash = canonicalize_and_hash(day["results"])
            if store.save_daily(user["user_id"], summary, output_hash, RULESET_VERSION):
                saved += 1
    return saved


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Daily DQQ analysis of a data export")
    parser.add_argument("export", help="Path to the exported JSON file")
    parser.add_argument("--cutoff", help="Ignore meals before this date (YYYY-MM-DD)")
    parser.add_argument("--min-days", type=int, default=DEFAULT_MIN_DAYS,
                        help="Keep users with more than this many days of meals")
    parser.add_argument("--min-meals", type=int, default=DEFAULT_MIN_MEALS,
                        help="Keep users with more than this many meals")
    parser.add_argument("--output", "-o", default=None,
                        help="Output path (default: usersWithMealsAndDqq.json next to the export)")
    parser.add_argument("--persist", action="store_true", help="Save daily results to the database")
    args = parser.parse_args(argv)

    export_path = Path(args.export)
    if not export_path.exists():
        logger.error(f"Export not found: {export_path}")
        return 1

    cutoff = None
    if args.cutoff:
        try:
            cutoff = datetime.strptime(args.cutoff, "%Y-%m-%d")
        except ValueError:
            logger.error(f"Invalid cutoff date '{args.cutoff}', expected YYYY-MM-DD")
            return 1

    with open(export_path, "r", encoding="utf-8") as f:
        export = json.load(f)

    analyzed = analyze_export(export, cutoff=cutoff, min_days=args.min_days, min_meals=args.min_meals)

    for user in analyzed:
        logger.info(
            f"{user['display_name']} ({user['role']}): "
            f"{user['meal_count']} meals over {user['day_count']} days"
        )

    output_path = Path(args.output) if args.output else export_path.parent / "usersWithMealsAndDqq.json"
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(analyzed, f, indent=2)
    logger.info(f"Wrote {len(analyzed)} users to {output_path}")

    if args.persist:
        saved = persist_results(analyzed)
        logger.info(f"Persisted {saved} daily results")

    return 0


if __name__ == "__main__":
    sys.exit(main())
