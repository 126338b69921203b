"""
Remove duplicate daily submission records and repair timezone-shifted dates.

Examples:
  # Preview what would change
  python -m apps.maintenance.dedup_submissions --dry-run

  # Apply the cleanup
  python -m apps.maintenance.dedup_submissions
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from pymongo.errors import PyMongoError

from libs.db.database import close_database
from libs.db.dedup import ACTION_DELETE, DedupReport, dedup_submissions

logger = logging.getLogger(__name__)


def print_report(report: DedupReport) -> None:
    mode = "DRY RUN" if report.dry_run else "APPLIED"

    print("=" * 70)
    print(f"PASS 1: EXACT DUPLICATES ({mode})")
    print("=" * 70)
    if not report.exact_groups:
        print("No exact duplicates found.")
    for group in report.exact_groups:
        guild_id, username, slug, date = group.key
        print(
            f"  {guild_id} / {username} / {slug} / {date.date()}: "
            f"keep {group.keep_id}, delete {len(group.delete_ids)}"
        )

    print("\n" + "=" * 70)
    print(f"PASS 2: TIMEZONE-SHIFTED DATES ({mode})")
    print("=" * 70)
    if not report.repairs:
        print("All dates are UTC midnights.")
    for repair in report.repairs:
        guild_id, username, slug, _ = repair.key
        if repair.action == ACTION_DELETE:
            detail = f"delete (correct record {repair.correct_id} exists)"
        else:
            detail = f"fix date -> {repair.intended_date.isoformat()}"
        print(f"  {guild_id} / {username} / {slug} @ {repair.bad_date.isoformat()}: {detail}")

    print("\n" + "-" * 70)
    print("SUMMARY")
    print("-" * 70)
    print(f"  Exact duplicates deleted:      {report.exact_deleted}")
    print(f"  Timezone duplicates deleted:   {report.tz_deleted}")
    print(f"  Dates fixed to UTC midnight:   {report.tz_fixed}")
    print(f"  Total deleted:                 {report.total_deleted}")
    if report.dry_run:
        print("\nDry run only. Re-run without --dry-run to apply.")


async def run(dry_run: bool) -> DedupReport:
    try:
        return await dedup_submissions(dry_run=dry_run)
    finally:
        await close_database()


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Remove duplicate daily submissions and fix non-UTC-midnight dates",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report what would change without writing anything",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    try:
        report = asyncio.run(run(args.dry_run))
    except (PyMongoError, ConnectionError, ValueError) as e:
        print(f"\n✗ Cleanup failed: {e}")
        sys.exit(1)

    print_report(report)
    sys.exit(0)


if __name__ == "__main__":
    main()
