"""
Move Telegram links stored on guild documents (older deployments) into the
telegram_users collection.

Examples:
  python -m apps.maintenance.migrate_telegram_users --dry-run
  python -m apps.maintenance.migrate_telegram_users
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Dict

from pymongo.errors import PyMongoError

from libs.db.database import close_database
from libs.db.telegram_users import migrate_legacy_guild_links


async def run(dry_run: bool) -> Dict[str, int]:
    try:
        return await migrate_legacy_guild_links(dry_run=dry_run)
    finally:
        await close_database()


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Migrate legacy per-guild Telegram links to the telegram_users collection",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="List the users that would be migrated without writing anything",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    try:
        result = asyncio.run(run(args.dry_run))
    except (PyMongoError, ConnectionError, ValueError) as e:
        print(f"\n✗ Migration failed: {e}")
        sys.exit(1)

    print("=" * 70)
    print(f"TELEGRAM USER MIGRATION{' (DRY RUN)' if args.dry_run else ''}")
    print("=" * 70)
    print(f"  Migrated: {result['migrated']}")
    print(f"  Errors:   {result['errors']}")
    sys.exit(1 if result["errors"] else 0)


if __name__ == "__main__":
    main()
