"""
Container health probe for the LeetCode bot.

Healthy means the bot has a live gateway session (it touches the readiness
file in on_ready and deletes it on disconnect) and MongoDB answers a ping.
Exit status 0 when healthy, 1 otherwise.
"""

from __future__ import annotations

import asyncio
import os
import sys
from pathlib import Path

from libs.db.database import close_database, get_database

READINESS_FILE = Path(os.getenv("BOT_READINESS_FILE", "/tmp/leetcode-bot-ready"))


async def mongo_reachable() -> bool:
    # get_database pings on connect and raises when the server is unreachable
    try:
        await get_database()
    except (ConnectionError, ValueError):
        return False
    finally:
        await close_database()
    return True


async def probe() -> int:
    if not READINESS_FILE.is_file():
        return 1
    return 0 if await mongo_reachable() else 1


def main() -> int:
    return asyncio.run(probe())


if __name__ == "__main__":
    sys.exit(main())
