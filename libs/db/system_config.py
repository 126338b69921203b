"""
Singleton key-value settings, used to remember posted message ids.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from libs.db.database import SYSTEM_CONFIG, get_database

SERVER_LEADERBOARD_MESSAGE_KEY = "server_leaderboard_message_id"
STATS_PANEL_MESSAGE_KEY = "stats_panel_message_id"


async def get_config_value(key: str) -> Optional[Any]:
    db = await get_database()
    doc = await db[SYSTEM_CONFIG].find_one({"key": key})
    return doc.get("value") if doc else None


async def set_config_value(key: str, value: Any) -> None:
    db = await get_database()
    await db[SYSTEM_CONFIG].update_one(
        {"key": key},
        {"$set": {"key": key, "value": value, "lastUpdated": datetime.now(timezone.utc)}},
        upsert=True,
    )
