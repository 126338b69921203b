"""
MongoDB connection utilities shared across services using motor.
"""

from __future__ import annotations

import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import PyMongoError

from libs.db.config import get_db_config

logger = logging.getLogger(__name__)

GUILDS = "guilds"
DAILY_SUBMISSIONS = "daily_submissions"
TELEGRAM_USERS = "telegram_users"
SYSTEM_CONFIG = "system_config"
BROADCAST_LOGS = "broadcast_logs"

_client: Optional[AsyncIOMotorClient] = None
_database: Optional[AsyncIOMotorDatabase] = None


async def get_database() -> AsyncIOMotorDatabase:
    """
    Get or create the shared database handle.
    The client is created on first call and reused for subsequent calls.
    """
    global _client, _database

    if _database is not None:
        return _database

    db_config = get_db_config()
    if not db_config.uri:
        raise ValueError("Missing database config: MONGODB_URI")

    client = AsyncIOMotorClient(
        db_config.uri,
        tz_aware=True,
        serverSelectionTimeoutMS=db_config.server_selection_timeout_ms,
    )
    try:
        await client.admin.command("ping")
    except PyMongoError as e:
        client.close()
        raise ConnectionError(f"Failed to connect to MongoDB: {e}") from e

    _client = client
    _database = client[db_config.database]
    logger.info(f"Connected to MongoDB database '{db_config.database}'")
    return _database


def set_database(database: Optional[AsyncIOMotorDatabase]) -> None:
    """Replace the shared database handle (used by scripts and tests)."""
    global _database
    _database = database


async def close_database() -> None:
    """Close the MongoDB client if open."""
    global _client, _database
    if _client is not None:
        _client.close()
        logger.info("Closed MongoDB client")
    _client = None
    _database = None


async def ping_database() -> bool:
    """Return True if the database answers a ping."""
    if _client is None:
        return False
    try:
        await _client.admin.command("ping")
        return True
    except PyMongoError as e:
        logger.warning(f"Database ping failed: {e}")
        return False


async def ensure_indexes() -> None:
    """Create the indexes every collection relies on. Safe to call repeatedly."""
    db = await get_database()

    await db[GUILDS].create_index("guildId", unique=True)

    submissions = db[DAILY_SUBMISSIONS]
    await submissions.create_index(
        [
            ("guildId", ASCENDING),
            ("leetcodeUsername", ASCENDING),
            ("questionSlug", ASCENDING),
            ("date", ASCENDING),
        ],
        unique=True,
        name="unique_daily_submission",
    )
    await submissions.create_index(
        [("guildId", ASCENDING), ("userId", ASCENDING), ("date", DESCENDING)]
    )
    await submissions.create_index("date")

    telegram_users = db[TELEGRAM_USERS]
    await telegram_users.create_index("leetcodeUsername", unique=True)
    await telegram_users.create_index("userId", unique=True, sparse=True)
    await telegram_users.create_index("telegramChatId")
    await telegram_users.create_index("tempToken")

    await db[SYSTEM_CONFIG].create_index("key", unique=True)

    broadcast_logs = db[BROADCAST_LOGS]
    await broadcast_logs.create_index("senderId")
    await broadcast_logs.create_index("sentAt")

    logger.info("Ensured MongoDB indexes")
