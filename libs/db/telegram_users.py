"""
Telegram account linkage for tracked LeetCode users.

A Discord user requests a short-lived token, opens the bot's deep link in
Telegram, and the /start handler exchanges the token for the chat id.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional

from pymongo.errors import PyMongoError

from libs.db.database import GUILDS, TELEGRAM_USERS, get_database
from libs.db.guilds import (
    GuildNotConfiguredError,
    NotTrackedError,
    get_all_guild_configs,
    get_guild_config,
)
from libs.db.models import TelegramUser

logger = logging.getLogger(__name__)

TOKEN_TTL = timedelta(minutes=15)


@dataclass
class LinkResult:
    success: bool
    message: str


@dataclass
class TelegramConnection:
    username: str
    user_id: Optional[str]
    connected_guilds: List[Dict[str, str]] = field(default_factory=list)
    user: Optional[TelegramUser] = None


async def _collection():
    db = await get_database()
    return db[TELEGRAM_USERS]


def _as_aware(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


async def set_telegram_token(guild_id: str, discord_id: str, token: str) -> str:
    """Store a 15 minute link token for the LeetCode account mapped to discord_id."""
    guild = await get_guild_config(guild_id)
    if guild is None:
        raise GuildNotConfiguredError(guild_id)

    username = guild.username_for_discord_id(str(discord_id))
    if not username:
        raise NotTrackedError("User not found or not linked to Discord")

    now = datetime.now(timezone.utc)
    collection = await _collection()
    await collection.update_one(
        {"leetcodeUsername": username},
        {
            "$set": {
                "leetcodeUsername": username,
                "userId": str(discord_id),
                "tempToken": token,
                "tokenExpires": now + TOKEN_TTL,
                "lastUpdated": now,
            },
            "$setOnInsert": {"isEnabled": True, "createdAt": now},
        },
        upsert=True,
    )
    logger.debug(f"Generated Telegram link token for {username}")
    return username


async def link_telegram_chat(token: str, chat_id: Any) -> LinkResult:
    """Exchange a link token for a Telegram chat id."""
    collection = await _collection()
    doc = await collection.find_one({"tempToken": token})
    if not doc:
        logger.warning("No matching Telegram link token found")
        return LinkResult(False, "Invalid token. Please check your link.")

    user = TelegramUser.from_document(doc)
    expires = _as_aware(user.token_expires)
    if expires is None or datetime.now(timezone.utc) > expires:
        logger.warning(f"Telegram link token expired for {user.leetcode_username}")
        return LinkResult(False, "Link token has expired. Please generate a new one.")

    chat_id = str(chat_id)
    if user.telegram_chat_id:
        if user.telegram_chat_id == chat_id:
            return LinkResult(True, "✅ You are already connected!")
        return LinkResult(
            False,
            "⚠️ This account is already linked to another Telegram chat. "
            "Please unlink it first or contact support.",
        )

    await collection.update_one(
        {"_id": user.id},
        {"$set": {
            "telegramChatId": chat_id,
            "tempToken": None,
            "tokenExpires": None,
            "lastUpdated": datetime.now(timezone.utc),
        }},
    )
    logger.info(f"Linked {user.leetcode_username} to Telegram chat {chat_id}")
    return LinkResult(True, "Successfully connected! You will now receive LeetCode notifications.")


async def toggle_telegram_updates(guild_id: str, discord_id: str) -> LinkResult:
    guild = await get_guild_config(guild_id)
    if guild is None:
        raise GuildNotConfiguredError(guild_id)

    username = guild.username_for_discord_id(str(discord_id))
    if not username:
        return LinkResult(False, "You are not registered in this server.")

    user = await get_telegram_user(username)
    if user is None or not user.is_linked:
        return LinkResult(False, "You have not connected a Telegram account yet.")

    enabled = not user.is_enabled
    collection = await _collection()
    await collection.update_one(
        {"_id": user.id},
        {"$set": {"isEnabled": enabled, "lastUpdated": datetime.now(timezone.utc)}},
    )
    return LinkResult(
        True, f"Telegram updates have been {'enabled' if enabled else 'disabled'} globally."
    )


async def get_telegram_user(username: str) -> Optional[TelegramUser]:
    collection = await _collection()
    doc = await collection.find_one({"leetcodeUsername": username})
    return TelegramUser.from_document(doc) if doc else None


async def get_connection_by_chat_id(chat_id: Any) -> Optional[TelegramConnection]:
    """The linked account for a chat plus every guild tracking it."""
    collection = await _collection()
    doc = await collection.find_one({"telegramChatId": str(chat_id)})
    if not doc:
        return None

    user = TelegramUser.from_document(doc)
    connected_guilds = [
        {"guildId": guild.guild_id, "channelId": guild.channel_id}
        for guild in await get_all_guild_configs()
        if user.leetcode_username in guild.users
    ]
    return TelegramConnection(
        username=user.leetcode_username,
        user_id=user.user_id,
        connected_guilds=connected_guilds,
        user=user,
    )


async def get_notification_targets(usernames: Iterable[str]) -> Dict[str, str]:
    """Chat ids of linked users with notifications enabled, keyed by LeetCode username."""
    names = list(usernames)
    if not names:
        return {}
    collection = await _collection()
    cursor = collection.find({
        "leetcodeUsername": {"$in": names},
        "isEnabled": True,
        "telegramChatId": {"$ne": None},
    })
    targets: Dict[str, str] = {}
    async for doc in cursor:
        user = TelegramUser.from_document(doc)
        if user.is_linked:
            targets[user.leetcode_username] = user.telegram_chat_id
    return targets


async def migrate_legacy_guild_links(dry_run: bool = False) -> Dict[str, int]:
    """
    Copy per-guild 'telegramUsers' maps from older deployments into the
    telegram_users collection.
    """
    db = await get_database()
    guilds = db[GUILDS]
    collection = db[TELEGRAM_USERS]
    migrated = 0
    errors = 0

    async for guild in guilds.find({"telegramUsers": {"$exists": True}}):
        legacy = guild.get("telegramUsers") or {}
        users = guild.get("users") or {}
        for username, data in legacy.items():
            data = data or {}
            update: Dict[str, Any] = {
                "leetcodeUsername": username,
                "isEnabled": data.get("enabled", True),
                "lastUpdated": datetime.now(timezone.utc),
            }
            discord_id = users.get(username)
            if discord_id and discord_id != "null":
                update["userId"] = str(discord_id)
            if data.get("chatId"):
                update["telegramChatId"] = str(data["chatId"])
            if data.get("tempToken"):
                update["tempToken"] = data["tempToken"]
            if data.get("tokenExpires"):
                update["tokenExpires"] = data["tokenExpires"]

            logger.info(
                f"Migrating {username} (discord={update.get('userId')}, "
                f"chat={update.get('telegramChatId')}) from guild {guild.get('guildId')}"
            )
            if dry_run:
                migrated += 1
                continue
            try:
                await collection.update_one(
                    {"leetcodeUsername": username},
                    {"$set": update, "$setOnInsert": {"createdAt": datetime.now(timezone.utc)}},
                    upsert=True,
                )
                migrated += 1
            except PyMongoError as e:
                logger.error(f"Failed to migrate {username}: {e}", exc_info=True)
                errors += 1

    return {"migrated": migrated, "errors": errors}
