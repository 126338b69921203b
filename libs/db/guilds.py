"""
Per-guild configuration store: tracked users, announcement channel, check schedule.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional

from libs.db.database import GUILDS, get_database
from libs.db.models import (
    DEFAULT_CRON_SCHEDULES,
    RUN_CHECK_TASK,
    CronJob,
    Guild,
    UserStats,
)
from libs.leetcode import LeetCodeAPIError, get_leetcode_client

logger = logging.getLogger(__name__)


class GuildNotConfiguredError(LookupError):
    """Raised when a guild has no stored configuration yet."""

    def __init__(self, guild_id: str) -> None:
        super().__init__(f"Guild {guild_id} not configured")
        self.guild_id = guild_id


class NotTrackedError(LookupError):
    """Raised when a Discord user or LeetCode username is not tracked in a guild."""


def format_check_time(hours: int, minutes: int) -> str:
    return f"{hours:02d}:{minutes:02d}"


def build_cron_schedule(hours: int, minutes: int) -> str:
    """Daily crontab expression for a check at hours:minutes."""
    if not 0 <= hours <= 23:
        raise ValueError(f"Invalid hours: {hours}. Must be between 0 and 23.")
    if not 0 <= minutes <= 59:
        raise ValueError(f"Invalid minutes: {minutes}. Must be between 0 and 59.")
    return f"{minutes} {hours} * * *"


def describe_cron_schedule(schedule: str) -> str:
    """'30 9 * * *' -> '09:30'; non-daily expressions are returned unchanged."""
    parts = schedule.split()
    if len(parts) == 5 and parts[0].isdigit() and parts[1].isdigit() and parts[2:] == ["*", "*", "*"]:
        return format_check_time(int(parts[1]), int(parts[0]))
    return schedule


async def _collection():
    db = await get_database()
    return db[GUILDS]


async def _require_guild(guild_id: str) -> Guild:
    guild = await get_guild_config(guild_id)
    if guild is None:
        raise GuildNotConfiguredError(guild_id)
    return guild


async def get_guild_config(guild_id: str) -> Optional[Guild]:
    collection = await _collection()
    doc = await collection.find_one({"guildId": str(guild_id)})
    return Guild.from_document(doc) if doc else None


async def get_all_guild_configs() -> List[Guild]:
    collection = await _collection()
    return [Guild.from_document(doc) async for doc in collection.find({})]


async def initialize_guild_config(guild_id: str, channel_id: str) -> Guild:
    """Create the guild's configuration with default check times if it does not exist."""
    collection = await _collection()
    defaults = Guild(
        guild_id=str(guild_id),
        channel_id=str(channel_id),
        cron_jobs=[CronJob(schedule) for schedule in DEFAULT_CRON_SCHEDULES],
    ).to_document()
    defaults.pop("guildId")

    await collection.update_one(
        {"guildId": str(guild_id)},
        {"$setOnInsert": defaults},
        upsert=True,
    )
    logger.info(f"Initialized configuration for guild {guild_id}")
    return await _require_guild(guild_id)


async def add_user(guild_id: str, username: str, discord_id: Optional[str] = None) -> str:
    """Start tracking a LeetCode username, storing its calendar stats when available."""
    logger.debug(f"Adding user {username} (discord={discord_id}) to guild {guild_id}")
    guild = await _require_guild(guild_id)

    if username in guild.users:
        return f"`{username}` is already being tracked in this server."

    collection = await _collection()
    linked_id = str(discord_id) if discord_id else None

    try:
        calendar = await get_leetcode_client().get_user_calendar(username)
    except LeetCodeAPIError as e:
        logger.warning(f"Could not fetch calendar data for {username}, adding user without stats: {e}")
        await collection.update_one(
            {"guildId": str(guild_id)},
            {"$set": {f"users.{username}": linked_id}},
        )
        return f"Added {username} to tracking list for this server. (Could not fetch calendar data)"

    stats = UserStats(
        streak=calendar.get("streak", 0),
        total_active_days=calendar.get("totalActiveDays", 0),
        active_years=calendar.get("activeYears", []),
        last_updated=datetime.now(timezone.utc),
    )
    await collection.update_one(
        {"guildId": str(guild_id)},
        {"$set": {
            f"users.{username}": linked_id,
            f"userStats.{username}": stats.to_document(),
        }},
    )
    logger.info(f"Added {username} to guild {guild_id} with streak {stats.streak}")
    return f"Added {username} to tracking list for this server. Current streak: {stats.streak} days."


async def remove_user(guild_id: str, username: str) -> str:
    guild = await get_guild_config(guild_id)
    if guild is None:
        return "Guild not configured."

    if username not in guild.users:
        return f"{username} is not in the tracking list for this server."

    collection = await _collection()
    await collection.update_one(
        {"guildId": str(guild_id)},
        {"$unset": {f"users.{username}": "", f"userStats.{username}": ""}},
    )
    logger.info(f"Removed {username} from guild {guild_id}")
    return f"Removed {username} from tracking list for this server."


async def get_guild_users(guild_id: str) -> Dict[str, Optional[str]]:
    """Map of tracked LeetCode username to linked Discord id (None when unlinked)."""
    guild = await get_guild_config(guild_id)
    if guild is None:
        logger.debug(f"Guild {guild_id} not found in database")
        return {}
    return dict(guild.users)


async def update_guild_channel(guild_id: str, channel_id: str) -> str:
    await _require_guild(guild_id)
    collection = await _collection()
    await collection.update_one(
        {"guildId": str(guild_id)},
        {"$set": {"channelId": str(channel_id)}},
    )
    return "Updated announcement channel for this server."


async def add_cron_job(guild_id: str, hours: int, minutes: int) -> str:
    schedule = build_cron_schedule(hours, minutes)
    label = format_check_time(hours, minutes)
    guild = await _require_guild(guild_id)

    if schedule in guild.check_schedules:
        return f"A check is already scheduled for {label}"

    collection = await _collection()
    await collection.update_one(
        {"guildId": str(guild_id)},
        {"$addToSet": {"cronJobs": CronJob(schedule).to_document()}},
    )
    return f"Added new check time at {label}"


async def remove_cron_job(guild_id: str, hours: int, minutes: int) -> str:
    schedule = build_cron_schedule(hours, minutes)
    label = format_check_time(hours, minutes)
    guild = await _require_guild(guild_id)

    if schedule not in guild.check_schedules:
        return f"No check scheduled for {label}"

    collection = await _collection()
    await collection.update_one(
        {"guildId": str(guild_id)},
        {"$pull": {"cronJobs": {"schedule": schedule, "task": RUN_CHECK_TASK}}},
    )
    return f"Removed check time at {label}"


async def list_cron_jobs(guild_id: str) -> List[str]:
    guild = await _require_guild(guild_id)
    return guild.check_schedules


async def update_user_stats(guild_id: str, username: str) -> bool:
    """Refresh a tracked user's calendar stats. Returns False if the user is unknown or the fetch fails."""
    guild = await _require_guild(guild_id)
    if username not in guild.users:
        logger.debug(f"User {username} not found in guild {guild_id}")
        return False

    try:
        calendar = await get_leetcode_client().get_user_calendar(username)
    except LeetCodeAPIError as e:
        logger.error(f"Error updating stats for {username}: {e}")
        return False

    stats = UserStats(
        streak=calendar.get("streak", 0),
        total_active_days=calendar.get("totalActiveDays", 0),
        active_years=calendar.get("activeYears", []),
        last_updated=datetime.now(timezone.utc),
    )
    collection = await _collection()
    await collection.update_one(
        {"guildId": str(guild_id)},
        {"$set": {f"userStats.{username}": stats.to_document()}},
    )
    return True


async def set_admin_role(guild_id: str, role_id: str) -> str:
    await _require_guild(guild_id)
    collection = await _collection()
    await collection.update_one(
        {"guildId": str(guild_id)},
        {"$set": {"adminRoleId": str(role_id)}},
    )
    return str(role_id)


async def get_admin_role(guild_id: str) -> Optional[str]:
    guild = await get_guild_config(guild_id)
    if guild is None:
        return None
    return guild.admin_role_id or None


async def _toggle_flag(guild_id: str, field_name: str, current: bool) -> bool:
    collection = await _collection()
    await collection.update_one(
        {"guildId": str(guild_id)},
        {"$set": {field_name: not current}},
    )
    return not current


async def toggle_broadcast(guild_id: str) -> bool:
    guild = await _require_guild(guild_id)
    return await _toggle_flag(guild_id, "broadcastEnabled", guild.broadcast_enabled)


async def toggle_contest_reminder(guild_id: str) -> bool:
    guild = await _require_guild(guild_id)
    return await _toggle_flag(guild_id, "contestReminderEnabled", guild.contest_reminder_enabled)
