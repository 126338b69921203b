"""
Weekly reminder of upcoming LeetCode contests.

Runs daily and posts on Fridays to every guild that enabled reminders with
/togglecontestreminder.
"""

import logging
from datetime import datetime, time, timezone
from typing import Any, Dict, List, Optional

import discord
from discord.ext import tasks

from apps.leetcode_bot.common.constants import HC_PING_CONTEST_REMINDER
from apps.leetcode_bot.common.embed_builder import format_contest_embed
from apps.leetcode_bot.notifications import send_to_guild
from libs.db.guilds import get_all_guild_configs
from libs.healthchecks import ping
from libs.leetcode import LeetCodeAPIError, get_leetcode_client

logger = logging.getLogger(__name__)

FRIDAY = 4
CONTEST_REMINDER_TIME = time(hour=12, minute=0, tzinfo=timezone.utc)

_bot_instance: Optional[discord.Client] = None


def set_bot_instance(bot: discord.Client) -> None:
    global _bot_instance
    _bot_instance = bot


def upcoming_contests(contests: List[Dict[str, Any]], now: Optional[datetime] = None) -> List[Dict[str, Any]]:
    """Contests starting after now, soonest first."""
    now_ts = (now or datetime.now(timezone.utc)).timestamp()
    future = [c for c in contests if c.get("startTime") and int(c["startTime"]) > now_ts]
    return sorted(future, key=lambda c: int(c["startTime"]))


def build_contest_embeds(contests: List[Dict[str, Any]]) -> List[discord.Embed]:
    return [format_contest_embed(contest, index, len(contests)) for index, contest in enumerate(contests)]


async def perform_contest_reminder(bot: discord.Client) -> int:
    """Post upcoming contests to opted-in guilds. Returns the number of guilds reached."""
    ping(HC_PING_CONTEST_REMINDER)

    try:
        contests = upcoming_contests(await get_leetcode_client().get_upcoming_contests())
    except LeetCodeAPIError as e:
        logger.error(f"Contest reminder aborted, contests unavailable: {e}")
        return 0

    if not contests:
        logger.info("No upcoming contests to announce")
        return 0

    embeds = build_contest_embeds(contests)
    sent = 0
    for guild_config in await get_all_guild_configs():
        if not guild_config.contest_reminder_enabled:
            continue
        if await send_to_guild(bot, guild_config, embeds=embeds):
            sent += 1
    logger.info(f"Contest reminder sent to {sent} guild(s)")
    return sent


@tasks.loop(time=CONTEST_REMINDER_TIME)
async def contest_reminder_task():
    if not _bot_instance:
        logger.error("Bot instance not set for contest reminder")
        return
    if datetime.now(timezone.utc).weekday() != FRIDAY:
        return
    try:
        await perform_contest_reminder(_bot_instance)
    except Exception as e:
        logger.error(f"Error in contest reminder task: {e}", exc_info=True)


def setup_contest_reminder_task(bot: discord.Client) -> None:
    set_bot_instance(bot)

    @contest_reminder_task.before_loop
    async def before_contest_reminder():
        await bot.wait_until_ready()

    if not contest_reminder_task.is_running():
        contest_reminder_task.start()
        logger.info("Started contest reminder task (Fridays at 12:00 UTC)")
    else:
        logger.warning("Contest reminder task already running")
