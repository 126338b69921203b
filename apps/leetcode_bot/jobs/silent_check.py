"""
Nightly performance report.

Shortly before the UTC day ends, the best accepted submission of every
tracked user is recorded without pinging anyone, and guilds with at least
one completion get a ranking of the day's solutions by runtime.
"""

import logging
from datetime import time, timezone
from typing import Any, Dict, List, Optional

import discord
from discord.ext import tasks
from pymongo.errors import PyMongoError

from apps.leetcode_bot.common.constants import HC_PING_SILENT_CHECK
from apps.leetcode_bot.common.embed_builder import build_submission_report_embed
from apps.leetcode_bot.common.ranking import build_ranked_fields, sort_submissions_by_performance
from apps.leetcode_bot.notifications import send_to_guild
from libs.db.guilds import get_all_guild_configs
from libs.db.models import Guild
from libs.db.submissions import record_daily_submission
from libs.healthchecks import ping
from libs.leetcode import LeetCodeAPIError, get_leetcode_client, parse_timestamp, utc_midnight

logger = logging.getLogger(__name__)

SILENT_CHECK_TIME = time(hour=23, minute=30, tzinfo=timezone.utc)

_bot_instance: Optional[discord.Client] = None


def set_bot_instance(bot: discord.Client) -> None:
    global _bot_instance
    _bot_instance = bot


async def collect_daily_submissions(guild_config: Guild, problem: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Best submission of today's problem for every tracked user who solved it, recorded silently."""
    client = get_leetcode_client()
    slug = problem["titleSlug"]
    day = utc_midnight()
    rows = []

    for username, discord_id in guild_config.users.items():
        try:
            submission = await client.get_best_daily_submission(username, slug, day)
        except LeetCodeAPIError as e:
            logger.warning(f"Silent check: could not fetch submissions of {username}: {e}")
            continue
        if submission is None:
            continue

        try:
            await record_daily_submission(
                guild_id=guild_config.guild_id,
                username=username,
                user_id=discord_id,
                question_title=problem.get("title") or slug,
                question_slug=slug,
                difficulty=problem.get("difficulty") or "Medium",
                submission_time=parse_timestamp(submission.get("timestamp")),
                day=day,
            )
        except PyMongoError as e:
            logger.error(f"Silent check: failed to record {username} in guild {guild_config.guild_id}: {e}", exc_info=True)

        rows.append({"username": username, "discord_id": discord_id, "submission": submission})
    return rows


async def perform_silent_check(bot: discord.Client) -> int:
    """Run the report for every guild. Returns the number of reports posted."""
    logger.info("Running silent daily check")
    ping(HC_PING_SILENT_CHECK)

    try:
        problem = await get_leetcode_client().get_daily_challenge()
    except LeetCodeAPIError as e:
        logger.error(f"Silent check aborted, daily challenge unavailable: {e}")
        return 0

    posted = 0
    for guild_config in await get_all_guild_configs():
        if not guild_config.users:
            continue

        rows = await collect_daily_submissions(guild_config, problem)
        if not rows:
            logger.info(f"Silent check: no completions in guild {guild_config.guild_id}")
            continue

        fields = build_ranked_fields(sort_submissions_by_performance(rows))
        embed = build_submission_report_embed(problem.get("title") or problem["titleSlug"], fields)
        if await send_to_guild(bot, guild_config, embed=embed):
            posted += 1

    logger.info(f"Silent check complete, posted {posted} report(s)")
    return posted


@tasks.loop(time=SILENT_CHECK_TIME)
async def silent_check_task():
    if not _bot_instance:
        logger.error("Bot instance not set for silent check")
        return
    try:
        await perform_silent_check(_bot_instance)
    except Exception as e:
        logger.error(f"Error in silent check task: {e}", exc_info=True)


def setup_silent_check_task(bot: discord.Client) -> None:
    set_bot_instance(bot)

    @silent_check_task.before_loop
    async def before_silent_check():
        await bot.wait_until_ready()

    if not silent_check_task.is_running():
        silent_check_task.start()
        logger.info("Started silent check task (daily at 23:30 UTC)")
    else:
        logger.warning("Silent check task already running")
