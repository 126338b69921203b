"""
Scheduled daily challenge check for a guild.

Checks every tracked user against today's challenge, records completions,
posts the status embed to the guild's channel and notifies linked Telegram
chats.
"""

import asyncio
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import discord
from pymongo.errors import PyMongoError

from apps.leetcode_bot.common.constants import HC_PING_DAILY_CHECK
from apps.leetcode_bot.common.embed_builder import build_check_status_embed, problem_url
from apps.leetcode_bot.notifications import get_announcement_channel, send_telegram_message
from libs.db.guilds import get_guild_config
from libs.db.submissions import record_daily_submission
from libs.db.telegram_users import get_notification_targets
from libs.healthchecks import ping
from libs.leetcode import LeetCodeAPIError, get_leetcode_client, parse_timestamp, utc_midnight

logger = logging.getLogger(__name__)

CHECK_ERROR_MESSAGE = "Error checking challenge status."

# One check at a time per guild
_guild_locks: Dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)


@dataclass
class CheckResult:
    embed: Optional[discord.Embed] = None
    content: Optional[str] = None
    problem: Dict[str, Any] = field(default_factory=dict)
    completed: Dict[str, bool] = field(default_factory=dict)
    newly_recorded: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.embed is not None

    def message_kwargs(self) -> Dict[str, Any]:
        if self.embed is not None:
            return {"embed": self.embed}
        return {"content": self.content}


async def _user_completed(username: str, slug: str) -> bool:
    try:
        return await get_leetcode_client().check_user(username, slug)
    except LeetCodeAPIError as e:
        logger.warning(f"Could not check {username} for {slug}: {e}")
        return False


async def _record_completion(
    guild_id: str, username: str, discord_id: Optional[str], problem: Dict[str, Any], slug: str
) -> bool:
    """Store today's completion if the user has an accepted submission dated today."""
    try:
        submission = await get_leetcode_client().get_best_daily_submission(username, slug)
    except LeetCodeAPIError as e:
        logger.warning(f"Could not fetch submissions of {username}: {e}")
        return False
    if submission is None:
        return False

    try:
        _, created = await record_daily_submission(
            guild_id=guild_id,
            username=username,
            user_id=discord_id,
            question_title=problem.get("title") or slug,
            question_slug=slug,
            difficulty=problem.get("difficulty") or "Medium",
            submission_time=parse_timestamp(submission.get("timestamp")),
            day=utc_midnight(),
        )
    except PyMongoError as e:
        logger.error(f"Failed to record submission of {username} in guild {guild_id}: {e}", exc_info=True)
        return False
    return created


async def enhanced_check(
    users: Dict[str, Optional[str]], guild_id: str, record: bool = True
) -> CheckResult:
    """
    Build the challenge status embed for users (LeetCode username -> Discord id).

    API failures while fetching the challenge produce a plain error message
    instead of an embed.
    """
    client = get_leetcode_client()
    try:
        daily = await client.get_daily_challenge()
        slug = daily["titleSlug"]
        problem = {**daily, **(await client.get_problem(slug))}
    except LeetCodeAPIError as e:
        logger.error(f"Error during enhanced check: {e}", exc_info=True)
        return CheckResult(content=CHECK_ERROR_MESSAGE)

    usernames = list(users)
    results = await asyncio.gather(*(_user_completed(username, slug) for username in usernames))
    completed = dict(zip(usernames, results))

    newly_recorded = []
    if record:
        for username in usernames:
            if completed[username] and await _record_completion(guild_id, username, users[username], problem, slug):
                newly_recorded.append(username)

    return CheckResult(
        embed=build_check_status_embed(problem, slug, completed),
        problem=problem,
        completed=completed,
        newly_recorded=newly_recorded,
    )


def build_telegram_notification(problem: Dict[str, Any], completed: bool) -> str:
    title = problem.get("title") or problem.get("titleSlug", "today's problem")
    url = problem_url(problem, problem.get("titleSlug", ""))
    if completed:
        return f"✅ You completed today's LeetCode challenge: {title}\nGreat job, keep the streak going! 🔥"
    return (
        f"⏰ Reminder: you haven't solved today's LeetCode challenge yet.\n\n"
        f"📌 {title} ({problem.get('difficulty') or 'Unknown'})\n{url}"
    )


async def notify_telegram_users(result: CheckResult) -> int:
    """Message linked users: reminders for pending users, congratulations for new completions."""
    if not result.ok or not result.completed:
        return 0

    try:
        targets = await get_notification_targets(result.completed.keys())
    except PyMongoError as e:
        logger.error(f"Failed to load Telegram notification targets: {e}", exc_info=True)
        return 0

    sent = 0
    for username, chat_id in targets.items():
        done = result.completed.get(username, False)
        if done and username not in result.newly_recorded:
            continue
        if await send_telegram_message(chat_id, build_telegram_notification(result.problem, done)):
            sent += 1
    if sent:
        logger.info(f"Sent {sent} Telegram notification(s)")
    return sent


async def run_guild_check(bot: discord.Client, guild_id: str) -> bool:
    """Run the daily check for one guild and post the result. Returns True if posted."""
    async with _guild_locks[str(guild_id)]:
        logger.info(f"Running daily check for guild {guild_id}")
        guild_config = await get_guild_config(guild_id)
        if guild_config is None:
            logger.warning(f"Skipping daily check: guild {guild_id} is not configured")
            return False
        if not guild_config.users:
            logger.info(f"Skipping daily check: no users tracked in guild {guild_id}")
            return False

        channel = await get_announcement_channel(bot, guild_config)
        if channel is None:
            return False

        result = await enhanced_check(guild_config.users, guild_config.guild_id)
        try:
            await channel.send(**result.message_kwargs())
        except discord.HTTPException as e:
            logger.error(f"Failed to post daily check for guild {guild_id}: {e}")
            return False

        await notify_telegram_users(result)
        ping(HC_PING_DAILY_CHECK)
        logger.info(f"Daily check complete for guild {guild_id}")
        return True
