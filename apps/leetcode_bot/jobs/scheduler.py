"""
Per-guild cron schedules for the daily check.

Each guild stores its own runCheck cron expressions. They are evaluated in
the configured timezone (Asia/Kolkata by default).
"""

import logging
from typing import List, Optional

import discord
import pytz
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from apps.leetcode_bot.bot_config import get_bot_config
from apps.leetcode_bot.jobs.daily_check import run_guild_check
from libs.db.guilds import get_all_guild_configs, get_guild_config
from libs.db.models import Guild

logger = logging.getLogger(__name__)

MISFIRE_GRACE_SECONDS = 300


def job_id(guild_id: str, schedule: str) -> str:
    return f"{guild_id}:{schedule}"


class GuildCheckScheduler:

    def __init__(
        self,
        bot: discord.Client,
        timezone: Optional[str] = None,
        scheduler: Optional[AsyncIOScheduler] = None,
    ) -> None:
        self._bot = bot
        self._timezone = pytz.timezone(timezone or get_bot_config().cron_timezone)
        self._scheduler = scheduler or AsyncIOScheduler(timezone=self._timezone)

    @property
    def running(self) -> bool:
        return self._scheduler.running

    def guild_job_ids(self, guild_id: str) -> List[str]:
        prefix = f"{guild_id}:"
        return sorted(job.id for job in self._scheduler.get_jobs() if job.id.startswith(prefix))

    def remove_guild(self, guild_id: str) -> None:
        for existing in self.guild_job_ids(guild_id):
            self._scheduler.remove_job(existing)

    def sync_guild(self, guild: Guild) -> int:
        """Make the scheduled jobs of a guild match its stored schedules."""
        wanted = {job_id(guild.guild_id, schedule): schedule for schedule in guild.check_schedules}

        for existing in self.guild_job_ids(guild.guild_id):
            if existing not in wanted:
                self._scheduler.remove_job(existing)
                logger.info(f"Removed check job {existing}")

        scheduled = 0
        for new_id, schedule in wanted.items():
            if self._scheduler.get_job(new_id) is not None:
                scheduled += 1
                continue
            try:
                trigger = CronTrigger.from_crontab(schedule, timezone=self._timezone)
            except ValueError as e:
                logger.error(f"Invalid cron schedule '{schedule}' for guild {guild.guild_id}: {e}")
                continue
            self._scheduler.add_job(
                run_guild_check,
                trigger,
                args=[self._bot, guild.guild_id],
                id=new_id,
                name=f"daily check {new_id}",
                max_instances=1,
                coalesce=True,
                misfire_grace_time=MISFIRE_GRACE_SECONDS,
                replace_existing=True,
            )
            scheduled += 1
            logger.info(f"Scheduled check job {new_id} ({self._timezone.zone})")
        return scheduled

    async def load_all(self) -> int:
        guilds = await get_all_guild_configs()
        total = sum(self.sync_guild(guild) for guild in guilds)
        logger.info(f"Scheduled {total} check job(s) across {len(guilds)} guild(s)")
        return total

    def start(self) -> None:
        if not self._scheduler.running:
            self._scheduler.start()
            logger.info("Guild check scheduler started")

    def shutdown(self) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
            logger.info("Guild check scheduler stopped")


_scheduler: Optional[GuildCheckScheduler] = None


def set_check_scheduler(scheduler: Optional[GuildCheckScheduler]) -> None:
    global _scheduler
    _scheduler = scheduler


def get_check_scheduler() -> Optional[GuildCheckScheduler]:
    return _scheduler


async def resync_guild_schedule(guild_id: str) -> None:
    """Reload a guild's schedules after they were changed through a command."""
    if _scheduler is None:
        return
    guild = await get_guild_config(guild_id)
    if guild is None:
        _scheduler.remove_guild(guild_id)
    else:
        _scheduler.sync_guild(guild)
