"""
Scheduled jobs of the LeetCode bot.
"""

from apps.leetcode_bot.jobs.contest_reminder import perform_contest_reminder, setup_contest_reminder_task
from apps.leetcode_bot.jobs.daily_check import CheckResult, enhanced_check, run_guild_check
from apps.leetcode_bot.jobs.scheduler import (
    GuildCheckScheduler,
    get_check_scheduler,
    resync_guild_schedule,
    set_check_scheduler,
)
from apps.leetcode_bot.jobs.server_leaderboard import setup_server_leaderboard_task, update_server_leaderboard
from apps.leetcode_bot.jobs.silent_check import perform_silent_check, setup_silent_check_task
from apps.leetcode_bot.jobs.stats_panel import format_uptime, setup_stats_panel_task, update_stats_panel

__all__ = [
    'perform_contest_reminder',
    'setup_contest_reminder_task',
    'CheckResult',
    'enhanced_check',
    'run_guild_check',
    'GuildCheckScheduler',
    'get_check_scheduler',
    'resync_guild_schedule',
    'set_check_scheduler',
    'setup_server_leaderboard_task',
    'update_server_leaderboard',
    'perform_silent_check',
    'setup_silent_check_task',
    'format_uptime',
    'setup_stats_panel_task',
    'update_stats_panel',
]
