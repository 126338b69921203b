"""
Slash commands of the LeetCode bot.

Each setup_* function registers its commands on the bot's command tree.
"""

from apps.leetcode_bot.commands.admin import setup_admin_commands, setup_setup_command
from apps.leetcode_bot.commands.help import setup_help_command
from apps.leetcode_bot.commands.owner import setup_owner_commands
from apps.leetcode_bot.commands.stats import setup_stats_commands
from apps.leetcode_bot.commands.telegram import setup_telegram_command
from apps.leetcode_bot.commands.tracking import setup_tracking_commands

__all__ = [
    'setup_admin_commands',
    'setup_setup_command',
    'setup_help_command',
    'setup_owner_commands',
    'setup_stats_commands',
    'setup_telegram_command',
    'setup_tracking_commands',
]
