"""
Shared helpers for the Discord bot: command decorators, embeds, tables,
ranking, validation and permission checks.
"""

from apps.leetcode_bot.common.decorators import command_wrapper, handle_command_errors, send_response
from apps.leetcode_bot.common.embed_builder import (
    build_check_status_embed,
    build_daily_problem_embed,
    build_panel_embed,
    build_submission_report_embed,
    format_contest_embed,
)
from apps.leetcode_bot.common.logging import log_command_completion, log_command_data
from apps.leetcode_bot.common.message_builder import build_leaderboard_message, build_table_message
from apps.leetcode_bot.common.permissions import is_bot_owner, is_guild_admin
from apps.leetcode_bot.common.ranking import build_ranked_fields, sort_submissions_by_performance
from apps.leetcode_bot.common.validation import (
    validate_choice_parameter,
    validate_leetcode_username,
    validate_limit,
)

__all__ = [
    'command_wrapper',
    'handle_command_errors',
    'send_response',
    'build_check_status_embed',
    'build_daily_problem_embed',
    'build_panel_embed',
    'build_submission_report_embed',
    'format_contest_embed',
    'log_command_completion',
    'log_command_data',
    'build_leaderboard_message',
    'build_table_message',
    'is_bot_owner',
    'is_guild_admin',
    'build_ranked_fields',
    'sort_submissions_by_performance',
    'validate_choice_parameter',
    'validate_leetcode_username',
    'validate_limit',
]
