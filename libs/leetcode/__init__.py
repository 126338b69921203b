"""
LeetCode proxy API client shared across services (Discord bot, Telegram bot, scripts).
"""

from libs.leetcode.client import (
    ACCEPTED,
    LeetCodeAPIError,
    LeetCodeClient,
    close_leetcode_client,
    get_leetcode_client,
)
from libs.leetcode.config import LeetCodeAPIConfig, get_api_config
from libs.leetcode.parsing import (
    is_utc_midnight,
    next_utc_midnight,
    parse_duration,
    parse_memory,
    parse_problem_stats,
    parse_timestamp,
    utc_midnight,
)

__all__ = [
    'ACCEPTED',
    'LeetCodeAPIError',
    'LeetCodeClient',
    'close_leetcode_client',
    'get_leetcode_client',
    'LeetCodeAPIConfig',
    'get_api_config',
    'is_utc_midnight',
    'next_utc_midnight',
    'parse_duration',
    'parse_memory',
    'parse_problem_stats',
    'parse_timestamp',
    'utc_midnight',
]
