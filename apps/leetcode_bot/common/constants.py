"""
Constants used across Discord bot commands and jobs.
"""

import discord

# =============================================================================
# Visual Branding
# =============================================================================

LEETCODE_ORANGE = discord.Color(0xFFA116)
STATUS_GREEN = discord.Color(0x00FF00)
PANEL_CYAN = discord.Color(0x00D9FF)
BIWEEKLY_CONTEST_COLOR = discord.Color(0x7B68EE)
WEEKLY_CONTEST_COLOR = discord.Color(0xFFA116)

DIFFICULTY_COLORS = {
    "Easy": discord.Color(0x00B8A3),
    "Medium": discord.Color(0xFFC01E),
    "Hard": discord.Color(0xFF375F),
}

# =============================================================================
# Discord Limits
# =============================================================================

DISCORD_MESSAGE_MAX_LENGTH = 2000
EMBED_MAX_FIELDS = 25
EMBED_FIELD_VALUE_MAX_LENGTH = 1024

# =============================================================================
# Limits and Defaults
# =============================================================================

LEADERBOARD_DEFAULT_LIMIT = 10
LEADERBOARD_MAX_LIMIT = 25
LEETCODE_USERNAME_MAX_LENGTH = 30

LEETCODE_BASE_URL = "https://leetcode.com"

BROADCAST_TYPES = ["announcement", "update", "maintenance"]

# =============================================================================
# Healthcheck ping environment keys
# =============================================================================

HC_PING_DAILY_CHECK = "HC_PING_DAILY_CHECK"
HC_PING_SILENT_CHECK = "HC_PING_SILENT_CHECK"
HC_PING_CONTEST_REMINDER = "HC_PING_CONTEST_REMINDER"
HC_PING_STATS_PANEL = "HC_PING_STATS_PANEL"
HC_PING_SERVER_LEADERBOARD = "HC_PING_SERVER_LEADERBOARD"
