"""
Leaderboard, streak and challenge information commands.
"""

import logging
from typing import Optional

import discord
from discord import app_commands

from apps.leetcode_bot.common.constants import LEADERBOARD_DEFAULT_LIMIT, LEADERBOARD_MAX_LIMIT
from apps.leetcode_bot.common.decorators import command_wrapper
from apps.leetcode_bot.common.embed_builder import build_daily_problem_embed
from apps.leetcode_bot.common.message_builder import build_leaderboard_message
from apps.leetcode_bot.common.validation import validate_leetcode_username, validate_limit
from apps.leetcode_bot.jobs.contest_reminder import build_contest_embeds, upcoming_contests
from libs.db.guilds import GuildNotConfiguredError, NotTrackedError, get_guild_config
from libs.db.submissions import get_current_streak, get_leaderboard_data
from libs.leetcode import get_leetcode_client

logger = logging.getLogger(__name__)


def setup_stats_commands(tree: app_commands.CommandTree, channel_check=None) -> None:
    """Register /leaderboard, /streak, /daily and /contests."""

    @tree.command(name="leaderboard", description="Show the all-time daily challenge leaderboard")
    @app_commands.describe(limit=f"(Optional) Number of users to show (1-{LEADERBOARD_MAX_LIMIT}, default: {LEADERBOARD_DEFAULT_LIMIT})")
    @app_commands.guild_only()
    @command_wrapper("leaderboard", channel_check=channel_check)
    async def leaderboard(interaction: discord.Interaction, limit: int = LEADERBOARD_DEFAULT_LIMIT):
        validate_limit(limit, LEADERBOARD_MAX_LIMIT)
        rows = await get_leaderboard_data(str(interaction.guild_id), limit)
        await interaction.followup.send(build_leaderboard_message(rows, interaction.guild.name))

    @tree.command(name="streak", description="Show the current daily challenge streak")
    @app_commands.describe(username="(Optional) LeetCode username (defaults to your linked account)")
    @app_commands.guild_only()
    @command_wrapper("streak", channel_check=channel_check)
    async def streak(interaction: discord.Interaction, username: Optional[str] = None):
        guild_id = str(interaction.guild_id)
        guild = await get_guild_config(guild_id)
        if guild is None:
            raise GuildNotConfiguredError(guild_id)

        if username:
            username = validate_leetcode_username(username)
        else:
            username = guild.username_for_discord_id(str(interaction.user.id))
            if not username:
                raise NotTrackedError(
                    "You are not linked to a tracked LeetCode account. Pass a username or ask an admin to `/adduser` you."
                )
        if username not in guild.users:
            raise NotTrackedError(f"{username} is not in the tracking list for this server.")

        days = await get_current_streak(guild_id, username)
        if days == 0:
            await interaction.followup.send(f"**{username}** has no active daily challenge streak. Solve today's problem to start one!")
        else:
            await interaction.followup.send(
                f"🔥 **{username}** has solved the daily challenge **{days}** day{'s' if days != 1 else ''} in a row!"
            )

    @tree.command(name="daily", description="Show today's LeetCode daily challenge")
    @command_wrapper("daily", channel_check=channel_check, guild_only=False)
    async def daily(interaction: discord.Interaction):
        client = get_leetcode_client()
        question = await client.get_daily_challenge()
        slug = question["titleSlug"]
        problem = {**question, **(await client.get_problem(slug))}
        await interaction.followup.send(embed=build_daily_problem_embed(problem, slug))

    @tree.command(name="contests", description="Show upcoming LeetCode contests")
    @command_wrapper("contests", channel_check=channel_check, guild_only=False)
    async def contests(interaction: discord.Interaction):
        upcoming = upcoming_contests(await get_leetcode_client().get_upcoming_contests())
        if not upcoming:
            await interaction.followup.send("No upcoming contests found.")
            return
        await interaction.followup.send(embeds=build_contest_embeds(upcoming))
