"""
Commands for managing the tracked LeetCode users of a server.
"""

import logging
from typing import Optional

import discord
from discord import app_commands

from apps.leetcode_bot.common.decorators import command_wrapper
from apps.leetcode_bot.common.message_builder import build_table_message
from apps.leetcode_bot.common.validation import validate_leetcode_username
from apps.leetcode_bot.jobs.daily_check import enhanced_check
from libs.db.guilds import GuildNotConfiguredError, add_user, get_guild_config, remove_user

logger = logging.getLogger(__name__)


def setup_tracking_commands(tree: app_commands.CommandTree, channel_check=None) -> None:
    """Register /adduser, /removeuser, /listusers and /check."""

    @tree.command(name="adduser", description="Add a LeetCode username to track")
    @app_commands.describe(
        username="The LeetCode username to add",
        member="(Optional) Discord member to link (defaults to you)",
    )
    @app_commands.guild_only()
    @command_wrapper("adduser", channel_check=channel_check, admin_only=True)
    async def adduser(interaction: discord.Interaction, username: str, member: Optional[discord.Member] = None):
        username = validate_leetcode_username(username)
        discord_id = str((member or interaction.user).id)
        message = await add_user(str(interaction.guild_id), username, discord_id)
        await interaction.followup.send(message)

    @tree.command(name="removeuser", description="Remove a LeetCode username from tracking")
    @app_commands.describe(username="The LeetCode username to remove")
    @app_commands.guild_only()
    @command_wrapper("removeuser", channel_check=channel_check, admin_only=True)
    async def removeuser(interaction: discord.Interaction, username: str):
        message = await remove_user(str(interaction.guild_id), username.strip())
        await interaction.followup.send(message)

    @tree.command(name="listusers", description="List all tracked LeetCode usernames")
    @app_commands.guild_only()
    @command_wrapper("listusers", channel_check=channel_check)
    async def listusers(interaction: discord.Interaction):
        guild = await get_guild_config(str(interaction.guild_id))
        if guild is None:
            raise GuildNotConfiguredError(str(interaction.guild_id))
        if not guild.users:
            await interaction.followup.send("No users are being tracked in this server.")
            return

        rows = []
        for username, discord_id in sorted(guild.users.items(), key=lambda item: item[0].lower()):
            stats = guild.user_stats.get(username)
            member = interaction.guild.get_member(int(discord_id)) if discord_id else None
            rows.append([
                username,
                member.display_name if member else "-",
                stats.streak if stats else "-",
            ])

        message = build_table_message(
            f"## 👥 Tracked Users ({len(rows)})",
            rows,
            headers=["LeetCode User", "Discord", "Streak"],
        )
        await interaction.followup.send(message)

    @tree.command(name="check", description="Run a manual check of today's LeetCode challenge status")
    @app_commands.guild_only()
    @command_wrapper("check", channel_check=channel_check)
    async def check(interaction: discord.Interaction):
        guild = await get_guild_config(str(interaction.guild_id))
        if guild is None:
            raise GuildNotConfiguredError(str(interaction.guild_id))
        if not guild.users:
            await interaction.followup.send("No users are being tracked in this server. Use `/adduser` first.")
            return

        result = await enhanced_check(guild.users, guild.guild_id)
        await interaction.followup.send(**result.message_kwargs())
