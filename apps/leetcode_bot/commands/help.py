"""
/help command, rendered from the command catalog.
"""

import logging
from typing import Dict, List, Any

import discord
from discord import app_commands

from apps.leetcode_bot.common.constants import LEETCODE_ORANGE
from apps.leetcode_bot.common.decorators import command_wrapper
from apps.leetcode_bot.commands.catalog import format_usage, get_commands, group_by_category

logger = logging.getLogger(__name__)


def build_help_embed(commands: List[Dict[str, Any]]) -> discord.Embed:
    embed = discord.Embed(
        title="📖 LeetCode Bot Commands",
        description="Track your server's daily LeetCode challenge progress. 🔒 = admin only.",
        color=LEETCODE_ORANGE,
    )
    for category, members in group_by_category(commands).items():
        lines = [
            f"`{format_usage(command)}`{' 🔒' if command['adminOnly'] else ''} · {command['description']}"
            for command in members
        ]
        embed.add_field(name=category, value="\n".join(lines), inline=False)
    return embed


def setup_help_command(tree: app_commands.CommandTree, channel_check=None) -> None:

    @tree.command(name="help", description="Show the list of available commands")
    @command_wrapper("help", channel_check=channel_check, ephemeral=True, guild_only=False)
    async def help_command(interaction: discord.Interaction):
        await interaction.followup.send(embed=build_help_embed(get_commands()), ephemeral=True)
