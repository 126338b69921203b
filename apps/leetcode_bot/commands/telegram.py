"""
Telegram account linking commands.

- /telegram connect: Get a one-time deep link to the Telegram bot
- /telegram toggle: Enable or disable Telegram notifications
- /telegram status: Show the link status
"""

import logging
import secrets

import discord
from discord import app_commands

from apps.leetcode_bot.bot_config import get_bot_config
from apps.leetcode_bot.common.decorators import command_wrapper
from apps.leetcode_bot.notifications import get_telegram_bot_username
from libs.db.guilds import GuildNotConfiguredError, get_guild_config
from libs.db.telegram_users import (
    TOKEN_TTL,
    get_telegram_user,
    set_telegram_token,
    toggle_telegram_updates,
)

logger = logging.getLogger(__name__)

TOKEN_BYTES = 16


def build_deep_link(bot_username: str, token: str) -> str:
    return f"https://t.me/{bot_username.lstrip('@')}?start={token}"


def setup_telegram_command(tree: app_commands.CommandTree, channel_check=None) -> None:
    """Register the /telegram command group."""
    telegram_group = app_commands.Group(
        name="telegram",
        description="Connect Telegram for daily challenge notifications",
        guild_only=True,
    )

    @telegram_group.command(name="connect", description="Get a link to connect your Telegram account")
    @command_wrapper("telegram connect", channel_check=channel_check, ephemeral=True)
    async def telegram_connect(interaction: discord.Interaction):
        bot_username = get_bot_config().telegram_bot_username or get_telegram_bot_username()
        if not bot_username:
            await interaction.followup.send("❌ Telegram integration is not enabled for this bot.", ephemeral=True)
            return

        token = secrets.token_urlsafe(TOKEN_BYTES)
        username = await set_telegram_token(str(interaction.guild_id), str(interaction.user.id), token)
        minutes = int(TOKEN_TTL.total_seconds() // 60)
        await interaction.followup.send(
            f"🔗 **Connect Telegram for {username}**\n"
            f"[Open the Telegram bot]({build_deep_link(bot_username, token)}) and press **Start**.\n"
            f"This link expires in {minutes} minutes.",
            ephemeral=True,
        )

    @telegram_group.command(name="toggle", description="Turn Telegram notifications on or off")
    @command_wrapper("telegram toggle", channel_check=channel_check, ephemeral=True)
    async def telegram_toggle(interaction: discord.Interaction):
        result = await toggle_telegram_updates(str(interaction.guild_id), str(interaction.user.id))
        await interaction.followup.send(
            f"{'✅' if result.success else '❌'} {result.message}", ephemeral=True
        )

    @telegram_group.command(name="status", description="Show your Telegram connection status")
    @command_wrapper("telegram status", channel_check=channel_check, ephemeral=True)
    async def telegram_status(interaction: discord.Interaction):
        guild = await get_guild_config(str(interaction.guild_id))
        if guild is None:
            raise GuildNotConfiguredError(str(interaction.guild_id))

        username = guild.username_for_discord_id(str(interaction.user.id))
        if not username:
            await interaction.followup.send("❌ You are not registered in this server.", ephemeral=True)
            return

        user = await get_telegram_user(username)
        if user is None or not user.is_linked:
            await interaction.followup.send(
                f"❌ **{username}** is not connected to Telegram. Use `/telegram connect` to link it.",
                ephemeral=True,
            )
            return

        await interaction.followup.send(
            f"✅ **{username}** is connected to Telegram.\n"
            f"Notifications: **{'enabled' if user.is_enabled else 'disabled'}**",
            ephemeral=True,
        )

    tree.add_command(telegram_group)
