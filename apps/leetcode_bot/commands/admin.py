"""
Server setup and administration commands.

- /setup channel: Create the server configuration
- /setchannel: Change the announcement channel
- /setadminrole: Let a role run admin commands
- /addcron, /removecron, /listcrons: Manage daily check times
- /togglecontestreminder, /togglebroadcast: Opt in or out of announcements
"""

import logging

import discord
from discord import app_commands

from apps.leetcode_bot.bot_config import get_bot_config
from apps.leetcode_bot.common.decorators import command_wrapper
from apps.leetcode_bot.jobs.scheduler import resync_guild_schedule
from apps.leetcode_bot.notifications import can_send
from libs.db.guilds import (
    add_cron_job,
    describe_cron_schedule,
    initialize_guild_config,
    list_cron_jobs,
    remove_cron_job,
    set_admin_role,
    toggle_broadcast,
    toggle_contest_reminder,
    update_guild_channel,
)

logger = logging.getLogger(__name__)


def _permission_warning(channel: discord.TextChannel) -> str:
    if can_send(channel):
        return ""
    return (
        f"\n⚠️ I can't post in {channel.mention} yet. "
        "Please grant me **Send Messages** and **Embed Links** there."
    )


def setup_setup_command(tree: app_commands.CommandTree, channel_check=None) -> None:
    """Register the /setup command group."""
    setup_group = app_commands.Group(
        name="setup",
        description="Set up the bot for this server",
        default_permissions=discord.Permissions(manage_guild=True),
        guild_only=True,
    )

    @setup_group.command(name="channel", description="Set up the bot for this server and choose the announcement channel")
    @app_commands.describe(channel="Channel for daily check announcements")
    @command_wrapper("setup channel", channel_check=channel_check, admin_only=True)
    async def setup_channel(interaction: discord.Interaction, channel: discord.TextChannel):
        guild_id = str(interaction.guild_id)
        guild = await initialize_guild_config(guild_id, str(channel.id))
        await resync_guild_schedule(guild_id)

        times = ", ".join(describe_cron_schedule(s) for s in guild.check_schedules) or "none"
        timezone_name = get_bot_config().cron_timezone
        await interaction.followup.send(
            f"✅ Bot configured! Announcements will be posted in {channel.mention}.\n"
            f"Daily checks are scheduled at: {times} ({timezone_name}).\n"
            "Use `/adduser` to start tracking LeetCode users."
            + _permission_warning(channel)
        )

    tree.add_command(setup_group)


def setup_admin_commands(tree: app_commands.CommandTree, channel_check=None) -> None:
    """Register the server admin commands."""

    @tree.command(name="setchannel", description="Change the announcement channel")
    @app_commands.describe(channel="New announcement channel")
    @app_commands.guild_only()
    @command_wrapper("setchannel", channel_check=channel_check, admin_only=True)
    async def setchannel(interaction: discord.Interaction, channel: discord.TextChannel):
        message = await update_guild_channel(str(interaction.guild_id), str(channel.id))
        await interaction.followup.send(f"✅ {message} ({channel.mention})" + _permission_warning(channel))

    @tree.command(name="setadminrole", description="Allow a role to manage the bot in this server")
    @app_commands.describe(role="Role that may run admin commands")
    @app_commands.guild_only()
    @command_wrapper("setadminrole", channel_check=channel_check, admin_only=True)
    async def setadminrole(interaction: discord.Interaction, role: discord.Role):
        await set_admin_role(str(interaction.guild_id), str(role.id))
        await interaction.followup.send(f"✅ Members with {role.mention} can now run admin commands.")

    @tree.command(name="addcron", description="Schedule a daily check at the given time (server timezone)")
    @app_commands.describe(hours="Hour of the day (0-23)", minutes="Minute of the hour (0-59)")
    @app_commands.guild_only()
    @command_wrapper("addcron", channel_check=channel_check, admin_only=True)
    async def addcron(
        interaction: discord.Interaction,
        hours: app_commands.Range[int, 0, 23],
        minutes: app_commands.Range[int, 0, 59],
    ):
        guild_id = str(interaction.guild_id)
        message = await add_cron_job(guild_id, hours, minutes)
        await resync_guild_schedule(guild_id)
        await interaction.followup.send(f"{message} ({get_bot_config().cron_timezone})")

    @tree.command(name="removecron", description="Remove a scheduled daily check")
    @app_commands.describe(hours="Hour of the day (0-23)", minutes="Minute of the hour (0-59)")
    @app_commands.guild_only()
    @command_wrapper("removecron", channel_check=channel_check, admin_only=True)
    async def removecron(
        interaction: discord.Interaction,
        hours: app_commands.Range[int, 0, 23],
        minutes: app_commands.Range[int, 0, 59],
    ):
        guild_id = str(interaction.guild_id)
        message = await remove_cron_job(guild_id, hours, minutes)
        await resync_guild_schedule(guild_id)
        await interaction.followup.send(message)

    @tree.command(name="listcrons", description="List the scheduled daily check times")
    @app_commands.guild_only()
    @command_wrapper("listcrons", channel_check=channel_check)
    async def listcrons(interaction: discord.Interaction):
        schedules = await list_cron_jobs(str(interaction.guild_id))
        if not schedules:
            await interaction.followup.send("No check times scheduled. Use `/addcron` to add one.")
            return
        lines = "\n".join(f"• {describe_cron_schedule(s)}" for s in schedules)
        await interaction.followup.send(
            f"**Scheduled check times ({get_bot_config().cron_timezone}):**\n{lines}"
        )

    @tree.command(name="togglecontestreminder", description="Turn the Friday contest reminder on or off")
    @app_commands.guild_only()
    @command_wrapper("togglecontestreminder", channel_check=channel_check, admin_only=True)
    async def togglecontestreminder(interaction: discord.Interaction):
        enabled = await toggle_contest_reminder(str(interaction.guild_id))
        await interaction.followup.send(
            f"✅ Contest reminders are now **{'enabled' if enabled else 'disabled'}** for this server."
        )

    @tree.command(name="togglebroadcast", description="Turn announcements from the bot developers on or off")
    @app_commands.guild_only()
    @command_wrapper("togglebroadcast", channel_check=channel_check, admin_only=True)
    async def togglebroadcast(interaction: discord.Interaction):
        enabled = await toggle_broadcast(str(interaction.guild_id))
        await interaction.followup.send(
            f"✅ Broadcast messages are now **{'enabled' if enabled else 'disabled'}** for this server."
        )
