"""
Bot owner commands.

- /broadcast: Announce something to every server that allows broadcasts
- /healthchecks list: Overview of the monitored scheduled jobs
- /healthchecks status: Details, recent pings and flips of one job
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List

import discord
from discord import app_commands

from apps.leetcode_bot.common.constants import BROADCAST_TYPES, PANEL_CYAN
from apps.leetcode_bot.common.decorators import command_wrapper
from apps.leetcode_bot.common.validation import validate_choice_parameter
from apps.leetcode_bot.notifications import send_to_guild
from libs.db.broadcasts import log_broadcast
from libs.db.guilds import get_all_guild_configs
from libs.healthchecks import (
    HealthchecksAPIError,
    format_time,
    format_time_ago,
    get_healthchecks_client,
)

logger = logging.getLogger(__name__)

BROADCAST_STYLES = {
    "announcement": ("📢 Announcement", discord.Color.blue()),
    "update": ("🆕 Bot Update", discord.Color.green()),
    "maintenance": ("🛠️ Scheduled Maintenance", discord.Color.orange()),
}

BROADCAST_TYPE_CHOICES = [
    app_commands.Choice(name=name.capitalize(), value=name) for name in BROADCAST_TYPES
]

RECENT_PINGS = 5
RECENT_FLIPS = 5


def build_broadcast_embed(broadcast_type: str, message: str) -> discord.Embed:
    title, color = BROADCAST_STYLES[broadcast_type]
    embed = discord.Embed(
        title=title,
        description=message,
        color=color,
        timestamp=datetime.now(timezone.utc),
    )
    embed.set_footer(text="Server admins can opt out with /togglebroadcast")
    return embed


def build_checks_list_embed(checks: List[Dict[str, Any]]) -> discord.Embed:
    embed = discord.Embed(
        title="🩺 Scheduled Job Health",
        color=PANEL_CYAN,
        timestamp=datetime.now(timezone.utc),
    )
    if not checks:
        embed.description = "No checks configured."
        return embed

    lines = [
        f"{check['status_emoji']} **{check['name']}** · last ping {format_time_ago(check['last_ping'])}"
        for check in checks
    ]
    embed.description = "\n".join(lines)
    embed.set_footer(text=f"{len(checks)} check{'s' if len(checks) != 1 else ''}")
    return embed


def build_check_status_embed(
    check: Dict[str, Any],
    pings: List[Dict[str, Any]],
    flips: List[Dict[str, Any]],
) -> discord.Embed:
    embed = discord.Embed(
        title=f"{check['status_emoji']} {check['name']}",
        description=check.get("desc") or None,
        color=PANEL_CYAN,
        timestamp=datetime.now(timezone.utc),
    )
    embed.add_field(name="Status", value=check["status"].capitalize(), inline=True)
    embed.add_field(name="Last Ping", value=format_time(check["last_ping"]), inline=True)
    embed.add_field(name="Next Expected", value=format_time(check["next_ping"]), inline=True)

    if pings:
        ping_lines = [
            f"`{ping.get('type', '?')}` {format_time_ago(ping.get('date'))}"
            for ping in pings[:RECENT_PINGS]
        ]
        embed.add_field(name="Recent Pings", value="\n".join(ping_lines), inline=False)

    if flips:
        flip_lines = [
            f"{'🟢 up' if flip.get('up') else '🔴 down'} · {format_time(flip.get('timestamp'))}"
            for flip in flips[-RECENT_FLIPS:]
        ]
        embed.add_field(name="Recent Status Changes", value="\n".join(flip_lines), inline=False)

    if check.get("n_pings") is not None:
        embed.set_footer(text=f"{check['n_pings']} pings total")
    return embed


def setup_owner_commands(tree: app_commands.CommandTree, channel_check=None) -> None:
    """Register /broadcast and the /healthchecks group."""

    @tree.command(name="broadcast", description="Send an announcement to every server that allows broadcasts")
    @app_commands.describe(type="Kind of announcement", message="Announcement text")
    @app_commands.choices(type=BROADCAST_TYPE_CHOICES)
    @command_wrapper("broadcast", owner_only=True, ephemeral=True, guild_only=False)
    async def broadcast(interaction: discord.Interaction, type: str, message: str):
        broadcast_type = validate_choice_parameter("type", type, set(BROADCAST_TYPES), BROADCAST_TYPES)
        embed = build_broadcast_embed(broadcast_type, message)

        success_count = 0
        fail_count = 0
        for guild_config in await get_all_guild_configs():
            if not guild_config.broadcast_enabled:
                continue
            if await send_to_guild(interaction.client, guild_config, embed=embed):
                success_count += 1
            else:
                fail_count += 1

        await log_broadcast(
            str(interaction.user.id), interaction.user.name, broadcast_type, message, success_count, fail_count
        )
        await interaction.followup.send(
            f"✅ Broadcast sent to **{success_count}** server(s). Failed: **{fail_count}**.",
            ephemeral=True,
        )

    healthchecks_group = app_commands.Group(
        name="healthchecks",
        description="Inspect the health of scheduled jobs",
    )

    @healthchecks_group.command(name="list", description="List monitored scheduled jobs")
    @command_wrapper("healthchecks list", owner_only=True, ephemeral=True, guild_only=False)
    async def healthchecks_list(interaction: discord.Interaction):
        try:
            checks = await get_healthchecks_client().list_checks()
        except HealthchecksAPIError as e:
            await interaction.followup.send(f"❌ {e}", ephemeral=True)
            return
        await interaction.followup.send(embed=build_checks_list_embed(checks), ephemeral=True)

    @healthchecks_group.command(name="status", description="Show status, recent pings and flips of a job")
    @app_commands.describe(name="Check name or slug")
    @command_wrapper("healthchecks status", owner_only=True, ephemeral=True, guild_only=False)
    async def healthchecks_status(interaction: discord.Interaction, name: str):
        client = get_healthchecks_client()
        try:
            check = await client.find_check_by_name(name)
            pings = await client.get_check_pings(check["uuid"], limit=RECENT_PINGS)
            flips = await client.get_check_flips(check["uuid"])
        except HealthchecksAPIError as e:
            await interaction.followup.send(f"❌ {e}", ephemeral=True)
            return
        await interaction.followup.send(embed=build_check_status_embed(check, pings, flips), ephemeral=True)

    tree.add_command(healthchecks_group)
