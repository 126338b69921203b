"""
Command logging utilities for the Discord bot.
"""

import logging
import time
from typing import Any, Dict, Optional

import discord

logger = logging.getLogger(__name__)

_HIDDEN_PARAMS = ('command_start_time', 'interaction')


def _describe_user(interaction: discord.Interaction) -> str:
    user = interaction.user
    return f"{user.name} ({user.id})"


def _describe_location(interaction: discord.Interaction) -> str:
    channel = interaction.channel
    channel_name = getattr(channel, "name", None) or "DM"
    guild_part = f" | Guild: {interaction.guild_id}" if interaction.guild_id else ""
    return f"#{channel_name} ({interaction.channel_id}){guild_part}"


def _format_params(params: Optional[Dict[str, Any]]) -> str:
    if not params:
        return ""
    shown = {k: v for k, v in params.items() if v is not None and k not in _HIDDEN_PARAMS}
    if not shown:
        return ""
    return " | Params: " + ", ".join(f"{k}={v}" for k, v in shown.items())


def log_command_data(interaction: discord.Interaction, command_name: str, **kwargs) -> None:
    """Log command invocation with user, channel, guild and parameters."""
    logger.info(
        f"Command: {command_name} | User: {_describe_user(interaction)} | "
        f"Channel: {_describe_location(interaction)}{_format_params(kwargs)}"
    )


def get_command_latency_ms(start_time: float) -> float:
    """Calculate elapsed time in milliseconds since start_time."""
    return (time.time() - start_time) * 1000


def log_command_completion(
    command_name: str,
    start_time: float,
    success: bool = True,
    interaction: Optional[discord.Interaction] = None,
    kwargs: Optional[dict] = None
) -> None:
    """Log command completion status with latency and user info."""
    status = "SUCCESS" if success else "FAILED"
    latency_ms = get_command_latency_ms(start_time)
    user_info = f" | User: {_describe_user(interaction)}" if interaction and interaction.user else ""

    logger.info(
        f"Command: {command_name} | Status: {status} | Latency: {latency_ms:.2f}ms"
        f"{user_info}{_format_params(kwargs)}"
    )
