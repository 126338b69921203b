"""
Command decorators for the Discord bot.
"""

import inspect
import logging
import time
from functools import wraps
from typing import Any, Callable, Optional

import discord
from pymongo.errors import PyMongoError

from apps.leetcode_bot.common.logging import (
    log_command_data,
    log_command_completion,
)
from apps.leetcode_bot.common.permissions import is_bot_owner, is_guild_admin
from libs.db.guilds import GuildNotConfiguredError, NotTrackedError
from libs.leetcode import LeetCodeAPIError

logger = logging.getLogger(__name__)

NOT_CONFIGURED_MESSAGE = "❌ This server is not set up yet. An admin needs to run `/setup` first."


async def send_response(interaction: discord.Interaction, content: Optional[str] = None, ephemeral: bool = False, **kwargs) -> None:
    """Reply or follow up depending on whether the interaction was already answered."""
    if not interaction.response.is_done():
        await interaction.response.send_message(content, ephemeral=ephemeral, **kwargs)
    else:
        await interaction.followup.send(content, ephemeral=ephemeral, **kwargs)


async def handle_command_errors(
    interaction: discord.Interaction,
    command_name: str,
    start_time: float,
    error: Exception,
    use_ephemeral: bool = False,
    kwargs: Optional[dict] = None
) -> None:
    """Handle errors with appropriate logging and user-facing messages."""
    exc_info = (type(error), error, error.__traceback__)

    if isinstance(error, GuildNotConfiguredError):
        logger.info(f"{command_name} used in unconfigured guild {error.guild_id}")
        error_msg = NOT_CONFIGURED_MESSAGE
    elif isinstance(error, LeetCodeAPIError):
        logger.error(f"LeetCode API error in {command_name}: {error}", exc_info=exc_info)
        error_msg = "❌ The LeetCode API is not responding right now. Please try again in a few minutes."
    elif isinstance(error, ValueError):
        logger.warning(f"Invalid input in {command_name}: {error}")
        error_msg = f"❌ {error}"
    elif isinstance(error, NotTrackedError):
        logger.info(f"Untracked user in {command_name}: {error}")
        error_msg = f"❌ {error}"
    elif isinstance(error, ConnectionError):
        logger.error(f"Database connection error in {command_name}: {error}", exc_info=exc_info)
        error_msg = "❌ Failed to connect to the database. Please try again later."
    elif isinstance(error, PyMongoError):
        logger.error(f"Database error in {command_name}: {error}", exc_info=exc_info)
        error_msg = "❌ Database error. Please try again later."
    else:
        logger.error(f"Unexpected error in {command_name}: {error}", exc_info=exc_info)
        error_msg = "❌ An unexpected error occurred."

    log_command_completion(command_name, start_time, success=False, interaction=interaction, kwargs=kwargs)
    await send_response(interaction, error_msg, ephemeral=use_ephemeral)


def command_wrapper(
    command_name: str,
    channel_check: Optional[Callable[[discord.Interaction], bool]] = None,
    log_params: Optional[dict] = None,
    ephemeral: bool = False,
    admin_only: bool = False,
    owner_only: bool = False,
    guild_only: bool = True,
):
    """
    Decorator that handles channel and permission checks, logging, error handling,
    and response deferral.

    Args:
        command_name: Name of the command for logging
        channel_check: Optional function to check if channel is allowed
        log_params: Optional additional params to log
        ephemeral: Defer (and answer errors) privately
        admin_only: Require Manage Server or the configured admin role
        owner_only: Require one of BOT_OWNER_IDS
        guild_only: Reject the command in DMs
    """
    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(func)
        async def wrapper(interaction: discord.Interaction, *args, **kwargs):
            command_start_time = time.time()

            log_kwargs = dict(log_params or {})
            log_kwargs.update(kwargs)
            log_command_data(interaction, command_name, **log_kwargs)

            async def reject(message: str) -> None:
                await interaction.response.send_message(message, ephemeral=True)
                log_command_completion(
                    command_name, command_start_time,
                    success=False, interaction=interaction, kwargs=log_kwargs
                )

            try:
                if guild_only and interaction.guild_id is None:
                    await reject("❌ This command can only be used in a server.")
                    return

                if channel_check and not channel_check(interaction):
                    await reject("❌ This bot can only be used in the designated channel.")
                    return

                if owner_only and not is_bot_owner(interaction):
                    await reject("❌ This command is restricted to the bot owner.")
                    return

                if admin_only and not await is_guild_admin(interaction):
                    await reject("❌ You need the Manage Server permission or the bot admin role to use this command.")
                    return

                await interaction.response.defer(ephemeral=ephemeral)

                result = await func(interaction, *args, **kwargs)
                log_command_completion(
                    command_name, command_start_time,
                    success=True, interaction=interaction, kwargs=log_kwargs
                )
                return result

            except Exception as e:
                await handle_command_errors(
                    interaction, command_name, command_start_time, e,
                    use_ephemeral=ephemeral, kwargs=log_kwargs
                )
                return

        wrapper.__signature__ = inspect.signature(func)
        return wrapper
    return decorator
