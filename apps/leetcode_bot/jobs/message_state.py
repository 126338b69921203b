"""
Persistent "panel" messages that are edited in place on every update.

The id of the posted message is kept in system_config so restarts keep
editing the same message instead of flooding the channel.
"""

import logging
from typing import Optional

import discord

from libs.db.system_config import get_config_value, set_config_value

logger = logging.getLogger(__name__)


async def fetch_panel_channel(
    bot: discord.Client, guild_id: Optional[int], channel_id: Optional[int]
) -> Optional[discord.abc.GuildChannel]:
    """Channel channel_id inside guild guild_id, or None if either is unavailable."""
    try:
        guild = bot.get_guild(guild_id) or await bot.fetch_guild(guild_id)
    except discord.HTTPException as e:
        logger.error(f"Guild {guild_id} not found: {e}")
        return None

    try:
        channel = guild.get_channel(channel_id) or await guild.fetch_channel(channel_id)
    except discord.HTTPException as e:
        logger.error(f"Channel {channel_id} not found in guild {guild_id}: {e}")
        return None
    return channel


async def edit_or_send(
    bot: discord.Client,
    channel: discord.abc.Messageable,
    config_key: str,
    embed: discord.Embed,
) -> discord.Message:
    """Edit the stored message if possible, otherwise post a new one and store its id."""
    stored_id = await get_config_value(config_key)

    if stored_id:
        try:
            message = await channel.fetch_message(int(stored_id))
            if message.author == bot.user:
                await message.edit(embed=embed)
                logger.info(f"Updated {config_key} message {stored_id}")
                return message
            logger.warning(f"Stored message {stored_id} is not owned by the bot, will create new")
        except discord.NotFound:
            logger.info(f"Stored message {stored_id} not found (may have been deleted), will create new")
        except discord.Forbidden:
            logger.warning(f"No permission to edit stored message {stored_id}, will create new")
        except discord.HTTPException as e:
            logger.warning(f"Failed to fetch/edit message {stored_id}, will create new one: {e}")

    message = await channel.send(embed=embed)
    await set_config_value(config_key, str(message.id))
    logger.info(f"Created new {config_key} message {message.id}")
    return message
