"""
Delivery of bot messages to guild announcement channels.
"""

import logging
from typing import Optional

import discord

from libs.db.models import Guild

logger = logging.getLogger(__name__)


def can_send(channel: discord.abc.Messageable) -> bool:
    """True if the bot may post messages and embeds in channel."""
    guild = getattr(channel, "guild", None)
    if guild is None:
        return True
    permissions = channel.permissions_for(guild.me)
    return permissions.view_channel and permissions.send_messages and permissions.embed_links


async def resolve_channel(client: discord.Client, channel_id) -> Optional[discord.abc.GuildChannel]:
    if not channel_id:
        return None
    channel = client.get_channel(int(channel_id))
    if channel is not None:
        return channel
    try:
        return await client.fetch_channel(int(channel_id))
    except discord.NotFound:
        logger.warning(f"Channel {channel_id} not found")
    except discord.Forbidden:
        logger.warning(f"No access to channel {channel_id}")
    except discord.HTTPException as e:
        logger.error(f"Failed to fetch channel {channel_id}: {e}")
    return None


async def notify_owner_missing_permission(guild: discord.Guild, channel: discord.abc.GuildChannel) -> None:
    """DM the server owner when the announcement channel is not writable."""
    try:
        owner = guild.owner or await guild.fetch_member(guild.owner_id)
        await owner.send(
            f"⚠️ I don't have permission to send messages in {channel.mention} on **{guild.name}**.\n"
            "Please grant me **Send Messages** and **Embed Links** there, "
            "or pick another channel with `/setchannel`."
        )
        logger.info(f"Notified owner of guild {guild.id} about missing permissions in {channel.id}")
    except discord.HTTPException as e:
        logger.warning(f"Could not DM owner of guild {guild.id}: {e}")


async def get_announcement_channel(client: discord.Client, guild_config: Guild) -> Optional[discord.abc.GuildChannel]:
    """
    Resolve a guild's announcement channel and check that the bot can post there.

    Missing permissions are logged and reported to the server owner.
    """
    channel = await resolve_channel(client, guild_config.channel_id)
    if channel is None:
        logger.error(f"Announcement channel {guild_config.channel_id} for guild {guild_config.guild_id} not found")
        return None

    if not can_send(channel):
        logger.error(
            f"Bot lacks permission to send messages in channel {channel.id} of guild {guild_config.guild_id}"
        )
        await notify_owner_missing_permission(channel.guild, channel)
        return None
    return channel


async def send_embed(channel: discord.abc.Messageable, embed: discord.Embed, content: Optional[str] = None) -> bool:
    try:
        await channel.send(content=content, embed=embed)
        return True
    except discord.HTTPException as e:
        logger.error(f"Failed to send embed to channel {getattr(channel, 'id', channel)}: {e}")
        return False


async def send_to_guild(client: discord.Client, guild_config: Guild, **kwargs) -> bool:
    """Send a message to a guild's announcement channel. Returns False on any failure."""
    channel = await get_announcement_channel(client, guild_config)
    if channel is None:
        return False
    try:
        await channel.send(**kwargs)
        return True
    except discord.HTTPException as e:
        logger.error(f"Failed to send to channel {channel.id} of guild {guild_config.guild_id}: {e}")
        return False
