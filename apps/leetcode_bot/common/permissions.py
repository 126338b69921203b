"""
Permission checks for admin and owner commands.
"""

import discord

from apps.leetcode_bot.bot_config import get_bot_config
from libs.db.guilds import get_admin_role


def is_bot_owner(interaction: discord.Interaction) -> bool:
    return interaction.user.id in get_bot_config().owner_ids


async def is_guild_admin(interaction: discord.Interaction) -> bool:
    """Manage Server permission, or the role configured with /setadminrole."""
    member = interaction.user
    if not isinstance(member, discord.Member):
        return False
    if member.guild_permissions.administrator or member.guild_permissions.manage_guild:
        return True
    if is_bot_owner(interaction):
        return True

    admin_role_id = await get_admin_role(str(interaction.guild_id))
    if not admin_role_id:
        return False
    return any(str(role.id) == admin_role_id for role in member.roles)
