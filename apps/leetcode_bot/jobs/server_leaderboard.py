"""
Hourly global leaderboard of the servers using the bot.

Posted in the bot's home server and edited in place.
"""

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional

import discord
from discord.ext import tasks
from pymongo.errors import PyMongoError

from apps.leetcode_bot.bot_config import get_bot_config
from apps.leetcode_bot.common.constants import EMBED_FIELD_VALUE_MAX_LENGTH, HC_PING_SERVER_LEADERBOARD
from apps.leetcode_bot.common.embed_builder import build_panel_embed
from apps.leetcode_bot.jobs.message_state import edit_or_send, fetch_panel_channel
from libs.db.database import GUILDS, get_database
from libs.db.models import Guild
from libs.db.submissions import count_submissions_by_guild
from libs.db.system_config import SERVER_LEADERBOARD_MESSAGE_KEY
from libs.healthchecks import ping

logger = logging.getLogger(__name__)

_bot_instance: Optional[discord.Client] = None


def set_bot_instance(bot: discord.Client) -> None:
    global _bot_instance
    _bot_instance = bot


def summarize_guilds(guilds: Iterable[Guild], submissions: Dict[str, int]) -> Dict[str, Any]:
    """Totals and per-guild metrics from guild configs and per-guild submission counts."""
    guild_metrics = [
        {
            "guildId": guild.guild_id,
            "totalUsers": len(guild.users),
            "totalSubmissions": submissions.get(guild.guild_id, 0),
        }
        for guild in guilds
    ]
    return {
        "totalUsers": sum(m["totalUsers"] for m in guild_metrics),
        "totalSubmissions": sum(submissions.values()),
        "totalGuilds": len(guild_metrics),
        "guildMetrics": guild_metrics,
    }


def sort_guild_metrics(guild_metrics: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Most submissions first, then most users, then guild id."""
    return sorted(
        guild_metrics,
        key=lambda m: (-m["totalSubmissions"], -m["totalUsers"], m["guildId"]),
    )


async def calculate_global_metrics(guild_ids: List[str]) -> Dict[str, Any]:
    db = await get_database()
    guilds = [Guild.from_document(doc) async for doc in db[GUILDS].find({"guildId": {"$in": guild_ids}})]
    submissions = await count_submissions_by_guild(guild_ids)
    return summarize_guilds(guilds, submissions)


def build_leaderboard_embed(
    metrics: Dict[str, Any],
    stats_guild_name: str,
    top_limit: int = 10,
    resolve_name: Optional[Callable[[str], Optional[str]]] = None,
) -> discord.Embed:
    fields = [
        {
            "name": "🌐 Tracked Servers",
            "value": f"**{metrics['totalGuilds']}** servers are using the bot",
            "inline": True,
        },
        {
            "name": "👥 Total Users",
            "value": f"**{metrics['totalUsers']}** users are using the bot",
            "inline": True,
        },
        {
            "name": "📊 Total Submissions",
            "value": f"**{metrics['totalSubmissions']}** submissions made by all users combined",
            "inline": True,
        },
    ]

    top = sort_guild_metrics(metrics.get("guildMetrics", []))[:top_limit]
    if top:
        lines = []
        length = 0
        for rank, guild in enumerate(top, start=1):
            name = (resolve_name(guild["guildId"]) if resolve_name else None) or guild["guildId"]
            line = (
                f"**#{rank}** {name}\n"
                f"└ 👥 {guild['totalUsers']} users • 📊 {guild['totalSubmissions']} submissions"
            )
            # whole entries only, within the field value limit
            added = len(line) + (1 if lines else 0)
            if length + added > EMBED_FIELD_VALUE_MAX_LENGTH:
                break
            length += added
            lines.append(line)
        fields.append({
            "name": f"🏅 Top {len(lines)} Servers (by submissions)",
            "value": "\n".join(lines),
            "inline": False,
        })

    return build_panel_embed(
        "🏆 Global Leaderboard Summary",
        fields,
        description=f"Overall statistics across all servers using the bot\n(Posted in **{stats_guild_name}**)",
    )


async def update_server_leaderboard(bot: discord.Client) -> bool:
    bot_config = get_bot_config()
    if not bot_config.stats_guild_id or not bot_config.leaderboard_channel_id:
        logger.error("STATS_GUILD_ID or LEADERBOARD_CHANNEL_ID is not set in environment variables")
        return False

    channel = await fetch_panel_channel(bot, bot_config.stats_guild_id, bot_config.leaderboard_channel_id)
    if channel is None:
        return False

    guild_ids = [str(guild.id) for guild in bot.guilds]
    metrics = await calculate_global_metrics(guild_ids)

    def resolve_name(guild_id: str) -> Optional[str]:
        guild = bot.get_guild(int(guild_id))
        return guild.name if guild else None

    embed = build_leaderboard_embed(
        metrics, channel.guild.name, bot_config.leaderboard_top_guilds, resolve_name
    )
    await edit_or_send(bot, channel, SERVER_LEADERBOARD_MESSAGE_KEY, embed)
    ping(HC_PING_SERVER_LEADERBOARD)
    logger.info("Server leaderboard update complete")
    return True


@tasks.loop(hours=1)
async def server_leaderboard_task():
    if not _bot_instance:
        logger.error("Bot instance not set for server leaderboard")
        return
    try:
        await update_server_leaderboard(_bot_instance)
    except (discord.HTTPException, PyMongoError, ConnectionError) as e:
        logger.error(f"Error updating server leaderboard: {e}", exc_info=True)


def setup_server_leaderboard_task(bot: discord.Client) -> None:
    set_bot_instance(bot)

    @server_leaderboard_task.before_loop
    async def before_server_leaderboard():
        await bot.wait_until_ready()

    if not server_leaderboard_task.is_running():
        server_leaderboard_task.start()
        logger.info("Started server leaderboard task (every hour)")
    else:
        logger.warning("Server leaderboard task already running")
