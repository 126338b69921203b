"""
Bot status panel posted in the bot's home server.
"""

import logging
import time
from typing import Any, Dict, Optional

import discord
from discord.ext import tasks
from pymongo.errors import PyMongoError

from apps.leetcode_bot.bot_config import get_bot_config
from apps.leetcode_bot.common.constants import HC_PING_STATS_PANEL
from apps.leetcode_bot.common.embed_builder import build_panel_embed
from apps.leetcode_bot.jobs.message_state import edit_or_send, fetch_panel_channel
from libs.db.database import ping_database
from libs.db.guilds import get_all_guild_configs
from libs.db.system_config import STATS_PANEL_MESSAGE_KEY
from libs.healthchecks import ping

logger = logging.getLogger(__name__)

STATUS_ONLINE = "🟢 Online"
STATUS_DEGRADED = "🟡 Degraded"
STATUS_ERROR = "🔴 Error"

_bot_instance: Optional[discord.Client] = None
_started_at: float = time.monotonic()


def set_bot_instance(bot: discord.Client) -> None:
    global _bot_instance, _started_at
    _bot_instance = bot
    _started_at = time.monotonic()


def get_uptime_seconds() -> float:
    return time.monotonic() - _started_at


def format_uptime(seconds: float) -> str:
    seconds = int(seconds)
    minutes, hours, days = seconds // 60, seconds // 3600, seconds // 86400
    if days > 0:
        return f"{days}d {hours % 24}h {minutes % 60}m"
    if hours > 0:
        return f"{hours}h {minutes % 60}m"
    if minutes > 0:
        return f"{minutes}m {seconds % 60}s"
    return f"{seconds}s"


async def calculate_metrics(uptime_seconds: float, version: str) -> Dict[str, Any]:
    try:
        guilds = await get_all_guild_configs()
        status = STATUS_ONLINE if await ping_database() else STATUS_DEGRADED
        return {
            "totalGuilds": len(guilds),
            "totalUsers": sum(len(guild.users) for guild in guilds),
            "uptime": format_uptime(uptime_seconds),
            "version": version,
            "status": status,
        }
    except (PyMongoError, ConnectionError, ValueError) as e:
        logger.error(f"Error calculating metrics: {e}", exc_info=True)
        return {
            "totalGuilds": 0,
            "totalUsers": 0,
            "uptime": "Unknown",
            "version": version,
            "status": STATUS_ERROR,
        }


def build_stats_embed(metrics: Dict[str, Any]) -> discord.Embed:
    return build_panel_embed("📊 Bot Status & Usage Statistics", [
        {"name": "🌐 Status", "value": metrics["status"], "inline": True},
        {"name": "📦 Version", "value": f"v{metrics['version']}", "inline": True},
        {"name": "⏱️ Uptime", "value": metrics["uptime"], "inline": True},
        {"name": "🏛️ Configured Guilds", "value": str(metrics["totalGuilds"]), "inline": True},
        {"name": "👥 Active Users", "value": str(metrics["totalUsers"]), "inline": True},
    ])


async def update_stats_panel(bot: discord.Client) -> bool:
    bot_config = get_bot_config()
    if not bot_config.stats_guild_id or not bot_config.stats_channel_id:
        logger.error("STATS_GUILD_ID or STATS_CHANNEL_ID is not set in environment variables")
        return False

    channel = await fetch_panel_channel(bot, bot_config.stats_guild_id, bot_config.stats_channel_id)
    if channel is None:
        return False

    metrics = await calculate_metrics(get_uptime_seconds(), bot_config.version)
    await edit_or_send(bot, channel, STATS_PANEL_MESSAGE_KEY, build_stats_embed(metrics))
    ping(HC_PING_STATS_PANEL)
    logger.info("Stats panel update complete")
    return True


@tasks.loop(minutes=60)
async def stats_panel_task():
    if not _bot_instance:
        logger.error("Bot instance not set for stats panel")
        return
    try:
        await update_stats_panel(_bot_instance)
    except (discord.HTTPException, PyMongoError, ConnectionError) as e:
        logger.error(f"Error updating stats panel: {e}", exc_info=True)


def setup_stats_panel_task(bot: discord.Client) -> None:
    set_bot_instance(bot)
    interval = get_bot_config().stats_update_interval_minutes
    stats_panel_task.change_interval(minutes=interval)

    @stats_panel_task.before_loop
    async def before_stats_panel():
        await bot.wait_until_ready()

    if not stats_panel_task.is_running():
        stats_panel_task.start()
        logger.info(f"Started stats panel task (every {interval} min)")
    else:
        logger.warning("Stats panel task already running")
