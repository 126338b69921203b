"""
Discord bot entry point: slash commands, scheduled checks and panels,
plus the Telegram companion bot running in the same event loop.
"""

import logging
import os
import signal

import discord

from discord.ext import commands

from apps.leetcode_bot.bot_config import get_bot_config
from apps.leetcode_bot.commands import (
    setup_admin_commands,
    setup_help_command,
    setup_owner_commands,
    setup_setup_command,
    setup_stats_commands,
    setup_telegram_command,
    setup_tracking_commands,
)
from apps.leetcode_bot.health_check import READINESS_FILE
from apps.leetcode_bot.jobs import (
    GuildCheckScheduler,
    get_check_scheduler,
    set_check_scheduler,
    setup_contest_reminder_task,
    setup_server_leaderboard_task,
    setup_silent_check_task,
    setup_stats_panel_task,
)
from apps.leetcode_bot.notifications import start_telegram_bot, stop_telegram_bot
from libs.db import close_database, ensure_indexes
from libs.leetcode import close_leetcode_client

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

bot_config = get_bot_config()
DISCORD_TOKEN = bot_config.token
ALLOWED_CHANNEL_IDS = bot_config.allowed_channel_ids

intents = discord.Intents.default()
intents.members = True  # Needed to show member names in /listusers


async def get_prefix(bot, message):
    """Return empty prefix list (only slash commands)."""
    return []


class LeetCodeBot(commands.Bot):

    async def setup_hook(self) -> None:
        """Prepare the database and start the Telegram bot before connecting to Discord."""
        logger.info("Running setup hook: ensuring MongoDB indexes...")
        await ensure_indexes()
        await start_telegram_bot(bot_config.telegram_token)

    async def close(self) -> None:
        logger.info("Shutting down, stopping schedulers and closing clients...")
        _remove_readiness_file()
        scheduler = get_check_scheduler()
        if scheduler is not None:
            scheduler.shutdown()
        await stop_telegram_bot()
        await close_leetcode_client()
        await close_database()
        await super().close()


bot = LeetCodeBot(
    command_prefix=get_prefix,
    intents=intents,
    description="LeetCode Daily Challenge Tracker"
)

tree = bot.tree

_tasks_started = False


def check_channel_permission(interaction: discord.Interaction) -> bool:
    """Returns True if the command is allowed in this channel."""
    if not ALLOWED_CHANNEL_IDS:
        return True
    return interaction.channel_id in ALLOWED_CHANNEL_IDS


# Register commands
setup_setup_command(tree, check_channel_permission)
setup_admin_commands(tree, check_channel_permission)
setup_tracking_commands(tree, check_channel_permission)
setup_stats_commands(tree, check_channel_permission)
setup_telegram_command(tree, check_channel_permission)
setup_owner_commands(tree, check_channel_permission)
setup_help_command(tree, check_channel_permission)


async def _sync_commands() -> None:
    dev_guild_id = bot_config.dev_guild_id

    if dev_guild_id:
        logger.info(f"Force-syncing commands to development guild {dev_guild_id}...")
        try:
            dev_guild = discord.Object(id=dev_guild_id)
            bot.tree.clear_commands(guild=dev_guild)
            bot.tree.copy_global_to(guild=dev_guild)
            synced = await bot.tree.sync(guild=dev_guild)
            logger.info(f"Synced {len(synced)} commands to guild: {', '.join(cmd.name for cmd in synced)}")
        except discord.HTTPException as e:
            logger.error(f"Failed to sync to development guild: {e}", exc_info=True)
        return

    logger.info("Syncing commands globally...")
    try:
        synced = await tree.sync()
        logger.info(f"Synced {len(synced)} commands globally: {', '.join(cmd.name for cmd in synced)}")
    except discord.HTTPException as e:
        logger.warning(f"HTTP error while syncing globally: {e}", exc_info=True)


async def _start_jobs() -> None:
    scheduler = GuildCheckScheduler(bot, timezone=bot_config.cron_timezone)
    await scheduler.load_all()
    scheduler.start()
    set_check_scheduler(scheduler)

    setup_silent_check_task(bot)
    setup_contest_reminder_task(bot)
    if bot_config.stats_guild_id and bot_config.leaderboard_channel_id:
        setup_server_leaderboard_task(bot)
    else:
        logger.info("STATS_GUILD_ID or LEADERBOARD_CHANNEL_ID not set, server leaderboard disabled")
    if bot_config.stats_guild_id and bot_config.stats_channel_id:
        setup_stats_panel_task(bot)
    else:
        logger.info("STATS_GUILD_ID or STATS_CHANNEL_ID not set, stats panel disabled")


@bot.event
async def on_ready():
    """Called when the bot is ready and connected to Discord."""
    global _tasks_started
    logger.info(f"{bot.user} has connected to Discord!")
    logger.info(f"Bot is in {len(bot.guilds)} guild(s)")

    try:
        if not _tasks_started:
            await _sync_commands()
            await _start_jobs()
            _tasks_started = True

        await bot.change_presence(activity=discord.Game(name="LeetCode daily | /help"))

        # Signal ready for healthcheck - only after everything succeeds
        try:
            open(READINESS_FILE, "a").close()
            logger.info("Bot is fully ready - healthcheck file created")
        except OSError as e:
            logger.warning(f"Could not create readiness file: {e}")

    except Exception as e:
        logger.error(f"Error during bot initialization: {e}", exc_info=True)
        _remove_readiness_file()
        raise


@bot.event
async def on_guild_join(guild: discord.Guild):
    logger.info(f"Joined guild {guild.id} ({guild.name}); waiting for /setup")


@bot.event
async def on_guild_remove(guild: discord.Guild):
    logger.info(f"Removed from guild {guild.id} ({guild.name})")
    scheduler = get_check_scheduler()
    if scheduler is not None:
        scheduler.remove_guild(str(guild.id))


@bot.event
async def on_disconnect():
    logger.info("Bot disconnected from Discord")
    _remove_readiness_file()


def _remove_readiness_file() -> None:
    """Remove readiness file so healthcheck fails after shutdown."""
    try:
        os.remove(READINESS_FILE)
    except OSError:
        pass


def main():
    """Main entry point for the Discord bot."""
    def handle_shutdown_signal(signum: int, frame) -> None:
        logger.info("Received signal %s, removing readiness file and exiting.", signum)
        _remove_readiness_file()
        raise SystemExit(0)

    for sig in (signal.SIGTERM, signal.SIGINT):
        try:
            signal.signal(sig, handle_shutdown_signal)
        except (ValueError, OSError):
            # SIGINT not available in all contexts (e.g. threads), skip
            pass

    try:
        logger.info("Starting Discord bot...")
        bot.run(DISCORD_TOKEN)
    except Exception as e:
        logger.error(f"Failed to start bot: {e}", exc_info=True)
        _remove_readiness_file()
        raise


if __name__ == "__main__":
    main()
