"""
Discord bot configuration from environment variables.
"""

from __future__ import annotations

import logging
import os

from pathlib import Path
from typing import Optional, Set

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

APPS_DIR = Path(__file__).parent.parent
ROOT_DIR = APPS_DIR.parent
ENV_FILE = ROOT_DIR / ".env"
DOCKER_ENV_FILE = ROOT_DIR / "infra" / "docker" / ".env"

DEFAULT_CRON_TIMEZONE = "Asia/Kolkata"
DEFAULT_BOT_VERSION = "2.2.0"

env_loaded = False
for env_path in [DOCKER_ENV_FILE, ENV_FILE]:
    if env_path.exists():
        load_dotenv(dotenv_path=env_path, override=False)
        logger.info(f"Loaded .env from {env_path}")
        env_loaded = True
        break
if not env_loaded:
    logger.info("No .env file found")


def _parse_id_set(value: str) -> Set[int]:
    return {int(item.strip()) for item in value.split(",") if item.strip()}


def _optional_int(name: str) -> Optional[int]:
    value = os.getenv(name)
    return int(value) if value else None


class LeetBotConfig:
    """Discord bot settings loaded from environment variables."""

    def __init__(self) -> None:
        self.token: Optional[str] = os.getenv("DISCORD_BOT_TOKEN")

        if not self.token:
            raise ValueError("DISCORD_BOT_TOKEN environment variable is required")

        self.allowed_channel_ids: Set[int] = _parse_id_set(os.getenv("DISCORD_ALLOWED_CHANNEL_IDS", ""))
        self.owner_ids: Set[int] = _parse_id_set(os.getenv("BOT_OWNER_IDS", ""))
        self.dev_guild_id: Optional[int] = _optional_int("DISCORD_DEV_GUILD_ID")

        # Global panels posted in the bot's home server
        self.stats_guild_id: Optional[int] = _optional_int("STATS_GUILD_ID")
        self.stats_channel_id: Optional[int] = _optional_int("STATS_CHANNEL_ID")
        self.leaderboard_channel_id: Optional[int] = _optional_int("LEADERBOARD_CHANNEL_ID")
        self.leaderboard_top_guilds: int = int(os.getenv("LEADERBOARD_TOP_GUILDS", "10"))
        self.stats_update_interval_minutes: int = int(os.getenv("STATS_UPDATE_INTERVAL_MINUTES", "60"))

        self.cron_timezone: str = os.getenv("CRON_TIMEZONE", DEFAULT_CRON_TIMEZONE)
        self.version: str = os.getenv("BOT_VERSION", DEFAULT_BOT_VERSION)

        self.telegram_token: Optional[str] = os.getenv("TELEGRAM_BOT_TOKEN")
        self.telegram_bot_username: Optional[str] = os.getenv("TELEGRAM_BOT_USERNAME")

    def __repr__(self) -> str:
        return (
            f"LeetBotConfig("
            f"token=***, "
            f"allowed_channel_ids={self.allowed_channel_ids}, "
            f"owner_ids={self.owner_ids}, "
            f"dev_guild_id={self.dev_guild_id}, "
            f"stats_guild_id={self.stats_guild_id}, "
            f"stats_channel_id={self.stats_channel_id}, "
            f"leaderboard_channel_id={self.leaderboard_channel_id}, "
            f"cron_timezone={self.cron_timezone!r}, "
            f"telegram_token={'***' if self.telegram_token else None})"
        )


_bot_config: Optional[LeetBotConfig] = None


def get_bot_config() -> LeetBotConfig:
    """Get or create the singleton config instance."""
    global _bot_config
    if _bot_config is None:
        _bot_config = LeetBotConfig()
    return _bot_config
