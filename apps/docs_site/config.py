"""
Docs site configuration from environment variables.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

APPS_DIR = Path(__file__).parent.parent
ROOT_DIR = APPS_DIR.parent
ENV_FILE = ROOT_DIR / ".env"
STATIC_DIR = Path(__file__).parent / "static"
COMMANDS_JSON_PATH = STATIC_DIR / "commands.json"

if ENV_FILE.exists():
    load_dotenv(dotenv_path=ENV_FILE, override=False)


class DocsSiteConfig:
    """Web server settings for the public docs site."""

    def __init__(self) -> None:
        self.host: str = os.getenv("DOCS_HOST", "0.0.0.0")
        self.port: int = int(os.getenv("DOCS_PORT", "8080"))
        self.bot_version: str = os.getenv("BOT_VERSION", "2.2.0")
        self.invite_url: Optional[str] = os.getenv("DISCORD_INVITE_URL")
        self.stats_cache_seconds: int = int(os.getenv("DOCS_STATS_CACHE_SECONDS", "300"))

    def __repr__(self) -> str:
        return (
            f"DocsSiteConfig("
            f"host={self.host!r}, "
            f"port={self.port}, "
            f"bot_version={self.bot_version!r}, "
            f"stats_cache_seconds={self.stats_cache_seconds})"
        )


_docs_config: Optional[DocsSiteConfig] = None


def get_docs_config() -> DocsSiteConfig:
    """Get or create the singleton config instance."""
    global _docs_config
    if _docs_config is None:
        _docs_config = DocsSiteConfig()
    return _docs_config
