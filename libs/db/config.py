"""
Database configuration from environment variables.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


LIBS_DIR = Path(__file__).parent.parent
ROOT_DIR = LIBS_DIR.parent
ENV_FILE = ROOT_DIR / ".env"

if ENV_FILE.exists():
    load_dotenv(dotenv_path=ENV_FILE, override=False)

DEFAULT_DATABASE_NAME = "leetcode_bot"


class DatabaseConfig:
    """MongoDB connection settings from environment variables."""

    def __init__(self) -> None:
        self.uri: Optional[str] = os.getenv("MONGODB_URI")
        self.database: str = os.getenv("MONGODB_DB", DEFAULT_DATABASE_NAME)
        self.server_selection_timeout_ms: int = int(
            os.getenv("MONGODB_TIMEOUT_MS", "5000")
        )

    def __repr__(self) -> str:
        return (
            f"DatabaseConfig(uri={'***' if self.uri else None}, "
            f"database={self.database!r}, "
            f"server_selection_timeout_ms={self.server_selection_timeout_ms})"
        )


_db_config: Optional[DatabaseConfig] = None


def get_db_config() -> DatabaseConfig:
    """Get or create the singleton config instance."""
    global _db_config
    if _db_config is None:
        _db_config = DatabaseConfig()
    return _db_config
