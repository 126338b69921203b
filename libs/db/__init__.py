"""
Shared MongoDB configuration, models and repositories for the tracker.

This package provides the document store used across services
(Discord bot, Telegram bot, docs site, maintenance scripts).
"""

from libs.db.config import get_db_config, DatabaseConfig
from libs.db.database import (
    get_database,
    set_database,
    close_database,
    ping_database,
    ensure_indexes,
)
from libs.db.guilds import GuildNotConfiguredError, NotTrackedError

__all__ = [
    'get_db_config',
    'DatabaseConfig',
    'get_database',
    'set_database',
    'close_database',
    'ping_database',
    'ensure_indexes',
    'GuildNotConfiguredError',
    'NotTrackedError',
]
