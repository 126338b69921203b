"""
Audit log of owner broadcasts.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from libs.db.database import BROADCAST_LOGS, get_database
from libs.db.models import BroadcastLog

logger = logging.getLogger(__name__)


async def log_broadcast(
    sender_id: str,
    sender_username: str,
    broadcast_type: str,
    message: str,
    success_count: int,
    fail_count: int,
) -> BroadcastLog:
    entry = BroadcastLog(
        sender_id=str(sender_id),
        sender_username=sender_username,
        type=broadcast_type,
        message=message,
        success_count=success_count,
        fail_count=fail_count,
        sent_at=datetime.now(timezone.utc),
    )
    db = await get_database()
    await db[BROADCAST_LOGS].insert_one(entry.to_document())
    logger.info(
        f"Logged {broadcast_type} broadcast from {sender_username}: "
        f"{success_count} delivered, {fail_count} failed"
    )
    return entry
