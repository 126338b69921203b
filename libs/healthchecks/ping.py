"""
Dead-man's-switch pings for scheduled jobs.
"""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Set

import aiohttp

logger = logging.getLogger(__name__)

PING_TIMEOUT_SECONDS = 10

# Keeps references to in-flight pings so they are not garbage collected
_pending: Set[asyncio.Task] = set()


async def send_ping(env_key: str) -> bool:
    """GET the URL stored in env_key. Failures are logged, never raised."""
    url = os.getenv(env_key)
    if not url:
        return False

    try:
        timeout = aiohttp.ClientTimeout(total=PING_TIMEOUT_SECONDS)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.get(url) as response:
                response.raise_for_status()
        return True
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        logger.warning(f"Healthcheck ping failed for {env_key} ({url}): {e}")
        return False


def ping(env_key: str) -> None:
    """Fire-and-forget ping from inside a running event loop."""
    if not os.getenv(env_key):
        return
    task = asyncio.get_running_loop().create_task(send_ping(env_key))
    _pending.add(task)
    task.add_done_callback(_pending.discard)
