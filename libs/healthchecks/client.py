"""
Read-only client for the healthchecks.io management API, with short TTL caches.
"""

from __future__ import annotations

import asyncio
import logging
import os
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

import aiohttp
from cachetools import TTLCache

logger = logging.getLogger(__name__)

BASE_URL = "https://healthchecks.io/api/v3"
USER_AGENT = "LeetDiscordBot/1.0"
REQUEST_TIMEOUT_SECONDS = 10

CHECKS_TTL_SECONDS = 45
PINGS_TTL_SECONDS = 15
FLIPS_TTL_SECONDS = 15

STATUS_EMOJIS = {
    "up": "🟢",
    "late": "🟡",
    "down": "🔴",
    "paused": "⏸️",
}
UNKNOWN_STATUS_EMOJI = "❓"


class HealthchecksAPIError(Exception):
    """Raised for missing credentials, unknown checks or API failures."""


def normalize_status(api_status: Optional[str]) -> str:
    if api_status in ("up", "new"):
        return "up"
    if api_status == "grace":
        return "late"
    if api_status in ("down", "paused"):
        return api_status
    return "unknown"


def get_status_emoji(status: str) -> str:
    return STATUS_EMOJIS.get(status, UNKNOWN_STATUS_EMOJI)


def _parse_iso(value: str) -> datetime:
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def format_time(iso_timestamp: Optional[str]) -> str:
    if not iso_timestamp:
        return "Never"
    return _parse_iso(iso_timestamp).strftime("%Y-%m-%d %H:%M:%S UTC")


def format_time_ago(iso_timestamp: Optional[str], now: Optional[datetime] = None) -> str:
    if not iso_timestamp:
        return "Never"
    now = now or datetime.now(timezone.utc)
    seconds = int((now - _parse_iso(iso_timestamp)).total_seconds())
    if seconds < 60:
        return f"{seconds}s ago"
    minutes = seconds // 60
    if minutes < 60:
        return f"{minutes}m ago"
    hours = minutes // 60
    if hours < 24:
        return f"{hours}h ago"
    return f"{hours // 24}d ago"


def format_check_for_display(check: Dict[str, Any]) -> Dict[str, Any]:
    status = normalize_status(check.get("status"))
    return {
        "name": check.get("name", ""),
        "slug": check.get("slug", ""),
        "uuid": check.get("uuid"),
        "status": status,
        "status_emoji": get_status_emoji(status),
        "last_ping": check.get("last_ping"),
        "next_ping": check.get("next_ping"),
        "timeout": check.get("timeout"),
        "grace": check.get("grace"),
        "tags": check.get("tags"),
        "desc": check.get("desc"),
        "n_pings": check.get("n_pings"),
    }


def match_check(checks: List[Dict[str, Any]], name: str) -> Dict[str, Any]:
    """Exact name/slug match first, then the first partial match."""
    term = name.lower()
    for check in checks:
        if check["name"].lower() == term or check["slug"].lower() == term:
            return check
    for check in checks:
        if term in check["name"].lower() or term in check["slug"].lower():
            return check
    raise HealthchecksAPIError(f'Check not found: "{name}"')


class HealthchecksClient:

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: str = BASE_URL,
        timer: Callable[[], float] = time.time,
    ) -> None:
        self._api_key = api_key if api_key is not None else os.getenv("HEALTHCHECKS_API_KEY")
        self._base_url = base_url
        self._checks_cache: TTLCache = TTLCache(maxsize=1, ttl=CHECKS_TTL_SECONDS, timer=timer)
        self._details_cache: TTLCache = TTLCache(maxsize=256, ttl=CHECKS_TTL_SECONDS, timer=timer)
        self._pings_cache: TTLCache = TTLCache(maxsize=256, ttl=PINGS_TTL_SECONDS, timer=timer)
        self._flips_cache: TTLCache = TTLCache(maxsize=256, ttl=FLIPS_TTL_SECONDS, timer=timer)

    def _headers(self) -> Dict[str, str]:
        if not self._api_key:
            raise HealthchecksAPIError("HEALTHCHECKS_API_KEY environment variable is not set")
        return {"X-Api-Key": self._api_key, "User-Agent": USER_AGENT}

    async def _get_json(self, path: str, uuid: Optional[str] = None, params: Optional[Dict[str, Any]] = None) -> Any:
        headers = self._headers()
        timeout = aiohttp.ClientTimeout(total=REQUEST_TIMEOUT_SECONDS)
        try:
            async with aiohttp.ClientSession(headers=headers, timeout=timeout) as session:
                async with session.get(f"{self._base_url}{path}", params=params) as response:
                    if response.status == 401:
                        raise HealthchecksAPIError("Invalid or missing HEALTHCHECKS_API_KEY")
                    if response.status == 404 and uuid:
                        raise HealthchecksAPIError(f"Check not found: {uuid}")
                    response.raise_for_status()
                    return await response.json()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Error calling healthchecks API {path}: {e}")
            raise HealthchecksAPIError(f"Healthchecks API request failed: {e}") from e

    async def list_checks(self) -> List[Dict[str, Any]]:
        cached = self._checks_cache.get("checks")
        if cached is not None:
            return cached

        logger.info("Fetching healthchecks list from API")
        payload = await self._get_json("/checks/")
        checks = [format_check_for_display(check) for check in payload.get("checks", [])]
        self._checks_cache["checks"] = checks
        logger.info(f"Fetched {len(checks)} checks")
        return checks

    async def get_check_details(self, uuid: str) -> Dict[str, Any]:
        cached = self._details_cache.get(uuid)
        if cached is not None:
            return cached

        check = await self._get_json(f"/checks/{uuid}", uuid=uuid)
        self._details_cache[uuid] = check
        return check

    async def get_check_pings(self, uuid: str, limit: int = 20) -> List[Dict[str, Any]]:
        pings = self._pings_cache.get(uuid)
        if pings is None:
            payload = await self._get_json(f"/checks/{uuid}/pings/", uuid=uuid)
            pings = payload.get("pings", [])
            self._pings_cache[uuid] = pings
        return pings[:limit]

    async def get_check_flips(self, uuid: str, seconds: Optional[int] = None) -> List[Dict[str, Any]]:
        key = (uuid, seconds)
        cached = self._flips_cache.get(key)
        if cached is not None:
            return cached

        params = {"seconds": seconds} if seconds else None
        payload = await self._get_json(f"/checks/{uuid}/flips/", uuid=uuid, params=params)
        flips = payload if isinstance(payload, list) else []
        self._flips_cache[key] = flips
        return flips

    async def find_check_by_name(self, name: str) -> Dict[str, Any]:
        return match_check(await self.list_checks(), name)

    def clear_cache(self) -> None:
        self._checks_cache.clear()
        self._details_cache.clear()
        self._pings_cache.clear()
        self._flips_cache.clear()
        logger.info("Healthchecks cache cleared")


_client: Optional[HealthchecksClient] = None


def get_healthchecks_client() -> HealthchecksClient:
    """Get or create the singleton client instance."""
    global _client
    if _client is None:
        _client = HealthchecksClient()
    return _client
