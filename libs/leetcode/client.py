"""
Cached async client for the LeetCode proxy API.

Three endpoints are cached in memory:
- the daily challenge, until the next UTC midnight
- a user's recent submissions, for 60 seconds
- a user's submission calendar, for 24 hours
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

import aiohttp
from cachetools import TLRUCache, TTLCache

from libs.leetcode.config import LeetCodeAPIConfig, get_api_config
from libs.leetcode.parsing import (
    next_utc_midnight,
    parse_duration,
    parse_memory,
    parse_timestamp,
    utc_midnight,
)

logger = logging.getLogger(__name__)

ACCEPTED = "Accepted"
DEFAULT_SUBMISSION_LIMIT = 20
SUBMISSIONS_TTL_SECONDS = 60
CALENDAR_TTL_SECONDS = 24 * 60 * 60
USER_CACHE_MAXSIZE = 1024


class LeetCodeAPIError(Exception):
    """Raised when the LeetCode proxy is unreachable or returns an error status."""

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


def _expires_at_next_utc_midnight(_key: Any, _value: Any, now: float) -> float:
    return next_utc_midnight(datetime.fromtimestamp(now, tz=timezone.utc)).timestamp()


def _normalize_calendar(payload: Dict[str, Any]) -> Dict[str, Any]:
    calendar = payload
    matched_user = payload.get("matchedUser")
    if isinstance(matched_user, dict) and isinstance(matched_user.get("userCalendar"), dict):
        calendar = matched_user["userCalendar"]

    submission_calendar = calendar.get("submissionCalendar") or {}
    if isinstance(submission_calendar, str):
        try:
            submission_calendar = json.loads(submission_calendar)
        except ValueError:
            submission_calendar = {}

    return {
        "streak": int(calendar.get("streak") or 0),
        "totalActiveDays": int(calendar.get("totalActiveDays") or 0),
        "activeYears": [int(year) for year in calendar.get("activeYears") or []],
        "submissionCalendar": submission_calendar,
    }


class LeetCodeClient:
    """Thin async wrapper around the proxy endpoints with TTL caching."""

    def __init__(
        self,
        config: Optional[LeetCodeAPIConfig] = None,
        session: Optional[aiohttp.ClientSession] = None,
        timer: Callable[[], float] = time.time,
    ) -> None:
        self._config = config or get_api_config()
        self._session = session
        self._owns_session = session is None
        self._daily_cache: TLRUCache = TLRUCache(
            maxsize=1, ttu=_expires_at_next_utc_midnight, timer=timer
        )
        self._submissions_cache: TTLCache = TTLCache(
            maxsize=USER_CACHE_MAXSIZE, ttl=SUBMISSIONS_TTL_SECONDS, timer=timer
        )
        self._calendar_cache: TTLCache = TTLCache(
            maxsize=USER_CACHE_MAXSIZE, ttl=CALENDAR_TTL_SECONDS, timer=timer
        )

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._config.timeout_seconds)
            )
            self._owns_session = True
        return self._session

    async def _get_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        session = await self._get_session()
        try:
            async with session.get(url, params=params) as response:
                if response.status >= 400:
                    raise LeetCodeAPIError(
                        f"LeetCode API returned {response.status} for {url}",
                        status=response.status,
                    )
                return await response.json(content_type=None)
        except aiohttp.ClientError as e:
            raise LeetCodeAPIError(f"Request to {url} failed: {e}") from e
        except asyncio.TimeoutError as e:
            raise LeetCodeAPIError(f"Request to {url} timed out") from e

    async def close(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    def clear_caches(self) -> None:
        self._daily_cache.clear()
        self._submissions_cache.clear()
        self._calendar_cache.clear()

    async def get_daily_challenge(self) -> Dict[str, Any]:
        """Return today's daily challenge question (cached until the next UTC midnight)."""
        cached = self._daily_cache.get("daily")
        if cached is not None:
            return cached

        payload = await self._get_json(self._config.daily_url)
        question = (payload or {}).get("question") or {}
        if not question.get("titleSlug"):
            raise LeetCodeAPIError("Daily challenge response is missing question.titleSlug")

        self._daily_cache["daily"] = question
        logger.info(f"Fetched daily challenge: {question['titleSlug']}")
        return question

    async def get_daily_slug(self) -> str:
        question = await self.get_daily_challenge()
        return question["titleSlug"]

    async def get_user_submissions(
        self, username: str, limit: int = DEFAULT_SUBMISSION_LIMIT
    ) -> List[Dict[str, Any]]:
        """Return a user's most recent submissions (cached for 60 seconds)."""
        key = (username.lower(), limit)
        cached = self._submissions_cache.get(key)
        if cached is not None:
            return cached

        payload = await self._get_json(
            self._config.submissions_url(username), params={"limit": limit}
        )
        if isinstance(payload, dict):
            payload = payload.get("submissions") or payload.get("submission") or []
        submissions = list(payload or [])

        self._submissions_cache[key] = submissions
        return submissions

    async def get_user_calendar(self, username: str) -> Dict[str, Any]:
        """Return streak, active days and active years (cached for 24 hours)."""
        key = username.lower()
        cached = self._calendar_cache.get(key)
        if cached is not None:
            return cached

        payload = await self._get_json(self._config.calendar_url(username))
        calendar = _normalize_calendar(payload or {})

        self._calendar_cache[key] = calendar
        return calendar

    async def get_problem(self, slug: str) -> Dict[str, Any]:
        return await self._get_json(self._config.problem_url(slug)) or {}

    async def get_upcoming_contests(self) -> List[Dict[str, Any]]:
        payload = await self._get_json(self._config.contests_url)
        if isinstance(payload, dict):
            payload = payload.get("topTwoContests") or payload.get("contests") or []
        return list(payload or [])

    async def check_user(self, username: str, slug: str) -> bool:
        """True if the user has an accepted submission for slug among recent submissions."""
        submissions = await self.get_user_submissions(username)
        return any(
            submission.get("titleSlug") == slug and submission.get("statusDisplay") == ACCEPTED
            for submission in submissions
        )

    async def get_best_daily_submission(
        self, username: str, slug: str, day: Optional[datetime] = None
    ) -> Optional[Dict[str, Any]]:
        """
        Return the user's fastest accepted submission of slug on the given UTC day.

        Ties on runtime are broken by memory. The returned dict always carries
        'url' and 'langName'.
        """
        day_start = utc_midnight(day)
        day_end = day_start + timedelta(days=1)

        submissions = await self.get_user_submissions(username)
        candidates = [
            submission
            for submission in submissions
            if submission.get("titleSlug") == slug
            and submission.get("statusDisplay") == ACCEPTED
            and day_start <= parse_timestamp(submission.get("timestamp")) < day_end
        ]
        if not candidates:
            return None

        best = dict(
            min(
                candidates,
                key=lambda s: (parse_duration(s.get("runtime")), parse_memory(s.get("memory"))),
            )
        )
        if not best.get("url"):
            best["url"] = f"/submissions/detail/{best.get('id')}/"
        if not best.get("langName"):
            best["langName"] = best.get("lang") or "Unknown"
        return best


_client: Optional[LeetCodeClient] = None


def get_leetcode_client() -> LeetCodeClient:
    """Get or create the singleton client instance."""
    global _client
    if _client is None:
        _client = LeetCodeClient()
    return _client


async def close_leetcode_client() -> None:
    global _client
    if _client is not None:
        await _client.close()
        _client = None
