"""
Parsing helpers for values returned by the LeetCode proxy.
"""

from __future__ import annotations

import json
import logging
import math
import re
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

# Numeric timestamps above this are milliseconds (1e11 seconds is year 5138)
MILLISECONDS_THRESHOLD = 10 ** 11

_NUMERIC_RE = re.compile(r"^-?\d+(?:\.\d+)?$")
_DURATION_RE = re.compile(r"(\d+(?:\.\d+)?)\s*ms", re.IGNORECASE)
_MEMORY_RE = re.compile(r"(\d+(?:\.\d+)?)\s*MB", re.IGNORECASE)


def utc_midnight(value: Optional[datetime] = None) -> datetime:
    """Return 00:00:00 UTC of the day containing value (default: now)."""
    if value is None:
        value = datetime.now(timezone.utc)
    elif value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.replace(hour=0, minute=0, second=0, microsecond=0)


def next_utc_midnight(value: Optional[datetime] = None) -> datetime:
    return utc_midnight(value) + timedelta(days=1)


def is_utc_midnight(value: datetime) -> bool:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value == utc_midnight(value)


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str) and _NUMERIC_RE.match(value.strip()):
        return float(value.strip())
    return None


def parse_timestamp(value: Any) -> datetime:
    """
    Normalize a submission timestamp to an aware UTC datetime.

    Tries unix seconds, then unix milliseconds, then an ISO-8601 string.
    Anything else logs a warning and falls back to the current time.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    numeric = _as_number(value)
    if numeric is not None:
        try:
            if abs(numeric) < MILLISECONDS_THRESHOLD:
                return datetime.fromtimestamp(numeric, tz=timezone.utc)
            return datetime.fromtimestamp(numeric / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            pass

    if isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            parsed = None
        if parsed is not None:
            if parsed.tzinfo is None:
                return parsed.replace(tzinfo=timezone.utc)
            return parsed.astimezone(timezone.utc)

    logger.warning(f"Invalid timestamp format: {value!r}")
    return datetime.now(timezone.utc)


def parse_duration(runtime: Any) -> float:
    """'52 ms' -> 52.0; missing or unparsable values sort last."""
    if runtime is None:
        return math.inf
    match = _DURATION_RE.search(str(runtime))
    return float(match.group(1)) if match else math.inf


def parse_memory(memory: Any) -> float:
    """'17.9 MB' -> 17.9; missing or unparsable values sort last."""
    if memory is None:
        return math.inf
    match = _MEMORY_RE.search(str(memory))
    return float(match.group(1)) if match else math.inf


def parse_problem_stats(problem: Dict[str, Any]) -> Dict[str, Any]:
    """The proxy returns problem stats as a JSON-encoded string."""
    stats = problem.get("stats")
    if isinstance(stats, dict):
        return stats
    try:
        return json.loads(stats) if stats else {}
    except (TypeError, ValueError):
        return {}
