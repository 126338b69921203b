"""
LeetCode proxy API configuration from environment variables.
"""

from __future__ import annotations

import os
from typing import Optional

DEFAULT_BASE_URL = "https://leetcode-api-pied.vercel.app"


class LeetCodeAPIConfig:
    """LeetCode proxy endpoint configuration."""

    def __init__(self) -> None:
        self.base_url: str = os.getenv("LEETCODE_API_BASE_URL", DEFAULT_BASE_URL).rstrip("/")
        self.timeout_seconds: float = float(os.getenv("LEETCODE_API_TIMEOUT", "15"))

        # API endpoints
        self.daily_endpoint: str = "/daily"
        self.submissions_endpoint: str = "/user/{username}/submissions"
        self.calendar_endpoint: str = "/user/{username}/calendar"
        self.problem_endpoint: str = "/problem/{slug}"
        self.contests_endpoint: str = "/contests/upcoming"

    @property
    def daily_url(self) -> str:
        return f"{self.base_url}{self.daily_endpoint}"

    def submissions_url(self, username: str) -> str:
        return f"{self.base_url}{self.submissions_endpoint.format(username=username)}"

    def calendar_url(self, username: str) -> str:
        return f"{self.base_url}{self.calendar_endpoint.format(username=username)}"

    def problem_url(self, slug: str) -> str:
        return f"{self.base_url}{self.problem_endpoint.format(slug=slug)}"

    @property
    def contests_url(self) -> str:
        return f"{self.base_url}{self.contests_endpoint}"

    def __repr__(self) -> str:
        return (
            f"LeetCodeAPIConfig(base_url={self.base_url!r}, "
            f"timeout_seconds={self.timeout_seconds})"
        )


_api_config: Optional[LeetCodeAPIConfig] = None


def get_api_config() -> LeetCodeAPIConfig:
    """Get or create the singleton config instance."""
    global _api_config
    if _api_config is None:
        _api_config = LeetCodeAPIConfig()
    return _api_config
