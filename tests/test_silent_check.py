"""
Tests for the nightly silent check and its ranked submission report.
"""

import asyncio
from datetime import datetime, timezone

import pytest

from apps.leetcode_bot.common.constants import HC_PING_SILENT_CHECK
from apps.leetcode_bot.jobs import silent_check
from apps.leetcode_bot.jobs.silent_check import perform_silent_check
from libs.db.guilds import initialize_guild_config
from libs.leetcode import LeetCodeAPIError

SUBMISSIONS = {
    "alice": {"id": 1, "runtime": "80 ms", "memory": "17 MB", "langName": "Python3", "url": "/submissions/detail/1/"},
    "bob": {"id": 2, "runtime": "40 ms", "memory": "18 MB", "langName": "C++", "url": "/submissions/detail/2/"},
}


class FakeLeetCodeClient:

    def __init__(self, fail_daily=False):
        self.fail_daily = fail_daily

    async def get_daily_challenge(self):
        if self.fail_daily:
            raise LeetCodeAPIError("proxy down", status=502)
        return {"titleSlug": "two-sum", "title": "Two Sum", "difficulty": "Easy"}

    async def get_best_daily_submission(self, username, slug, day=None):
        if username == "broken":
            raise LeetCodeAPIError("user lookup failed")
        submission = SUBMISSIONS.get(username)
        if submission is None:
            return None
        return {
            **submission,
            "titleSlug": slug,
            "timestamp": str(int(datetime.now(timezone.utc).timestamp())),
        }


@pytest.fixture
def leetcode(monkeypatch):
    client = FakeLeetCodeClient()
    monkeypatch.setattr(silent_check, "get_leetcode_client", lambda: client)
    return client


@pytest.fixture
def sent(monkeypatch):
    messages = []

    async def fake_send_to_guild(bot, guild_config, **kwargs):
        messages.append((guild_config.guild_id, kwargs))
        return True

    monkeypatch.setattr(silent_check, "send_to_guild", fake_send_to_guild)
    return messages


@pytest.fixture
def pings(monkeypatch):
    keys = []
    monkeypatch.setattr(silent_check, "ping", keys.append)
    return keys


def _guild(fake_db, guild_id, users):
    asyncio.run(initialize_guild_config(guild_id, "200"))
    doc = next(d for d in fake_db["guilds"].docs if d["guildId"] == guild_id)
    doc["users"] = users


class TestPerformSilentCheck:

    def test_ranked_report(self, fake_db, leetcode, sent, pings):
        _guild(fake_db, "100", {"alice": "42", "bob": None, "carol": None, "broken": None})

        assert asyncio.run(perform_silent_check(None)) == 1
        assert pings == [HC_PING_SILENT_CHECK]

        guild_id, kwargs = sent[0]
        embed = kwargs["embed"]
        assert guild_id == "100"
        assert embed.title == "🏆 Daily Challenge Submissions"
        assert "Two Sum" in embed.description
        assert embed.footer.text == "2 users completed this challenge"
        assert [field.name for field in embed.fields] == ["**1. bob** 🥇", "**2. alice** 🥈"]
        assert "<@42>" in embed.fields[1].value

    def test_records_without_posting_per_user(self, fake_db, leetcode, sent, pings):
        _guild(fake_db, "100", {"alice": "42", "carol": None})

        asyncio.run(perform_silent_check(None))

        stored = fake_db["daily_submissions"].docs
        assert [doc["leetcodeUsername"] for doc in stored] == ["alice"]
        assert stored[0]["questionSlug"] == "two-sum"
        assert len(sent) == 1

    def test_single_completion_footer(self, fake_db, leetcode, sent, pings):
        _guild(fake_db, "100", {"alice": "42"})
        asyncio.run(perform_silent_check(None))
        assert sent[0][1]["embed"].footer.text == "1 user completed this challenge"

    def test_skips_guilds_without_completions(self, fake_db, leetcode, sent, pings):
        _guild(fake_db, "100", {"carol": None})
        _guild(fake_db, "101", {})
        _guild(fake_db, "102", {"bob": None})

        assert asyncio.run(perform_silent_check(None)) == 1
        assert [guild_id for guild_id, _ in sent] == ["102"]

    def test_daily_challenge_unavailable(self, fake_db, leetcode, sent, pings):
        leetcode.fail_daily = True
        _guild(fake_db, "100", {"alice": "42"})

        assert asyncio.run(perform_silent_check(None)) == 0
        assert sent == []
        assert fake_db["daily_submissions"].docs == []
