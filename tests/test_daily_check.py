"""
Tests for the per-guild daily check: status embed, recording and Telegram fan-out.
"""

import asyncio
from datetime import datetime, timezone

import pytest

from apps.leetcode_bot.jobs import daily_check
from apps.leetcode_bot.jobs.daily_check import (
    CHECK_ERROR_MESSAGE,
    CheckResult,
    enhanced_check,
    notify_telegram_users,
    run_guild_check,
)
from libs.db.guilds import initialize_guild_config
from libs.leetcode import LeetCodeAPIError


class FakeLeetCodeClient:

    def __init__(self, solved, fail_daily=False):
        self.solved = solved
        self.fail_daily = fail_daily

    async def get_daily_challenge(self):
        if self.fail_daily:
            raise LeetCodeAPIError("proxy down", status=502)
        return {"titleSlug": "two-sum", "title": "Two Sum", "difficulty": "Easy"}

    async def get_problem(self, slug):
        return {"stats": '{"acRate": "50%"}', "topicTags": [{"name": "Array"}]}

    async def check_user(self, username, slug):
        if username == "broken":
            raise LeetCodeAPIError("user lookup failed")
        return username in self.solved

    async def get_best_daily_submission(self, username, slug, day=None):
        if username not in self.solved:
            return None
        return {
            "id": 1,
            "titleSlug": slug,
            "runtime": "40 ms",
            "memory": "16 MB",
            "timestamp": str(int(datetime.now(timezone.utc).timestamp())),
        }


class FakeChannel:

    def __init__(self):
        self.sent = []

    async def send(self, **kwargs):
        self.sent.append(kwargs)


@pytest.fixture
def leetcode(monkeypatch):
    client = FakeLeetCodeClient(solved={"alice"})
    monkeypatch.setattr(daily_check, "get_leetcode_client", lambda: client)
    return client


@pytest.fixture
def telegram(monkeypatch):
    messages = []

    async def fake_send(chat_id, text):
        messages.append((chat_id, text))
        return True

    monkeypatch.setattr(daily_check, "send_telegram_message", fake_send)
    return messages


class TestEnhancedCheck:

    def test_statuses_and_recording(self, fake_db, leetcode):
        result = asyncio.run(enhanced_check({"alice": "42", "bob": None, "broken": None}, "100"))

        assert result.ok
        assert result.completed == {"alice": True, "bob": False, "broken": False}
        assert result.newly_recorded == ["alice"]
        assert result.problem["title"] == "Two Sum"
        assert result.problem["topicTags"] == [{"name": "Array"}]

        stored = fake_db["daily_submissions"].docs
        assert len(stored) == 1
        assert stored[0]["userId"] == "42"
        assert stored[0]["questionSlug"] == "two-sum"

    def test_second_run_records_nothing_new(self, fake_db, leetcode):
        asyncio.run(enhanced_check({"alice": None}, "100"))
        result = asyncio.run(enhanced_check({"alice": None}, "100"))
        assert result.newly_recorded == []
        assert len(fake_db["daily_submissions"].docs) == 1

    def test_without_recording(self, fake_db, leetcode):
        result = asyncio.run(enhanced_check({"alice": None}, "100", record=False))
        assert result.completed == {"alice": True}
        assert fake_db["daily_submissions"].docs == []

    def test_api_failure_gives_plain_message(self, fake_db, leetcode):
        leetcode.fail_daily = True
        result = asyncio.run(enhanced_check({"alice": None}, "100"))
        assert not result.ok
        assert result.message_kwargs() == {"content": CHECK_ERROR_MESSAGE}


class TestNotifyTelegramUsers:

    def _result(self):
        return CheckResult(
            embed=object(),
            problem={"title": "Two Sum", "titleSlug": "two-sum", "difficulty": "Easy"},
            completed={"alice": True, "bob": False, "carol": True},
            newly_recorded=["alice"],
        )

    def test_reminders_and_congratulations(self, monkeypatch, telegram):
        async def targets(usernames):
            return {"alice": "1", "bob": "2", "carol": "3"}

        monkeypatch.setattr(daily_check, "get_notification_targets", targets)
        assert asyncio.run(notify_telegram_users(self._result())) == 2

        chats = dict(telegram)
        assert chats["1"].startswith("✅")
        assert chats["2"].startswith("⏰")
        assert "3" not in chats

    def test_failed_check_sends_nothing(self, telegram):
        assert asyncio.run(notify_telegram_users(CheckResult(content=CHECK_ERROR_MESSAGE))) == 0
        assert telegram == []


class TestRunGuildCheck:

    def test_posts_embed(self, fake_db, leetcode, telegram, monkeypatch):
        channel = FakeChannel()

        async def announcement_channel(bot, guild_config):
            return channel

        monkeypatch.setattr(daily_check, "get_announcement_channel", announcement_channel)
        asyncio.run(initialize_guild_config("100", "200"))
        fake_db["guilds"].docs[0]["users"] = {"alice": "42"}

        assert asyncio.run(run_guild_check(None, "100")) is True
        assert len(channel.sent) == 1
        assert channel.sent[0]["embed"].title == "Daily LeetCode Challenge Status"

    def test_skips_guild_without_users(self, fake_db, leetcode):
        asyncio.run(initialize_guild_config("100", "200"))
        assert asyncio.run(run_guild_check(None, "100")) is False

    def test_skips_unconfigured_guild(self, fake_db, leetcode):
        assert asyncio.run(run_guild_check(None, "404")) is False
