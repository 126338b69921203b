"""
Tests for per-guild configuration: tracked users, schedules and toggles.
"""

import asyncio

import pytest

from libs.db import guilds
from libs.db.guilds import (
    GuildNotConfiguredError,
    add_cron_job,
    add_user,
    build_cron_schedule,
    describe_cron_schedule,
    get_admin_role,
    get_guild_config,
    get_guild_users,
    initialize_guild_config,
    list_cron_jobs,
    remove_cron_job,
    remove_user,
    set_admin_role,
    toggle_broadcast,
    toggle_contest_reminder,
    update_guild_channel,
    update_user_stats,
)
from libs.leetcode import LeetCodeAPIError


class FakeLeetCodeClient:

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail

    async def get_user_calendar(self, username):
        if self.fail:
            raise LeetCodeAPIError("proxy down", status=503)
        return {"streak": 5, "totalActiveDays": 40, "activeYears": [2024]}


@pytest.fixture
def leetcode(monkeypatch):
    client = FakeLeetCodeClient()
    monkeypatch.setattr(guilds, "get_leetcode_client", lambda: client)
    return client


@pytest.fixture
def configured(fake_db):
    asyncio.run(initialize_guild_config("100", "200"))
    return fake_db


class TestCronHelpers:

    def test_build_schedule(self):
        assert build_cron_schedule(9, 30) == "30 9 * * *"

    @pytest.mark.parametrize("hours,minutes", [(24, 0), (-1, 0), (10, 60)])
    def test_build_schedule_rejects_out_of_range(self, hours, minutes):
        with pytest.raises(ValueError):
            build_cron_schedule(hours, minutes)

    def test_describe_daily_schedule(self):
        assert describe_cron_schedule("5 18 * * *") == "18:05"

    def test_describe_other_expression_unchanged(self):
        assert describe_cron_schedule("*/15 * * * *") == "*/15 * * * *"


class TestInitializeGuildConfig:

    def test_defaults(self, configured):
        guild = asyncio.run(get_guild_config("100"))
        assert guild.channel_id == "200"
        assert guild.check_schedules == ["0 10 * * *", "0 18 * * *"]
        assert guild.broadcast_enabled is True
        assert guild.contest_reminder_enabled is False

    def test_existing_config_kept(self, configured):
        asyncio.run(update_guild_channel("100", "300"))
        guild = asyncio.run(initialize_guild_config("100", "999"))
        assert guild.channel_id == "300"
        assert len(configured["guilds"].docs) == 1


class TestTrackedUsers:

    def test_add_user_stores_stats(self, configured, leetcode):
        message = asyncio.run(add_user("100", "alice", "42"))
        assert message == "Added alice to tracking list for this server. Current streak: 5 days."

        guild = asyncio.run(get_guild_config("100"))
        assert guild.users == {"alice": "42"}
        assert guild.user_stats["alice"].total_active_days == 40

    def test_add_user_without_stats_when_api_fails(self, configured, leetcode):
        leetcode.fail = True
        message = asyncio.run(add_user("100", "alice"))
        assert "Could not fetch calendar data" in message
        assert asyncio.run(get_guild_users("100")) == {"alice": None}

    def test_add_existing_user(self, configured, leetcode):
        asyncio.run(add_user("100", "alice"))
        message = asyncio.run(add_user("100", "alice"))
        assert message == "`alice` is already being tracked in this server."

    def test_add_user_unconfigured_guild(self, fake_db, leetcode):
        with pytest.raises(GuildNotConfiguredError) as exc_info:
            asyncio.run(add_user("404", "alice"))
        assert exc_info.value.guild_id == "404"

    def test_remove_user(self, configured, leetcode):
        asyncio.run(add_user("100", "alice"))
        message = asyncio.run(remove_user("100", "alice"))
        assert message == "Removed alice from tracking list for this server."

        guild = asyncio.run(get_guild_config("100"))
        assert guild.users == {}
        assert guild.user_stats == {}

    def test_remove_unknown_user(self, configured):
        assert asyncio.run(remove_user("100", "ghost")) == "ghost is not in the tracking list for this server."

    def test_legacy_null_discord_id(self, configured):
        configured["guilds"].docs[0]["users"] = {"bob": "null"}
        assert asyncio.run(get_guild_users("100")) == {"bob": None}


class TestCronJobs:

    def test_add_and_list(self, configured):
        assert asyncio.run(add_cron_job("100", 7, 5)) == "Added new check time at 07:05"
        assert asyncio.run(list_cron_jobs("100")) == ["0 10 * * *", "0 18 * * *", "5 7 * * *"]

    def test_add_duplicate(self, configured):
        assert asyncio.run(add_cron_job("100", 10, 0)) == "A check is already scheduled for 10:00"

    def test_remove(self, configured):
        assert asyncio.run(remove_cron_job("100", 18, 0)) == "Removed check time at 18:00"
        assert asyncio.run(list_cron_jobs("100")) == ["0 10 * * *"]

    def test_remove_missing(self, configured):
        assert asyncio.run(remove_cron_job("100", 3, 0)) == "No check scheduled for 03:00"


class TestSettings:

    def test_admin_role(self, configured):
        assert asyncio.run(get_admin_role("100")) is None
        asyncio.run(set_admin_role("100", 555))
        assert asyncio.run(get_admin_role("100")) == "555"

    def test_toggles(self, configured):
        assert asyncio.run(toggle_broadcast("100")) is False
        assert asyncio.run(toggle_broadcast("100")) is True
        assert asyncio.run(toggle_contest_reminder("100")) is True

    def test_toggle_unconfigured(self, fake_db):
        with pytest.raises(GuildNotConfiguredError):
            asyncio.run(toggle_broadcast("404"))


class TestUpdateUserStats:

    def test_refreshes_calendar(self, configured, leetcode):
        leetcode.fail = True
        asyncio.run(add_user("100", "alice"))
        leetcode.fail = False

        assert asyncio.run(update_user_stats("100", "alice")) is True
        guild = asyncio.run(get_guild_config("100"))
        assert guild.user_stats["alice"].streak == 5

    def test_unknown_user(self, configured, leetcode):
        assert asyncio.run(update_user_stats("100", "ghost")) is False

    def test_api_failure(self, configured, leetcode):
        asyncio.run(add_user("100", "alice"))
        leetcode.fail = True
        assert asyncio.run(update_user_stats("100", "alice")) is False
