"""
Tests for linking Telegram chats to tracked LeetCode accounts.
"""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from libs.db.guilds import GuildNotConfiguredError, NotTrackedError, initialize_guild_config
from libs.db.telegram_users import (
    get_connection_by_chat_id,
    get_notification_targets,
    get_telegram_user,
    link_telegram_chat,
    migrate_legacy_guild_links,
    set_telegram_token,
    toggle_telegram_updates,
)


@pytest.fixture
def guild(fake_db):
    asyncio.run(initialize_guild_config("100", "200"))
    fake_db["guilds"].docs[0]["users"] = {"alice": "42", "bob": None}
    return fake_db


def _connect(token="tok", chat_id=777):
    async def run():
        await set_telegram_token("100", "42", token)
        return await link_telegram_chat(token, chat_id)
    return asyncio.run(run())


class TestSetTelegramToken:

    def test_stores_token_for_linked_discord_user(self, guild):
        username = asyncio.run(set_telegram_token("100", "42", "tok"))
        assert username == "alice"

        user = asyncio.run(get_telegram_user("alice"))
        assert user.temp_token == "tok"
        assert user.user_id == "42"
        assert user.is_enabled is True
        assert user.token_expires > datetime.now(timezone.utc) + timedelta(minutes=14)

    def test_unlinked_discord_user(self, guild):
        with pytest.raises(NotTrackedError, match="not linked to Discord"):
            asyncio.run(set_telegram_token("100", "99", "tok"))

    def test_unconfigured_guild(self, fake_db):
        with pytest.raises(GuildNotConfiguredError):
            asyncio.run(set_telegram_token("404", "42", "tok"))


class TestLinkTelegramChat:

    def test_success_clears_token(self, guild):
        result = _connect()
        assert result.success
        assert result.message == "Successfully connected! You will now receive LeetCode notifications."

        user = asyncio.run(get_telegram_user("alice"))
        assert user.telegram_chat_id == "777"
        assert user.temp_token is None

    def test_invalid_token(self, guild):
        result = asyncio.run(link_telegram_chat("nope", 1))
        assert not result.success
        assert result.message == "Invalid token. Please check your link."

    def test_expired_token(self, guild):
        asyncio.run(set_telegram_token("100", "42", "tok"))
        guild["telegram_users"].docs[0]["tokenExpires"] = datetime.now(timezone.utc) - timedelta(seconds=1)

        result = asyncio.run(link_telegram_chat("tok", 777))
        assert not result.success
        assert result.message == "Link token has expired. Please generate a new one."

    def test_same_chat_again(self, guild):
        _connect()
        result = _connect(token="tok2")
        assert result.success
        assert result.message == "✅ You are already connected!"

    def test_other_chat_rejected(self, guild):
        _connect()
        result = _connect(token="tok2", chat_id=888)
        assert not result.success
        assert "already linked to another Telegram chat" in result.message


class TestToggleTelegramUpdates:

    def test_toggle(self, guild):
        _connect()
        first = asyncio.run(toggle_telegram_updates("100", "42"))
        assert first.message == "Telegram updates have been disabled globally."
        second = asyncio.run(toggle_telegram_updates("100", "42"))
        assert second.message == "Telegram updates have been enabled globally."

    def test_not_registered(self, guild):
        result = asyncio.run(toggle_telegram_updates("100", "99"))
        assert result.message == "You are not registered in this server."

    def test_not_connected(self, guild):
        result = asyncio.run(toggle_telegram_updates("100", "42"))
        assert result.message == "You have not connected a Telegram account yet."


class TestLookups:

    def test_connection_by_chat_id(self, guild):
        _connect()
        connection = asyncio.run(get_connection_by_chat_id(777))
        assert connection.username == "alice"
        assert connection.connected_guilds == [{"guildId": "100", "channelId": "200"}]

    def test_unknown_chat(self, guild):
        assert asyncio.run(get_connection_by_chat_id(1)) is None

    def test_notification_targets_skip_disabled_and_unlinked(self, guild):
        _connect()
        guild["telegram_users"].docs.append({"leetcodeUsername": "bob", "isEnabled": True})
        guild["telegram_users"].docs.append(
            {"leetcodeUsername": "carol", "isEnabled": False, "telegramChatId": "5"}
        )
        targets = asyncio.run(get_notification_targets(["alice", "bob", "carol"]))
        assert targets == {"alice": "777"}

    def test_notification_targets_empty(self, guild):
        assert asyncio.run(get_notification_targets([])) == {}


class TestMigrateLegacyGuildLinks:

    def _seed(self, fake_db):
        fake_db["guilds"].docs.append({
            "_id": 50,
            "guildId": "300",
            "users": {"dave": "7"},
            "telegramUsers": {"dave": {"chatId": 123, "enabled": False}},
        })

    def test_dry_run(self, fake_db):
        self._seed(fake_db)
        assert asyncio.run(migrate_legacy_guild_links(dry_run=True)) == {"migrated": 1, "errors": 0}
        assert fake_db["telegram_users"].docs == []

    def test_migrates(self, fake_db):
        self._seed(fake_db)
        assert asyncio.run(migrate_legacy_guild_links()) == {"migrated": 1, "errors": 0}

        user = asyncio.run(get_telegram_user("dave"))
        assert user.telegram_chat_id == "123"
        assert user.user_id == "7"
        assert user.is_enabled is False
