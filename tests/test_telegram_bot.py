"""
Tests for the Telegram command handlers.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
from telegram.error import Conflict

from apps.leetcode_bot.notifications import telegram_bot
from apps.leetcode_bot.notifications.telegram_bot import (
    NOT_CONNECTED_TEXT,
    WELCOME_TEXT,
    leetstatus_handler,
    start_handler,
    status_handler,
)
from libs.db.guilds import initialize_guild_config


class FakeMessage:

    def __init__(self):
        self.replies = []

    async def reply_text(self, text, **kwargs):
        self.replies.append(text)


def _update(chat_id=777):
    return SimpleNamespace(effective_chat=SimpleNamespace(id=chat_id), message=FakeMessage())


def _context(*args):
    return SimpleNamespace(args=list(args))


def _link(fake_db, username):
    asyncio.run(initialize_guild_config("100", "200"))
    fake_db["guilds"].docs[0]["users"] = {username: "42"}
    fake_db["telegram_users"].docs.append({
        "_id": 1,
        "leetcodeUsername": username,
        "userId": "42",
        "isEnabled": True,
        "tempToken": "tok",
        "tokenExpires": datetime.now(timezone.utc) + timedelta(minutes=10),
    })
    return fake_db


@pytest.fixture
def linked(fake_db):
    return _link(fake_db, "alice")


class TestStartHandler:

    def test_without_token(self, fake_db):
        update = _update()
        asyncio.run(start_handler(update, _context()))
        assert update.message.replies == [WELCOME_TEXT]

    def test_links_chat(self, linked):
        update = _update()
        asyncio.run(start_handler(update, _context("tok")))
        assert update.message.replies == ["Successfully connected! You will now receive LeetCode notifications."]
        assert linked["telegram_users"].docs[0]["telegramChatId"] == "777"

    def test_bad_token(self, linked):
        update = _update()
        asyncio.run(start_handler(update, _context("wrong")))
        assert update.message.replies == ["Invalid token. Please check your link."]


class TestStatusHandler:

    def test_not_connected(self, linked):
        update = _update(chat_id=1)
        asyncio.run(status_handler(update, _context()))
        assert update.message.replies == [NOT_CONNECTED_TEXT]

    def test_lists_guilds(self, linked):
        asyncio.run(start_handler(_update(), _context("tok")))
        update = _update()
        asyncio.run(status_handler(update, _context()))
        reply = update.message.replies[0]
        assert "👤 *LeetCode*: alice" in reply
        assert "- Server ID: `100`" in reply

    def test_escapes_username(self, fake_db):
        _link(fake_db, "foo_bar")
        asyncio.run(start_handler(_update(), _context("tok")))
        update = _update()
        asyncio.run(status_handler(update, _context()))
        assert "👤 *LeetCode*: foo\\_bar" in update.message.replies[0]


class TestLeetstatusHandler:

    def test_shows_calendar(self, linked, monkeypatch):
        class FakeClient:
            async def get_user_calendar(self, username):
                return {"streak": 3, "totalActiveDays": 20, "activeYears": [2023, 2024]}

        monkeypatch.setattr(telegram_bot, "get_leetcode_client", lambda: FakeClient())
        asyncio.run(start_handler(_update(), _context("tok")))
        update = _update()
        asyncio.run(leetstatus_handler(update, _context()))
        reply = update.message.replies[0]
        assert "🔥 Current Streak: 3 days" in reply
        assert "📅 Active Years: 2023, 2024" in reply

    def test_escapes_username(self, fake_db, monkeypatch):
        class FakeClient:
            async def get_user_calendar(self, username):
                return {"streak": 1, "totalActiveDays": 1, "activeYears": [2024]}

        monkeypatch.setattr(telegram_bot, "get_leetcode_client", lambda: FakeClient())
        _link(fake_db, "foo_bar")
        asyncio.run(start_handler(_update(), _context("tok")))
        update = _update()
        asyncio.run(leetstatus_handler(update, _context()))
        assert update.message.replies[0].startswith("📊 *LeetCode Stats for* foo\\_bar\n")


class TestPollingErrorCallback:

    def test_conflict_stops_updater(self, monkeypatch):
        stopped = []

        class FakeUpdater:
            running = True

            async def stop(self):
                stopped.append(True)

        monkeypatch.setattr(telegram_bot, "_application", SimpleNamespace(updater=FakeUpdater()))

        async def conflict():
            telegram_bot._polling_error_callback(Conflict("terminated by other getUpdates request"))
            assert len(telegram_bot._pending) == 1
            await asyncio.gather(*telegram_bot._pending)

        asyncio.run(conflict())
        assert stopped == [True]
        assert telegram_bot._pending == set()
