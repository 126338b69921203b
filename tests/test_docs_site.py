"""
Tests for the docs site pages and stats endpoint.
"""

import asyncio

from aiohttp import test_utils
from pymongo.errors import ServerSelectionTimeoutError

from apps.docs_site import server
from apps.docs_site.config import DocsSiteConfig
from apps.docs_site.server import collect_stats, create_app, render_command_sections, render_index
from apps.leetcode_bot.commands.catalog import get_commands


def _config(monkeypatch, **env):
    for key, value in env.items():
        monkeypatch.setenv(key, value)
    return DocsSiteConfig()


async def _get(app, path):
    async with test_utils.TestClient(test_utils.TestServer(app)) as client:
        response = await client.get(path)
        body = await response.json() if response.content_type == "application/json" else await response.text()
        return response.status, body


class TestRendering:

    def test_sections_follow_categories(self):
        sections = render_command_sections(get_commands())
        assert sections.index("<h2>Setup &amp; Admin</h2>") < sections.index("<h2>User Tracking</h2>")
        assert "<code>/adduser username [member]</code>" in sections
        assert "<code>/broadcast" not in sections

    def test_index_with_invite(self, monkeypatch):
        config = _config(monkeypatch, BOT_VERSION="9.9.9", DISCORD_INVITE_URL="https://discord.com/invite/x")
        page = render_index(config)
        assert "Version 9.9.9." in page
        assert 'href="https://discord.com/invite/x"' in page

    def test_index_without_invite(self, monkeypatch):
        monkeypatch.delenv("DISCORD_INVITE_URL", raising=False)
        assert "Add the bot" not in render_index(DocsSiteConfig())


class TestStats:

    def test_collect_stats(self, fake_db):
        fake_db["guilds"].docs.extend([
            {"guildId": "1", "users": {"a": None, "b": None}},
            {"guildId": "2", "users": {}},
        ])
        fake_db["daily_submissions"].docs.append({"guildId": "1"})
        stats = asyncio.run(collect_stats("2.2.0"))
        assert stats == {"guilds": 2, "users": 2, "submissions": 1, "version": "2.2.0"}

    def test_stats_endpoint_cached(self, fake_db, monkeypatch):
        app = create_app(_config(monkeypatch, DOCS_STATS_CACHE_SECONDS="300", BOT_VERSION="2.2.0"))

        async def run():
            async with test_utils.TestClient(test_utils.TestServer(app)) as client:
                first = await (await client.get("/api/stats")).json()
                fake_db["guilds"].docs.append({"guildId": "3", "users": {}})
                second = await (await client.get("/api/stats")).json()
            return first, second

        first, second = asyncio.run(run())
        assert first == {"guilds": 0, "users": 0, "submissions": 0, "version": "2.2.0"}
        assert second == first

    def test_stats_endpoint_unavailable(self, monkeypatch):
        async def broken(version):
            raise ServerSelectionTimeoutError("no servers")

        monkeypatch.setattr(server, "collect_stats", broken)
        status, body = asyncio.run(_get(create_app(_config(monkeypatch)), "/api/stats"))
        assert status == 503
        assert body == {"error": "Stats are temporarily unavailable"}


class TestRoutes:

    def test_healthz(self, monkeypatch):
        assert asyncio.run(_get(create_app(_config(monkeypatch)), "/healthz")) == (200, {"status": "ok"})

    def test_commands_json(self, monkeypatch):
        status, body = asyncio.run(_get(create_app(_config(monkeypatch)), "/commands.json"))
        assert status == 200
        assert [command["name"] for command in body] == [command["name"] for command in get_commands()]
