"""
Public docs site: command reference and live usage numbers.

Routes:
- /              HTML command reference grouped by category
- /commands.json the command catalog
- /api/stats     guild, user and submission totals
- /healthz       liveness probe
"""

from __future__ import annotations

import html
import logging
import time
from typing import Any, Callable, Dict, List, Optional

from aiohttp import web
from cachetools import TTLCache
from pymongo.errors import PyMongoError

from apps.docs_site.config import DocsSiteConfig, get_docs_config
from apps.leetcode_bot.commands.catalog import format_usage, get_commands, group_by_category
from libs.db.database import close_database
from libs.db.guilds import get_all_guild_configs
from libs.db.submissions import count_all_submissions

logger = logging.getLogger(__name__)

CONFIG_KEY = web.AppKey("config", DocsSiteConfig)
STATS_CACHE_KEY = web.AppKey("stats_cache", TTLCache)

PAGE_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>LeetCode Daily Tracker Bot</title>
<style>
body {{ font-family: system-ui, sans-serif; max-width: 860px; margin: 2rem auto; padding: 0 1rem; color: #1f2328; }}
h1 {{ color: #ffa116; }}
code {{ background: #f6f8fa; padding: 0.1rem 0.3rem; border-radius: 4px; }}
.stats {{ display: flex; gap: 1.5rem; margin: 1rem 0 2rem; }}
.stat strong {{ display: block; font-size: 1.6rem; }}
.admin {{ font-size: 0.8rem; color: #cf222e; margin-left: 0.4rem; }}
li {{ margin-bottom: 0.6rem; }}
</style>
</head>
<body>
<h1>LeetCode Daily Tracker</h1>
<p>Track your server's daily LeetCode challenge progress, streaks and contests. Version {version}.</p>
{invite}
<div class="stats" id="stats"></div>
{sections}
<script>
fetch("/api/stats").then(r => r.json()).then(s => {{
  document.getElementById("stats").innerHTML =
    `<div class="stat"><strong>${{s.guilds}}</strong>servers</div>` +
    `<div class="stat"><strong>${{s.users}}</strong>tracked users</div>` +
    `<div class="stat"><strong>${{s.submissions}}</strong>recorded solves</div>`;
}}).catch(() => {{}});
</script>
</body>
</html>
"""


def render_command_sections(commands: List[Dict[str, Any]]) -> str:
    sections = []
    for category, members in group_by_category(commands).items():
        items = []
        for command in members:
            badge = '<span class="admin">admin</span>' if command["adminOnly"] else ""
            options = "".join(
                f"<br><code>{html.escape(option['name'])}</code>"
                f"{'' if option['required'] else ' (optional)'}: {html.escape(option['description'])}"
                for option in command["options"]
            )
            items.append(
                f"<li><code>{html.escape(format_usage(command))}</code>{badge}<br>"
                f"{html.escape(command['description'])}{options}</li>"
            )
        sections.append(f"<h2>{html.escape(category)}</h2>\n<ul>{''.join(items)}</ul>")
    return "\n".join(sections)


def render_index(config: DocsSiteConfig) -> str:
    invite = ""
    if config.invite_url:
        invite = f'<p><a href="{html.escape(config.invite_url)}">Add the bot to your server</a></p>'
    return PAGE_TEMPLATE.format(
        version=html.escape(config.bot_version),
        invite=invite,
        sections=render_command_sections(get_commands()),
    )


async def collect_stats(version: str) -> Dict[str, Any]:
    guilds = await get_all_guild_configs()
    return {
        "guilds": len(guilds),
        "users": sum(len(guild.users) for guild in guilds),
        "submissions": await count_all_submissions(),
        "version": version,
    }


async def index_handler(request: web.Request) -> web.Response:
    return web.Response(text=render_index(request.app[CONFIG_KEY]), content_type="text/html")


async def commands_handler(request: web.Request) -> web.Response:
    return web.json_response(get_commands())


async def stats_handler(request: web.Request) -> web.Response:
    config = request.app[CONFIG_KEY]
    cache = request.app[STATS_CACHE_KEY]
    stats = cache.get("stats")
    if stats is None:
        try:
            stats = await collect_stats(config.bot_version)
        except (PyMongoError, ConnectionError, ValueError) as e:
            logger.error(f"Failed to collect stats: {e}", exc_info=True)
            return web.json_response({"error": "Stats are temporarily unavailable"}, status=503)
        cache["stats"] = stats
    return web.json_response(stats)


async def healthz_handler(request: web.Request) -> web.Response:
    return web.json_response({"status": "ok"})


async def _close_database(app: web.Application) -> None:
    await close_database()


def create_app(
    config: Optional[DocsSiteConfig] = None,
    timer: Callable[[], float] = time.monotonic,
) -> web.Application:
    config = config or get_docs_config()
    app = web.Application()
    app[CONFIG_KEY] = config
    app[STATS_CACHE_KEY] = TTLCache(maxsize=1, ttl=config.stats_cache_seconds, timer=timer)
    app.router.add_get("/", index_handler)
    app.router.add_get("/commands.json", commands_handler)
    app.router.add_get("/api/stats", stats_handler)
    app.router.add_get("/healthz", healthz_handler)
    app.on_cleanup.append(_close_database)
    return app


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    config = get_docs_config()
    logger.info(f"Starting docs site on {config.host}:{config.port}")
    web.run_app(create_app(config), host=config.host, port=config.port)


if __name__ == "__main__":
    main()
