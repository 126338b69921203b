"""
Shared utilities for building Discord embeds.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import discord

from apps.leetcode_bot.common.constants import (
    BIWEEKLY_CONTEST_COLOR,
    DIFFICULTY_COLORS,
    EMBED_MAX_FIELDS,
    LEETCODE_BASE_URL,
    LEETCODE_ORANGE,
    PANEL_CYAN,
    STATUS_GREEN,
    WEEKLY_CONTEST_COLOR,
)
from libs.leetcode import parse_problem_stats


def add_fields(embed: discord.Embed, fields: List[Dict[str, Any]]) -> discord.Embed:
    """Add field dicts (name/value/inline) up to Discord's per-embed limit."""
    for field in fields[:EMBED_MAX_FIELDS]:
        embed.add_field(name=field["name"], value=field["value"], inline=field.get("inline", True))
    return embed


def problem_url(problem: Dict[str, Any], slug: str) -> str:
    url = problem.get("url") or f"{LEETCODE_BASE_URL}/problems/{slug}/"
    if url.startswith("/"):
        url = f"{LEETCODE_BASE_URL}{url}"
    return url


def format_topics(problem: Dict[str, Any]) -> str:
    tags = problem.get("topicTags")
    if isinstance(tags, list) and tags:
        return ", ".join(tag.get("name", "") for tag in tags if isinstance(tag, dict))
    return "Not specified"


def build_check_status_embed(
    problem: Dict[str, Any],
    slug: str,
    statuses: Dict[str, bool],
) -> discord.Embed:
    """Status of every tracked user for today's challenge."""
    stats = parse_problem_stats(problem)
    description = (
        f"**Problem**: {problem.get('title') or 'Unknown'}\n"
        f"**Difficulty**: {problem.get('difficulty') or 'Unknown'}\n"
        f"**Topics**: {format_topics(problem)}\n"
        f"**Acceptance Rate**: {stats.get('acRate') or 'Unknown'}\n"
        f"**Total Submissions**: {stats.get('totalSubmission') or 'Unknown'}\n\n"
        f"**User Status**:"
    )
    embed = discord.Embed(
        title="Daily LeetCode Challenge Status",
        description=description,
        color=STATUS_GREEN,
        url=problem_url(problem, slug),
        timestamp=datetime.now(timezone.utc),
    )
    return add_fields(embed, [
        {"name": username, "value": "✅ Completed" if done else "❌ Not completed", "inline": True}
        for username, done in statuses.items()
    ])


def build_daily_problem_embed(problem: Dict[str, Any], slug: str) -> discord.Embed:
    difficulty = problem.get("difficulty") or "Unknown"
    stats = parse_problem_stats(problem)
    embed = discord.Embed(
        title=f"📌 {problem.get('title') or slug}",
        url=problem_url(problem, slug),
        color=DIFFICULTY_COLORS.get(difficulty, LEETCODE_ORANGE),
        timestamp=datetime.now(timezone.utc),
    )
    embed.add_field(name="Difficulty", value=difficulty, inline=True)
    embed.add_field(name="Acceptance Rate", value=str(stats.get("acRate") or "Unknown"), inline=True)
    embed.add_field(name="Topics", value=format_topics(problem), inline=False)
    embed.set_footer(text="LeetCode Daily Challenge")
    return embed


def build_submission_report_embed(
    problem_title: str,
    ranked_fields: List[Dict[str, Any]],
) -> discord.Embed:
    count = len(ranked_fields)
    embed = discord.Embed(
        title="🏆 Daily Challenge Submissions",
        description=f"**{problem_title}**\n\n**Ranked by Runtime**",
        color=PANEL_CYAN,
        timestamp=datetime.now(timezone.utc),
    )
    add_fields(embed, ranked_fields)
    embed.set_footer(text=f"{count} user{'s' if count != 1 else ''} completed this challenge")
    return embed


def format_contest_duration(seconds: int) -> str:
    hours, remainder = divmod(int(seconds), 3600)
    minutes = remainder // 60
    return f"{hours}h {minutes}m" if minutes > 0 else f"{hours}h"


def format_contest_embed(contest: Dict[str, Any], index: int = 0, total: int = 1) -> discord.Embed:
    """
    Embed for one upcoming contest.

    Biweekly contests are purple and weekly contests orange. The heading
    depends on the contest's position among the contests being announced.
    """
    duration = format_contest_duration(contest.get("duration", 0))
    start = int(contest["startTime"])
    slug = contest.get("titleSlug", "")
    is_biweekly = "biweekly" in contest.get("title", "").lower()

    if total > 1 and index > 0:
        label = f"📅 Also Upcoming ({index + 1} of {total})"
    else:
        label = "🔜 Next Up"

    contest_url = f"{LEETCODE_BASE_URL}/contest/{slug}"
    embed = discord.Embed(
        title=f"📝 {contest.get('title', 'LeetCode Contest')}",
        description=(
            f"**{label}** · LeetCode Contest\n\n"
            f"**Starts:** <t:{start}:F> (<t:{start}:R>)\n"
            f"**Duration:** {duration}\n"
            f"**[Register / View Details]({contest_url})**"
        ),
        color=BIWEEKLY_CONTEST_COLOR if is_biweekly else WEEKLY_CONTEST_COLOR,
        timestamp=datetime.now(timezone.utc),
    )
    embed.add_field(name="⏰ Start Time", value=f"<t:{start}:F>", inline=True)
    embed.add_field(name="⌛ Duration", value=duration, inline=True)
    embed.add_field(name="🔗 Contest Page", value=f"[leetcode.com/contest/{slug}]({contest_url})", inline=True)
    embed.set_footer(text=f"LeetCode Contest Reminder{f' • {index + 1} of {total}' if total > 1 else ''}")
    return embed


def build_panel_embed(
    title: str,
    fields: List[Dict[str, Any]],
    description: Optional[str] = None,
    footer: str = "Updates automatically every hour",
) -> discord.Embed:
    embed = discord.Embed(
        title=title,
        description=description,
        color=PANEL_CYAN,
        timestamp=datetime.now(timezone.utc),
    )
    add_fields(embed, fields)
    embed.set_footer(text=footer)
    return embed
