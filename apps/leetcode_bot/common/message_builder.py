"""
Plain-text table messages for leaderboards and listings.
"""

from typing import Any, Dict, List, Optional, Sequence

from tabulate import tabulate

from apps.leetcode_bot.common.constants import DISCORD_MESSAGE_MAX_LENGTH


def build_table_message(
    title: str,
    rows: Sequence[Sequence[Any]],
    headers: Sequence[str],
    prefix_lines: Optional[List[str]] = None,
    max_length: int = DISCORD_MESSAGE_MAX_LENGTH,
) -> str:
    """
    Render rows as a GitHub-style table inside a code block.

    Rows are dropped from the bottom until the message fits max_length, with
    a note saying how many were shown.
    """
    header_lines = [title] + list(prefix_lines or [])

    for num_rows in range(len(rows), 0, -1):
        table = tabulate(rows[:num_rows], headers=headers, tablefmt="github")
        lines = header_lines + ["```", table, "```"]
        if num_rows < len(rows):
            lines.append(f"*Showing {num_rows} of {len(rows)} rows (message length limit)*")

        message = "\n".join(lines)
        if len(message) <= max_length:
            return message

    return title + "\n*Message too long to display*"


def build_leaderboard_message(rows: List[Dict[str, Any]], guild_name: str) -> str:
    """All-time unique completions per user."""
    if not rows:
        return (
            f"## 🏆 {guild_name} Leaderboard\n"
            "No completions recorded yet. Checks record solves automatically."
        )

    table = [
        [rank, row["leetcodeUsername"], row["uniqueCompletions"]]
        for rank, row in enumerate(rows, 1)
    ]
    return build_table_message(
        f"## 🏆 {guild_name} Leaderboard",
        table,
        headers=["#", "LeetCode User", "Daily Challenges Solved"],
        prefix_lines=["*All-time unique daily challenges completed*"],
    )
