"""
Ranking of daily submissions for the nightly performance report.
"""

from typing import Any, Callable, Dict, List, Optional

from libs.leetcode import parse_duration, parse_memory

MEDALS = ("🥇", "🥈", "🥉")
SUBMISSION_URL_BASE = "https://leetcode.com"


def sort_submissions_by_performance(rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Fastest runtime first; equal runtimes are ordered by lower memory."""
    return sorted(
        rows,
        key=lambda row: (
            parse_duration(row["submission"].get("runtime")),
            parse_memory(row["submission"].get("memory")),
        ),
    )


def format_mention(row: Dict[str, Any]) -> str:
    discord_id = row.get("discord_id")
    return f"<@{discord_id}>" if discord_id else row["username"]


def build_ranked_fields(
    rows: List[Dict[str, Any]],
    format_value: Optional[Callable[[Dict[str, Any]], str]] = None,
) -> List[Dict[str, Any]]:
    """
    Embed fields for an already ordered list of rows.

    Each row has 'username', optional 'discord_id' and either a 'submission'
    dict, a 'value', or neither. The first three rows get medals.
    """
    fields = []
    for index, row in enumerate(rows):
        medal = MEDALS[index] if index < len(MEDALS) else ""
        mention = format_mention(row)
        submission = row.get("submission")

        if submission:
            lines = [
                f"👤 {mention}",
                f"🔗 [View Submission]({SUBMISSION_URL_BASE}{submission.get('url', '')})",
                f"💻 {submission.get('langName', 'Unknown')}",
                f"⚡ Runtime: {submission.get('runtime', 'N/A')}",
                f"🧠 Memory: {submission.get('memory', 'N/A')}",
            ]
        elif format_value is not None:
            lines = [f"👤 {mention}", format_value(row)]
        elif row.get("value") is not None:
            lines = [f"👤 {mention}", f"{row['value']}"]
        else:
            lines = [f"👤 {mention}"]

        fields.append({
            "name": f"**{index + 1}. {row['username']}** {medal}",
            "value": "\n".join(lines),
            "inline": True,
        })
    return fields
