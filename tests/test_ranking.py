"""
Tests for ordering and formatting the nightly submission report.
"""

from apps.leetcode_bot.common.ranking import build_ranked_fields, sort_submissions_by_performance


def _row(username, runtime, memory, discord_id=None):
    return {
        "username": username,
        "discord_id": discord_id,
        "submission": {
            "runtime": runtime,
            "memory": memory,
            "url": f"/submissions/detail/{username}/",
            "langName": "Python3",
        },
    }


class TestSortSubmissions:

    def test_fastest_runtime_first(self):
        rows = [_row("slow", "90 ms", "16 MB"), _row("fast", "40 ms", "18 MB")]
        assert [r["username"] for r in sort_submissions_by_performance(rows)] == ["fast", "slow"]

    def test_memory_breaks_ties(self):
        rows = [_row("heavy", "40 ms", "18 MB"), _row("light", "40 ms", "16.5 MB")]
        assert [r["username"] for r in sort_submissions_by_performance(rows)] == ["light", "heavy"]

    def test_unparsable_runtime_sorts_last(self):
        rows = [_row("unknown", "N/A", "10 MB"), _row("known", "100 ms", "20 MB")]
        assert [r["username"] for r in sort_submissions_by_performance(rows)] == ["known", "unknown"]


class TestBuildRankedFields:

    def test_medals_for_top_three(self):
        rows = [_row(f"user{i}", f"{i} ms", "10 MB") for i in range(1, 5)]
        fields = build_ranked_fields(rows)
        assert fields[0]["name"] == "**1. user1** 🥇"
        assert fields[1]["name"].endswith("🥈")
        assert fields[2]["name"].endswith("🥉")
        assert fields[3]["name"] == "**4. user4** "

    def test_mentions_linked_users(self):
        fields = build_ranked_fields([_row("alice", "1 ms", "1 MB", discord_id="42")])
        assert "👤 <@42>" in fields[0]["value"]
        assert "https://leetcode.com/submissions/detail/alice/" in fields[0]["value"]

    def test_unlinked_user_shows_username(self):
        fields = build_ranked_fields([{"username": "bob", "value": 7}])
        assert fields[0]["value"] == "👤 bob\n7"

    def test_custom_value_formatter(self):
        fields = build_ranked_fields(
            [{"username": "bob", "count": 3}],
            format_value=lambda row: f"{row['count']} days",
        )
        assert fields[0]["value"].endswith("3 days")
