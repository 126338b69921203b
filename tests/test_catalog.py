"""
Tests for the command catalog, /help rendering and the JSON export.
"""

import json

from apps.leetcode_bot.commands.catalog import (
    CATEGORY_ORDER,
    CATEGORY_OWNER,
    CATEGORY_SETUP,
    COMMANDS,
    find_command,
    format_usage,
    get_commands,
    group_by_category,
)
from apps.leetcode_bot.commands.help import build_help_embed
from apps.leetcode_bot.commands.telegram import build_deep_link
from apps.maintenance.export_commands import export_commands


class TestCatalog:

    def test_names_unique(self):
        names = [command["name"] for command in COMMANDS]
        assert len(names) == len(set(names))

    def test_every_category_known(self):
        assert {command["category"] for command in COMMANDS} <= set(CATEGORY_ORDER)

    def test_hidden_commands_excluded_by_default(self):
        public = {command["name"] for command in get_commands()}
        assert "broadcast" not in public
        assert "healthchecks status" not in public
        assert "broadcast" in {command["name"] for command in get_commands(include_hidden=True)}

    def test_group_order(self):
        grouped = group_by_category(get_commands())
        assert list(grouped)[0] == CATEGORY_SETUP
        assert CATEGORY_OWNER not in grouped

    def test_find_command(self):
        assert find_command("addcron")["adminOnly"] is True
        assert find_command("nope") is None

    def test_usage(self):
        assert format_usage(find_command("addcron")) == "/addcron hours minutes"
        assert format_usage(find_command("adduser")) == "/adduser username [member]"
        assert format_usage(find_command("daily")) == "/daily"


class TestHelpEmbed:

    def test_one_field_per_category(self):
        commands = get_commands()
        embed = build_help_embed(commands)
        assert [field.name for field in embed.fields] == list(group_by_category(commands))

    def test_admin_marker(self):
        embed = build_help_embed([find_command("setchannel")])
        assert embed.fields[0].value.startswith("`/setchannel channel` 🔒 · ")


class TestDeepLink:

    def test_strips_at_sign(self):
        assert build_deep_link("@LeetTrackerBot", "abc") == "https://t.me/LeetTrackerBot?start=abc"


class TestExportCommands:

    def test_writes_json(self, tmp_path):
        output = tmp_path / "static" / "commands.json"
        exported = export_commands(output)
        assert json.loads(output.read_text(encoding="utf-8")) == exported
        assert len(exported) == len(COMMANDS)

    def test_public_only(self, tmp_path):
        output = tmp_path / "commands.json"
        exported = export_commands(output, include_hidden=False)
        assert all(not command["hidden"] for command in exported)
