"""
Metadata for every slash command.

Single source for /help, the docs site and the commands.json export. Keep
it in step with the command modules when adding or renaming commands.
"""

from typing import Any, Dict, List, Optional

CATEGORY_SETUP = "Setup & Admin"
CATEGORY_TRACKING = "User Tracking"
CATEGORY_STATS = "Stats & Challenges"
CATEGORY_TELEGRAM = "Telegram"
CATEGORY_OWNER = "Bot Owner"
CATEGORY_GENERAL = "General"

CATEGORY_ORDER = [
    CATEGORY_SETUP,
    CATEGORY_TRACKING,
    CATEGORY_STATS,
    CATEGORY_TELEGRAM,
    CATEGORY_GENERAL,
    CATEGORY_OWNER,
]


def _option(name: str, description: str, type_: str = "string", required: bool = True, **extra) -> Dict[str, Any]:
    option = {"name": name, "description": description, "type": type_, "required": required}
    option.update(extra)
    return option


def _command(
    name: str,
    description: str,
    category: str,
    options: Optional[List[Dict[str, Any]]] = None,
    admin_only: bool = False,
    hidden: bool = False,
) -> Dict[str, Any]:
    return {
        "name": name,
        "description": description,
        "options": options or [],
        "category": category,
        "adminOnly": admin_only,
        "hidden": hidden,
    }


COMMANDS: List[Dict[str, Any]] = [
    _command(
        "setup channel", "Set up the bot for this server and choose the announcement channel",
        CATEGORY_SETUP, [_option("channel", "Channel for daily check announcements", "channel")],
        admin_only=True,
    ),
    _command(
        "setchannel", "Change the announcement channel",
        CATEGORY_SETUP, [_option("channel", "New announcement channel", "channel")],
        admin_only=True,
    ),
    _command(
        "setadminrole", "Allow a role to manage the bot in this server",
        CATEGORY_SETUP, [_option("role", "Role that may run admin commands", "role")],
        admin_only=True,
    ),
    _command(
        "addcron", "Schedule a daily check at the given time (server timezone)",
        CATEGORY_SETUP,
        [
            _option("hours", "Hour of the day (0-23)", "integer", min_value=0, max_value=23),
            _option("minutes", "Minute of the hour (0-59)", "integer", min_value=0, max_value=59),
        ],
        admin_only=True,
    ),
    _command(
        "removecron", "Remove a scheduled daily check",
        CATEGORY_SETUP,
        [
            _option("hours", "Hour of the day (0-23)", "integer", min_value=0, max_value=23),
            _option("minutes", "Minute of the hour (0-59)", "integer", min_value=0, max_value=59),
        ],
        admin_only=True,
    ),
    _command("listcrons", "List the scheduled daily check times", CATEGORY_SETUP),
    _command(
        "togglecontestreminder", "Turn the Friday contest reminder on or off",
        CATEGORY_SETUP, admin_only=True,
    ),
    _command(
        "togglebroadcast", "Turn announcements from the bot developers on or off",
        CATEGORY_SETUP, admin_only=True,
    ),
    _command(
        "adduser", "Add a LeetCode username to track",
        CATEGORY_TRACKING,
        [
            _option("username", "The LeetCode username to add"),
            _option("member", "Discord member to link (defaults to you)", "user", required=False),
        ],
        admin_only=True,
    ),
    _command(
        "removeuser", "Remove a LeetCode username from tracking",
        CATEGORY_TRACKING, [_option("username", "The LeetCode username to remove")],
        admin_only=True,
    ),
    _command("listusers", "List all tracked LeetCode usernames", CATEGORY_TRACKING),
    _command("check", "Run a manual check of today's LeetCode challenge status", CATEGORY_TRACKING),
    _command(
        "leaderboard", "Show the all-time daily challenge leaderboard",
        CATEGORY_STATS,
        [_option("limit", "Number of users to show (1-25)", "integer", required=False, min_value=1, max_value=25)],
    ),
    _command(
        "streak", "Show the current daily challenge streak",
        CATEGORY_STATS, [_option("username", "LeetCode username (defaults to your linked account)", required=False)],
    ),
    _command("daily", "Show today's LeetCode daily challenge", CATEGORY_STATS),
    _command("contests", "Show upcoming LeetCode contests", CATEGORY_STATS),
    _command("telegram connect", "Get a link to connect your Telegram account", CATEGORY_TELEGRAM),
    _command("telegram toggle", "Turn Telegram notifications on or off", CATEGORY_TELEGRAM),
    _command("telegram status", "Show your Telegram connection status", CATEGORY_TELEGRAM),
    _command("help", "Show the list of available commands", CATEGORY_GENERAL),
    _command(
        "broadcast", "Send an announcement to every server that allows broadcasts",
        CATEGORY_OWNER,
        [
            _option("type", "Kind of announcement", choices=["announcement", "update", "maintenance"]),
            _option("message", "Announcement text"),
        ],
        hidden=True,
    ),
    _command("healthchecks list", "List monitored scheduled jobs", CATEGORY_OWNER, hidden=True),
    _command(
        "healthchecks status", "Show status, recent pings and flips of a job",
        CATEGORY_OWNER, [_option("name", "Check name or slug")],
        hidden=True,
    ),
]


def get_commands(include_hidden: bool = False) -> List[Dict[str, Any]]:
    return [command for command in COMMANDS if include_hidden or not command["hidden"]]


def group_by_category(commands: List[Dict[str, Any]]) -> Dict[str, List[Dict[str, Any]]]:
    """Commands grouped by category, categories in display order."""
    grouped: Dict[str, List[Dict[str, Any]]] = {}
    for category in CATEGORY_ORDER:
        members = [command for command in commands if command["category"] == category]
        if members:
            grouped[category] = members
    return grouped


def find_command(name: str) -> Optional[Dict[str, Any]]:
    for command in COMMANDS:
        if command["name"] == name:
            return command
    return None


def format_usage(command: Dict[str, Any]) -> str:
    """'/addcron hours minutes' style usage string; optional options in brackets."""
    parts = [f"/{command['name']}"]
    for option in command["options"]:
        parts.append(option["name"] if option["required"] else f"[{option['name']}]")
    return " ".join(parts)
