"""
Input validation utilities for Discord bot commands.
"""

import re

from apps.leetcode_bot.common.constants import LEETCODE_USERNAME_MAX_LENGTH

_USERNAME_RE = re.compile(r"^[A-Za-z0-9_-]+$")


def validate_leetcode_username(username: str) -> str:
    """
    Validate and normalize a LeetCode username.

    Usernames become keys of the guild's users map, so dots and dollar signs
    (which MongoDB treats as path operators) are rejected along with anything
    else LeetCode does not allow.

    Raises:
        ValueError: If the username is empty, too long or has invalid characters
    """
    normalized = username.strip()
    if not normalized:
        raise ValueError("Username cannot be empty.")
    if len(normalized) > LEETCODE_USERNAME_MAX_LENGTH:
        raise ValueError(
            f"Invalid username: {username}. Must be at most {LEETCODE_USERNAME_MAX_LENGTH} characters."
        )
    if not _USERNAME_RE.match(normalized):
        raise ValueError(
            f"Invalid username: {username}. Only letters, digits, '-' and '_' are allowed."
        )
    return normalized


def validate_limit(limit: int, maximum: int) -> None:
    """Raise ValueError if limit is outside 1..maximum."""
    if limit < 1 or limit > maximum:
        raise ValueError(f"Invalid limit: {limit}. Must be between 1 and {maximum}.")


def validate_choice_parameter(
    parameter_name: str,
    value: str,
    valid_choices: set,
    display_choices: list = None
) -> str:
    """
    Validate and normalize a choice parameter.

    Returns:
        Normalized (lowercase, stripped) value

    Raises:
        ValueError: If value is not in valid_choices
    """
    normalized_value = value.lower().strip()
    if normalized_value not in valid_choices:
        display_list = display_choices or sorted(valid_choices)
        raise ValueError(
            f"Invalid {parameter_name}: {value}. Valid options: {', '.join(display_list)}"
        )
    return normalized_value
