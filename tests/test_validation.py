"""
Tests for command input validation.
"""

import pytest

from apps.leetcode_bot.common.validation import (
    validate_choice_parameter,
    validate_leetcode_username,
    validate_limit,
)


class TestValidateLeetcodeUsername:

    def test_strips_whitespace(self):
        assert validate_leetcode_username("  alice_01 ") == "alice_01"

    def test_allows_dashes(self):
        assert validate_leetcode_username("lee-code") == "lee-code"

    @pytest.mark.parametrize("username", ["", "   ", "a.b", "$where", "has space"])
    def test_rejects_invalid(self, username):
        with pytest.raises(ValueError):
            validate_leetcode_username(username)

    def test_rejects_too_long(self):
        with pytest.raises(ValueError):
            validate_leetcode_username("a" * 200)


class TestValidateLimit:

    def test_accepts_bounds(self):
        validate_limit(1, 25)
        validate_limit(25, 25)

    @pytest.mark.parametrize("limit", [0, 26, -3])
    def test_rejects_out_of_range(self, limit):
        with pytest.raises(ValueError, match="Must be between 1 and 25"):
            validate_limit(limit, 25)


class TestValidateChoiceParameter:

    def test_normalizes(self):
        assert validate_choice_parameter("type", " Update ", {"update", "announcement"}) == "update"

    def test_lists_valid_options(self):
        with pytest.raises(ValueError, match="announcement, update"):
            validate_choice_parameter("type", "spam", {"update", "announcement"})
