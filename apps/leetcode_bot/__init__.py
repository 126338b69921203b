"""
LeetCode daily challenge tracker bot for Discord, with Telegram notifications.

This package provides slash commands for tracking users, scheduled daily
checks per server and global status panels.
"""

def main():
    """Main entry point for the Discord bot."""
    from apps.leetcode_bot.bot import main as _main
    _main()

__all__ = ['main']
