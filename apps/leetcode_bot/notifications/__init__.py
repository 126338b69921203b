"""
Notification dispatchers for Discord channels and Telegram chats.
"""

from apps.leetcode_bot.notifications.discord_dispatch import (
    can_send,
    get_announcement_channel,
    notify_owner_missing_permission,
    resolve_channel,
    send_embed,
    send_to_guild,
)
from apps.leetcode_bot.notifications.telegram_bot import (
    get_telegram_bot_username,
    send_telegram_message,
    start_telegram_bot,
    stop_telegram_bot,
)

__all__ = [
    'can_send',
    'get_announcement_channel',
    'notify_owner_missing_permission',
    'resolve_channel',
    'send_embed',
    'send_to_guild',
    'get_telegram_bot_username',
    'send_telegram_message',
    'start_telegram_bot',
    'stop_telegram_bot',
]
