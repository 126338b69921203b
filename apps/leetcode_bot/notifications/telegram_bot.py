"""
Telegram companion bot.

Runs inside the Discord bot's event loop. Users link their chat with a
one-time token from /telegram connect and then receive daily challenge
notifications.
"""

import asyncio
import logging
from typing import Optional, Set

from pymongo.errors import PyMongoError
from telegram import LinkPreviewOptions, Update
from telegram.constants import ParseMode
from telegram.error import Conflict, TelegramError
from telegram.ext import Application, CommandHandler, ContextTypes
from telegram.helpers import escape_markdown

from libs.db.telegram_users import get_connection_by_chat_id, link_telegram_chat
from libs.leetcode import LeetCodeAPIError, get_leetcode_client

logger = logging.getLogger(__name__)

HELP_TEXT = (
    "I am a notification bot for LeetCode Discord.\n\n"
    "Commands:\n"
    "/start <token> - Link your Discord account\n"
    "/status - Check connection status\n"
    "/info - Show server info\n"
    "/leetstatus - Show your LeetCode stats\n"
    "/help - Show this message"
)
WELCOME_TEXT = "Welcome! To link your account, use the /telegram connect command in our Discord server."
NOT_CONNECTED_TEXT = "❌ Not connected. Use /telegram connect in Discord to link your account."

_application: Optional[Application] = None
# Keeps references to scheduled updater shutdowns so they are not garbage collected
_pending: Set[asyncio.Task] = set()


async def start_handler(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    chat_id = update.effective_chat.id
    if not context.args:
        await update.message.reply_text(WELCOME_TEXT)
        return

    try:
        result = await link_telegram_chat(context.args[0], chat_id)
    except (PyMongoError, ConnectionError) as e:
        logger.error(f"Error linking Telegram chat {chat_id}: {e}", exc_info=True)
        await update.message.reply_text(
            "An error occurred while linking your account. Please try generating a new link from Discord."
        )
        return

    logger.info(f"Telegram link attempt from chat {chat_id}: {result.message}")
    await update.message.reply_text(result.message)


async def help_handler(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await update.message.reply_text(HELP_TEXT)


async def status_handler(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    connection = await get_connection_by_chat_id(update.effective_chat.id)
    if connection is None:
        await update.message.reply_text(NOT_CONNECTED_TEXT)
        return

    lines = ["✅ *Connected Globally*", "", f"👤 *LeetCode*: {escape_markdown(connection.username)}", ""]
    if connection.connected_guilds:
        lines.append(f"Tracked in *{len(connection.connected_guilds)}* Discord server(s):")
        lines.extend(f"- Server ID: `{guild['guildId']}`" for guild in connection.connected_guilds)
    else:
        lines.append(
            "⚠️ You are linked, but not currently tracked in any Discord servers. "
            f"Ask an admin to `/adduser {connection.username}`."
        )
    await update.message.reply_text("\n".join(lines), parse_mode=ParseMode.MARKDOWN)


async def info_handler(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    connection = await get_connection_by_chat_id(update.effective_chat.id)
    if connection is None:
        await update.message.reply_text("❌ Not connected.")
        return
    await update.message.reply_text(
        f"👤 Account Info\nUsername: {connection.username}\n\n"
        "Your Telegram account is linked globally. "
        "You will receive notifications from any server where you are tracked."
    )


async def leetstatus_handler(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    connection = await get_connection_by_chat_id(update.effective_chat.id)
    if connection is None:
        await update.message.reply_text(
            "❌ Not connected. Use /telegram connect in Discord to link your account first."
        )
        return

    try:
        calendar = await get_leetcode_client().get_user_calendar(connection.username)
    except LeetCodeAPIError as e:
        logger.error(f"Error fetching stats for {connection.username}: {e}")
        await update.message.reply_text(
            "❌ Could not fetch your LeetCode statistics. Please try again later."
        )
        return

    years = ", ".join(str(year) for year in calendar.get("activeYears", [])) or "N/A"
    await update.message.reply_text(
        f"📊 *LeetCode Stats for* {escape_markdown(connection.username)}\n\n"
        f"🔥 Current Streak: {calendar.get('streak', 0)} days\n"
        f"✅ Total Active Days: {calendar.get('totalActiveDays', 0)}\n"
        f"📅 Active Years: {years}\n\n"
        "Keep up the great work! 💪",
        parse_mode=ParseMode.MARKDOWN,
    )


async def error_handler(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
    logger.error(f"Exception while handling a Telegram update: {context.error}", exc_info=context.error)


def _polling_error_callback(error: TelegramError) -> None:
    if isinstance(error, Conflict):
        logger.warning(
            "Telegram polling conflict (409): another instance is running. "
            "Stopping polling for this instance."
        )
        if _application is not None and _application.updater.running:
            task = asyncio.get_running_loop().create_task(_application.updater.stop())
            _pending.add(task)
            task.add_done_callback(_pending.discard)
        return
    logger.error(f"Telegram polling error: {error}")


def build_application(token: str) -> Application:
    application = Application.builder().token(token).build()
    application.add_handler(CommandHandler("start", start_handler))
    application.add_handler(CommandHandler("help", help_handler))
    application.add_handler(CommandHandler("status", status_handler))
    application.add_handler(CommandHandler("info", info_handler))
    application.add_handler(CommandHandler("leetstatus", leetstatus_handler))
    application.add_error_handler(error_handler)
    return application


async def start_telegram_bot(token: Optional[str]) -> None:
    """Start polling alongside the Discord client. No-op without a token."""
    global _application
    if not token:
        logger.warning("TELEGRAM_BOT_TOKEN not set. Telegram features will be disabled.")
        return
    if _application is not None:
        return

    application = build_application(token)
    try:
        await application.initialize()
        await application.start()
        await application.updater.start_polling(error_callback=_polling_error_callback)
    except TelegramError as e:
        logger.error(f"Failed to start Telegram bot: {e}", exc_info=True)
        return

    _application = application
    logger.info(f"Telegram bot @{application.bot.username} started")


async def stop_telegram_bot() -> None:
    global _application
    if _application is None:
        return
    logger.info("Stopping Telegram bot polling...")
    if _application.updater.running:
        await _application.updater.stop()
    await _application.stop()
    await _application.shutdown()
    _application = None
    logger.info("Telegram bot stopped")


def get_telegram_bot_username() -> Optional[str]:
    if _application is None:
        return None
    return _application.bot.username


async def send_telegram_message(chat_id: str, text: str) -> bool:
    if _application is None:
        logger.warning("Cannot send Telegram message: bot not initialized")
        return False
    try:
        await _application.bot.send_message(
            chat_id=chat_id,
            text=text,
            link_preview_options=LinkPreviewOptions(is_disabled=True),
        )
        return True
    except TelegramError as e:
        logger.error(f"Failed to send Telegram message to {chat_id}: {e}")
        return False
