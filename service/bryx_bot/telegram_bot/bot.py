"""
Main Telegram bot application.

Uses python-telegram-bot library in long-polling mode.
"""

from telegram import Update
from telegram.ext import Application, CallbackQueryHandler, MessageHandler, filters

from bryx_bot.config import Settings
from .api_client import close_api_client
from .auth import get_allow_list
from .logging_config import bot_logger as logger
from .handlers import (
    route_text_message,
    handle_callback_query,
    handle_error,
)


async def _post_init(application: Application) -> None:
    """Runs after the bot credential was checked (getMe), before polling."""
    logger.info(f"Bot started: @{application.bot.username}")
    await get_allow_list().refresh()


async def _post_shutdown(application: Application) -> None:
    await close_api_client()
    logger.info("Bot shut down")


def build_application(settings: Settings) -> Application:
    """Create telegram bot application with all handlers registered."""
    application = (
        Application.builder()
        .token(settings.bot_token)
        .post_init(_post_init)
        .post_shutdown(_post_shutdown)
        .build()
    )

    # Every new text message, commands included: routing is done in one place
    application.add_handler(
        MessageHandler(filters.TEXT & filters.UpdateType.MESSAGE, route_text_message)
    )

    # Callback queries (inline keyboard buttons)
    application.add_handler(CallbackQueryHandler(handle_callback_query))

    application.add_error_handler(handle_error)

    logger.info("Telegram bot application initialized")
    return application


def run_bot(settings: Settings) -> None:
    """Build the application and poll until SIGINT/SIGTERM."""
    application = build_application(settings)
    logger.info("Starting Bryx Bot...")
    application.run_polling(allowed_updates=Update.ALL_TYPES)
