import sys

from telegram.error import InvalidToken

from bryx_bot.config import get_settings, report_settings
from bryx_bot.telegram_bot import run_bot
from bryx_bot.telegram_bot.logging_config import bot_logger as logger, setup_logging


def main() -> None:
    settings = get_settings()
    setup_logging(settings.log_level.upper())
    report_settings(settings, logger)
    logger.info(f"CRM API base URL: {settings.api_base_url}")

    try:
        run_bot(settings)
    except InvalidToken as e:
        logger.critical(f"Telegram rejected the bot token, exiting: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
