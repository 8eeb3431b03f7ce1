"""
Telegram message and callback handlers.

ARCHITECTURE: thin proxy to the Bryx CRM bot API.
- Every text message goes through route_text_message
- /start is open to everyone (access request), other commands need the
  sender's @username in the CRM allow-list
- Handlers call one CRM endpoint, format the answer and reply
- CRM failures are caught here and turned into one fixed reply per handler

Callback data format: "ship_{sale_id}" - sent by the CRM with new sale
notifications; marks the sale as shipped.
"""

from typing import Awaitable, Callable, Optional

from telegram import ReplyKeyboardMarkup, Update
from telegram.constants import ParseMode
from telegram.error import TelegramError
from telegram.ext import ContextTypes

from bryx_bot.schemas import RegistrationRequest
from .api_client import CrmAPIError, get_api_client
from .auth import get_allow_list
from .formatters import format_products, format_sales, format_stats, mark_shipped
from .logging_config import bot_logger as logger

Handler = Callable[[Update, ContextTypes.DEFAULT_TYPE], Awaitable[None]]

SHIP_CALLBACK_PREFIX = "ship_"
# CRM sale ids are 32-bit signed ints
MAX_SALE_ID = 2**31 - 1

ACCESS_DENIED_TEXT = (
    "⛔ Доступ запрещен. Обратитесь к администратору для добавления "
    "вашего @username в список разрешённых пользователей."
)

WELCOME_CONFIRMED_TEXT = """👋 Добро пожаловать в Bryx CRM Bot!

✅ Вы подтверждены и можете использовать бота.

Используйте /help для просмотра доступных команд.
Используйте /menu для доступа к главному меню."""

WELCOME_PENDING_TEXT = """👋 Здравствуйте!

⏳ Ваша заявка на доступ к Bryx CRM Bot отправлена администратору.

Пожалуйста, ожидайте подтверждения. После подтверждения вы сможете использовать все функции бота.

Попробуйте снова отправить /start через некоторое время, чтобы проверить статус."""

NO_USERNAME_TEXT = """👋 Здравствуйте!

⚠️ У вас не установлен Telegram username.

Для использования бота необходимо установить username в настройках Telegram:
Settings → Edit Profile → Username

После установки username отправьте /start снова."""

WELCOME_DEFAULT_TEXT = """👋 Добро пожаловать в Bryx CRM Bot!

Я помогу вам управлять вашей CRM системой через Telegram.

Используйте /help для просмотра доступных команд.
Используйте /menu для доступа к главному меню."""

HELP_TEXT = """📚 Доступные команды:

/start - Приветственное сообщение
/help - Список команд
/menu - Главное меню
/products - Просмотр товаров
/sales - Просмотр продаж
/stats - Статистика"""

UNKNOWN_COMMAND_TEXT = "Неизвестная команда. Используйте /help для просмотра доступных команд."

PRODUCTS_ERROR_TEXT = "Не удалось получить данные о товарах. Проверьте, что CRM запущена."
SALES_ERROR_TEXT = "Не удалось получить данные о продажах. Проверьте, что CRM запущена."
STATS_ERROR_TEXT = "Не удалось получить статистику. Проверьте, что CRM запущена."

SHIP_SUCCESS_TEXT = "✅ Продажа отмечена как отправленная!"
SHIP_ERROR_TEXT = "❌ Ошибка при обновлении статуса. Проверьте CRM."

MENU_PRODUCTS = "📦 Товары"
MENU_SALES = "💰 Продажи"
MENU_STATS = "📊 Статистика"
MENU_HELP = "ℹ️ Помощь"

MENU_KEYBOARD = ReplyKeyboardMarkup(
    [[MENU_PRODUCTS, MENU_SALES], [MENU_STATS, MENU_HELP]],
    resize_keyboard=True,
)


def display_username(username: Optional[str]) -> str:
    return f"@{username}" if username else "без_username"


def extract_command(text: str) -> str:
    """
    First whitespace-delimited token, with a "@botname" suffix removed from
    slash commands ("/stats@BryxBot" -> "/stats"). Menu labels are returned whole.
    """
    stripped = text.strip()
    if stripped in MENU_ALIASES:
        return stripped
    parts = stripped.split()
    if not parts:
        return ""
    token = parts[0]
    if token.startswith("/"):
        token = token.split("@", 1)[0]
    return token


# =============================================================================
# COMMANDS
# =============================================================================

async def handle_start_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /start: submit an access request to the CRM.

    Open to everyone so that unknown users can ask for access.
    """
    user = update.effective_user
    chat_id = update.effective_chat.id

    if not user.username:
        await update.message.reply_text(NO_USERNAME_TEXT)
        return

    request = RegistrationRequest(
        username=user.username,
        chat_id=str(chat_id),
        first_name=user.first_name,
        last_name=user.last_name,
    )

    try:
        result = await get_api_client().register_user(request)
    except CrmAPIError as e:
        logger.error(f"Failed to register @{user.username}: {e}", exc_info=True)
        await update.message.reply_text(WELCOME_DEFAULT_TEXT)
        return

    logger.info(
        f"User @{user.username} registered with chat_id={chat_id}, "
        f"is_confirmed={result.is_confirmed}"
    )

    if result.is_confirmed:
        await update.message.reply_text(WELCOME_CONFIRMED_TEXT)
    else:
        await update.message.reply_text(WELCOME_PENDING_TEXT)


async def handle_help_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /help command."""
    await update.message.reply_text(HELP_TEXT)


async def handle_menu_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /menu command - show quick-reply keyboard."""
    await update.message.reply_text("Выберите раздел:", reply_markup=MENU_KEYBOARD)


async def handle_products_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    try:
        data = await get_api_client().list_products()
    except CrmAPIError as e:
        logger.error(f"Failed to load products: {e}", exc_info=True)
        await update.message.reply_text(PRODUCTS_ERROR_TEXT)
        return

    await update.message.reply_text(format_products(data))


async def handle_sales_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    try:
        data = await get_api_client().list_sales()
    except CrmAPIError as e:
        logger.error(f"Failed to load sales: {e}", exc_info=True)
        await update.message.reply_text(SALES_ERROR_TEXT)
        return

    await update.message.reply_text(format_sales(data))


async def handle_stats_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    try:
        data = await get_api_client().get_stats()
    except CrmAPIError as e:
        logger.error(f"Failed to load stats: {e}", exc_info=True)
        await update.message.reply_text(STATS_ERROR_TEXT)
        return

    await update.message.reply_text(format_stats(data))


async def handle_unknown_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await update.message.reply_text(UNKNOWN_COMMAND_TEXT)


# Commands that require the sender to be in the allow-list
COMMANDS: dict[str, Handler] = {
    "/help": handle_help_command,
    "/menu": handle_menu_command,
    "/products": handle_products_command,
    "/sales": handle_sales_command,
    "/stats": handle_stats_command,
}

# Labels of MENU_KEYBOARD buttons
MENU_ALIASES: dict[str, str] = {
    MENU_PRODUCTS: "/products",
    MENU_SALES: "/sales",
    MENU_STATS: "/stats",
    MENU_HELP: "/help",
}


async def route_text_message(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Entry point for every text message.

    1. Extract the command token
    2. /start bypasses authorization
    3. Check the allow-list
    4. Dispatch through COMMANDS (unknown commands get a fixed reply)
    """
    message = update.message
    user = update.effective_user
    if message is None or message.text is None or user is None:
        return

    logger.info(
        f"Message from {display_username(user.username)} (user_id={user.id}): {message.text}"
    )

    command = extract_command(message.text)
    if command == "/start":
        await handle_start_command(update, context)
        return

    if not await get_allow_list().is_authorized(user.username):
        logger.warning(
            f"Unauthorized access attempt from {display_username(user.username)} (user_id={user.id})"
        )
        await message.reply_text(ACCESS_DENIED_TEXT)
        return

    command = MENU_ALIASES.get(command, command)
    handler = COMMANDS.get(command, handle_unknown_command)
    await handler(update, context)


# =============================================================================
# CALLBACKS
# =============================================================================

def parse_ship_callback(data: str) -> Optional[int]:
    """Sale id from "ship_{id}", or None if data is not a ship callback."""
    if not data.startswith(SHIP_CALLBACK_PREFIX):
        return None
    suffix = data[len(SHIP_CALLBACK_PREFIX):]
    if not suffix.isascii() or not suffix.isdigit():
        return None
    sale_id = int(suffix)
    if sale_id > MAX_SALE_ID:
        return None
    return sale_id


async def handle_callback_query(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle inline keyboard button callbacks.

    Only "ship_{sale_id}" is recognized; anything else is ignored.
    """
    query = update.callback_query
    user = update.effective_user
    if query is None or query.data is None or query.message is None or user is None:
        return

    logger.info(
        f"Callback {query.data} from {display_username(user.username)} (user_id={user.id})"
    )

    if not await get_allow_list().is_authorized(user.username):
        logger.warning(
            f"Unauthorized callback from {display_username(user.username)} (user_id={user.id})"
        )
        await query.answer(ACCESS_DENIED_TEXT, show_alert=True)
        return

    sale_id = parse_ship_callback(query.data)
    if sale_id is None:
        return

    await handle_ship_callback(update, context, sale_id)


async def handle_ship_callback(
    update: Update,
    context: ContextTypes.DEFAULT_TYPE,
    sale_id: int
) -> None:
    """Mark sale as shipped in the CRM and update the notification message."""
    query = update.callback_query

    try:
        await get_api_client().ship_sale(sale_id)
    except CrmAPIError as e:
        logger.error(f"Failed to mark sale {sale_id} as shipped: {e}", exc_info=True)
        await query.answer(SHIP_ERROR_TEXT, show_alert=True)
        return

    # Sale is shipped in the CRM from here on, the edit is cosmetic.
    # Editing without reply_markup drops the "Shipped" button.
    try:
        await query.edit_message_text(
            mark_shipped(query.message.text),
            parse_mode=ParseMode.HTML,
        )
    except TelegramError as e:
        logger.warning(f"Sale {sale_id} shipped but message edit failed: {e}")

    await query.answer(SHIP_SUCCESS_TEXT)
    logger.info(f"Sale {sale_id} marked as shipped")


async def handle_error(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Log errors that escaped the handlers. Polling keeps running."""
    logger.error(f"Bot error: {context.error}", exc_info=context.error)
