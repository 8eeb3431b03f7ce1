"""
Telegram Bot module for Bryx CRM.

ARCHITECTURE: Thin proxy - NO business logic duplication!
- Receives updates from Telegram (long polling)
- Authorizes user (@username → CRM allow-list)
- Routes command to a handler
- Handler calls the CRM bot API (/api/bot/...)
- Returns formatted response to Telegram

All business logic stays in the CRM.
"""

from .bot import build_application, run_bot
from .auth import AllowList, get_allow_list, normalize_username
from .api_client import CrmAPIClient, CrmAPIError, get_api_client

__all__ = [
    "build_application",
    "run_bot",
    "AllowList",
    "get_allow_list",
    "normalize_username",
    "CrmAPIClient",
    "CrmAPIError",
    "get_api_client",
]
