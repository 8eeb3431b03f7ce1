"""
Authorization of Telegram users against the CRM allow-list.

The CRM user directory (GET /users) is the only source of truth. The list
is cached in memory and refreshed when older than the refresh interval.
Any refresh failure empties the cache: no one is authorized until the
directory answers again.
"""

import asyncio
import time
from typing import Callable, Optional

from bryx_bot.config import get_settings
from .api_client import CrmAPIClient, CrmAPIError, get_api_client
from .logging_config import bot_logger as logger


def normalize_username(value: str | None) -> str | None:
    """Strip one leading '@' and lower-case. Empty input gives None."""
    if not value:
        return None
    if value.startswith("@"):
        value = value[1:]
    return value.lower() or None


class AllowList:
    """
    TTL cache of normalized usernames allowed to use the bot.
    """

    def __init__(
        self,
        api_client_factory: Callable[[], CrmAPIClient] = get_api_client,
        refresh_interval: float = 300,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._api_client_factory = api_client_factory
        self.refresh_interval = refresh_interval
        self._clock = clock
        self._users: frozenset[str] = frozenset()
        self._refreshed_at: Optional[float] = None
        self._lock = asyncio.Lock()

    @property
    def users(self) -> frozenset[str]:
        return self._users

    def is_stale(self) -> bool:
        if self._refreshed_at is None:
            return True
        return self._clock() - self._refreshed_at > self.refresh_interval

    async def refresh(self) -> None:
        """Reload the allow-list. Serialized: one request in flight at a time."""
        async with self._lock:
            await self._refresh_locked()

    async def _refresh_locked(self) -> None:
        try:
            data = await self._api_client_factory().list_allowed_users()
        except CrmAPIError as e:
            logger.error(f"Failed to load allowed users from CRM, access denied for everyone: {e}")
            self._users = frozenset()
            return

        if data.allowed_users is None:
            logger.warning("CRM returned no allowed users list, access denied for everyone")
            self._users = frozenset()
            return

        normalized = (normalize_username(u) for u in data.allowed_users)
        self._users = frozenset(u for u in normalized if u)
        self._refreshed_at = self._clock()
        logger.info(f"Allowed users refreshed: {len(self._users)} users")
        logger.debug(f"Allowed users: [{', '.join('@' + u for u in sorted(self._users))}]")

    async def _refresh_if_stale(self) -> None:
        if not self.is_stale():
            return
        async with self._lock:
            # Another caller may have refreshed while we waited
            if self.is_stale():
                await self._refresh_locked()

    async def is_authorized(self, username: str | None) -> bool:
        """Check a Telegram username. Fails closed."""
        await self._refresh_if_stale()

        normalized = normalize_username(username)
        if normalized is None:
            logger.warning("User without username tried to access the bot")
            return False

        users = self._users
        if not users:
            logger.warning(f"Allowed users list is empty, @{normalized} is not authorized")
            return False

        if normalized not in users:
            logger.warning(f"@{normalized} is not in the allowed users list")
            return False

        logger.debug(f"@{normalized} authorized")
        return True


# Global instance
_allow_list: Optional[AllowList] = None


def get_allow_list() -> AllowList:
    """Get or create allow-list singleton."""
    global _allow_list
    if _allow_list is None:
        settings = get_settings()
        _allow_list = AllowList(refresh_interval=settings.users_refresh_interval)
    return _allow_list
