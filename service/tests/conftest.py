"""
Shared fakes: CRM API over httpx.MockTransport and Telegram updates.
"""

import json
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from bryx_bot.telegram_bot.api_client import CrmAPIClient

BASE_URL = "https://crm.test/api/bot"


class FakeCrm:
    """Routes "METHOD /path" to canned responses and records requests."""

    def __init__(self):
        self.routes: dict[str, object] = {}
        self.requests: list[httpx.Request] = []

    def set(self, method: str, path: str, response) -> None:
        """response: httpx.Response, an exception instance, or a JSON-able body."""
        self.routes[f"{method} {path}"] = response

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(f"{request.method} {request.url.path}")
        if route is None:
            return httpx.Response(404, json={"error": "not found"})
        if isinstance(route, Exception):
            raise route
        if isinstance(route, httpx.Response):
            return route
        return httpx.Response(200, content=json.dumps(route).encode(), headers={"content-type": "application/json"})


@pytest.fixture
def fake_crm() -> FakeCrm:
    return FakeCrm()


@pytest.fixture
def api_client(fake_crm) -> CrmAPIClient:
    return CrmAPIClient(BASE_URL, transport=httpx.MockTransport(fake_crm.handler))


def make_user(username="manager", user_id=1001, first_name="Ivan", last_name="Petrenko"):
    user = MagicMock()
    user.username = username
    user.id = user_id
    user.first_name = first_name
    user.last_name = last_name
    return user


def make_text_update(text: str, username="manager", chat_id=555):
    update = MagicMock()
    update.callback_query = None
    update.effective_user = make_user(username=username)
    update.effective_chat.id = chat_id
    update.message.text = text
    update.message.reply_text = AsyncMock()
    return update


def make_callback_update(data: str, username="manager", message_text="Нова продажа #42"):
    update = MagicMock()
    update.message = None
    update.effective_user = make_user(username=username)
    query = update.callback_query
    query.data = data
    query.message.text = message_text
    query.answer = AsyncMock()
    query.edit_message_text = AsyncMock()
    return update
