"""
HTTP client for the Bryx CRM bot API.

Thin wrapper over httpx: one method per endpoint, payloads parsed into
pydantic models. Every failure surfaces as CrmAPIError so handlers only
have to catch one exception type.
"""

import httpx
from pydantic import BaseModel, ValidationError
from typing import Optional, Type, TypeVar

from bryx_bot.config import get_settings
from bryx_bot.schemas import (
    AllowedUsersResponse,
    ProductsResponse,
    RegistrationRequest,
    RegistrationResponse,
    SalesResponse,
    StatsResponse,
)

DEFAULT_PAGE_SIZE = 5

ModelT = TypeVar("ModelT", bound=BaseModel)


class CrmAPIError(Exception):
    """Remote call failed: network error, non-2xx status or malformed body."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class CrmAPIClient:
    """
    Client for the CRM endpoints under {CRM_API_URL}/api/bot.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url
        try:
            self.client = httpx.AsyncClient(
                base_url=base_url, timeout=timeout, transport=transport
            )
        except httpx.InvalidURL as e:
            raise CrmAPIError(f"Invalid CRM API URL {base_url!r}: {e}") from e

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            response = await self.client.request(method, path, **kwargs)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise CrmAPIError(f"{method} {path} failed: {e}") from e

        if response.is_error:
            raise CrmAPIError(
                f"{method} {path} returned {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )
        return response

    @staticmethod
    def _parse(response: httpx.Response, model: Type[ModelT]) -> ModelT:
        try:
            return model.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise CrmAPIError(
                f"Malformed {model.__name__} from {response.request.url}: {e}",
                status_code=response.status_code,
            ) from e

    async def register_user(self, request: RegistrationRequest) -> RegistrationResponse:
        """POST /users/register - submit an access request for a Telegram user."""
        response = await self._request(
            "POST", "/users/register",
            json=request.model_dump(by_alias=True)
        )
        return self._parse(response, RegistrationResponse)

    async def list_allowed_users(self) -> AllowedUsersResponse:
        """GET /users - usernames allowed to use the bot."""
        response = await self._request("GET", "/users")
        return self._parse(response, AllowedUsersResponse)

    async def list_products(self, page_size: int = DEFAULT_PAGE_SIZE) -> ProductsResponse:
        response = await self._request("GET", "/products", params={"pageSize": page_size})
        return self._parse(response, ProductsResponse)

    async def list_sales(self, page_size: int = DEFAULT_PAGE_SIZE) -> SalesResponse:
        response = await self._request("GET", "/sales", params={"pageSize": page_size})
        return self._parse(response, SalesResponse)

    async def get_stats(self) -> StatsResponse:
        response = await self._request("GET", "/stats")
        return self._parse(response, StatsResponse)

    async def ship_sale(self, sale_id: int) -> None:
        """POST /sales/{id}/ship - mark a sale as shipped. Any 2xx is success."""
        await self._request("POST", f"/sales/{sale_id}/ship")

    async def close(self):
        """Close HTTP client."""
        await self.client.aclose()


# Global instance
_api_client: Optional[CrmAPIClient] = None


def get_api_client() -> CrmAPIClient:
    """Get or create CRM API client singleton."""
    global _api_client
    if _api_client is None:
        settings = get_settings()
        _api_client = CrmAPIClient(settings.api_base_url, timeout=settings.crm_api_timeout)
    return _api_client


async def close_api_client() -> None:
    global _api_client
    if _api_client is not None:
        await _api_client.close()
        _api_client = None
