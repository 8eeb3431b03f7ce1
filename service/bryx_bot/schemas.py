"""
Payloads of the Bryx CRM bot API (/api/bot).

The CRM serializes JSON in camelCase; models accept both camelCase and
snake_case names.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CrmModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Users

class RegistrationRequest(CrmModel):
    username: str
    chat_id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class RegistrationResponse(CrmModel):
    message: str = ""
    is_confirmed: bool = False
    user_id: int = 0


class AllowedUsersResponse(CrmModel):
    allowed_users: Optional[list[str]] = None
    count: int = 0


# Products

class Product(CrmModel):
    id: int
    name: str = ""
    category: str = ""
    subcategory: Optional[str] = None
    purchase_price: float = 0
    sale_price: float = 0
    status: str = ""
    supplier: str = ""
    color: Optional[str] = None
    is_favorite: bool = False
    is_defective: bool = False
    created_at: Optional[datetime] = None


class ProductsResponse(CrmModel):
    total: int = 0
    page: int = 1
    page_size: int = 0
    products: list[Product] = Field(default_factory=list)


# Sales

class Sale(CrmModel):
    id: int
    buyer: str = ""
    sale_date: datetime
    total_amount: float = 0
    status: str = ""
    # C# side names this property "TTN", serialized as "ttn"
    ttn: Optional[str] = None
    sold_through: Optional[str] = None
    additional_service: Optional[str] = None
    product_count: int = 0


class SalesResponse(CrmModel):
    total: int = 0
    page: int = 1
    page_size: int = 0
    sales: list[Sale] = Field(default_factory=list)


# Stats

class ProductStats(CrmModel):
    total: int = 0
    in_stock: int = 0
    sold: int = 0
    expected: int = 0


class TodayStats(CrmModel):
    count: int = 0
    amount: float = 0


class SalesStats(CrmModel):
    total: int = 0
    total_amount: float = 0
    today: TodayStats = Field(default_factory=TodayStats)


class CategoryStats(CrmModel):
    category: str = ""
    count: int = 0


class StatsResponse(CrmModel):
    products: ProductStats = Field(default_factory=ProductStats)
    sales: SalesStats = Field(default_factory=SalesStats)
    categories: list[CategoryStats] = Field(default_factory=list)
