"""
Admin API Schemas

Pydantic models returned by the admin services and routes.
"""

import math
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from storefront.database.models import DeliveryStatus, OrderStatus, PaymentStatus


# =============================================================================
# USERS & ORDERS
# =============================================================================

class UserSummary(BaseModel):
    """Owning user of an order, reduced to what the admin panel shows"""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: Optional[str] = None
    email: str


class RecentUser(UserSummary):
    """Recently registered user"""
    created_at: datetime


class ProductSummary(BaseModel):
    """Catalog entry behind an order line, when it still exists"""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    slug: str


class OrderItemRead(BaseModel):
    """Order line item"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    product_id: Optional[UUID] = None
    product_name: str
    quantity: int
    unit_price_cents: int
    total_price_cents: int
    stripe_price_id: Optional[str] = None
    product: Optional[ProductSummary] = None


class OrderRead(BaseModel):
    """Order with its owning user summary and line items"""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: Optional[UUID] = None
    guest_email: Optional[str] = None
    order_status: OrderStatus
    payment_status: PaymentStatus
    delivery_status: DeliveryStatus
    subtotal_cents: int
    tax_cents: int
    shipping_cents: int
    total_cents: int
    currency: str
    stripe_payment_intent_id: Optional[str] = None
    billing_address: Optional[dict] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    user: Optional[UserSummary] = None
    items: List[OrderItemRead] = []


class Pagination(BaseModel):
    """Pagination metadata"""
    page: int
    limit: int
    total_count: int
    total_pages: int
    has_next_page: bool
    has_previous_page: bool

    @classmethod
    def for_page(cls, page: int, limit: int, total_count: int) -> "Pagination":
        total_pages = math.ceil(total_count / limit) if limit else 0
        return cls(
            page=page,
            limit=limit,
            total_count=total_count,
            total_pages=total_pages,
            has_next_page=page < total_pages,
            has_previous_page=page > 1,
        )


class OrderListResponse(BaseModel):
    """Paginated order list"""
    orders: List[OrderRead]
    pagination: Pagination


class OrderStatusUpdate(BaseModel):
    """Partial status update; omitted fields are left untouched"""
    order_status: Optional[OrderStatus] = None
    payment_status: Optional[PaymentStatus] = None
    delivery_status: Optional[DeliveryStatus] = None


# =============================================================================
# DASHBOARD
# =============================================================================

class StatsTotals(BaseModel):
    """Entity counts and paid revenue"""
    users: int
    products: int
    orders: int
    revenue: Decimal


class OrdersByStatus(BaseModel):
    """Order counts for the statuses shown on the dashboard"""
    PENDING: int
    PAID: int
    FULFILLED: int


class StatsSnapshot(BaseModel):
    """
    Dashboard statistics.

    Recomputed on every request from independent reads, so counts and
    samples may be taken at slightly different instants.
    """
    totals: StatsTotals
    orders_by_status: OrdersByStatus
    recent_orders: List[OrderRead]
    recent_users: List[RecentUser]


# =============================================================================
# CATALOG
# =============================================================================

class ProductInput(BaseModel):
    """Body for creating or replacing a product"""
    name: str = Field(..., min_length=1, max_length=200)
    slug: str = Field(..., min_length=1, max_length=220, pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
    description: Optional[str] = None
    content: Optional[str] = None
    price_cents: int = Field(..., ge=0)
    currency: str = Field(default="EUR", min_length=3, max_length=3)
    stock: int = Field(..., ge=0)
    is_active: bool = False


class ProductRead(BaseModel):
    """Catalog entry as shown in the admin panel"""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    slug: str
    description: Optional[str] = None
    content: Optional[str] = None
    price_cents: int
    currency: str
    stock: int
    is_active: bool
    stripe_product_id: Optional[str] = None
    stripe_price_id: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class ProductUpdateResult(BaseModel):
    """Updated product; ``slug_changed`` tells the client to follow the new URL"""
    product: ProductRead
    slug_changed: bool


class ProductStatus(BaseModel):
    slug: str
    is_active: bool


class SlugAvailability(BaseModel):
    slug: str
    taken: bool


# =============================================================================
# ACCOUNTS
# =============================================================================

class UserOrderSummary(BaseModel):
    """One of a user's orders, reduced for the user list"""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    total_cents: int
    order_status: OrderStatus
    payment_status: PaymentStatus
    created_at: datetime


class UserRead(RecentUser):
    """Account with its Stripe link and order history, newest order first"""
    stripe_customer_id: Optional[str] = None
    updated_at: Optional[datetime] = None
    orders: List[UserOrderSummary] = []


class UserListResponse(BaseModel):
    """Paginated user list"""
    users: List[UserRead]
    pagination: Pagination
