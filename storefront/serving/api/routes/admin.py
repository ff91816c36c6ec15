"""
Admin API Endpoints

Dashboard statistics and order, product and user management for the admin panel.
"""

from typing import List, Literal, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from storefront.admin import dashboard_stats, orders, products, users
from storefront.admin.dashboard_stats import StatsAggregator
from storefront.admin.schemas import (
    OrderListResponse,
    OrderRead,
    OrderStatusUpdate,
    ProductInput,
    ProductRead,
    ProductStatus,
    ProductUpdateResult,
    SlugAvailability,
    StatsSnapshot,
    UserListResponse,
    UserRead,
)
from storefront.database.connection import get_db_dependency
from storefront.database.models import OrderStatus, PaymentStatus
from storefront.errors import OrderNotFoundError, ProductNotFoundError, SlugTakenError
from storefront.serving.api.deps import require_admin_key

router = APIRouter(dependencies=[Depends(require_admin_key)])
logger = structlog.get_logger(__name__)


@router.get("/dashboard", response_model=StatsSnapshot)
async def get_dashboard(
    aggregator: StatsAggregator = Depends(dashboard_stats.get_stats_aggregator),
) -> StatsSnapshot:
    """
    Dashboard statistics: totals, paid revenue, order-status breakdown,
    five most recent orders and users.
    """
    return await aggregator.compute_snapshot()


@router.get("/orders", response_model=OrderListResponse)
async def list_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    order_by: Literal["created_at", "updated_at", "total_cents", "order_status"] = "created_at",
    direction: Literal["asc", "desc"] = "desc",
    q: Optional[str] = Query(None, min_length=1, max_length=200),
    status: Optional[OrderStatus] = None,
    payment_status: Optional[PaymentStatus] = None,
    db: AsyncSession = Depends(get_db_dependency),
) -> OrderListResponse:
    """
    List orders with pagination.

    Any of ``q``, ``status`` or ``payment_status`` switches to search mode,
    which always sorts newest first.
    """
    if q or status or payment_status:
        return await orders.search_orders(
            db,
            query=q,
            status=status,
            payment_status=payment_status,
            page=page,
            limit=limit,
        )
    return await orders.list_orders(
        db,
        page=page,
        limit=limit,
        order_by=order_by,
        direction=direction,
    )


@router.get("/orders/{order_id}", response_model=OrderRead)
async def get_order(
    order_id: UUID,
    db: AsyncSession = Depends(get_db_dependency),
) -> OrderRead:
    """Get order details by ID."""
    order = await orders.get_order(db, order_id)
    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")
    return order


@router.patch("/orders/{order_id}", response_model=OrderRead)
async def update_order(
    order_id: UUID,
    update: OrderStatusUpdate,
    db: AsyncSession = Depends(get_db_dependency),
) -> OrderRead:
    """Update order, payment and/or delivery status."""
    try:
        return await orders.update_order_status(
            db,
            order_id,
            order_status=update.order_status,
            payment_status=update.payment_status,
            delivery_status=update.delivery_status,
        )
    except OrderNotFoundError:
        raise HTTPException(status_code=404, detail="Order not found")


# =============================================================================
# PRODUCTS
# =============================================================================

@router.get("/products", response_model=List[ProductRead])
async def list_products(db: AsyncSession = Depends(get_db_dependency)) -> List[ProductRead]:
    """List all products, including inactive ones."""
    return await products.list_products(db)


@router.get("/products/slug-taken", response_model=SlugAvailability)
async def check_slug(
    slug: str = Query(..., min_length=1, max_length=220),
    db: AsyncSession = Depends(get_db_dependency),
) -> SlugAvailability:
    """Whether a slug is already used, for form validation."""
    return SlugAvailability(slug=slug, taken=await products.is_slug_taken(db, slug))


@router.post("/products", response_model=ProductRead, status_code=201)
async def create_product(
    data: ProductInput,
    db: AsyncSession = Depends(get_db_dependency),
) -> ProductRead:
    try:
        return await products.create_product(db, data)
    except SlugTakenError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.get("/products/{slug}", response_model=ProductRead)
async def get_product(slug: str, db: AsyncSession = Depends(get_db_dependency)) -> ProductRead:
    try:
        return await products.get_product(db, slug)
    except ProductNotFoundError:
        raise HTTPException(status_code=404, detail="Product not found")


@router.put("/products/{slug}", response_model=ProductUpdateResult)
async def update_product(
    slug: str,
    data: ProductInput,
    db: AsyncSession = Depends(get_db_dependency),
) -> ProductUpdateResult:
    """Replace a product; the response says whether its slug changed."""
    try:
        return await products.update_product(db, slug, data)
    except ProductNotFoundError:
        raise HTTPException(status_code=404, detail="Product not found")
    except SlugTakenError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.delete("/products/{slug}", status_code=204)
async def delete_product(slug: str, db: AsyncSession = Depends(get_db_dependency)) -> Response:
    try:
        await products.delete_product(db, slug)
    except ProductNotFoundError:
        raise HTTPException(status_code=404, detail="Product not found")
    return Response(status_code=204)


@router.post("/products/{slug}/toggle-status", response_model=ProductStatus)
async def toggle_product_status(slug: str, db: AsyncSession = Depends(get_db_dependency)) -> ProductStatus:
    """Activate an inactive product or deactivate an active one."""
    try:
        return await products.toggle_product_status(db, slug)
    except ProductNotFoundError:
        raise HTTPException(status_code=404, detail="Product not found")


# =============================================================================
# USERS
# =============================================================================

@router.get("/users", response_model=UserListResponse)
async def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    q: Optional[str] = Query(None, min_length=1, max_length=200),
    db: AsyncSession = Depends(get_db_dependency),
) -> UserListResponse:
    """List accounts with their orders, newest account first."""
    return await users.list_users(db, query=q, page=page, limit=limit)


@router.get("/users/{user_id}", response_model=UserRead)
async def get_user(user_id: UUID, db: AsyncSession = Depends(get_db_dependency)) -> UserRead:
    user = await users.get_user(db, user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user
