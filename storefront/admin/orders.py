"""
Admin Order Management

Listing, search, lookup and status updates for orders in the admin panel.
"""

from typing import List, Optional, Tuple
from uuid import UUID

import structlog
from sqlalchemy import Select, String, cast, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from storefront.admin.schemas import OrderListResponse, OrderRead, Pagination
from storefront.database.models import (
    DeliveryStatus,
    Order,
    OrderItem,
    OrderStatus,
    PaymentStatus,
    Product,
    User,
)
from storefront.errors import OrderNotFoundError

logger = structlog.get_logger(__name__)

SORTABLE_COLUMNS = {
    "created_at": Order.created_at,
    "updated_at": Order.updated_at,
    "total_cents": Order.total_cents,
    "order_status": Order.order_status,
}


def _with_user_and_items(statement: Select) -> Select:
    # Refresh rows already in the session so every relationship is loaded
    return statement.options(
        selectinload(Order.user).load_only(User.id, User.name, User.email, User.stripe_customer_id),
        selectinload(Order.items)
        .selectinload(OrderItem.product)
        .load_only(Product.id, Product.name, Product.slug),
    ).execution_options(populate_existing=True)


async def _paginate(
    session: AsyncSession,
    statement: Select,
    count_statement: Select,
    page: int,
    limit: int,
) -> Tuple[List[OrderRead], Pagination]:
    total_count = (await session.execute(count_statement)).scalar_one()

    offset = (page - 1) * limit
    result = await session.execute(_with_user_and_items(statement).offset(offset).limit(limit))
    orders = [OrderRead.model_validate(order) for order in result.scalars().all()]

    return orders, Pagination.for_page(page, limit, total_count)


async def list_orders(
    session: AsyncSession,
    page: int = 1,
    limit: int = 20,
    order_by: str = "created_at",
    direction: str = "desc",
) -> OrderListResponse:
    """
    List orders with pagination.

    Args:
        session: Database session
        page: 1-based page number
        limit: Page size
        order_by: One of ``SORTABLE_COLUMNS``
        direction: ``asc`` or ``desc``

    Raises:
        ValueError: On an unknown sort column or direction
    """
    if order_by not in SORTABLE_COLUMNS:
        raise ValueError(f"Cannot sort orders by {order_by!r}")
    if direction not in ("asc", "desc"):
        raise ValueError(f"Sort direction must be 'asc' or 'desc', got {direction!r}")

    column = SORTABLE_COLUMNS[order_by]
    ordering = column.desc() if direction == "desc" else column.asc()

    orders, pagination = await _paginate(
        session,
        select(Order).order_by(ordering, Order.id),
        select(func.count()).select_from(Order),
        page,
        limit,
    )
    logger.debug("Orders listed", page=page, limit=limit, total_count=pagination.total_count)
    return OrderListResponse(orders=orders, pagination=pagination)


async def search_orders(
    session: AsyncSession,
    query: Optional[str] = None,
    status: Optional[OrderStatus] = None,
    payment_status: Optional[PaymentStatus] = None,
    page: int = 1,
    limit: int = 20,
) -> OrderListResponse:
    """
    Search orders, newest first.

    ``query`` matches case-insensitively against the order id, the guest
    email, and the owning user's email or name.
    """
    conditions = []

    if query:
        pattern = f"%{query.lower()}%"
        conditions.append(
            or_(
                func.lower(cast(Order.id, String)).like(pattern),
                func.lower(Order.guest_email).like(pattern),
                Order.user.has(
                    or_(
                        func.lower(User.email).like(pattern),
                        func.lower(User.name).like(pattern),
                    )
                ),
            )
        )
    if status:
        conditions.append(Order.order_status == status)
    if payment_status:
        conditions.append(Order.payment_status == payment_status)

    statement = select(Order).where(*conditions).order_by(Order.created_at.desc(), Order.id)
    count_statement = select(func.count()).select_from(Order).where(*conditions)

    orders, pagination = await _paginate(session, statement, count_statement, page, limit)
    logger.debug(
        "Orders searched",
        query=query,
        status=status,
        payment_status=payment_status,
        total_count=pagination.total_count,
    )
    return OrderListResponse(orders=orders, pagination=pagination)


async def get_order(session: AsyncSession, order_id: UUID) -> Optional[OrderRead]:
    """Get a single order with its user and items, or ``None``."""
    result = await session.execute(
        _with_user_and_items(select(Order).where(Order.id == order_id))
    )
    order = result.scalar_one_or_none()
    if order is None:
        return None
    return OrderRead.model_validate(order)


async def update_order_status(
    session: AsyncSession,
    order_id: UUID,
    order_status: Optional[OrderStatus] = None,
    payment_status: Optional[PaymentStatus] = None,
    delivery_status: Optional[DeliveryStatus] = None,
) -> OrderRead:
    """
    Update the statuses of an order. Fields left as ``None`` are not touched.

    Raises:
        OrderNotFoundError: If the order does not exist
    """
    order = await session.get(Order, order_id)
    if order is None:
        raise OrderNotFoundError(order_id)

    changes = {}
    if order_status is not None:
        order.order_status = order_status
        changes["order_status"] = order_status.value
    if payment_status is not None:
        order.payment_status = payment_status
        changes["payment_status"] = payment_status.value
    if delivery_status is not None:
        order.delivery_status = delivery_status
        changes["delivery_status"] = delivery_status.value

    await session.flush()
    logger.info("Order status updated", order_id=str(order_id), **changes)

    # Reload so onupdate timestamps and relationships are current
    session.expire(order)
    updated = await get_order(session, order_id)
    return updated
