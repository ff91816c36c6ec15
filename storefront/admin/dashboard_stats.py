"""
Dashboard Statistics

Builds the admin dashboard snapshot: entity counts, paid revenue, the
order-status breakdown and the most recent orders and users.
"""

import asyncio
import time
from typing import Any, List

import structlog
from sqlalchemy import Select, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from storefront.admin.schemas import (
    OrderRead,
    OrdersByStatus,
    RecentUser,
    StatsSnapshot,
    StatsTotals,
)
from storefront.database.connection import get_session_factory
from storefront.database.models import (
    Order,
    OrderItem,
    OrderStatus,
    PaymentStatus,
    Product,
    User,
)
from storefront.errors import StoreUnavailableError
from storefront.money import cents_to_amount

logger = structlog.get_logger(__name__)

RECENT_LIMIT = 5


class StatsAggregator:
    """
    Computes the dashboard :class:`StatsSnapshot`.

    The nine reads behind a snapshot do not depend on each other, so they are
    issued concurrently, each on its own session (an ``AsyncSession`` runs one
    statement at a time), and joined once all of them finish. If any read
    fails the whole call fails with :class:`StoreUnavailableError`; no partial
    snapshot is returned.

    Usage:
        aggregator = StatsAggregator(session_factory)
        snapshot = await aggregator.compute_snapshot()
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        recent_limit: int = RECENT_LIMIT,
    ):
        """
        Args:
            session_factory: Factory for read sessions on the store.
            recent_limit: How many recent orders and users to sample.
        """
        self._session_factory = session_factory
        self._recent_limit = recent_limit

    async def compute_snapshot(self) -> StatsSnapshot:
        """
        Run all dashboard reads and assemble the snapshot.

        Raises:
            StoreUnavailableError: If any read fails.
        """
        start_time = time.perf_counter()

        try:
            (
                total_users,
                total_products,
                total_orders,
                recent_orders,
                recent_users,
                pending_orders,
                paid_orders,
                fulfilled_orders,
                revenue_cents,
            ) = await asyncio.gather(
                self._count(User),
                self._count(Product),
                self._count(Order),
                self._recent_orders(),
                self._recent_users(),
                self._count(Order, Order.order_status == OrderStatus.PENDING),
                self._count(Order, Order.order_status == OrderStatus.PAID),
                self._count(Order, Order.order_status == OrderStatus.FULFILLED),
                self._paid_revenue_cents(),
            )
        except (SQLAlchemyError, OSError) as e:
            logger.error(
                "Dashboard statistics query failed",
                error=str(e),
                error_type=type(e).__name__,
            )
            raise StoreUnavailableError("Dashboard statistics are unavailable") from e

        snapshot = StatsSnapshot(
            totals=StatsTotals(
                users=total_users,
                products=total_products,
                orders=total_orders,
                revenue=cents_to_amount(revenue_cents),
            ),
            orders_by_status=OrdersByStatus(
                PENDING=pending_orders,
                PAID=paid_orders,
                FULFILLED=fulfilled_orders,
            ),
            recent_orders=recent_orders,
            recent_users=recent_users,
        )

        logger.info(
            "Dashboard snapshot computed",
            users=total_users,
            products=total_products,
            orders=total_orders,
            revenue_cents=revenue_cents,
            duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
        )
        return snapshot

    async def _scalar(self, statement: Select) -> Any:
        async with self._session_factory() as session:
            result = await session.execute(statement)
            return result.scalar_one()

    async def _count(self, model: type, *criteria) -> int:
        """Count rows of ``model`` matching ``criteria``."""
        statement = select(func.count()).select_from(model)
        if criteria:
            statement = statement.where(*criteria)
        return await self._scalar(statement)

    async def _paid_revenue_cents(self) -> int:
        """Sum of ``total_cents`` over paid orders; 0 when there are none."""
        statement = select(func.coalesce(func.sum(Order.total_cents), 0)).where(
            Order.payment_status == PaymentStatus.PAID
        )
        return int(await self._scalar(statement))

    async def _recent_orders(self) -> List[OrderRead]:
        """Newest orders with the owning user's id/name/email and all line items."""
        statement = (
            select(Order)
            .options(
                selectinload(Order.user).load_only(User.id, User.name, User.email),
                selectinload(Order.items)
                .selectinload(OrderItem.product)
                .load_only(Product.id, Product.name, Product.slug),
            )
            .order_by(Order.created_at.desc())
            .limit(self._recent_limit)
        )
        async with self._session_factory() as session:
            result = await session.execute(statement)
            return [OrderRead.model_validate(order) for order in result.scalars().all()]

    async def _recent_users(self) -> List[RecentUser]:
        statement = (
            select(User.id, User.name, User.email, User.created_at)
            .order_by(User.created_at.desc())
            .limit(self._recent_limit)
        )
        async with self._session_factory() as session:
            result = await session.execute(statement)
            return [RecentUser.model_validate(row) for row in result.all()]


def get_stats_aggregator() -> StatsAggregator:
    """FastAPI dependency returning an aggregator bound to the application database."""
    return StatsAggregator(get_session_factory())
