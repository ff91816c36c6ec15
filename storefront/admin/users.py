"""
Admin User Management

Read-only account views for the admin panel: paginated listing with
search, and a single account with its order history.
"""

from typing import Optional
from uuid import UUID

import structlog
from sqlalchemy import Select, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from storefront.admin.schemas import Pagination, UserListResponse, UserRead
from storefront.database.models import Order, User

logger = structlog.get_logger(__name__)


def _with_orders(statement: Select) -> Select:
    return statement.options(
        selectinload(User.orders).load_only(
            Order.id,
            Order.total_cents,
            Order.order_status,
            Order.payment_status,
            Order.created_at,
        )
    ).execution_options(populate_existing=True)


async def list_users(
    session: AsyncSession,
    query: Optional[str] = None,
    page: int = 1,
    limit: int = 50,
) -> UserListResponse:
    """
    List accounts, newest first.

    ``query`` matches case-insensitively against name and email.
    """
    conditions = []
    if query:
        pattern = f"%{query.lower()}%"
        conditions.append(
            or_(
                func.lower(User.email).like(pattern),
                func.lower(User.name).like(pattern),
            )
        )

    total_count = (
        await session.execute(select(func.count()).select_from(User).where(*conditions))
    ).scalar_one()

    statement = (
        select(User)
        .where(*conditions)
        .order_by(User.created_at.desc(), User.id)
        .offset((page - 1) * limit)
        .limit(limit)
    )
    result = await session.execute(_with_orders(statement))
    users = [UserRead.model_validate(user) for user in result.scalars().all()]

    logger.debug("Users listed", query=query, page=page, total_count=total_count)
    return UserListResponse(users=users, pagination=Pagination.for_page(page, limit, total_count))


async def get_user(session: AsyncSession, user_id: UUID) -> Optional[UserRead]:
    """Get one account with its orders, or ``None``."""
    result = await session.execute(_with_orders(select(User).where(User.id == user_id)))
    user = result.scalar_one_or_none()
    if user is None:
        return None
    return UserRead.model_validate(user)
