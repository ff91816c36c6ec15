"""
Test Suite Configuration
"""
import itertools
from datetime import datetime, timedelta
from typing import AsyncGenerator, List, Optional

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine

from storefront.config import Settings
from storefront.database.connection import create_session_factory
from storefront.database.models import (
    Base,
    Order,
    OrderItem,
    OrderStatus,
    PaymentStatus,
    Product,
    User,
)

BASE_TIME = datetime(2025, 1, 1, 12, 0, 0)


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """Create test settings"""
    return Settings(
        app_env="testing",
        debug=True,
    )


@pytest.fixture
async def test_engine(tmp_path):
    """
    Test database engine.

    On-disk SQLite so that concurrent sessions each get their own
    connection to the same data.
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'storefront.db'}",
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    """Session factory bound to the test engine"""
    return create_session_factory(test_engine)


@pytest.fixture
async def test_db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session"""
    async with session_factory() as session:
        yield session


@pytest.fixture
def make_user(test_db):
    """Factory persisting users with increasing ``created_at``"""
    counter = itertools.count()

    async def _make_user(**overrides) -> User:
        i = next(counter)
        fields = {
            "name": f"User {i}",
            "email": f"user{i}@example.com",
            "created_at": BASE_TIME + timedelta(minutes=i),
        }
        fields.update(overrides)
        user = User(**fields)
        test_db.add(user)
        await test_db.commit()
        return user

    return _make_user


@pytest.fixture
def make_product(test_db):
    """Factory persisting products with increasing ``created_at``"""
    counter = itertools.count()

    async def _make_product(**overrides) -> Product:
        i = next(counter)
        fields = {
            "name": f"Product {i}",
            "slug": f"product-{i}",
            "price_cents": 1500,
            "stock": 10,
            "created_at": BASE_TIME + timedelta(minutes=i),
        }
        fields.update(overrides)
        product = Product(**fields)
        test_db.add(product)
        await test_db.commit()
        return product

    return _make_product


@pytest.fixture
def make_order(test_db):
    """
    Factory persisting orders with one line item by default.

    Orders get increasing ``created_at`` values unless one is given.
    """
    counter = itertools.count()

    async def _make_order(
        user: Optional[User] = None,
        total_cents: int = 1000,
        order_status: OrderStatus = OrderStatus.PENDING,
        payment_status: PaymentStatus = PaymentStatus.PENDING,
        items: Optional[List[OrderItem]] = None,
        **overrides,
    ) -> Order:
        i = next(counter)
        if items is None:
            items = [
                OrderItem(
                    product_name=f"Item for order {i}",
                    quantity=1,
                    unit_price_cents=total_cents,
                    total_price_cents=total_cents,
                )
            ]
        fields = {
            "user_id": user.id if user else None,
            "guest_email": None if user else f"guest{i}@example.com",
            "order_status": order_status,
            "payment_status": payment_status,
            "subtotal_cents": total_cents,
            "total_cents": total_cents,
            "created_at": BASE_TIME + timedelta(hours=i),
            "items": items,
        }
        fields.update(overrides)
        order = Order(**fields)
        test_db.add(order)
        await test_db.commit()
        return order

    return _make_order
