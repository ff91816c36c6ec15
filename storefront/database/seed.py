"""
Development Seed Data

Fills an empty development database with fake users, products and orders.

Usage:
    python -m storefront.database.seed --users 20 --products 10 --orders 40
"""

import argparse
import asyncio
import random
import re
import uuid
from datetime import datetime, timedelta, timezone
from typing import List

import structlog
from faker import Faker

from storefront.config.logging import configure_logging
from storefront.database.connection import (
    close_database,
    create_tables,
    get_db,
    init_database,
)
from storefront.database.models import (
    DeliveryStatus,
    Order,
    OrderItem,
    OrderStatus,
    PaymentStatus,
    Product,
    User,
)

logger = structlog.get_logger(__name__)

ADJECTIVES = ["Comfortable", "Elegant", "Compact", "Premium", "Light", "Sturdy", "Chic", "Colorful"]
NOUNS = ["T-shirt", "Cap", "Mug", "Bag", "Cushion", "Shoe", "Lamp", "Scarf"]

# (order status, payment status, weight)
ORDER_STATES = [
    (OrderStatus.DRAFT, PaymentStatus.PENDING, 0.10),
    (OrderStatus.PENDING, PaymentStatus.PENDING, 0.15),
    (OrderStatus.PAID, PaymentStatus.PAID, 0.35),
    (OrderStatus.FULFILLED, PaymentStatus.PAID, 0.30),
    (OrderStatus.CANCELED, PaymentStatus.FAILED, 0.05),
    (OrderStatus.REFUNDED, PaymentStatus.REFUNDED, 0.05),
]


def slugify(value: str) -> str:
    """Lowercase, collapse non-alphanumerics to '-', strip edge dashes."""
    return re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")


class SeedDataGenerator:
    """Builds unsaved model instances with reproducible fake data"""

    def __init__(self, seed: int = 42):
        self.fake = Faker()
        self.fake.seed_instance(seed)
        self.random = random.Random(seed)
        # Naive UTC, matching the DateTime columns
        self.now = datetime.now(timezone.utc).replace(tzinfo=None)

    def _id(self) -> uuid.UUID:
        """Reproducible primary key, so orders can reference rows before a flush"""
        return uuid.UUID(int=self.random.getrandbits(128), version=4)

    def users(self, n: int) -> List[User]:
        return [
            User(
                id=self._id(),
                name=self.fake.name(),
                email=self.fake.unique.email(),
                created_at=self.now - timedelta(days=self.random.randint(0, 365), minutes=i),
            )
            for i in range(n)
        ]

    def products(self, n: int) -> List[Product]:
        products = []
        for i in range(n):
            name = f"{self.random.choice(ADJECTIVES)} {self.random.choice(NOUNS)}"
            products.append(
                Product(
                    id=self._id(),
                    name=name,
                    slug=f"{slugify(name)}-{i}",
                    description=f"Generated product: {name}",
                    price_cents=self.random.randint(500, 20000),
                    stock=self.random.randint(0, 100),
                    is_active=True,
                    currency="EUR",
                )
            )
        return products

    def orders(self, n: int, users: List[User], products: List[Product]) -> List[Order]:
        orders = []
        for i in range(n):
            order_status, payment_status, _ = self.random.choices(
                ORDER_STATES, weights=[state[2] for state in ORDER_STATES]
            )[0]

            items = []
            for product in self.random.sample(products, k=min(len(products), self.random.randint(1, 3))):
                quantity = self.random.randint(1, 4)
                items.append(
                    OrderItem(
                        product_id=product.id,
                        product_name=product.name,
                        quantity=quantity,
                        unit_price_cents=product.price_cents,
                        total_price_cents=product.price_cents * quantity,
                    )
                )
            subtotal = sum(item.total_price_cents for item in items)

            # Roughly one order in five is a guest checkout
            user = self.random.choice(users) if users and self.random.random() > 0.2 else None

            orders.append(
                Order(
                    user_id=user.id if user else None,
                    guest_email=None if user else self.fake.email(),
                    order_status=order_status,
                    payment_status=payment_status,
                    delivery_status=(
                        DeliveryStatus.DELIVERED
                        if order_status == OrderStatus.FULFILLED
                        else DeliveryStatus.PENDING
                    ),
                    subtotal_cents=subtotal,
                    tax_cents=0,
                    shipping_cents=0,
                    total_cents=subtotal,
                    currency="EUR",
                    items=items,
                    created_at=self.now - timedelta(days=self.random.randint(0, 90), minutes=i),
                )
            )
        return orders


async def seed(n_users: int = 20, n_products: int = 10, n_orders: int = 40, seed: int = 42) -> None:
    """Create tables and insert generated rows."""
    engine = await init_database()
    try:
        await create_tables(engine)

        generator = SeedDataGenerator(seed)
        users = generator.users(n_users)
        products = generator.products(n_products)

        async with get_db() as db:
            db.add_all(users + products)
            # Insert referenced rows before the orders
            await db.flush()
            orders = generator.orders(n_orders, users, products) if products else []
            db.add_all(orders)

        logger.info(
            "Database seeding completed",
            users=len(users),
            products=len(products),
            orders=len(orders),
        )
    finally:
        await close_database()


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed the storefront database with fake data")
    parser.add_argument("--users", type=int, default=20)
    parser.add_argument("--products", type=int, default=10)
    parser.add_argument("--orders", type=int, default=40)
    parser.add_argument("--seed", type=int, default=42, help="Random seed for reproducible data")
    args = parser.parse_args()

    configure_logging()
    asyncio.run(seed(args.users, args.products, args.orders, args.seed))


if __name__ == "__main__":
    main()
