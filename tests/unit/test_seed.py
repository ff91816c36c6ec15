"""
Unit Tests - Seed Data Generator
"""
from storefront.database.models import DeliveryStatus, OrderStatus
from storefront.database.seed import SeedDataGenerator, slugify


class TestSlugify:
    """Tests for slugify"""

    def test_basic(self):
        assert slugify("Premium T-shirt") == "premium-t-shirt"

    def test_collapses_and_strips(self):
        assert slugify("  Chic -- Lamp!! ") == "chic-lamp"


class TestSeedDataGenerator:
    """Tests for SeedDataGenerator"""

    def test_users_have_unique_emails(self):
        users = SeedDataGenerator(seed=1).users(30)

        assert len(users) == 30
        assert len({user.email for user in users}) == 30

    def test_products_have_unique_slugs(self):
        products = SeedDataGenerator(seed=1).products(25)

        assert len({product.slug for product in products}) == 25
        assert all(500 <= product.price_cents <= 20000 for product in products)

    def test_reproducible(self):
        first = SeedDataGenerator(seed=7).products(5)
        second = SeedDataGenerator(seed=7).products(5)

        assert [p.slug for p in first] == [p.slug for p in second]

    def test_order_totals_match_items(self):
        generator = SeedDataGenerator(seed=3)
        users = generator.users(5)
        products = generator.products(4)

        orders = generator.orders(50, users, products)

        for order in orders:
            assert 1 <= len(order.items) <= 3
            assert order.total_cents == sum(item.total_price_cents for item in order.items)

    def test_orders_reference_generated_rows(self):
        """Test that orders point at generated users and products before any flush"""
        generator = SeedDataGenerator(seed=3)
        users = generator.users(5)
        products = generator.products(4)
        user_ids = {user.id for user in users}
        product_ids = {product.id for product in products}

        orders = generator.orders(50, users, products)

        assert None not in user_ids | product_ids
        for order in orders:
            if order.user_id is None:
                assert order.guest_email
            else:
                assert order.user_id in user_ids
                assert order.guest_email is None
            assert all(item.product_id in product_ids for item in order.items)
        assert any(order.user_id is not None for order in orders)
        assert any(order.user_id is None for order in orders)

    def test_fulfilled_orders_are_delivered(self):
        generator = SeedDataGenerator(seed=5)
        orders = generator.orders(100, generator.users(3), generator.products(3))

        for order in orders:
            if order.order_status == OrderStatus.FULFILLED:
                assert order.delivery_status == DeliveryStatus.DELIVERED
            else:
                assert order.delivery_status == DeliveryStatus.PENDING
