"""
Unit Tests - Admin Order Management
"""
import uuid

import pytest

from storefront.admin.orders import (
    get_order,
    list_orders,
    search_orders,
    update_order_status,
)
from storefront.database.models import DeliveryStatus, OrderItem, OrderStatus, PaymentStatus
from storefront.errors import OrderNotFoundError


class TestListOrders:
    """Tests for list_orders"""

    async def test_pagination(self, test_db, make_order):
        """Test page slicing and pagination metadata"""
        orders = [await make_order() for _ in range(5)]

        first = await list_orders(test_db, page=1, limit=2)
        last = await list_orders(test_db, page=3, limit=2)

        assert [o.id for o in first.orders] == [orders[4].id, orders[3].id]
        assert first.pagination.total_count == 5
        assert first.pagination.total_pages == 3
        assert first.pagination.has_next_page is True
        assert first.pagination.has_previous_page is False

        assert [o.id for o in last.orders] == [orders[0].id]
        assert last.pagination.has_next_page is False
        assert last.pagination.has_previous_page is True

    async def test_sort_by_total_ascending(self, test_db, make_order):
        for cents in (3000, 1000, 2000):
            await make_order(total_cents=cents)

        result = await list_orders(test_db, order_by="total_cents", direction="asc")

        assert [o.total_cents for o in result.orders] == [1000, 2000, 3000]

    async def test_rejects_unknown_sort_column(self, test_db):
        with pytest.raises(ValueError):
            await list_orders(test_db, order_by="guest_email")

    async def test_includes_user_and_items(self, test_db, make_user, make_order):
        user = await make_user(name="Bob")
        await make_order(user=user)

        result = await list_orders(test_db)

        assert result.orders[0].user.name == "Bob"
        assert len(result.orders[0].items) == 1

    async def test_items_carry_product_summary(self, test_db, make_product, make_order):
        """Test that lines link to their product and deleted products show as None"""
        mug = await make_product(name="Mug", slug="mug")
        await make_order(
            total_cents=3000,
            items=[
                OrderItem(product_id=mug.id, product_name="Mug", quantity=2, unit_price_cents=1000, total_price_cents=2000),
                OrderItem(product_name="Gone", quantity=1, unit_price_cents=1000, total_price_cents=1000),
            ],
        )

        result = await list_orders(test_db)
        linked, orphan = result.orders[0].items

        assert linked.product.model_dump() == {"id": mug.id, "name": "Mug", "slug": "mug"}
        assert orphan.product is None

    async def test_empty(self, test_db):
        result = await list_orders(test_db)

        assert result.orders == []
        assert result.pagination.total_pages == 0
        assert result.pagination.has_next_page is False


class TestSearchOrders:
    """Tests for search_orders"""

    async def test_matches_user_email_case_insensitive(self, test_db, make_user, make_order):
        alice = await make_user(name="Alice", email="alice@shop.test")
        bob = await make_user(name="Bob", email="bob@shop.test")
        alice_order = await make_order(user=alice)
        await make_order(user=bob)

        result = await search_orders(test_db, query="ALICE@")

        assert [o.id for o in result.orders] == [alice_order.id]
        assert result.pagination.total_count == 1

    async def test_matches_user_name(self, test_db, make_user, make_order):
        carol = await make_user(name="Carol Smith")
        order = await make_order(user=carol)
        await make_order()

        result = await search_orders(test_db, query="smith")

        assert [o.id for o in result.orders] == [order.id]

    async def test_matches_guest_email(self, test_db, make_order):
        order = await make_order(guest_email="walk-in@example.org")
        await make_order()

        result = await search_orders(test_db, query="walk-in")

        assert [o.id for o in result.orders] == [order.id]

    async def test_status_filters(self, test_db, make_order):
        paid = await make_order(order_status=OrderStatus.PAID, payment_status=PaymentStatus.PAID)
        await make_order(order_status=OrderStatus.PAID, payment_status=PaymentStatus.PENDING)
        await make_order(order_status=OrderStatus.PENDING)

        by_status = await search_orders(test_db, status=OrderStatus.PAID)
        by_both = await search_orders(
            test_db, status=OrderStatus.PAID, payment_status=PaymentStatus.PAID
        )

        assert by_status.pagination.total_count == 2
        assert [o.id for o in by_both.orders] == [paid.id]


class TestGetOrder:
    """Tests for get_order"""

    async def test_found(self, test_db, make_order):
        order = await make_order(total_cents=4321)

        result = await get_order(test_db, order.id)

        assert result.id == order.id
        assert result.total_cents == 4321

    async def test_missing(self, test_db):
        assert await get_order(test_db, uuid.uuid4()) is None


class TestUpdateOrderStatus:
    """Tests for update_order_status"""

    async def test_updates_only_given_fields(self, test_db, make_order):
        order = await make_order(
            order_status=OrderStatus.PAID,
            payment_status=PaymentStatus.PAID,
        )

        result = await update_order_status(
            test_db, order.id, delivery_status=DeliveryStatus.SHIPPED
        )

        assert result.delivery_status == DeliveryStatus.SHIPPED
        assert result.order_status == OrderStatus.PAID
        assert result.payment_status == PaymentStatus.PAID

    async def test_updates_order_status(self, test_db, make_order):
        order = await make_order(order_status=OrderStatus.PAID)

        result = await update_order_status(test_db, order.id, order_status=OrderStatus.FULFILLED)

        assert result.order_status == OrderStatus.FULFILLED

    async def test_missing_order(self, test_db):
        with pytest.raises(OrderNotFoundError):
            await update_order_status(test_db, uuid.uuid4(), order_status=OrderStatus.PAID)
