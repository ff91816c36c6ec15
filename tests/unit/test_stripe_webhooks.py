"""
Unit Tests - Stripe Webhooks
"""
import hashlib
import hmac
import json
import time
import uuid

import pytest
import stripe

from storefront.database.models import OrderStatus, PaymentStatus
from storefront.errors import OrderNotFoundError, UserNotFoundError
from storefront.payments.stripe_webhooks import dispatch_event, verify_event

SECRET = "whsec_test_secret"


def sign(payload: bytes, secret: str = SECRET, timestamp: int = None) -> str:
    """Build a Stripe-Signature header the way Stripe does"""
    timestamp = int(time.time()) if timestamp is None else timestamp
    signed = f"{timestamp}.{payload.decode('utf-8')}".encode("utf-8")
    digest = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={digest}"


def checkout_completed(order_id, **session_fields) -> dict:
    """Minimal checkout.session.completed event"""
    checkout = {
        "id": "cs_test_123",
        "object": "checkout.session",
        "payment_intent": "pi_test_123",
        "customer": None,
        "customer_details": {
            "name": "Dana Buyer",
            "email": "dana@example.com",
            "address": {"city": "Lyon", "country": "FR"},
        },
        "metadata": {"orderId": str(order_id) if order_id else None, "isGuest": "true"},
    }
    checkout.update(session_fields)
    return {
        "id": "evt_test_123",
        "type": "checkout.session.completed",
        "data": {"object": checkout},
    }


class TestVerifyEvent:
    """Tests for signature verification"""

    def test_valid_signature(self):
        payload = json.dumps({"id": "evt_1", "type": "ping"}).encode()

        event = verify_event(payload, sign(payload), SECRET)

        assert event["type"] == "ping"

    def test_wrong_secret(self):
        payload = json.dumps({"id": "evt_1", "type": "ping"}).encode()

        with pytest.raises(stripe.SignatureVerificationError):
            verify_event(payload, sign(payload, secret="whsec_other"), SECRET)

    def test_expired_timestamp(self):
        payload = json.dumps({"id": "evt_1", "type": "ping"}).encode()
        header = sign(payload, timestamp=int(time.time()) - 3600)

        with pytest.raises(stripe.SignatureVerificationError):
            verify_event(payload, header, SECRET, tolerance=300)

    def test_rejects_non_object_payload(self):
        payload = b"[]"

        with pytest.raises(ValueError):
            verify_event(payload, sign(payload), SECRET)


class TestDispatchEvent:
    """Tests for event dispatch"""

    async def test_checkout_completed_marks_order_paid(self, test_db, make_order):
        order = await make_order(order_status=OrderStatus.PENDING)

        handled = await dispatch_event(test_db, checkout_completed(order.id))
        await test_db.commit()
        await test_db.refresh(order)

        assert handled is True
        assert order.order_status == OrderStatus.PAID
        assert order.payment_status == PaymentStatus.PAID
        assert order.stripe_payment_intent_id == "pi_test_123"
        assert order.billing_address == {
            "name": "Dana Buyer",
            "email": "dana@example.com",
            "address": {"city": "Lyon", "country": "FR"},
        }

    async def test_missing_order_id_is_ignored(self, test_db, make_order):
        order = await make_order(order_status=OrderStatus.PENDING)

        handled = await dispatch_event(test_db, checkout_completed(None))
        await test_db.refresh(order)

        assert handled is True
        assert order.order_status == OrderStatus.PENDING

    async def test_unknown_order_raises(self, test_db):
        with pytest.raises(OrderNotFoundError):
            await dispatch_event(test_db, checkout_completed(uuid.uuid4()))

    async def test_links_customer_to_signed_in_user(self, test_db, make_user, make_order):
        user = await make_user()
        order = await make_order(user=user)
        event = checkout_completed(
            order.id,
            customer="cus_signed_in",
            metadata={"orderId": str(order.id), "userId": str(user.id), "isGuest": "false"},
        )

        await dispatch_event(test_db, event)
        await test_db.commit()
        await test_db.refresh(user)

        assert user.stripe_customer_id == "cus_signed_in"

    async def test_attaches_guest_order_to_existing_account(self, test_db, make_user, make_order):
        user = await make_user(email="dana@example.com")
        order = await make_order(user=None, guest_email="dana@example.com")

        await dispatch_event(test_db, checkout_completed(order.id, customer="cus_guest"))
        await test_db.commit()
        await test_db.refresh(order)
        await test_db.refresh(user)

        assert order.user_id == user.id
        assert user.stripe_customer_id == "cus_guest"

    async def test_keeps_existing_customer_id_for_guest_match(self, test_db, make_user, make_order):
        user = await make_user(email="dana@example.com", stripe_customer_id="cus_original")
        order = await make_order(user=None, guest_email="dana@example.com")

        await dispatch_event(test_db, checkout_completed(order.id, customer="cus_new"))
        await test_db.commit()
        await test_db.refresh(user)

        assert user.stripe_customer_id == "cus_original"

    async def test_unknown_signed_in_user_raises(self, test_db, make_order):
        """Test that the event fails, so Stripe retries it"""
        order = await make_order()
        event = checkout_completed(
            order.id,
            customer="cus_x",
            metadata={"orderId": str(order.id), "userId": str(uuid.uuid4()), "isGuest": "false"},
        )

        with pytest.raises(UserNotFoundError):
            await dispatch_event(test_db, event)

    async def test_event_without_type_is_ignored(self, test_db):
        assert await dispatch_event(test_db, {"id": "evt_3"}) is False

    async def test_unhandled_event_type(self, test_db):
        event = {"id": "evt_2", "type": "customer.created", "data": {"object": {}}}

        assert await dispatch_event(test_db, event) is False
