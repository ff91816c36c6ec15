"""
Stripe Webhook Handling

Verifies webhook signatures with the Stripe SDK and applies the events the
storefront cares about to orders and users.
"""

import json
from typing import Any, Mapping, Optional
from uuid import UUID

import stripe
import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.database.models import Order, OrderStatus, PaymentStatus, User
from storefront.errors import OrderNotFoundError, UserNotFoundError

logger = structlog.get_logger(__name__)

CHECKOUT_SESSION_COMPLETED = "checkout.session.completed"


def verify_event(
    payload: bytes,
    signature: str,
    secret: str,
    tolerance: int = stripe.Webhook.DEFAULT_TOLERANCE,
) -> dict:
    """
    Verify the ``Stripe-Signature`` header and parse the event body.

    Raises:
        stripe.SignatureVerificationError: If the signature does not match
            or the timestamp is older than ``tolerance`` seconds
        ValueError: If the payload is not a JSON object
    """
    body = payload.decode("utf-8")
    stripe.WebhookSignature.verify_header(body, signature, secret, tolerance)
    event = json.loads(body)
    if not isinstance(event, dict):
        raise ValueError("Webhook payload is not a JSON object")
    return event


def _billing_address(customer_details: Optional[Mapping[str, Any]]) -> Optional[dict]:
    if not customer_details:
        return None
    address = customer_details.get("address")
    return {
        "name": customer_details.get("name"),
        "email": customer_details.get("email"),
        "address": dict(address) if address else None,
    }


async def _link_stripe_customer(
    session: AsyncSession,
    order: Order,
    stripe_customer_id: str,
    user_id: Optional[UUID],
    email: Optional[str],
) -> None:
    """
    Attach the Stripe customer id to the right user.

    Signed-in checkouts store it on the buyer. Guest checkouts whose email
    matches an existing account are moved onto that account, which gets the
    customer id if it has none.

    Raises:
        UserNotFoundError: If a signed-in checkout names an unknown user
    """
    if user_id is not None:
        user = await session.get(User, user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        user.stripe_customer_id = stripe_customer_id
        logger.info("Stripe customer linked to user", user_id=str(user_id))
        return

    if not email:
        return

    result = await session.execute(select(User).where(User.email == email))
    existing_user = result.scalar_one_or_none()
    if existing_user is None:
        return

    order.user_id = existing_user.id
    if not existing_user.stripe_customer_id:
        existing_user.stripe_customer_id = stripe_customer_id
    logger.info(
        "Guest order attached to existing user",
        order_id=str(order.id),
        user_id=str(existing_user.id),
    )


async def handle_checkout_session_completed(
    session: AsyncSession,
    checkout: Mapping[str, Any],
) -> None:
    """
    Mark the order referenced by the checkout session as paid.

    Raises:
        OrderNotFoundError: If the metadata points to an unknown order
        UserNotFoundError: If a signed-in checkout names an unknown user
    """
    metadata = checkout.get("metadata") or {}
    order_id = metadata.get("orderId")

    if not order_id:
        logger.error("Order ID missing from checkout session metadata", checkout_id=checkout.get("id"))
        return

    order = await session.get(Order, UUID(order_id))
    if order is None:
        raise OrderNotFoundError(UUID(order_id))

    customer_details = checkout.get("customer_details")
    order.order_status = OrderStatus.PAID
    order.payment_status = PaymentStatus.PAID
    order.stripe_payment_intent_id = checkout.get("payment_intent")
    order.billing_address = _billing_address(customer_details)

    stripe_customer_id = checkout.get("customer")
    if stripe_customer_id:
        user_id = metadata.get("userId")
        is_guest = metadata.get("isGuest")
        await _link_stripe_customer(
            session,
            order,
            stripe_customer_id,
            user_id=UUID(user_id) if user_id and is_guest == "false" else None,
            email=(customer_details or {}).get("email"),
        )

    await session.flush()
    logger.info("Order marked as paid", order_id=order_id)


async def dispatch_event(session: AsyncSession, event: Mapping[str, Any]) -> bool:
    """
    Route a verified event to its handler.

    Returns:
        True if the event type is handled, False if it was ignored
    """
    event_type = event.get("type")

    if event_type == CHECKOUT_SESSION_COMPLETED:
        await handle_checkout_session_completed(session, event["data"]["object"])
        return True

    logger.info("Unhandled Stripe event type", event_type=event_type, event_id=event.get("id"))
    return False
