"""
Payment Webhook Endpoints
"""

from typing import Optional

import stripe
import structlog
from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import PlainTextResponse
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.config import get_settings
from storefront.database.connection import get_db_dependency
from storefront.payments import stripe_webhooks

router = APIRouter()
logger = structlog.get_logger(__name__)


@router.post("/stripe/webhooks", response_class=PlainTextResponse)
async def stripe_webhook(
    request: Request,
    stripe_signature: Optional[str] = Header(default=None),
    db: AsyncSession = Depends(get_db_dependency),
) -> PlainTextResponse:
    """
    Receive Stripe events.

    503 while no signing secret is configured, 400 for a missing or invalid
    signature, 500 when applying the event fails so that Stripe retries the
    delivery.
    """
    stripe_settings = get_settings().stripe
    if stripe_settings.webhook_secret is None:
        logger.error("Stripe webhook received but STRIPE_WEBHOOK_SECRET is not set")
        return PlainTextResponse("Webhook endpoint is not configured", status_code=503)

    if not stripe_signature:
        return PlainTextResponse("Missing stripe-signature header", status_code=400)

    payload = await request.body()

    try:
        event = stripe_webhooks.verify_event(
            payload,
            stripe_signature,
            stripe_settings.webhook_secret.get_secret_value(),
            tolerance=stripe_settings.webhook_tolerance_seconds,
        )
    except (stripe.SignatureVerificationError, ValueError) as e:
        logger.warning("Webhook signature verification failed", error=str(e))
        return PlainTextResponse("Invalid signature", status_code=400)

    try:
        await stripe_webhooks.dispatch_event(db, event)
    except Exception as e:
        logger.error(
            "Error processing webhook",
            event_type=event.get("type"),
            error=str(e),
            error_type=type(e).__name__,
        )
        await db.rollback()
        return PlainTextResponse("Internal server error", status_code=500)

    return PlainTextResponse("Webhook processed successfully", status_code=200)
