"""
Payments Module
"""
from .stripe_webhooks import dispatch_event, handle_checkout_session_completed, verify_event

__all__ = [
    "dispatch_event",
    "handle_checkout_session_completed",
    "verify_event",
]
