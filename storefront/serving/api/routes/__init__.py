"""
API Routes Module
"""
from .health import router as health_router
from .admin import router as admin_router
from .webhooks import router as webhooks_router

__all__ = [
    "health_router",
    "admin_router",
    "webhooks_router",
]
