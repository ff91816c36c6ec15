"""
Shared API Dependencies
"""

import hmac
from typing import Optional

from fastapi import Header, HTTPException

from storefront.config import get_settings


async def require_admin_key(x_admin_key: Optional[str] = Header(default=None)) -> None:
    """
    Guard for admin routes.

    Compares the ``X-Admin-Key`` header with ``ADMIN_API_KEY``. The admin API
    is disabled (503) while no key is configured.
    """
    configured = get_settings().security.admin_api_key
    if configured is None:
        raise HTTPException(status_code=503, detail="Admin API is not configured")

    if not x_admin_key or not hmac.compare_digest(
        x_admin_key.encode("utf-8"), configured.get_secret_value().encode("utf-8")
    ):
        raise HTTPException(status_code=401, detail="Invalid admin key")
