"""
Storefront Exceptions
"""

from uuid import UUID


class StorefrontError(Exception):
    """Base class for storefront errors"""


class StoreUnavailableError(StorefrontError):
    """
    The data store could not answer a read.

    Raised for connection failures, query timeouts and malformed queries.
    The underlying SQLAlchemy error is chained as ``__cause__``.
    """


class OrderNotFoundError(StorefrontError):
    """No order exists with the requested id"""

    def __init__(self, order_id: UUID):
        super().__init__(f"Order {order_id} not found")
        self.order_id = order_id


class UserNotFoundError(StorefrontError):
    """No user exists with the requested id"""

    def __init__(self, user_id: UUID):
        super().__init__(f"User {user_id} not found")
        self.user_id = user_id


class ProductNotFoundError(StorefrontError):
    """No product exists with the requested slug"""

    def __init__(self, slug: str):
        super().__init__(f"Product {slug!r} not found")
        self.slug = slug


class SlugTakenError(StorefrontError):
    """Another product already uses the slug"""

    def __init__(self, slug: str):
        super().__init__(f"Slug {slug!r} is already used by another product")
        self.slug = slug
