"""
Admin Module
"""
from .dashboard_stats import StatsAggregator, get_stats_aggregator
from .orders import get_order, list_orders, search_orders, update_order_status
from .products import (
    create_product,
    delete_product,
    get_product,
    is_slug_taken,
    list_products,
    toggle_product_status,
    update_product,
)
from .users import get_user, list_users

__all__ = [
    "StatsAggregator",
    "get_stats_aggregator",
    "get_order",
    "list_orders",
    "search_orders",
    "update_order_status",
    "create_product",
    "delete_product",
    "get_product",
    "is_slug_taken",
    "list_products",
    "toggle_product_status",
    "update_product",
    "get_user",
    "list_users",
]
