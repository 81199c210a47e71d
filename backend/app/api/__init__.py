"""API package exports."""
from . import (
    routes_auth,
    routes_bird_nests,
    routes_categories,
    routes_orders,
    routes_posts,
    routes_products,
    routes_users,
)

__all__ = [
    "routes_auth",
    "routes_bird_nests",
    "routes_categories",
    "routes_orders",
    "routes_posts",
    "routes_products",
    "routes_users",
]
