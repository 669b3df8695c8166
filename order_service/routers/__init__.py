"""
API routers for order service endpoints.
"""

from . import health_router, order_router, product_router, user_router

__all__ = ["health_router", "order_router", "product_router", "user_router"]
