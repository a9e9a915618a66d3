"""
Storefront Core Package

Client-side storefront building blocks:
- cart: persisted cart store with change notification
- services: cart totals and checkout against the storefront API
- routers: HTTP surface for browser front ends
- realtime: Redis stream events for other processes

Note: Importing the package itself loads no submodule. `storefront.cart`
imports the Upstash Redis client (via storefront.db) at import time;
FastAPI is only loaded by storefront.routers.
"""

__all__ = [
    "CartStore",
    "get_cart_store",
    "get_logger",
]


def __getattr__(name):
    """Lazy attribute access for the most used entry points."""
    if name in ("CartStore", "get_cart_store"):
        from storefront import cart
        return getattr(cart, name)
    if name == "get_logger":
        from storefront.logging import get_logger
        return get_logger
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
