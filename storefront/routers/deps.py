"""
Shared Dependencies for Routers

Overridable with app.dependency_overrides in tests.
"""

from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from storefront.cart import CartStore
    from storefront.services.checkout import OrderClient


_order_client: Optional["OrderClient"] = None


def get_store(session_id: str) -> "CartStore":
    """Cart store of the shopper session in the path"""
    from storefront.cart import get_cart_store
    return get_cart_store(session_id)


def get_order_client() -> "OrderClient":
    """Get or create OrderClient singleton (lazy loaded)"""
    global _order_client
    if _order_client is None:
        from storefront.services.checkout import OrderClient
        _order_client = OrderClient()
    return _order_client
