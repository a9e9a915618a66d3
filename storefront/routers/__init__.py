"""HTTP routers for the storefront API."""
from .cart import router as cart_router

__all__ = ["cart_router"]
