"""
Common Error Constants and Exceptions

Centralized error messages to avoid string duplication.
"""

# Checkout errors
ERROR_CART_EMPTY = "Cart is empty"
ERROR_SHIPPING_DETAILS = "Please fill in all shipping details."
ERROR_ORDER_FAILED = "Failed to place order. Please try again."
ERROR_REQUEST_TIMEOUT = "Request timed out"

# Storage errors
ERROR_STORAGE_QUOTA = "Storage quota exceeded"
ERROR_REDIS_NOT_CONFIGURED = "UPSTASH_REDIS_REST_URL and UPSTASH_REDIS_REST_TOKEN must be set"


class CheckoutError(ValueError):
    """Checkout input cannot be turned into an order."""


class ApiError(Exception):
    """Remote storefront API answered with an error or did not answer."""

    def __init__(self, message: str, status: int | None = None, payload=None):
        super().__init__(message)
        self.status = status
        self.payload = payload


class StorageQuotaExceeded(Exception):
    """A storage write would exceed the configured quota."""
