"""
Checkout Service

Turns the persisted cart plus the shipping form into an order on the
storefront API. The cart is cleared only once the API accepted the order.
"""
import asyncio
import os
from dataclasses import dataclass, field
from typing import Any, Literal, Optional

import httpx
from pydantic import BaseModel

from storefront.cart.models import Cart, CartLine
from storefront.cart.service import CartStore
from storefront.errors import (
    ERROR_CART_EMPTY,
    ERROR_REQUEST_TIMEOUT,
    ERROR_SHIPPING_DETAILS,
    ApiError,
    CheckoutError,
)
from storefront.logging import get_logger
from .pricing import DEFAULT_SHIPPING, ShippingPolicy, summarize_cart

logger = get_logger(__name__)

API_BASE = os.environ.get("STOREFRONT_API_BASE", "http://127.0.0.1:8000/api")
ORDER_PATH = "/v2/order/"
DEFAULT_TIMEOUT = 10.0


# ==================== MODELS ====================

class CheckoutForm(BaseModel):
    """Shipping and payment details entered on the checkout page."""
    first_name: str = ""
    last_name: str = ""
    email: Optional[str] = None
    phone: str = ""
    address: str = ""
    city: str = ""
    zip_code: str = ""
    payment_method: Literal["cod", "card"] = "cod"

    @property
    def cash_on_delivery(self) -> bool:
        return self.payment_method == "cod"

    def ensure_shipping_details(self) -> None:
        """Address, city and phone are required to ship anything."""
        if not (self.address.strip() and self.city.strip() and self.phone.strip()):
            raise CheckoutError(ERROR_SHIPPING_DETAILS)


@dataclass
class OrderConfirmation:
    """What the order success page shows."""
    order_id: Any
    items: list[CartLine] = field(default_factory=list)
    total_amount: float = 0.0
    shipping_address: Optional[CheckoutForm] = None


# ==================== PAYLOAD ====================

def build_order_payload(
    form: CheckoutForm,
    cart: Cart,
    shipping: ShippingPolicy = DEFAULT_SHIPPING,
) -> dict:
    """
    Build the JSON body for the order endpoint.

    Raises:
        CheckoutError: If the cart is empty or shipping details are missing
    """
    if cart.is_empty:
        raise CheckoutError(ERROR_CART_EMPTY)
    form.ensure_shipping_details()

    summary = summarize_cart(cart, shipping)
    return {
        "first_name": form.first_name,
        "last_name": form.last_name,
        "email": form.email,
        "phone": form.phone,
        "address": form.address,
        "city": form.city,
        "zip_code": form.zip_code,
        "total_amount": summary.total,
        "cash_on_delivery": form.cash_on_delivery,
        "items": [
            {"product": line.id, "quantity": line.quantity, "price": line.price}
            for line in cart.lines
        ],
    }


# ==================== API CLIENT ====================

class OrderClient:
    """Async client for the storefront order endpoint."""

    def __init__(
        self,
        api_base: str = API_BASE,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def submit_order(self, payload: dict) -> dict:
        """
        POST an order payload.

        Returns:
            Created order as returned by the API

        Raises:
            ApiError: On timeout, connection failure or non-2xx status
        """
        url = f"{self.api_base}{ORDER_PATH}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(url, json=payload, headers={"Accept": "application/json"})
        except httpx.TimeoutException as e:
            logger.warning(f"Order request timed out: {e}")
            raise ApiError(ERROR_REQUEST_TIMEOUT) from e
        except httpx.HTTPError as e:
            logger.error(f"Order request failed: {e}")
            raise ApiError(f"Order request failed: {e}") from e

        body = _parse_body(response)
        if response.is_error:
            logger.error(f"Order API returned {response.status_code}")
            raise ApiError(
                f"API request failed with status {response.status_code}",
                status=response.status_code,
                payload=body,
            )
        return body if isinstance(body, dict) else {"data": body}


def _parse_body(response: httpx.Response) -> Any:
    """JSON when the API says so, raw text otherwise."""
    if "application/json" in response.headers.get("content-type", ""):
        try:
            return response.json()
        except ValueError:
            return None
    return response.text


# ==================== CHECKOUT FLOW ====================

async def place_order(
    store: CartStore,
    form: CheckoutForm,
    client: Optional[OrderClient] = None,
    shipping: ShippingPolicy = DEFAULT_SHIPPING,
) -> OrderConfirmation:
    """
    Submit the current cart as an order and clear the cart.

    The cart is left untouched if validation or the API call fails.
    Store calls go through a worker thread since storage I/O is blocking.

    Raises:
        CheckoutError: Invalid form or empty cart
        ApiError: The order API rejected or did not answer
    """
    cart = await asyncio.to_thread(store.read)
    payload = build_order_payload(form, cart, shipping)
    order = await (client or OrderClient()).submit_order(payload)

    await asyncio.to_thread(store.clear)
    logger.info(f"Order {order.get('id')} placed with {cart.count} items")
    return OrderConfirmation(
        order_id=order.get("id"),
        items=cart.lines,
        total_amount=payload["total_amount"],
        shipping_address=form,
    )
