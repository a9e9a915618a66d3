"""Cart store: the persisted cart plus change notification."""
import os
from typing import Any, Callable, Optional

from storefront.logging import get_logger, sanitize_id_for_logging
from storefront.services import pricing
from storefront.utils.slug import resolve_media_url
from .events import CartEventBus, CartHandler, ChangeNotifier
from .models import (
    MAX_LINE_QUANTITY,
    Cart,
    CartLine,
    _get,
    decode_cart,
    encode_cart,
    normalize_id,
    normalize_price,
    normalize_quantity,
)
from .storage import KeyValueStorage

logger = get_logger(__name__)

CART_KEY = os.environ.get("CART_STORAGE_KEY", "cart")
MEDIA_BASE = os.environ.get("STOREFRONT_MEDIA_BASE", "")


def _product_image(product: Any) -> Any:
    """Direct `image` field, else the first entry of `images`."""
    image = _get(product, "image")
    if image:
        return image
    images = _get(product, "images")
    if not images or isinstance(images, (str, bytes)):
        return None
    try:
        first = next(iter(images))
    except (TypeError, StopIteration):
        return None
    if isinstance(first, str):
        return first
    # some catalog endpoints name the nested field "images"
    return _get(first, "image") or _get(first, "images")


class CartStore:
    """
    Shopping cart persisted as one JSON blob in key-value storage.

    Every mutation is a read-modify-write of the whole blob followed by
    exactly one synchronous change notification. No public method raises:
    unreadable data reads as an empty cart and failed writes are logged.

    Usage:
        store = CartStore(MemoryStorage().open_context(), media_base="https://cdn.example.com")
        unsubscribe = store.subscribe(render_badge)
        store.add_line({"id": 7, "name": "Shoe", "price": "19.99"}, 2)
        store.count()
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        notifier: Optional[ChangeNotifier] = None,
        media_base: str = "",
        key: str = CART_KEY,
    ):
        self.storage = storage
        self.notifier = notifier if notifier is not None else CartEventBus()
        self.media_base = media_base
        self.key = key

    def subscribe(self, handler: CartHandler) -> Callable[[], None]:
        """Register a change handler on the notifier; returns an unsubscribe callable."""
        subscribe = getattr(self.notifier, "subscribe", None)
        if subscribe is None:
            raise TypeError(f"{type(self.notifier).__name__} does not accept subscriptions")
        return subscribe(handler)

    def read(self) -> Cart:
        """Get the persisted cart; empty if missing or unreadable."""
        try:
            return decode_cart(self.storage.get_item(self.key))
        except Exception as e:
            logger.error(f"Failed to read cart from storage: {e}", exc_info=True)
            return Cart()

    def write(self, lines: Any) -> Cart:
        """
        Normalize and persist a cart, then notify subscribers.

        The notification fires even if persistence failed, so observers
        show the attempted state until the next reload.
        """
        cart = Cart.from_list(lines)
        try:
            self.storage.set_item(self.key, encode_cart(cart))
        except Exception as e:
            logger.error(f"Failed to save cart to storage: {e}", exc_info=True)
        try:
            self.notifier.publish(cart)
        except Exception as e:
            logger.error(f"Failed to broadcast cart change: {e}", exc_info=True)
        return cart.copy()

    def add_line(self, product: Any, quantity: Any = 1) -> Cart:
        """
        Add a product to the cart.

        An existing line only gets its quantity incremented (capped at
        MAX_LINE_QUANTITY); name, price and image keep their first values.
        """
        cart = self.read()
        pid = normalize_id(_get(product, "id"))
        amount = normalize_quantity(quantity) or 1

        existing = cart.get(pid)
        if existing is not None:
            existing.quantity = min(existing.quantity + amount, MAX_LINE_QUANTITY)
        else:
            name = _get(product, "name")
            cart.lines.append(CartLine(
                id=pid,
                name=str(name) if name else "",
                price=normalize_price(_get(product, "price")),
                quantity=amount,
                image=resolve_media_url(_product_image(product), self.media_base),
            ))

        logger.debug(f"Added {amount} x product {sanitize_id_for_logging(pid)} to cart")
        return self.write(cart)

    def remove_line(self, product_id: Any) -> Cart:
        """Remove a product from the cart (no-op when absent)."""
        pid = normalize_id(product_id)
        cart = self.read()
        cart.lines = [line for line in cart.lines if line.id != pid]
        return self.write(cart)

    def set_quantity(self, product_id: Any, quantity: Any) -> Cart:
        """
        Set a line's quantity exactly.

        Zero or negative removes the line. Unlike add_line this path is
        not capped at MAX_LINE_QUANTITY.
        """
        pid = normalize_id(product_id)
        qty = normalize_quantity(quantity)
        cart = self.read()
        line = cart.get(pid)
        if line is not None:
            line.quantity = max(qty, 0)
        cart.lines = [it for it in cart.lines if it.quantity > 0]
        return self.write(cart)

    def clear(self) -> Cart:
        """Empty the cart."""
        return self.write([])

    def count(self) -> int:
        """Total units in the persisted cart."""
        return self.read().count

    def summary(self, shipping: Optional["pricing.ShippingPolicy"] = None) -> "pricing.CartSummary":
        """Persisted cart with subtotal, shipping and total."""
        return pricing.summarize_cart(self.read(), shipping or pricing.DEFAULT_SHIPPING)


def get_cart_store(session_id: str) -> CartStore:
    """
    Build the Redis-backed CartStore for a shopper session.

    A new store is built on every call; nothing is kept per session in
    process memory. The Redis client underneath is the shared singleton.
    """
    from storefront.realtime import RedisStreamNotifier
    from .events import CompositeNotifier
    from .storage import RedisStorage

    notifier = CompositeNotifier([CartEventBus(), RedisStreamNotifier(session_id)])
    return CartStore(RedisStorage(session_id), notifier=notifier, media_base=MEDIA_BASE)
