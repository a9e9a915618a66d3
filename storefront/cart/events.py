"""Cart change notification: in-context pub/sub and the storage-change path."""
from typing import Callable, Iterable, Optional, Protocol

from storefront.logging import get_logger
from .models import Cart, decode_cart
from .storage import StorageContext, StorageEvent

logger = get_logger(__name__)

CartHandler = Callable[[Cart], None]


class ChangeNotifier(Protocol):
    """Anything the cart store can announce a new snapshot to."""

    def publish(self, cart: Cart) -> None: ...


class CartEventBus:
    """
    Synchronous publish/subscribe for one context.

    Handlers run in registration order inside `publish`, each with its
    own copy of the snapshot. A failing handler is logged and skipped.
    """

    def __init__(self):
        self._handlers: list[CartHandler] = []

    def subscribe(self, handler: CartHandler) -> Callable[[], None]:
        """Register a handler; returns a callable that unsubscribes it."""
        self._handlers.append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)

        return unsubscribe

    @property
    def subscriber_count(self) -> int:
        return len(self._handlers)

    def publish(self, cart: Cart) -> None:
        for handler in list(self._handlers):
            try:
                handler(cart.copy())
            except Exception as e:
                logger.error(f"Cart change handler {handler!r} failed: {e}", exc_info=True)


class StorageChangeListener(CartEventBus):
    """
    Turns storage events from other contexts into cart snapshots.

    Only events for the cart key are forwarded. A removed key or an
    unparsable value is reported as an empty cart.
    """

    def __init__(self, context: StorageContext, key: str):
        super().__init__()
        self.key = key
        self._detach: Optional[Callable[[], None]] = context.add_listener(self._on_storage_event)

    def _on_storage_event(self, event: StorageEvent) -> None:
        if event.key != self.key:
            return
        try:
            cart = decode_cart(event.new_value)
        except (ValueError, TypeError) as e:
            logger.warning(f"Ignoring unparsable cart from another context: {e}")
            cart = Cart()
        self.publish(cart)

    def close(self) -> None:
        """Stop listening to the storage context."""
        if self._detach is not None:
            self._detach()
            self._detach = None


class CompositeNotifier:
    """Fans a single publish out to several notifiers."""

    def __init__(self, notifiers: Iterable[ChangeNotifier]):
        self.notifiers = list(notifiers)

    def subscribe(self, handler: CartHandler) -> Callable[[], None]:
        """Subscribe on the first notifier that supports subscriptions."""
        for notifier in self.notifiers:
            subscribe = getattr(notifier, "subscribe", None)
            if subscribe is not None:
                return subscribe(handler)
        raise TypeError("No subscribable notifier configured")

    def publish(self, cart: Cart) -> None:
        for notifier in self.notifiers:
            try:
                notifier.publish(cart)
            except Exception as e:
                logger.error(f"Notifier {type(notifier).__name__} failed: {e}", exc_info=True)
