"""Cart package: models, storage backends, change notification and the store."""
from .models import MAX_LINE_QUANTITY, CartLine, Cart
from .storage import MemoryStorage, StorageContext, StorageEvent, RedisStorage
from .events import CartEventBus, StorageChangeListener, CompositeNotifier
from .service import CART_KEY, CartStore, get_cart_store

__all__ = [
    "MAX_LINE_QUANTITY",
    "CartLine",
    "Cart",
    "MemoryStorage",
    "StorageContext",
    "StorageEvent",
    "RedisStorage",
    "CartEventBus",
    "StorageChangeListener",
    "CompositeNotifier",
    "CART_KEY",
    "CartStore",
    "get_cart_store",
]
