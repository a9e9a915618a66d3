"""Key-value storage backends for the cart blob."""
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from storefront.db import get_redis, RedisKeys, TTL
from storefront.errors import ERROR_STORAGE_QUOTA, StorageQuotaExceeded
from storefront.logging import get_logger

logger = get_logger(__name__)


class KeyValueStorage(Protocol):
    """String key-value storage, the shape of browser localStorage."""

    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


@dataclass(frozen=True)
class StorageEvent:
    """A key changed in storage shared with another context."""
    key: str
    old_value: Optional[str]
    new_value: Optional[str]


StorageListener = Callable[[StorageEvent], None]


class MemoryStorage:
    """
    Process-local storage shared by several contexts.

    Each context plays the role of one browser tab: writes are visible to
    every context immediately, and change events reach every context except
    the one that made the change.

    Usage:
        shared = MemoryStorage()
        tab_a = shared.open_context()
        tab_b = shared.open_context()
    """

    def __init__(self, quota: Optional[int] = None):
        self._data: dict[str, str] = {}
        self._contexts: list["StorageContext"] = []
        self.quota = quota

    def open_context(self) -> "StorageContext":
        context = StorageContext(self)
        self._contexts.append(context)
        return context

    def close_context(self, context: "StorageContext") -> None:
        if context in self._contexts:
            self._contexts.remove(context)

    def _used(self, replacing: str) -> int:
        return sum(len(k) + len(v) for k, v in self._data.items() if k != replacing)

    def _set(self, source: "StorageContext", key: str, value: Optional[str]) -> None:
        old_value = self._data.get(key)
        if value is None:
            self._data.pop(key, None)
        else:
            if self.quota is not None and self._used(key) + len(key) + len(value) > self.quota:
                raise StorageQuotaExceeded(ERROR_STORAGE_QUOTA)
            self._data[key] = value

        if old_value == value:
            return
        event = StorageEvent(key=key, old_value=old_value, new_value=value)
        for context in list(self._contexts):
            if context is not source:
                context._dispatch(event)


class StorageContext:
    """One context's handle on a MemoryStorage."""

    def __init__(self, storage: MemoryStorage):
        self._storage = storage
        self._listeners: list[StorageListener] = []

    def get_item(self, key: str) -> Optional[str]:
        return self._storage._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._storage._set(self, key, value)

    def remove_item(self, key: str) -> None:
        self._storage._set(self, key, None)

    def add_listener(self, listener: StorageListener) -> Callable[[], None]:
        """Register a change listener; returns a callable that removes it."""
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def _dispatch(self, event: StorageEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                logger.error(f"Storage listener failed for key {event.key}: {e}", exc_info=True)


class RedisStorage:
    """
    Storage backed by Upstash Redis, scoped to one shopper session.

    Keys expire after TTL.CART seconds of inactivity so abandoned carts
    clean themselves up.
    """

    def __init__(self, session_id: str, redis=None, ttl: Optional[int] = TTL.CART):
        self.session_id = session_id
        self.ttl = ttl
        self._redis = redis  # Lazy initialization

    @property
    def redis(self):
        """Get Redis client (lazy initialization)."""
        if self._redis is None:
            self._redis = get_redis()
        return self._redis

    def _key(self, key: str) -> str:
        return RedisKeys.cart_key(self.session_id, key)

    def get_item(self, key: str) -> Optional[str]:
        value = self.redis.get(self._key(key))
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        return value

    def set_item(self, key: str, value: str) -> None:
        if self.ttl:
            self.redis.set(self._key(key), value, ex=self.ttl)
        else:
            self.redis.set(self._key(key), value)

    def remove_item(self, key: str) -> None:
        self.redis.delete(self._key(key))
