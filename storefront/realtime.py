"""Realtime Module - Cart event broadcasting over Redis Streams.

Emits cart.updated events so listeners outside this process (another
worker serving the same shopper, a websocket relay) can refresh.

Note: Using Redis Streams (XADD) instead of Pub/Sub for better
compatibility with the Upstash REST API and history/replay support.
"""

import json

from storefront.cart.models import Cart
from storefront.db import get_redis, RedisKeys
from storefront.logging import get_session_logger

CART_UPDATED_EVENT = "cart.updated"


def emit_cart_update(session_id: str, cart: Cart, redis=None) -> None:
    """Emit cart.updated event for a shopper session.

    Args:
        session_id: Shopper session id
        cart: Normalized cart snapshot
        redis: Optional Redis client (defaults to the shared singleton)
    """
    logger = get_session_logger(__name__, session_id)
    try:
        client = redis if redis is not None else get_redis()
        stream_key = RedisKeys.cart_stream_key(session_id)
        payload = {
            "event": CART_UPDATED_EVENT,
            "session_id": session_id,
            "items": cart.to_list(),
            "count": cart.count,
        }
        client.xadd(stream_key, "*", {"data": json.dumps(payload)})
        logger.debug("Emitted cart.updated")
    except Exception as e:
        logger.warning(f"Failed to emit cart.updated: {e}", exc_info=True)


class RedisStreamNotifier:
    """Change notifier that forwards every cart snapshot to the session stream."""

    def __init__(self, session_id: str, redis=None):
        self.session_id = session_id
        self._redis = redis

    def publish(self, cart: Cart) -> None:
        emit_cart_update(self.session_id, cart, redis=self._redis)
