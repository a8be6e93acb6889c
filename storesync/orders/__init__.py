"""
Orders — checkout pipeline and order history.

    from storesync import orders as O

    history = O.OrderHistory(requests, state)
    pipeline = O.OrderPipeline(requests, state, cart, cart_remote, history)

    result = await pipeline.checkout()
    orders = await history.list(user_id)
"""

from storesync.orders._history import (
    LOCAL_ORDER_PREFIXES,
    is_local_only,
    OrderHistory,
)
from storesync.orders._pipeline import (
    NO_ADDRESS_MESSAGE,
    INVALID_ADDRESS_MESSAGE,
    EMPTY_CART_MESSAGE,
    NO_USER_MESSAGE,
    ORDER_FAILED_MESSAGE,
    ORDER_PLACED_MESSAGE,
    build_payload,
    OrderPipeline,
)

__all__ = (
    # History
    "LOCAL_ORDER_PREFIXES",
    "is_local_only",
    "OrderHistory",
    # Pipeline
    "NO_ADDRESS_MESSAGE",
    "INVALID_ADDRESS_MESSAGE",
    "EMPTY_CART_MESSAGE",
    "NO_USER_MESSAGE",
    "ORDER_FAILED_MESSAGE",
    "ORDER_PLACED_MESSAGE",
    "build_payload",
    "OrderPipeline",
)
