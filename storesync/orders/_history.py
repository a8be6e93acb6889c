"""
Order history — local order log merged with the server's view.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any

from storesync._types import Clock, system_clock
from storesync.domain import Order, first, order_from_remote, status_from_remote
from storesync.remote import E, RemoteResult, Requests
from storesync.store import LocalState

logger = logging.getLogger(__name__)

LOCAL_ORDER_PREFIXES = ("local-", "ORD-")


def is_local_only(order_id: str) -> bool:
    """Ids minted on this device have no server record."""
    return order_id.startswith(LOCAL_ORDER_PREFIXES)


class OrderHistory:
    """
    Orders placed from this device plus the user's orders on the server.

    Server orders win when both sides know the same order id.
    """

    def __init__(
        self,
        requests: Requests,
        state: LocalState,
        *,
        clock: Clock = system_clock,
    ) -> None:
        self._requests = requests
        self._state = state
        self._clock = clock

    def _now(self) -> datetime:
        return datetime.fromtimestamp(self._clock(), tz=timezone.utc)

    async def local(self, user_id: str | None = None) -> list[Order]:
        orders = await self._state.orders()
        if user_id is None:
            return orders
        return [o for o in orders if o.user_id == user_id]

    async def mint_local_id(self, order_id: str, timestamp_ms: int) -> str:
        """`<order_id>-<ms>`, bumped until no stored order uses it."""
        taken = {o.local_id for o in await self._state.orders()}
        stamp = timestamp_ms
        while f"{order_id}-{stamp}" in taken:
            stamp += 1
        return f"{order_id}-{stamp}"

    async def save(self, order: Order) -> Order:
        """Insert, or replace the stored order with the same order id."""
        orders = await self._state.orders()
        for index, existing in enumerate(orders):
            if existing.order_id == order.order_id:
                # local_id is assigned once
                saved = replace(order, local_id=existing.local_id)
                orders[index] = saved
                logger.info("Updated stored order %s", order.order_id)
                break
        else:
            saved = order
            orders.append(order)
            logger.info("Stored order %s", order.order_id)

        await self._state.save_orders(orders)
        return saved

    async def list(self, user_id: str) -> list[Order]:
        """Server orders first, then local orders the server does not know."""
        local = await self.local(user_id)

        result = await self._requests.get(E.Orders.for_user(user_id))
        if not result.success or not isinstance(result.data, list):
            if not result.success:
                logger.warning("Falling back to local orders: %s", result.error)
            return local

        now = self._now()
        remote = [
            o for o in (
                order_from_remote(row, user_id, now) for row in result.data if isinstance(row, Mapping)
            ) if o is not None
        ]
        known = {o.order_id for o in remote}
        return remote + [o for o in local if o.order_id not in known]

    async def refresh_status(self, order: Order) -> RemoteResult[Order]:
        """Pull the server status of one order and persist a change."""
        if is_local_only(order.order_id):
            return RemoteResult.ok(order)

        result = await self._requests.get(E.Orders.status(order.order_id))
        if not result.success:
            return result

        status = status_from_remote(_status_id(result.data))
        if status is order.status:
            return RemoteResult.ok(order, status=result.status)

        logger.info("Order %s moved %s -> %s", order.order_id, order.status.value, status.value)
        updated = await self.save(order.with_status(status))
        return RemoteResult.ok(updated, status=result.status)


def _status_id(data: Any) -> Any:
    if isinstance(data, Mapping):
        return first(data, "orderStatusId", "statusId", "status")
    return data


__all__ = (
    "LOCAL_ORDER_PREFIXES",
    "is_local_only",
    "OrderHistory",
)
