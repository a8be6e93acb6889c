"""
Order submission pipeline.

    validate → build payload → commit (≤ N attempts) → persist order
             → drain remote cart (real success only) → clear local checkout

A server error on order creation is answered by the executor with a local
fallback; the pipeline treats it as success but skips the remote drain.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any

from combinators import batch
from kungfu import LazyCoroResult, Ok, Result

from storesync._types import Clock, Sleep, epoch_ms, system_clock, system_sleep
from storesync.cart import CartCoordinator, CartRemote
from storesync.domain import (
    Address,
    CartItem,
    Order,
    OrderReceipt,
    OrderStatus,
    OrderStatusId,
    User,
    first,
    money,
)
from storesync.orders._history import OrderHistory
from storesync.remote import E, RemoteResult, Requests
from storesync.store import LocalState

logger = logging.getLogger(__name__)

NO_ADDRESS_MESSAGE = "Please select a delivery address to continue."
INVALID_ADDRESS_MESSAGE = (
    "The selected address is invalid. Please select a different address or add a new one."
)
EMPTY_CART_MESSAGE = "Your cart is empty."
NO_USER_MESSAGE = "Please sign in to place an order."
ORDER_FAILED_MESSAGE = "We could not process your order at this time. Please try again later."
ORDER_PLACED_MESSAGE = "Order placed successfully."


def build_payload(
    items: Sequence[CartItem],
    address_id: int,
    user: User,
    placed_at: datetime,
    timestamp_ms: int,
) -> dict[str, Any]:
    """Order-create body. Money is rounded to 2 decimals."""
    order_items: list[dict[str, Any]] = []
    for item in items:
        row: dict[str, Any] = {
            "productId": item.id,
            "quantity": item.quantity,
            "price": money(item.unit_price),
            "productName": item.name or "Product",
        }
        if item.image_ref:
            row["imageUrl"] = item.image_ref
        order_items.append(row)

    return {
        "userId": user.id,
        "shippingAddressId": address_id,
        "totalAmount": money(sum(i.line_total for i in items)),
        "orderStatusId": OrderStatusId.NEW,
        "orderDate": placed_at.isoformat().replace("+00:00", "Z"),
        "trackingNumber": f"TRK-{timestamp_ms}",
        "orderItems": order_items,
    }


class OrderPipeline:
    """
    Turns the current cart into an order.

    Example:
        pipeline = OrderPipeline(requests, state, cart, cart_remote, history)
        result = await pipeline.checkout()
        if result.success:
            receipt = result.data
    """

    def __init__(
        self,
        requests: Requests,
        state: LocalState,
        cart: CartCoordinator,
        cart_remote: CartRemote,
        history: OrderHistory,
        *,
        attempts: int = 2,
        retry_delay: float = 1.0,
        sleep: Sleep = system_sleep,
        clock: Clock = system_clock,
    ) -> None:
        self._requests = requests
        self._state = state
        self._cart = cart
        self._cart_remote = cart_remote
        self._history = history
        self._attempts = max(1, attempts)
        self._retry_delay = retry_delay
        self._sleep = sleep
        self._clock = clock

    async def checkout(self) -> RemoteResult[OrderReceipt]:
        """Submit the current cart to the selected address as the signed-in user."""
        items = await self._cart.current()
        address = await self._state.selected_address()
        session = await self._state.session()
        return await self.submit(items, address, session.user if session else None)

    async def submit(
        self,
        items: Sequence[CartItem],
        address: Address | None,
        user: User | None,
    ) -> RemoteResult[OrderReceipt]:
        if address is None:
            return RemoteResult.invalid(NO_ADDRESS_MESSAGE)
        address_id = address.numeric_id
        if address_id is None:
            return RemoteResult.invalid(INVALID_ADDRESS_MESSAGE)
        if not items:
            return RemoteResult.invalid(EMPTY_CART_MESSAGE)
        if user is None:
            return RemoteResult.invalid(NO_USER_MESSAGE)

        items = tuple(items)
        ms = epoch_ms(self._clock)
        placed_at = datetime.fromtimestamp(ms / 1000, tz=timezone.utc)
        payload = build_payload(items, address_id, user, placed_at, ms)

        result = await self._commit(payload)
        if not result.success:
            logger.error("Failed to create order: %s", result.error)
            if result.terminal:
                return result
            return replace(result, error=ORDER_FAILED_MESSAGE)

        data = result.data if isinstance(result.data, Mapping) else {}
        order_id = str(first(data, "orderId", "id", default=f"ORD-{str(ms)[-6:]}"))
        order = Order(
            local_id=await self._history.mint_local_id(order_id, ms),
            order_id=order_id,
            items=items,
            total_amount=payload["totalAmount"],
            address=address,
            status=OrderStatus.PROCESSING,
            user_id=user.id,
            created_at=placed_at,
            tracking_number=payload["trackingNumber"],
        )
        order = await self._history.save(order)

        if result.is_local_fallback:
            logger.warning("Order %s kept locally; remote cart left as is", order.order_id)
        else:
            await self._drain(items)

        await self._cart.clear()
        await self._state.clear_checkout()

        message = (result.error if result.is_local_fallback else None) or ORDER_PLACED_MESSAGE
        receipt = OrderReceipt(
            order=order,
            is_local_fallback=result.is_local_fallback,
            message=message,
        )
        return RemoteResult(
            success=True,
            data=receipt,
            is_local_fallback=result.is_local_fallback,
            status=result.status,
        )

    async def _commit(self, payload: dict[str, Any]) -> RemoteResult[Any]:
        result: RemoteResult[Any] | None = None
        for attempt in range(1, self._attempts + 1):
            logger.info("Attempt %d to create order", attempt)
            result = await self._requests.post(E.Orders.CREATE, payload)
            if result.success or result.terminal:
                break
            if attempt < self._attempts:
                logger.info("Order creation failed, retrying in %.1fs", self._retry_delay)
                await self._sleep(self._retry_delay)
        assert result is not None
        return result

    async def _drain(self, items: Sequence[CartItem]) -> None:
        """Zero each ordered row on the server, one at a time. Best-effort."""

        async def clear_one(item: CartItem) -> Result[None, str]:
            cleared = await self._cart_remote.set_quantity(item.id, 0)
            if not cleared.success:
                logger.warning("Could not clear %s from remote cart: %s", item.id, cleared.error)
            return Ok(None)

        await batch(
            items,
            handler=lambda item: LazyCoroResult(lambda: clear_one(item)),
            concurrency=1,
        )


__all__ = (
    "NO_ADDRESS_MESSAGE",
    "INVALID_ADDRESS_MESSAGE",
    "EMPTY_CART_MESSAGE",
    "NO_USER_MESSAGE",
    "ORDER_FAILED_MESSAGE",
    "ORDER_PLACED_MESSAGE",
    "build_payload",
    "OrderPipeline",
)
