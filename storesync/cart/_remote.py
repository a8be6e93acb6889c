"""
Remote cart operations.

The backend accepts POST {productId, quantity} for both "add" and "set
quantity", PUT /item/{id} {quantity} for rows it already has, and DELETE by
product id. "Not found in cart" answers on removal paths mean the row is
already gone and count as success.
"""

from __future__ import annotations

import logging
from typing import Any

from storesync.domain import CartItem, cart_items_from_remote
from storesync.remote import E, RemoteResult, Requests

logger = logging.getLogger(__name__)

ALREADY_GONE = ("Item not found in cart", "Product not found in cart")


def _already_gone(result: RemoteResult[Any]) -> bool:
    return not result.success and any(m in (result.error or "") for m in ALREADY_GONE)


class CartRemote:
    """Cart endpoints, each returning a RemoteResult."""

    def __init__(self, requests: Requests) -> None:
        self._requests = requests

    async def fetch(self, user_id: str | None = None) -> RemoteResult[list[CartItem]]:
        """Remote cart rows; `data` is None when the body is not a recognizable cart."""
        endpoint = E.Cart.for_user(user_id) if user_id else E.Cart.GET
        result = await self._requests.get(endpoint)
        if not result.success:
            return result
        return RemoteResult.ok(cart_items_from_remote(result.data), status=result.status)

    async def add(self, product_id: str, quantity: int) -> RemoteResult[Any]:
        return await self._requests.post(
            E.Cart.ADD, {"productId": product_id, "quantity": quantity}
        )

    async def set_quantity(self, product_id: str, quantity: int) -> RemoteResult[Any]:
        """Absolute quantity; 0 removes the row."""
        result = await self._requests.post(
            E.Cart.SET_QUANTITY, {"productId": product_id, "quantity": quantity}
        )
        if quantity == 0 and _already_gone(result):
            logger.info("Cart row %s already absent remotely", product_id)
            return RemoteResult.ok(None, status=result.status)
        return result

    async def update_item(self, product_id: str, quantity: int) -> RemoteResult[Any]:
        return await self._requests.put(E.Cart.item(product_id), {"quantity": quantity})

    async def delete(self, product_id: str) -> RemoteResult[Any]:
        result = await self._requests.delete(E.Cart.delete(product_id))
        if _already_gone(result):
            logger.info("Cart row %s already absent remotely", product_id)
            return RemoteResult.ok(None, status=result.status)
        return result

    async def sync_quantity(
        self,
        product_id: str,
        quantity: int,
        *,
        is_new: bool,
    ) -> RemoteResult[Any]:
        """
        Mirror a row's quantity.

        New rows are added. Existing rows are updated by id; if the server
        does not have the row (or the update fails for any reason) it is added.
        """
        if is_new:
            return await self.add(product_id, quantity)

        result = await self.update_item(product_id, quantity)
        if result.success:
            return result
        logger.info("Update of %s failed (%s); adding instead", product_id, result.error)
        return await self.add(product_id, quantity)


__all__ = (
    "ALREADY_GONE",
    "CartRemote",
)
