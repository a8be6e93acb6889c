"""
LocalState — typed facade over a Store.

Owns the persisted keys and their JSON encoding. Store failures are logged
and degrade to "nothing stored"; callers never see a StoreError from here.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import Any

from kungfu import Ok, Error

from storesync.domain import (
    Address,
    AuthSession,
    CartItem,
    Order,
    User,
    address_from_dict,
    address_to_dict,
    cart_item_from_dict,
    cart_item_to_dict,
    order_from_dict,
    order_to_dict,
    user_from_dict,
    user_to_dict,
)
from storesync.store._types import Store

logger = logging.getLogger(__name__)


class Keys:
    """Persisted key names, before namespacing."""

    USER = "user"
    AUTH_TOKEN = "authToken"
    CART = "cart"
    ORDERS = "orders"
    SELECTED_ADDRESS = "selectedCartAddress"
    DEFAULT_ADDRESS_ID = "defaultAddressId"


class LocalState:
    """
    Device-local state: session, cart, order history, address choices.

    Example:
        state = LocalState(MemoryStore(), namespace="AgriMart")
        await state.save_cart([item])
        items = await state.cart()
    """

    def __init__(self, store: Store, namespace: str = "AgriMart") -> None:
        self._store = store
        self._namespace = namespace

    def key(self, name: str) -> str:
        return f"@{self._namespace}:{name}"

    # ─────────────────────────────────────────────────────────────────────────
    # Raw access
    # ─────────────────────────────────────────────────────────────────────────

    async def _read_text(self, name: str) -> str | None:
        match await self._store.get(self.key(name)):
            case Ok(value):
                return value
            case Error(e):
                logger.error("Failed to read %s: %s", name, e.message)
                return None

    async def _write_text(self, name: str, value: str) -> bool:
        match await self._store.set(self.key(name), value):
            case Ok(_):
                return True
            case Error(e):
                logger.error("Failed to write %s: %s", name, e.message)
                return False

    async def _read_json(self, name: str) -> Any:
        raw = await self._read_text(name)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("Discarding corrupt value under %s", name)
            return None

    async def _write_json(self, name: str, value: Any) -> bool:
        return await self._write_text(name, json.dumps(value))

    async def _read_list[T](self, name: str, decode: Callable[[Any], T | None]) -> list[T]:
        data = await self._read_json(name)
        if not isinstance(data, list):
            return []
        return [v for v in (decode(row) for row in data if isinstance(row, dict)) if v is not None]

    async def remove(self, *names: str) -> bool:
        match await self._store.delete_many(tuple(self.key(n) for n in names)):
            case Ok(_):
                return True
            case Error(e):
                logger.error("Failed to remove %s: %s", ", ".join(names), e.message)
                return False

    # ─────────────────────────────────────────────────────────────────────────
    # Session
    # ─────────────────────────────────────────────────────────────────────────

    async def token(self) -> str | None:
        token = await self._read_text(Keys.AUTH_TOKEN)
        return token or None

    async def save_token(self, token: str) -> bool:
        return await self._write_text(Keys.AUTH_TOKEN, token)

    async def user(self) -> User | None:
        data = await self._read_json(Keys.USER)
        return user_from_dict(data) if isinstance(data, dict) else None

    async def save_user(self, user: User) -> bool:
        return await self._write_json(Keys.USER, user_to_dict(user))

    async def session(self) -> AuthSession | None:
        """Current session; None unless both a user and a non-empty token exist."""
        token = await self.token()
        if not token:
            return None
        user = await self.user()
        if user is None:
            return None
        return AuthSession(user=user, token=token)

    async def clear_session(self) -> bool:
        return await self.remove(Keys.USER, Keys.AUTH_TOKEN)

    # ─────────────────────────────────────────────────────────────────────────
    # Cart
    # ─────────────────────────────────────────────────────────────────────────

    async def cart(self) -> list[CartItem]:
        return await self._read_list(Keys.CART, cart_item_from_dict)

    async def save_cart(self, items: list[CartItem]) -> bool:
        return await self._write_json(
            Keys.CART, [cart_item_to_dict(i) for i in items if i.quantity > 0]
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Orders
    # ─────────────────────────────────────────────────────────────────────────

    async def orders(self) -> list[Order]:
        return await self._read_list(Keys.ORDERS, order_from_dict)

    async def save_orders(self, orders: list[Order]) -> bool:
        return await self._write_json(Keys.ORDERS, [order_to_dict(o) for o in orders])

    # ─────────────────────────────────────────────────────────────────────────
    # Addresses
    # ─────────────────────────────────────────────────────────────────────────

    async def selected_address(self) -> Address | None:
        data = await self._read_json(Keys.SELECTED_ADDRESS)
        return address_from_dict(data) if isinstance(data, dict) else None

    async def save_selected_address(self, address: Address) -> bool:
        return await self._write_json(Keys.SELECTED_ADDRESS, address_to_dict(address))

    async def default_address_id(self) -> str | None:
        return await self._read_text(Keys.DEFAULT_ADDRESS_ID) or None

    async def save_default_address_id(self, address_id: str) -> bool:
        return await self._write_text(Keys.DEFAULT_ADDRESS_ID, address_id)

    # ─────────────────────────────────────────────────────────────────────────
    # Checkout
    # ─────────────────────────────────────────────────────────────────────────

    async def clear_checkout(self) -> bool:
        """Drop the local cart and the selected checkout address."""
        return await self.remove(Keys.CART, Keys.SELECTED_ADDRESS)


__all__ = (
    "Keys",
    "LocalState",
)
