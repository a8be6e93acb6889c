"""
Domain types — session, cart, address and order records.

All records are frozen; state changes produce new instances via
`dataclasses.replace` or the `with_*` helpers.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum

# ═══════════════════════════════════════════════════════════════════════════════
# Session
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class User:
    id: str
    phone_number: str | None = None
    name: str | None = None
    email: str | None = None
    profile_picture: str | None = None
    role: str | None = None


@dataclass(frozen=True, slots=True)
class AuthSession:
    """
    Live session on this device.

    An empty token is not a session; LocalState never builds one from it.
    """

    user: User
    token: str


# ═══════════════════════════════════════════════════════════════════════════════
# Cart
# ═══════════════════════════════════════════════════════════════════════════════


class Provenance(Enum):
    """Where a cart row was last written from."""

    LOCAL = "local"
    REMOTE = "remote"


@dataclass(frozen=True, slots=True)
class CartItem:
    """
    One cart row. `id` is the product identity, unique within a cart.

    Quantity 0 means "delete"; such rows are never stored.
    """

    id: str
    name: str
    unit_price: float
    quantity: int
    image_ref: str | None = None
    provenance: Provenance = Provenance.LOCAL

    def with_quantity(self, quantity: int) -> CartItem:
        return replace(self, quantity=quantity, provenance=Provenance.LOCAL)

    @property
    def line_total(self) -> float:
        return self.unit_price * self.quantity


# ═══════════════════════════════════════════════════════════════════════════════
# Address
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Address:
    """
    Delivery address after alias normalization.

    id: identifier the UI works with (string form).
    address_id: numeric backend identifier; orders reference this one.
    default_flag: the server marked it default (`isDefault` or
        `isDefaultShipping` is true or "true").
    default_hint: any other default-like field was truthy.
    is_default: resolved marker, set by AddressBook after resolution.
    """

    id: str
    address_id: int | None = None
    kind: str = "Home"
    line: str = ""
    city: str = ""
    state: str = ""
    postal_code: str = ""
    phone: str = ""
    is_default: bool = False
    default_flag: bool = False
    default_hint: bool = False
    created_at: datetime | None = None
    modified_at: datetime | None = None

    def with_default(self, is_default: bool) -> Address:
        return replace(self, is_default=is_default)

    @property
    def numeric_id(self) -> int | None:
        """Backend id, falling back to a numeric UI id."""
        if self.address_id is not None:
            return self.address_id
        try:
            return int(self.id)
        except (TypeError, ValueError):
            return None

    @property
    def label(self) -> str:
        parts = [p for p in (self.line, self.city, self.state, self.postal_code) if p]
        return ", ".join(parts)


# ═══════════════════════════════════════════════════════════════════════════════
# Orders
# ═══════════════════════════════════════════════════════════════════════════════


class OrderStatus(Enum):
    PROCESSING = "processing"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class OrderStatusId:
    """Server-side order status identifiers."""

    NEW = "057993b3-25d8-4c6b-8a9e-e3fe997938d0"
    PENDING = "a1b2c3d4-e5f6-7890-1234-567890abcdef"
    PROCESSING = "0eab3a6d-400c-48de-8929-4578e3ccab6a"
    SHIPPED = "b95df366-3c86-462a-9986-0e77b3f78469"
    DELIVERED = "c3b745e3-e756-442e-bfce-7dde4e5a53a3"
    CANCELLED = "39231369-9430-4222-be81-2f672942964c"
    REFUNDED = "58630249-b6ad-4121-b38d-6162451a00ec"


@dataclass(frozen=True, slots=True)
class Order:
    """
    Submitted order.

    local_id is minted once from order_id and the creation timestamp and is
    never reused. Only `status` changes after creation.
    """

    local_id: str
    order_id: str
    items: tuple[CartItem, ...]
    total_amount: float
    address: Address | None
    status: OrderStatus
    user_id: str | None
    created_at: datetime
    tracking_number: str | None = None

    def with_status(self, status: OrderStatus) -> Order:
        return replace(self, status=status)


@dataclass(frozen=True, slots=True)
class OrderReceipt:
    """What the caller gets back from a submission."""

    order: Order
    is_local_fallback: bool
    message: str


__all__ = (
    "User",
    "AuthSession",
    "Provenance",
    "CartItem",
    "Address",
    "OrderStatus",
    "OrderStatusId",
    "Order",
    "OrderReceipt",
)
