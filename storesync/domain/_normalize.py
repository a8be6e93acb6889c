"""
Boundary normalization — remote payloads and persisted JSON to domain records.

The backend names the same field several ways (`id` / `addressId` / `Id`,
`pincode` / `zipCode` / `postalCode`, ...). Aliases are resolved here once;
nothing past this module looks at raw payload keys.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

from storesync.domain._types import (
    Address,
    CartItem,
    Order,
    OrderStatus,
    OrderStatusId,
    Provenance,
    User,
)


type Payload = Mapping[str, Any]


# ═══════════════════════════════════════════════════════════════════════════════
# Scalars
# ═══════════════════════════════════════════════════════════════════════════════


def first(data: Payload, *keys: str, default: Any = None) -> Any:
    """First present, non-empty value among alias keys."""
    for key in keys:
        value = data.get(key)
        if value is not None and value != "":
            return value
    return default


def truthy(value: Any) -> bool:
    """Loose truthiness for server flags that arrive as bools, ints or strings."""
    if isinstance(value, str):
        return value.strip().lower() not in ("", "false", "0", "null", "none")
    return bool(value)


def strict_true(value: Any) -> bool:
    """True only for `True` or the string "true"."""
    return value is True or (isinstance(value, str) and value.strip().lower() == "true")


def money(value: Any) -> float:
    """Round to 2 decimals, half up."""
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return 0.0
    if not amount.is_finite():
        return 0.0
    return float(amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def to_int(value: Any) -> int | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def parse_timestamp(value: Any) -> datetime | None:
    """ISO-8601 text to an aware UTC datetime; naive input is read as UTC."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def format_timestamp(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


# ═══════════════════════════════════════════════════════════════════════════════
# User
# ═══════════════════════════════════════════════════════════════════════════════


def user_from_remote(data: Payload) -> User | None:
    user_id = first(data, "userId", "id", "Id")
    if user_id is None:
        return None
    return User(
        id=str(user_id),
        phone_number=first(data, "phoneNumber", "phone"),
        name=first(data, "name", "fullName", "userName"),
        email=first(data, "email"),
        profile_picture=first(data, "profilePicture", "profilePictureUrl"),
        role=first(data, "role", "userRole"),
    )


def user_to_dict(user: User) -> dict[str, Any]:
    return {
        "id": user.id,
        "phoneNumber": user.phone_number,
        "name": user.name,
        "email": user.email,
        "profilePicture": user.profile_picture,
        "role": user.role,
    }


def user_from_dict(data: Payload) -> User | None:
    return user_from_remote(data)


# ═══════════════════════════════════════════════════════════════════════════════
# Cart
# ═══════════════════════════════════════════════════════════════════════════════


def cart_item_from_remote(data: Payload) -> CartItem | None:
    """
    Remote cart row to CartItem.

    Rows without a product id or with a non-positive quantity are dropped.
    """
    product_id = first(data, "productId", "id")
    quantity = to_int(first(data, "quantity", default=0)) or 0
    if product_id is None or quantity <= 0:
        return None
    return CartItem(
        id=str(product_id),
        name=str(first(data, "productName", "name", default="Product")),
        unit_price=money(first(data, "price", "unitPrice", default=0)),
        quantity=quantity,
        image_ref=first(data, "imageUrl", "image"),
        provenance=Provenance.REMOTE,
    )


def cart_items_from_remote(data: Any) -> list[CartItem] | None:
    """
    Remote cart body to rows.

    Accepts a bare list or an object wrapping one under `items` / `cartItems`.
    Returns None when the body has no recognizable list.
    """
    rows = data
    if isinstance(data, Mapping):
        rows = first(data, "items", "cartItems")
    if not isinstance(rows, list):
        return None

    items: dict[str, CartItem] = {}
    for row in rows:
        if not isinstance(row, Mapping):
            continue
        item = cart_item_from_remote(row)
        if item is not None:
            items[item.id] = item
    return list(items.values())


def cart_item_to_dict(item: CartItem) -> dict[str, Any]:
    return {
        "id": item.id,
        "name": item.name,
        "price": item.unit_price,
        "quantity": item.quantity,
        "image": item.image_ref,
        "provenance": item.provenance.value,
    }


def cart_item_from_dict(data: Payload) -> CartItem | None:
    item_id = first(data, "id", "productId")
    quantity = to_int(data.get("quantity")) or 0
    if item_id is None or quantity <= 0:
        return None
    try:
        provenance = Provenance(data.get("provenance", Provenance.LOCAL.value))
    except ValueError:
        provenance = Provenance.LOCAL
    return CartItem(
        id=str(item_id),
        name=str(first(data, "name", default="Product")),
        unit_price=money(first(data, "price", default=0)),
        quantity=quantity,
        image_ref=first(data, "image", "imageUrl"),
        provenance=provenance,
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Address
# ═══════════════════════════════════════════════════════════════════════════════

DEFAULT_HINT_FIELDS = (
    "isDefault",
    "isDefaultShipping",
    "default",
    "defaultAddress",
    "isDefaultAddress",
)


def is_deleted_address(data: Payload) -> bool:
    """Soft-deleted rows: zero status or the server's tombstone values."""
    if to_int(data.get("statusId")) == 0:
        return True
    return data.get("fullName") == "Deleted User" or data.get("phoneNumber") == "0000000000"


def address_from_remote(data: Payload) -> Address | None:
    address_id = to_int(first(data, "addressId", "id", "Id"))
    ui_id = first(data, "id", "addressId", "Id")
    if ui_id is None:
        return None
    return Address(
        id=str(ui_id),
        address_id=address_id,
        kind=str(first(data, "type", "addressLine2", default="Home")),
        line=str(first(data, "address", "addressLine1", "street", default="")),
        city=str(first(data, "city", "cityName", default="")),
        state=str(first(data, "state", "stateName", default="")),
        postal_code=str(first(data, "pincode", "zipCode", "postalCode", default="")),
        phone=str(first(data, "phone", "phoneNumber", default="")),
        default_flag=strict_true(data.get("isDefault")) or strict_true(data.get("isDefaultShipping")),
        default_hint=any(truthy(data.get(f)) for f in DEFAULT_HINT_FIELDS),
        created_at=parse_timestamp(first(data, "createdDate", "createdAt")),
        modified_at=parse_timestamp(first(data, "updatedDate", "modifiedDate", "updatedAt")),
    )


def addresses_from_remote(data: Any, user_id: str | None = None) -> list[Address]:
    """Remote list to addresses, dropping tombstones and other users' rows."""
    if not isinstance(data, list):
        return []
    out: list[Address] = []
    for row in data:
        if not isinstance(row, Mapping) or is_deleted_address(row):
            continue
        owner = row.get("userId")
        if user_id is not None and owner is not None and str(owner) != user_id:
            continue
        address = address_from_remote(row)
        if address is not None:
            out.append(address)
    return out


def address_to_dict(address: Address) -> dict[str, Any]:
    return {
        "id": address.id,
        "addressId": address.address_id,
        "type": address.kind,
        "address": address.line,
        "city": address.city,
        "state": address.state,
        "pincode": address.postal_code,
        "phone": address.phone,
        "isDefault": address.is_default,
        "defaultFlag": address.default_flag,
        "defaultHint": address.default_hint,
        "createdDate": format_timestamp(address.created_at),
        "updatedDate": format_timestamp(address.modified_at),
    }


def address_from_dict(data: Payload) -> Address | None:
    address = address_from_remote(data)
    if address is None:
        return None
    return Address(
        id=address.id,
        address_id=address.address_id,
        kind=address.kind,
        line=address.line,
        city=address.city,
        state=address.state,
        postal_code=address.postal_code,
        phone=address.phone,
        is_default=bool(data.get("isDefault")),
        default_flag=bool(data.get("defaultFlag", address.default_flag)),
        default_hint=bool(data.get("defaultHint", address.default_hint)),
        created_at=address.created_at,
        modified_at=address.modified_at,
    )


def address_to_remote(address: Address, user_id: str | None) -> dict[str, Any]:
    """Write payload for address create/update."""
    body: dict[str, Any] = {
        "userId": user_id,
        "addressLine1": address.line,
        "addressLine2": address.kind,
        "city": address.city,
        "state": address.state,
        "zipCode": address.postal_code,
        "phoneNumber": address.phone,
        "isDefaultShipping": address.is_default,
        "isDefaultBilling": address.is_default,
    }
    if address.address_id is not None:
        body["addressId"] = address.address_id
    return body


# ═══════════════════════════════════════════════════════════════════════════════
# Orders
# ═══════════════════════════════════════════════════════════════════════════════


def status_from_remote(status_id: Any) -> OrderStatus:
    """Server status id to the three client-visible states."""
    value = str(status_id).strip().lower() if status_id is not None else ""
    if value in ("2", OrderStatusId.DELIVERED, "delivered"):
        return OrderStatus.DELIVERED
    if value in ("3", OrderStatusId.CANCELLED, "cancelled", "canceled"):
        return OrderStatus.CANCELLED
    return OrderStatus.PROCESSING


def order_to_dict(order: Order) -> dict[str, Any]:
    return {
        "id": order.local_id,
        "orderId": order.order_id,
        "items": [cart_item_to_dict(i) for i in order.items],
        "totalAmount": order.total_amount,
        "address": address_to_dict(order.address) if order.address else None,
        "status": order.status.value,
        "userId": order.user_id,
        "date": format_timestamp(order.created_at),
        "trackingNumber": order.tracking_number,
    }


def order_from_dict(data: Payload) -> Order | None:
    order_id = first(data, "orderId", "id")
    created_at = parse_timestamp(data.get("date"))
    if order_id is None or created_at is None:
        return None
    try:
        status = OrderStatus(data.get("status", OrderStatus.PROCESSING.value))
    except ValueError:
        status = OrderStatus.PROCESSING
    raw_items = data.get("items") or []
    items = tuple(
        i for i in (cart_item_from_dict(r) for r in raw_items if isinstance(r, Mapping)) if i is not None
    )
    raw_address = data.get("address")
    return Order(
        local_id=str(first(data, "id", default=order_id)),
        order_id=str(order_id),
        items=items,
        total_amount=money(data.get("totalAmount", 0)),
        address=address_from_dict(raw_address) if isinstance(raw_address, Mapping) else None,
        status=status,
        user_id=data.get("userId"),
        created_at=created_at,
        tracking_number=data.get("trackingNumber"),
    )


def order_from_remote(data: Payload, user_id: str | None, fallback_now: datetime) -> Order | None:
    """Order from the user-orders listing."""
    order_id = first(data, "orderId", "id")
    if order_id is None:
        return None
    items: list[CartItem] = []
    for row in data.get("orderItems") or []:
        if not isinstance(row, Mapping):
            continue
        quantity = to_int(row.get("quantity")) or 0
        product_id = first(row, "productId", "id")
        if product_id is None or quantity <= 0:
            continue
        items.append(CartItem(
            id=str(product_id),
            name=str(first(row, "productName", "name", default="Product")),
            unit_price=money(row.get("price", 0)),
            quantity=quantity,
            provenance=Provenance.REMOTE,
        ))
    raw_address = data.get("shippingAddress")
    created_at = parse_timestamp(first(data, "createdAt", "orderDate")) or fallback_now
    return Order(
        local_id=str(order_id),
        order_id=str(order_id),
        items=tuple(items),
        total_amount=money(data.get("totalAmount", 0)),
        address=address_from_remote(raw_address) if isinstance(raw_address, Mapping) else None,
        status=status_from_remote(data.get("orderStatusId")),
        user_id=user_id,
        created_at=created_at,
        tracking_number=data.get("trackingNumber"),
    )


__all__ = (
    "first",
    "truthy",
    "strict_true",
    "money",
    "to_int",
    "parse_timestamp",
    "format_timestamp",
    "user_from_remote",
    "user_to_dict",
    "user_from_dict",
    "cart_item_from_remote",
    "cart_items_from_remote",
    "cart_item_to_dict",
    "cart_item_from_dict",
    "DEFAULT_HINT_FIELDS",
    "is_deleted_address",
    "address_from_remote",
    "addresses_from_remote",
    "address_to_dict",
    "address_from_dict",
    "address_to_remote",
    "status_from_remote",
    "order_to_dict",
    "order_from_dict",
    "order_from_remote",
)
