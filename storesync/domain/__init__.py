"""
Domain — records shared by every component, plus boundary normalization.

    from storesync import domain as D

    item = D.cart_item_from_remote({"productId": "p1", "quantity": 2, "price": 10})
    address = D.address_from_remote({"addressId": 7, "zipCode": "560001"})
"""

from storesync.domain._types import (
    User,
    AuthSession,
    Provenance,
    CartItem,
    Address,
    OrderStatus,
    OrderStatusId,
    Order,
    OrderReceipt,
)
from storesync.domain._normalize import (
    first,
    truthy,
    strict_true,
    money,
    to_int,
    parse_timestamp,
    format_timestamp,
    user_from_remote,
    user_to_dict,
    user_from_dict,
    cart_item_from_remote,
    cart_items_from_remote,
    cart_item_to_dict,
    cart_item_from_dict,
    DEFAULT_HINT_FIELDS,
    is_deleted_address,
    address_from_remote,
    addresses_from_remote,
    address_to_dict,
    address_from_dict,
    address_to_remote,
    status_from_remote,
    order_to_dict,
    order_from_dict,
    order_from_remote,
)

__all__ = (
    # Types
    "User",
    "AuthSession",
    "Provenance",
    "CartItem",
    "Address",
    "OrderStatus",
    "OrderStatusId",
    "Order",
    "OrderReceipt",
    # Scalars
    "first",
    "truthy",
    "strict_true",
    "money",
    "to_int",
    "parse_timestamp",
    "format_timestamp",
    # Mapping
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
