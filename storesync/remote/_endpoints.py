"""
Endpoint paths, grouped by resource.
"""

from __future__ import annotations

from urllib.parse import quote


def _seg(value: str | int) -> str:
    return quote(str(value), safe="")


class Auth:
    GENERATE_OTP = "/api/Otp/generate"
    VERIFY_OTP = "/api/Otp/verify"
    LOGIN = "/api/Authentication/login"
    REGISTER = "/api/Authentication/register"
    CREATE_MANAGER = "/api/Authentication/create-manager"
    ME = "/api/Authentication/me"


class Cart:
    GET = "/api/Cart"
    ADD = "/api/Cart"
    SET_QUANTITY = "/api/Cart"

    @staticmethod
    def for_user(user_id: str) -> str:
        return f"/api/Cart?userId={_seg(user_id)}"

    @staticmethod
    def item(product_id: str) -> str:
        return f"/api/Cart/item/{_seg(product_id)}"

    @staticmethod
    def delete(product_id: str) -> str:
        return f"/api/Cart/{_seg(product_id)}"


class Address:
    CREATE = "/api/Address"
    UPDATE = "/api/Address"

    @staticmethod
    def for_user(user_id: str) -> str:
        return f"/api/Address?userId={_seg(user_id)}"

    @staticmethod
    def by_id(address_id: str | int) -> str:
        return f"/api/Address/{_seg(address_id)}"


class Orders:
    CREATE = "/api/Orders"

    @staticmethod
    def for_user(user_id: str) -> str:
        return f"/api/Orders/user/{_seg(user_id)}"

    @staticmethod
    def status(order_id: str | int) -> str:
        return f"/api/Orders/{_seg(order_id)}/status"


HEALTH = "/api/health"

# Calls that must never carry a bearer token.
UNAUTHENTICATED = frozenset({Auth.CREATE_MANAGER})


__all__ = (
    "Auth",
    "Cart",
    "Address",
    "Orders",
    "HEALTH",
    "UNAUTHENTICATED",
)
