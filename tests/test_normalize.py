"""Tests for boundary normalization of remote payloads."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from storesync.domain import (
    OrderStatus,
    OrderStatusId,
    Provenance,
    address_from_remote,
    address_to_remote,
    addresses_from_remote,
    cart_items_from_remote,
    is_deleted_address,
    money,
    order_from_remote,
    parse_timestamp,
    status_from_remote,
    truthy,
    user_from_remote,
)


class TestScalars:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (10.005, 10.01),
            ("2.675", 2.68),
            (3, 3.0),
            ("abc", 0.0),
            (None, 0.0),
            (float("inf"), 0.0),
            (float("nan"), 0.0),
            ("-Infinity", 0.0),
        ],
    )
    def test_money_rounds_half_up(self, value, expected):
        assert money(value) == expected

    @pytest.mark.parametrize("value", ["", "false", "0", "null", "None", 0, None, False])
    def test_falsy_flags(self, value):
        assert not truthy(value)

    @pytest.mark.parametrize("value", ["true", "yes", "1", 1, True])
    def test_truthy_flags(self, value):
        assert truthy(value)

    def test_naive_timestamp_is_utc(self):
        assert parse_timestamp("2024-03-01T10:00:00") == datetime(2024, 3, 1, 10, tzinfo=timezone.utc)

    def test_zulu_timestamp(self):
        assert parse_timestamp("2024-03-01T10:00:00Z") == datetime(2024, 3, 1, 10, tzinfo=timezone.utc)

    def test_offset_is_converted(self):
        assert parse_timestamp("2024-03-01T15:30:00+05:30") == datetime(2024, 3, 1, 10, tzinfo=timezone.utc)

    def test_garbage_timestamp(self):
        assert parse_timestamp("yesterday") is None


class TestUser:
    def test_aliases(self):
        user = user_from_remote({"userId": 5, "phone": "+91", "fullName": "Ravi"})

        assert user is not None
        assert user.id == "5"
        assert user.phone_number == "+91"
        assert user.name == "Ravi"

    def test_missing_id(self):
        assert user_from_remote({"name": "Nobody"}) is None


class TestCart:
    def test_bare_list(self):
        items = cart_items_from_remote([
            {"productId": "p1", "productName": "Seeds", "price": 40, "quantity": 2, "imageUrl": "s.png"},
        ])

        assert items is not None
        [row] = items
        assert (row.id, row.name, row.unit_price, row.quantity, row.image_ref) == ("p1", "Seeds", 40.0, 2, "s.png")
        assert row.provenance is Provenance.REMOTE

    @pytest.mark.parametrize("key", ["items", "cartItems"])
    def test_wrapped_list(self, key):
        items = cart_items_from_remote({key: [{"id": "p1", "name": "Hoe", "unitPrice": 5, "quantity": 1}]})

        assert items is not None
        assert [(i.id, i.name, i.unit_price) for i in items] == [("p1", "Hoe", 5.0)]

    def test_unrecognized_body(self):
        assert cart_items_from_remote({"total": 3}) is None
        assert cart_items_from_remote("nope") is None

    def test_non_positive_rows_and_duplicates(self):
        items = cart_items_from_remote([
            {"productId": "p1", "quantity": 0},
            {"productId": "p2", "quantity": 1},
            {"productId": "p2", "quantity": 3},
        ])

        assert [(i.id, i.quantity) for i in items or []] == [("p2", 3)]


class TestAddress:
    def test_aliases(self):
        address = address_from_remote({
            "addressId": "12",
            "addressLine1": "4 Mill Road",
            "addressLine2": "Work",
            "cityName": "Pune",
            "stateName": "MH",
            "zipCode": "411001",
            "phoneNumber": "99999",
            "isDefaultShipping": "true",
            "createdDate": "2024-01-01T00:00:00",
            "updatedDate": "2024-02-01T00:00:00Z",
        })

        assert address is not None
        assert address.id == "12"
        assert address.address_id == 12
        assert address.kind == "Work"
        assert address.line == "4 Mill Road"
        assert (address.city, address.state, address.postal_code, address.phone) == ("Pune", "MH", "411001", "99999")
        assert address.default_flag
        assert address.default_hint
        assert address.modified_at == datetime(2024, 2, 1, tzinfo=timezone.utc)

    def test_hint_without_strict_flag(self):
        address = address_from_remote({"id": 3, "isDefault": 1})

        assert address is not None
        assert not address.default_flag
        assert address.default_hint

    def test_string_false_is_not_a_hint(self):
        address = address_from_remote({"id": 3, "isDefault": "false", "defaultAddress": "0"})

        assert address is not None
        assert not address.default_flag
        assert not address.default_hint

    @pytest.mark.parametrize(
        "row",
        [
            {"id": 1, "statusId": 0},
            {"id": 1, "fullName": "Deleted User"},
            {"id": 1, "phoneNumber": "0000000000"},
        ],
    )
    def test_tombstones(self, row):
        assert is_deleted_address(row)

    def test_listing_drops_tombstones_and_other_users(self):
        addresses = addresses_from_remote(
            [
                {"id": 1, "userId": "u1"},
                {"id": 2, "userId": "u2"},
                {"id": 3, "userId": "u1", "statusId": 0},
                {"id": 4},
            ],
            "u1",
        )

        assert [a.id for a in addresses] == ["1", "4"]

    def test_write_payload(self, address):
        body = address_to_remote(address.with_default(True), "u1")

        assert body == {
            "userId": "u1",
            "addressLine1": "4 Mill Road",
            "addressLine2": "Home",
            "city": "Pune",
            "state": "MH",
            "zipCode": "411001",
            "phoneNumber": "",
            "isDefaultShipping": True,
            "isDefaultBilling": True,
            "addressId": 12,
        }


class TestOrders:
    @pytest.mark.parametrize(
        ("status_id", "expected"),
        [
            ("2", OrderStatus.DELIVERED),
            (OrderStatusId.DELIVERED, OrderStatus.DELIVERED),
            ("3", OrderStatus.CANCELLED),
            (OrderStatusId.CANCELLED, OrderStatus.CANCELLED),
            (OrderStatusId.NEW, OrderStatus.PROCESSING),
            (None, OrderStatus.PROCESSING),
        ],
    )
    def test_status_mapping(self, status_id, expected):
        assert status_from_remote(status_id) is expected

    def test_remote_order(self):
        now = datetime(2024, 5, 1, tzinfo=timezone.utc)
        order = order_from_remote(
            {
                "orderId": 77,
                "totalAmount": "99.999",
                "orderStatusId": OrderStatusId.DELIVERED,
                "orderItems": [
                    {"productId": "p1", "productName": "Seeds", "price": 50, "quantity": 2},
                    {"productId": "p2", "quantity": 0},
                ],
            },
            "u1",
            now,
        )

        assert order is not None
        assert order.order_id == "77"
        assert order.total_amount == 100.0
        assert order.status is OrderStatus.DELIVERED
        assert order.created_at == now
        assert [(i.id, i.quantity) for i in order.items] == [("p1", 2)]
