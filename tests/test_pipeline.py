"""Tests for the order submission pipeline."""

from __future__ import annotations

from datetime import datetime, timezone

import httpx
import pytest
from kungfu import Error

from storesync.cart import CartCoordinator, CartRemote
from storesync.domain import Address, CartItem, OrderStatus, OrderStatusId, User
from storesync.orders import (
    EMPTY_CART_MESSAGE,
    INVALID_ADDRESS_MESSAGE,
    NO_ADDRESS_MESSAGE,
    NO_USER_MESSAGE,
    ORDER_FAILED_MESSAGE,
    ORDER_PLACED_MESSAGE,
    OrderHistory,
    OrderPipeline,
    build_payload,
)
from storesync.remote import ORDER_FALLBACK_MESSAGE, ErrorKind
from storesync.store import Keys, MemoryStore, StoreError

from conftest import NOW_MS, body_of, item


@pytest.fixture
def cart_remote(requests) -> CartRemote:
    return CartRemote(requests)


@pytest.fixture
def cart(state, cart_remote) -> CartCoordinator:
    return CartCoordinator(state, cart_remote)


@pytest.fixture
def history(requests, state, clock) -> OrderHistory:
    return OrderHistory(requests, state, clock=clock)


@pytest.fixture
def pipeline(requests, state, cart, cart_remote, history, sleep, clock) -> OrderPipeline:
    return OrderPipeline(
        requests,
        state,
        cart,
        cart_remote,
        history,
        attempts=2,
        retry_delay=1.0,
        sleep=sleep,
        clock=clock,
    )


@pytest.fixture
async def ready(state, cart, address, signed_in):
    """Signed-in user with two cart rows and a selected address."""
    await cart.merge([item("p1", 2, price=40.0), item("p2", 1, price=12.5)])
    await state.save_selected_address(address)


class TestPreconditions:
    async def test_missing_address(self, pipeline, server, user):
        result = await pipeline.submit([item()], None, user)

        assert not result.success
        assert result.error == NO_ADDRESS_MESSAGE
        assert result.terminal
        assert server.calls == []

    async def test_address_without_numeric_id(self, pipeline, server, user):
        result = await pipeline.submit([item()], Address(id="home"), user)

        assert result.error == INVALID_ADDRESS_MESSAGE
        assert server.calls == []

    async def test_empty_cart(self, pipeline, server, address, user):
        result = await pipeline.submit([], address, user)

        assert result.error == EMPTY_CART_MESSAGE
        assert server.calls == []

    async def test_no_user(self, pipeline, server, address):
        result = await pipeline.submit([item()], address, None)

        assert result.error == NO_USER_MESSAGE
        assert server.calls == []

    async def test_checkout_without_selection(self, pipeline, server, cart, signed_in):
        await cart.merge([item("p1", 1)])

        result = await pipeline.checkout()

        assert result.error == NO_ADDRESS_MESSAGE
        assert server.calls == []


class TestSuccess:
    async def test_order_is_saved_and_checkout_cleared(self, pipeline, server, state, cart, memory_store, ready):
        server.on("POST", "/api/Orders", httpx.Response(201, json={"orderId": 501}))
        server.on("POST", "/api/Cart", httpx.Response(200, json={}))

        result = await pipeline.checkout()

        assert result.success
        assert not result.is_local_fallback
        receipt = result.data
        assert receipt.message == ORDER_PLACED_MESSAGE
        assert receipt.order.order_id == "501"
        assert receipt.order.local_id == f"501-{NOW_MS}"
        assert receipt.order.status is OrderStatus.PROCESSING
        assert receipt.order.total_amount == 92.5

        assert cart.items == ()
        assert await state.cart() == []
        assert await state.selected_address() is None
        assert [o.order_id for o in await state.orders()] == ["501"]
        assert state.key(Keys.CART) not in memory_store.snapshot()
        assert state.key(Keys.SELECTED_ADDRESS) not in memory_store.snapshot()

    async def test_payload(self, pipeline, server, ready):
        server.on("POST", "/api/Orders", httpx.Response(201, json={"orderId": 501}))
        server.on("POST", "/api/Cart", httpx.Response(200, json={}))

        await pipeline.checkout()

        payload = body_of(server.calls_to("POST", "/api/Orders")[0])
        assert payload["userId"] == "u1"
        assert payload["shippingAddressId"] == 12
        assert payload["totalAmount"] == 92.5
        assert payload["orderStatusId"] == OrderStatusId.NEW
        assert payload["orderDate"] == "2023-11-14T22:13:20Z"
        assert payload["trackingNumber"] == f"TRK-{NOW_MS}"
        assert [(r["productId"], r["quantity"], r["price"]) for r in payload["orderItems"]] == [
            ("p1", 2, 40.0),
            ("p2", 1, 12.5),
        ]

    async def test_remote_cart_is_drained_row_by_row(self, pipeline, server, ready):
        server.on("POST", "/api/Orders", httpx.Response(201, json={"orderId": 501}))
        server.on("POST", "/api/Cart", httpx.Response(200, json={}))

        await pipeline.checkout()

        drained = [body_of(c) for c in server.calls_to("POST", "/api/Cart")]
        assert drained == [
            {"productId": "p1", "quantity": 0},
            {"productId": "p2", "quantity": 0},
        ]

    async def test_drain_failure_does_not_fail_the_order(self, pipeline, server, cart, ready):
        server.on("POST", "/api/Orders", httpx.Response(201, json={"orderId": 501}))
        server.on("POST", "/api/Cart", httpx.Response(500, text="boom"))

        result = await pipeline.checkout()

        assert result.success
        assert cart.items == ()

    async def test_missing_order_id_is_synthesized(self, pipeline, server, ready):
        server.on("POST", "/api/Orders", httpx.Response(204))
        server.on("POST", "/api/Cart", httpx.Response(200, json={}))

        result = await pipeline.checkout()

        assert result.data.order.order_id == f"ORD-{str(NOW_MS)[-6:]}"

    async def test_second_attempt_succeeds(self, pipeline, server, sleep, ready):
        server.on(
            "POST",
            "/api/Orders",
            httpx.ConnectError("connection reset"),
            httpx.Response(201, json={"orderId": 502}),
        )
        server.on("POST", "/api/Cart", httpx.Response(200, json={}))

        result = await pipeline.checkout()

        assert result.success
        assert result.data.order.order_id == "502"
        assert len(server.calls_to("POST", "/api/Orders")) == 2
        assert sleep.calls == [1.0]


class CartWriteFails(MemoryStore):
    """Store that rejects every write of the cart key."""

    async def set(self, key: str, value: str):
        if key.endswith(":cart"):
            return Error(StoreError("disk full"))
        return await super().set(key, value)


class TestUnpersistedCart:
    @pytest.fixture
    def memory_store(self) -> MemoryStore:
        return CartWriteFails()

    async def test_in_memory_cart_is_ordered(self, pipeline, server, state, cart, address, signed_in):
        server.on("POST", "/api/Orders", httpx.Response(201, json={"orderId": 501}))
        server.on("POST", "/api/Cart", httpx.Response(200, json={}))
        await cart.add(item("p1", 2, price=40.0))
        await state.save_selected_address(address)

        assert await state.cart() == []

        result = await pipeline.checkout()

        assert result.success
        assert [(i.id, i.quantity) for i in result.data.order.items] == [("p1", 2)]
        assert body_of(server.calls_to("POST", "/api/Orders")[0])["totalAmount"] == 80.0


class TestLocalFallback:
    async def test_server_error_keeps_order_locally(self, pipeline, server, state, cart, ready):
        server.on("POST", "/api/Orders", httpx.Response(500, text="boom"))

        result = await pipeline.checkout()

        assert result.success
        assert result.is_local_fallback
        assert result.data.is_local_fallback
        assert result.data.message == ORDER_FALLBACK_MESSAGE
        assert result.data.order.order_id == f"local-{NOW_MS}"
        assert server.calls_to("POST", "/api/Cart") == []
        assert cart.items == ()
        assert await state.selected_address() is None
        assert len(await state.orders()) == 1


class TestFailure:
    async def test_transport_failure_keeps_checkout_state(self, pipeline, server, state, sleep, address, ready):
        server.on("POST", "/api/Orders", httpx.ConnectError("connection refused"))

        result = await pipeline.checkout()

        assert not result.success
        assert result.error == ORDER_FAILED_MESSAGE
        assert result.kind is ErrorKind.NETWORK
        assert len(server.calls_to("POST", "/api/Orders")) == 2
        assert sleep.calls == [1.0]
        assert [i.id for i in await state.cart()] == ["p1", "p2"]
        assert await state.selected_address() == address
        assert await state.orders() == []

    async def test_validation_failure_is_not_retried(self, pipeline, server, state, ready):
        server.on("POST", "/api/Orders", httpx.Response(400, json={"message": "Address does not belong to user"}))

        result = await pipeline.checkout()

        assert not result.success
        assert result.error == "Address does not belong to user"
        assert len(server.calls_to("POST", "/api/Orders")) == 1
        assert len(await state.cart()) == 2


class TestBuildPayload:
    def test_image_is_optional(self):
        rows = [
            CartItem(id="p1", name="Seeds", unit_price=10.005, quantity=1, image_ref="s.png"),
            CartItem(id="p2", name="", unit_price=1, quantity=2),
        ]

        payload = build_payload(rows, 7, User(id="u9"), datetime(2024, 1, 1, tzinfo=timezone.utc), 42)

        first, second = payload["orderItems"]
        assert first == {"productId": "p1", "quantity": 1, "price": 10.01, "productName": "Seeds", "imageUrl": "s.png"}
        assert second == {"productId": "p2", "quantity": 2, "price": 1.0, "productName": "Product"}
        assert payload["orderDate"] == "2024-01-01T00:00:00Z"
        assert payload["trackingNumber"] == "TRK-42"
