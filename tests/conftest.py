"""Shared pytest fixtures for storesync tests."""

from __future__ import annotations

import json
from collections.abc import Awaitable, Callable
from typing import Any

import httpx
import pytest
from kungfu import Error, Ok, Result

from storesync.domain import Address, CartItem, User
from storesync.remote import Executor, ExecutorPolicy, Requests, RetryPolicy
from storesync.store import LocalState, MemoryStore


NOW = 1_700_000_000.0
NOW_MS = 1_700_000_000_000

type Responder = httpx.Response | Exception | Callable[
    [httpx.Request], httpx.Response | Awaitable[httpx.Response]
]


class FakeServer:
    """
    Scripted backend behind httpx.MockTransport.

    Responses are queued per (method, path). The last queued response
    repeats once the queue is down to one entry.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], list[Responder]] = {}
        self.calls: list[httpx.Request] = []

    def on(self, method: str, path: str, *responses: Responder) -> None:
        self.routes.setdefault((method, path), []).extend(responses)

    async def handle(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        queue = self.routes.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(404, json={"message": f"no route {request.url.path}"})
        responder = queue[0] if len(queue) == 1 else queue.pop(0)
        if isinstance(responder, Exception):
            raise responder
        if callable(responder):
            response = responder(request)
            if isinstance(response, httpx.Response):
                return response
            return await response
        return responder

    def calls_to(self, method: str, path: str) -> list[httpx.Request]:
        return [c for c in self.calls if c.method == method and c.url.path == path]


class RecordingSleep:
    """Sleep stand-in that records requested delays and returns at once."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


def body_of(request: httpx.Request) -> Any:
    return json.loads(request.content)


def ok_value[T](result: Result[T, Any]) -> T:
    match result:
        case Ok(value):
            return value
        case Error(e):
            pytest.fail(f"expected Ok, got Error({e})")


def error_value[E](result: Result[Any, E]) -> E:
    match result:
        case Ok(value):
            pytest.fail(f"expected Error, got Ok({value})")
        case Error(e):
            return e


def item(item_id: str = "p1", quantity: int = 1, price: float = 40.0) -> CartItem:
    return CartItem(id=item_id, name=f"Product {item_id}", unit_price=price, quantity=quantity)


def cart_row(item_id: str, quantity: int, price: float = 40.0) -> dict[str, Any]:
    return {"productId": item_id, "productName": f"Product {item_id}", "price": price, "quantity": quantity}


@pytest.fixture
def server() -> FakeServer:
    return FakeServer()


@pytest.fixture
async def client(server: FakeServer):
    """httpx client wired to the fake backend."""
    async with httpx.AsyncClient(
        base_url="http://test",
        transport=httpx.MockTransport(server.handle),
    ) as client:
        yield client


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def clock() -> Callable[[], float]:
    return lambda: NOW


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def state(memory_store: MemoryStore) -> LocalState:
    return LocalState(memory_store)


@pytest.fixture
def policy() -> ExecutorPolicy:
    return (
        ExecutorPolicy()
        .with_timeout(seconds=5)
        .with_health_timeout(seconds=1)
        .with_retry(RetryPolicy().with_retries(3).with_delay(seconds=1))
    )


@pytest.fixture
def executor(client, policy, sleep, clock) -> Executor:
    return Executor(client, policy, sleep=sleep, clock=clock)


@pytest.fixture
def requests(executor: Executor, state: LocalState) -> Requests:
    return Requests(executor, state)


@pytest.fixture
def user() -> User:
    return User(id="u1", phone_number="+911234567890", name="Asha")


@pytest.fixture
async def signed_in(state: LocalState, user: User) -> User:
    """Store a session for `user` with token `tok-123`."""
    await state.save_token("tok-123")
    await state.save_user(user)
    return user


@pytest.fixture
def address() -> Address:
    return Address(id="12", address_id=12, line="4 Mill Road", city="Pune", state="MH", postal_code="411001")
