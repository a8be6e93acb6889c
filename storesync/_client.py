"""
Storefront — one object wiring every component to one backend and one store.

    settings = Settings.from_env()
    async with await Storefront.open(settings) as shop:
        await shop.sessions.verify_otp(phone, code)
        await shop.cart.add(item)
        result = await shop.orders.checkout()
"""

from __future__ import annotations

from dataclasses import dataclass
from types import TracebackType

import httpx
from sqlalchemy.ext.asyncio import AsyncEngine

from storesync._types import Clock, Sleep, system_clock, system_sleep
from storesync.address import AddressBook
from storesync.cart import CartCoordinator, CartRemote
from storesync.config import Settings
from storesync.orders import OrderHistory, OrderPipeline
from storesync.remote import Executor, ExecutorPolicy, Requests
from storesync.session import SessionManager
from storesync.store import LocalState, SQLAlchemyStore, Store, create_database


@dataclass(slots=True)
class Storefront:
    settings: Settings
    state: LocalState
    requests: Requests
    sessions: SessionManager
    cart: CartCoordinator
    addresses: AddressBook
    history: OrderHistory
    orders: OrderPipeline
    _client: httpx.AsyncClient
    _engine: AsyncEngine | None = None

    @classmethod
    async def open(
        cls,
        settings: Settings,
        *,
        store: Store | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Sleep = system_sleep,
        clock: Clock = system_clock,
    ) -> Storefront:
        """
        Build the component graph.

        Without an explicit store, a SQLAlchemy store on `settings.db_url`
        is created (and disposed by `aclose`).
        """
        engine: AsyncEngine | None = None
        if store is None:
            session_factory, engine = await create_database(settings.db_url)
            store = SQLAlchemyStore(session_factory)

        client = httpx.AsyncClient(base_url=settings.base_url, transport=transport)
        state = LocalState(store, namespace=settings.namespace)
        executor = Executor(
            client,
            ExecutorPolicy.from_settings(settings),
            user_agent=settings.user_agent,
            sleep=sleep,
            clock=clock,
        )
        requests = Requests(executor, state)
        cart_remote = CartRemote(requests)
        cart = CartCoordinator(state, cart_remote)
        history = OrderHistory(requests, state, clock=clock)
        pipeline = OrderPipeline(
            requests,
            state,
            cart,
            cart_remote,
            history,
            attempts=settings.order_attempts,
            retry_delay=settings.order_retry_delay,
            sleep=sleep,
            clock=clock,
        )

        return cls(
            settings=settings,
            state=state,
            requests=requests,
            sessions=SessionManager(requests, state),
            cart=cart,
            addresses=AddressBook(requests, state, clock=clock),
            history=history,
            orders=pipeline,
            _client=client,
            _engine=engine,
        )

    async def check_connection(self) -> bool:
        return await self.requests.executor.check_connection()

    async def aclose(self) -> None:
        await self._client.aclose()
        if self._engine is not None:
            await self._engine.dispose()

    async def __aenter__(self) -> Storefront:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()


__all__ = ("Storefront",)
