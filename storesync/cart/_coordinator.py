"""
Optimistic cart coordinator.

Every mutation is applied to the local cart and persisted before any network
call. The remote mirror runs afterwards, serialized per item id, and its
failure never undoes the local change.

    cart = CartCoordinator(state, CartRemote(requests))
    await cart.load()

    outcome = await cart.add(CartItem(id="p1", name="Seeds", unit_price=40, quantity=2))
    outcome.items        # local cart after the change
    outcome.mirror       # SYNCED / FAILED / SUPERSEDED / SKIPPED
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections import Counter
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, replace
from enum import Enum, auto
from typing import Any

from storesync.cart._remote import CartRemote
from storesync.domain import CartItem, Provenance, money
from storesync.remote import RemoteResult
from storesync.store import LocalState

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# Types
# ═══════════════════════════════════════════════════════════════════════════════


class CartState(Enum):
    IDLE = auto()
    MUTATING = auto()


class MirrorOutcome(Enum):
    """
    What happened to the remote mirror of one mutation.

    SUPERSEDED: the mirror ran, but a newer mutation of the same item was
    issued meanwhile; its result no longer describes the cart.
    SKIPPED: nothing to mirror.
    """

    SYNCED = auto()
    FAILED = auto()
    SUPERSEDED = auto()
    SKIPPED = auto()


@dataclass(frozen=True, slots=True)
class Mutation:
    items: tuple[CartItem, ...]
    mirror: MirrorOutcome
    remote: RemoteResult[Any] | None = None


@dataclass(frozen=True, slots=True)
class SyncReport:
    """Result of pushing the local cart to the server."""

    success: bool
    local_items: tuple[CartItem, ...]
    remote_items: tuple[CartItem, ...]
    synced: bool
    issues: tuple[str, ...] = ()


type RemoteCall = Callable[[], Awaitable[RemoteResult[Any]]]


@dataclass(frozen=True, slots=True)
class _Pending:
    """A local change already applied, waiting for its remote mirror."""

    ticket: int
    snapshot: tuple[CartItem, ...]
    call: RemoteCall


def _fingerprint(items: Iterable[CartItem]) -> str:
    rows = sorted((i.id, i.quantity, i.name, i.unit_price) for i in items)
    return json.dumps(rows)


def _quantities(items: Iterable[CartItem]) -> dict[str, int]:
    return {i.id: i.quantity for i in items}


# ═══════════════════════════════════════════════════════════════════════════════
# Coordinator
# ═══════════════════════════════════════════════════════════════════════════════


class CartCoordinator:
    """
    Local-first cart with per-item remote mirroring.

    Note: `add` sums quantities, `merge` replaces them. Interactive adds
    accumulate; bulk merges carry absolute quantities from elsewhere.
    """

    def __init__(self, state: LocalState, remote: CartRemote) -> None:
        self._state = state
        self._remote = remote
        self._items: dict[str, CartItem] = {}
        self._loaded = False
        self._lock = asyncio.Lock()
        self._item_locks: dict[str, asyncio.Lock] = {}
        self._in_flight: Counter[str] = Counter()
        self._issued: Counter[str] = Counter()
        self._last_merge: str | None = None

    # ─────────────────────────────────────────────────────────────────────────
    # Views
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def items(self) -> tuple[CartItem, ...]:
        return tuple(self._items.values())

    @property
    def state(self) -> CartState:
        return CartState.MUTATING if +self._in_flight else CartState.IDLE

    @property
    def in_flight(self) -> frozenset[str]:
        """Item ids with a remote mirror still running."""
        return frozenset(k for k, v in self._in_flight.items() if v > 0)

    def is_in_flight(self, item_id: str) -> bool:
        return self._in_flight[item_id] > 0

    @property
    def count(self) -> int:
        """Total units, not distinct products."""
        return sum(i.quantity for i in self._items.values())

    @property
    def total(self) -> float:
        return money(sum(i.line_total for i in self._items.values()))

    def get(self, item_id: str) -> CartItem | None:
        return self._items.get(item_id)

    # ─────────────────────────────────────────────────────────────────────────
    # Local state
    # ─────────────────────────────────────────────────────────────────────────

    async def load(self) -> tuple[CartItem, ...]:
        """Restore the cart from the store."""
        async with self._lock:
            await self._load()
            return self.items

    async def current(self) -> tuple[CartItem, ...]:
        """The cart as held in memory, read from the store only on first use."""
        async with self._lock:
            await self._ensure_loaded()
            return self.items

    async def _load(self) -> None:
        stored = await self._state.cart()
        self._items = {i.id: i for i in stored}
        self._loaded = True
        logger.debug("Loaded %d cart rows from storage", len(self._items))

    async def _ensure_loaded(self) -> None:
        if not self._loaded:
            await self._load()

    async def _persist(self) -> None:
        await self._state.save_cart(list(self._items.values()))

    # ─────────────────────────────────────────────────────────────────────────
    # Interactive mutations
    # ─────────────────────────────────────────────────────────────────────────

    async def add(self, item: CartItem) -> Mutation:
        """Add units; an id already in the cart has its quantity increased."""
        if not item.id:
            raise ValueError("cart item needs an id")
        if item.quantity <= 0:
            raise ValueError(f"quantity to add must be positive, got {item.quantity}")

        async with self._lock:
            await self._ensure_loaded()
            existing = self._items.get(item.id)
            if existing is None:
                updated = replace(item, provenance=Provenance.LOCAL)
            else:
                updated = existing.with_quantity(existing.quantity + item.quantity)
            self._items[item.id] = updated
            await self._persist()
            ticket = self._issue(item.id)
            snapshot = self.items

        return await self._mirror(
            item.id,
            ticket,
            snapshot,
            lambda: self._remote.sync_quantity(
                item.id, updated.quantity, is_new=existing is None
            ),
        )

    async def set_quantity(self, item_id: str, quantity: int) -> Mutation:
        """Replace a row's quantity; zero or less removes the row."""
        async with self._lock:
            await self._ensure_loaded()
            pending = await self._apply(item_id, quantity)
        return await self._settle(item_id, pending)

    async def change_quantity(self, item_id: str, delta: int) -> Mutation:
        """Step a row up or down; the result is clamped at zero."""
        async with self._lock:
            await self._ensure_loaded()
            existing = self._items.get(item_id)
            if existing is None:
                return Mutation(self.items, MirrorOutcome.SKIPPED)
            pending = await self._apply(item_id, max(0, existing.quantity + delta))
        return await self._settle(item_id, pending)

    async def remove(self, item_id: str) -> Mutation:
        """
        Remove a row. Idempotent.

        The local delete always stands. Remotely: delete by id, then
        "set quantity 0" if the delete failed.
        """
        async with self._lock:
            await self._ensure_loaded()
            pending = await self._apply(item_id, 0)
        return await self._settle(item_id, pending)

    async def _apply(self, item_id: str, quantity: int) -> _Pending | Mutation:
        """Write an absolute quantity locally. Caller holds `_lock`."""
        if quantity <= 0:
            if self._items.pop(item_id, None) is not None:
                await self._persist()
            return _Pending(self._issue(item_id), self.items, lambda: self._remote_remove(item_id))

        existing = self._items.get(item_id)
        if existing is None:
            logger.debug("set_quantity on %s: not in cart", item_id)
            return Mutation(self.items, MirrorOutcome.SKIPPED)
        if existing.quantity == quantity:
            return Mutation(self.items, MirrorOutcome.SKIPPED)
        self._items[item_id] = existing.with_quantity(quantity)
        await self._persist()
        return _Pending(
            self._issue(item_id),
            self.items,
            lambda: self._remote.sync_quantity(item_id, quantity, is_new=False),
        )

    async def _settle(self, item_id: str, pending: _Pending | Mutation) -> Mutation:
        match pending:
            case Mutation():
                return pending
            case _Pending(ticket, snapshot, call):
                return await self._mirror(item_id, ticket, snapshot, call)

    async def _remote_remove(self, item_id: str) -> RemoteResult[Any]:
        result = await self._remote.delete(item_id)
        if result.success:
            return result
        logger.warning("Remote delete of %s failed (%s); setting quantity 0", item_id, result.error)
        return await self._remote.set_quantity(item_id, 0)

    async def clear(self) -> None:
        async with self._lock:
            self._items = {}
            self._loaded = True
            self._last_merge = None
            await self._persist()

    # ─────────────────────────────────────────────────────────────────────────
    # Bulk
    # ─────────────────────────────────────────────────────────────────────────

    async def merge(self, incoming: Iterable[CartItem]) -> tuple[CartItem, ...]:
        """
        Merge a batch of rows into the local cart.

        Known ids take the incoming quantity; new ids are appended; a zero
        quantity removes. A payload identical to the last merged one is
        ignored. Local only; use `push` to mirror.
        """
        rows = list(incoming)
        fingerprint = _fingerprint(rows)

        async with self._lock:
            await self._ensure_loaded()
            if fingerprint == self._last_merge:
                logger.debug("Skipping merge of an already processed payload")
                return self.items

            for row in rows:
                if row.quantity <= 0:
                    self._items.pop(row.id, None)
                    continue
                existing = self._items.get(row.id)
                if existing is None:
                    self._items[row.id] = replace(row, provenance=Provenance.LOCAL)
                else:
                    self._items[row.id] = existing.with_quantity(row.quantity)

            self._last_merge = fingerprint
            await self._persist()
            return self.items

    async def refresh(self, user_id: str | None) -> RemoteResult[tuple[CartItem, ...]]:
        """
        Replace the local view with the server cart.

        An empty or unrecognizable server cart leaves the local cart alone.
        Rows with a mirror in flight keep their local version.
        """
        async with self._lock:
            await self._ensure_loaded()

        result = await self._remote.fetch(user_id)
        if not result.success:
            logger.warning("Cart refresh failed: %s", result.error)
            return result

        remote_rows = result.data or []
        if not remote_rows:
            logger.info("Server cart empty or invalid; keeping %d local rows", len(self._items))
            return RemoteResult.ok(self.items, status=result.status)

        async with self._lock:
            busy = self.in_flight
            merged: dict[str, CartItem] = {}
            for row in remote_rows:
                if row.id in busy:
                    local = self._items.get(row.id)
                    if local is not None:
                        merged[row.id] = local
                else:
                    merged[row.id] = row
            for item_id in busy:
                local = self._items.get(item_id)
                if local is not None and item_id not in merged:
                    merged[item_id] = local
            self._items = merged
            await self._persist()
            return RemoteResult.ok(self.items, status=result.status)

    async def push(self, user_id: str | None) -> SyncReport:
        """
        Make the server cart match the local one.

        When quantities differ, every local row is written as an absolute
        quantity and server-only rows are zeroed.
        """
        async with self._lock:
            await self._ensure_loaded()
            local = self.items

        if not user_id:
            return SyncReport(False, local, (), False, ("No user logged in",))

        fetched = await self._remote.fetch(user_id)
        remote_rows = tuple(fetched.data or ()) if fetched.success else ()

        local_q = _quantities(local)
        remote_q = _quantities(remote_rows)
        if local_q == remote_q:
            logger.info("Cart already in sync")
            return SyncReport(True, local, remote_rows, True)

        issues: list[str] = []
        for item_id, quantity in local_q.items():
            result = await self._serialized(item_id, lambda i=item_id, q=quantity: self._remote.set_quantity(i, q))
            if not result.success:
                issues.append(f"Failed to sync item {item_id}: {result.error}")
        for item_id in remote_q.keys() - local_q.keys():
            result = await self._serialized(item_id, lambda i=item_id: self._remote.set_quantity(i, 0))
            if not result.success:
                issues.append(f"Failed to remove item {item_id}: {result.error}")

        if issues:
            logger.warning("Cart push finished with %d issue(s)", len(issues))
        return SyncReport(True, local, remote_rows, not issues, tuple(issues))

    # ─────────────────────────────────────────────────────────────────────────
    # Mirroring
    # ─────────────────────────────────────────────────────────────────────────

    def _issue(self, item_id: str) -> int:
        self._issued[item_id] += 1
        return self._issued[item_id]

    def _lock_for(self, item_id: str) -> asyncio.Lock:
        lock = self._item_locks.get(item_id)
        if lock is None:
            lock = self._item_locks[item_id] = asyncio.Lock()
        return lock

    async def _serialized(self, item_id: str, call: RemoteCall) -> RemoteResult[Any]:
        self._in_flight[item_id] += 1
        try:
            async with self._lock_for(item_id):
                return await call()
        finally:
            self._in_flight[item_id] -= 1

    async def _mirror(
        self,
        item_id: str,
        ticket: int,
        snapshot: tuple[CartItem, ...],
        call: RemoteCall,
    ) -> Mutation:
        result = await self._serialized(item_id, call)

        if self._issued[item_id] != ticket:
            return Mutation(snapshot, MirrorOutcome.SUPERSEDED, result)
        if not result.success:
            logger.warning("Remote cart mirror for %s failed: %s", item_id, result.error)
            return Mutation(snapshot, MirrorOutcome.FAILED, result)
        return Mutation(snapshot, MirrorOutcome.SYNCED, result)


__all__ = (
    "CartState",
    "MirrorOutcome",
    "Mutation",
    "SyncReport",
    "CartCoordinator",
)
