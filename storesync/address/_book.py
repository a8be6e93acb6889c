"""
Address book — remote address list, default choice, checkout selection.
"""

from __future__ import annotations

import logging
import secrets
from collections.abc import Mapping
from dataclasses import replace
from typing import Any

from storesync._types import Clock, epoch_ms, system_clock
from storesync.address._resolver import matches_id, resolve_default
from storesync.domain import Address, address_from_remote, address_to_remote, addresses_from_remote
from storesync.remote import E, RemoteResult, Requests
from storesync.store import Keys, LocalState

logger = logging.getLogger(__name__)

SUBMISSION_HEADER = "X-Client-Submission-ID"


class AddressBook:
    """
    Addresses of the signed-in user.

    Example:
        book = AddressBook(requests, state)
        result = await book.list(user_id)
        default = next(a for a in result.data if a.is_default)
    """

    def __init__(
        self,
        requests: Requests,
        state: LocalState,
        *,
        clock: Clock = system_clock,
    ) -> None:
        self._requests = requests
        self._state = state
        self._clock = clock

    def _submission_id(self, prefix: str) -> str:
        return f"{prefix}-{epoch_ms(self._clock)}-{secrets.token_hex(4)}"

    # ─────────────────────────────────────────────────────────────────────────
    # Read
    # ─────────────────────────────────────────────────────────────────────────

    async def list(self, user_id: str) -> RemoteResult[list[Address]]:
        """
        Normalized addresses with exactly one marked default.

        Soft-deleted rows and rows of other users are dropped.
        """
        result = await self._requests.get(E.Address.for_user(user_id))
        if not result.success:
            return result

        addresses = addresses_from_remote(result.data, user_id)
        chosen = await self._state.default_address_id()
        default = resolve_default(addresses, chosen)
        marked = [a.with_default(a is default) for a in addresses]
        return RemoteResult.ok(marked, status=result.status)

    async def default(self, user_id: str) -> Address | None:
        result = await self.list(user_id)
        if not result.success or not result.data:
            return None
        return next((a for a in result.data if a.is_default), None)

    # ─────────────────────────────────────────────────────────────────────────
    # Default choice
    # ─────────────────────────────────────────────────────────────────────────

    async def choose_default(self, address: Address, user_id: str) -> RemoteResult[Any]:
        """
        Make `address` the default.

        The choice is persisted locally first and always wins on this device;
        the server is told best-effort.
        """
        await self._state.save_default_address_id(address.id)
        result = await self.update(replace(address, is_default=True), user_id)
        if not result.success:
            logger.warning("Default address %s saved locally only: %s", address.id, result.error)
        return result

    # ─────────────────────────────────────────────────────────────────────────
    # Write
    # ─────────────────────────────────────────────────────────────────────────

    async def create(self, address: Address, user_id: str) -> RemoteResult[Address]:
        submission = self._submission_id("client")
        body = {**address_to_remote(address, user_id), "clientSubmissionId": submission}
        logger.info("Address submission %s", submission)
        result = await self._requests.post(
            E.Address.CREATE, body, headers={SUBMISSION_HEADER: submission}
        )
        return _with_address(result, address)

    async def update(self, address: Address, user_id: str) -> RemoteResult[Address]:
        submission = self._submission_id("update")
        body = {
            **address_to_remote(address, user_id),
            "id": address.id,
            "clientSubmissionId": submission,
        }
        result = await self._requests.post(
            E.Address.UPDATE, body, headers={SUBMISSION_HEADER: submission}
        )
        return _with_address(result, address)

    async def delete(self, address: Address) -> RemoteResult[Any]:
        """Delete remotely; a row the server no longer has counts as deleted."""
        result = await self._requests.delete(E.Address.by_id(address.numeric_id or address.id))
        if not result.success:
            return result

        chosen = await self._state.default_address_id()
        if chosen and matches_id(address, chosen):
            await self._state.remove(Keys.DEFAULT_ADDRESS_ID)
        selected = await self._state.selected_address()
        if selected is not None and selected.id == address.id:
            await self._state.remove(Keys.SELECTED_ADDRESS)
        return result

    # ─────────────────────────────────────────────────────────────────────────
    # Checkout selection
    # ─────────────────────────────────────────────────────────────────────────

    async def select_for_checkout(self, address: Address) -> bool:
        return await self._state.save_selected_address(address)

    async def selected(self) -> Address | None:
        return await self._state.selected_address()


def _with_address(result: RemoteResult[Any], sent: Address) -> RemoteResult[Address]:
    if not result.success:
        return result
    saved = address_from_remote(result.data) if isinstance(result.data, Mapping) else None
    return RemoteResult.ok(saved or sent, status=result.status)


__all__ = (
    "SUBMISSION_HEADER",
    "AddressBook",
)
