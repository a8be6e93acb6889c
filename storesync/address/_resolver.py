"""
Default address resolution.

Layered, first match wins:

    1. the id the user chose on this device
    2. the server's explicit default flag (true / "true")
    3. any other default-like field that is truthy
    4. several candidates from 2 or 3 → most recently modified
    5. no candidates → most recently created
    6. nothing dated → the first address
    7. no addresses → None
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import datetime, timezone

from storesync.domain import Address


_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _modified(address: Address) -> datetime | None:
    return address.modified_at or address.created_at


def _created(address: Address) -> datetime | None:
    return address.created_at or address.modified_at


def _latest(
    addresses: Sequence[Address],
    stamp: Callable[[Address], datetime | None],
) -> Address | None:
    dated = [a for a in addresses if stamp(a) is not None]
    if not dated:
        return None
    # max() keeps the earliest element on ties
    return max(dated, key=lambda a: stamp(a) or _EPOCH)


def matches_id(address: Address, address_id: str) -> bool:
    if address.address_id is not None and str(address.address_id) == address_id:
        return True
    return address.id == address_id


def resolve_default(
    addresses: Sequence[Address],
    chosen_id: str | None = None,
) -> Address | None:
    if not addresses:
        return None

    if chosen_id:
        for address in addresses:
            if matches_id(address, chosen_id):
                return address

    candidates = [a for a in addresses if a.default_flag]
    if not candidates:
        candidates = [a for a in addresses if a.default_hint]

    if len(candidates) == 1:
        return candidates[0]
    if candidates:
        return _latest(candidates, _modified) or candidates[0]

    return _latest(addresses, _created) or addresses[0]


__all__ = (
    "matches_id",
    "resolve_default",
)
