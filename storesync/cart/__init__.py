"""
Cart — optimistic local cart mirrored to the server.

    from storesync import cart as Ct

    coordinator = Ct.CartCoordinator(state, Ct.CartRemote(requests))
    await coordinator.load()
    await coordinator.add(item)
    await coordinator.set_quantity("p1", 0)   # removes
    report = await coordinator.push(user_id)
"""

from storesync.cart._remote import (
    ALREADY_GONE,
    CartRemote,
)
from storesync.cart._coordinator import (
    CartState,
    MirrorOutcome,
    Mutation,
    SyncReport,
    CartCoordinator,
)

__all__ = (
    # Remote
    "ALREADY_GONE",
    "CartRemote",
    # Coordinator
    "CartState",
    "MirrorOutcome",
    "Mutation",
    "SyncReport",
    "CartCoordinator",
)
