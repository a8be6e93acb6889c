"""
storesync — resilient client-side sync for a storefront.

    from storesync import store as St    # Durable local state
    from storesync import remote as R    # HTTP executor, auth, retry
    from storesync import cart as Ct     # Optimistic cart
    from storesync import address as A   # Default address resolution
    from storesync import orders as O    # Checkout pipeline, history

    async with await Storefront.open(Settings.from_env()) as shop:
        ...
"""

from storesync import store
from storesync import remote
from storesync import domain
from storesync import session
from storesync import cart
from storesync import address
from storesync import orders
from storesync.config import Settings, configure_logging
from storesync._client import Storefront

__version__ = "0.1.0"

__all__ = (
    "store",
    "remote",
    "domain",
    "session",
    "cart",
    "address",
    "orders",
    "Settings",
    "configure_logging",
    "Storefront",
)
