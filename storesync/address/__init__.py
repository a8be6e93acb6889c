"""
Address — default resolution and the user's address book.

    from storesync import address as A

    default = A.resolve_default(addresses, chosen_id="42")
"""

from storesync.address._resolver import (
    matches_id,
    resolve_default,
)
from storesync.address._book import (
    SUBMISSION_HEADER,
    AddressBook,
)

__all__ = (
    "matches_id",
    "resolve_default",
    "SUBMISSION_HEADER",
    "AddressBook",
)
