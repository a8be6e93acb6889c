"""
Store — durable local state.

    from storesync import store as St

    # In-memory (tests, single process)
    state = St.LocalState(St.MemoryStore())

    # SQLAlchemy (durable)
    session_factory, engine = await St.create_database("sqlite+aiosqlite:///app.db")
    state = St.LocalState(St.SQLAlchemyStore(session_factory), namespace="AgriMart")
"""

from storesync.store._types import (
    Store,
    StoreError,
)
from storesync.store._memory import MemoryStore
from storesync.store._sqlalchemy import (
    Base,
    KeyValueTable,
    create_database,
    SQLAlchemyStore,
)
from storesync.store._state import (
    Keys,
    LocalState,
)

__all__ = (
    # Protocol
    "Store",
    "StoreError",
    # Backends
    "MemoryStore",
    "SQLAlchemyStore",
    "Base",
    "KeyValueTable",
    "create_database",
    # Facade
    "Keys",
    "LocalState",
)
