"""
Persisted store — typed storage protocol.

Store — durable key→text storage.
All methods return Result for explicit error handling.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from kungfu import Result


# ═══════════════════════════════════════════════════════════════════════════════
# Store Error
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class StoreError:
    """Storage operation error."""

    message: str
    cause: Exception | None = None


# ═══════════════════════════════════════════════════════════════════════════════
# Store Protocol
# ═══════════════════════════════════════════════════════════════════════════════


class Store(Protocol):
    """
    Durable key-value store protocol.

    Values are opaque text; encoding belongs to the caller (see LocalState).
    Keys are already namespaced when they reach the store.
    """

    async def get(self, key: str) -> Result[str | None, StoreError]:
        """Get value. Returns Ok(None) if not found."""
        ...

    async def set(self, key: str, value: str) -> Result[None, StoreError]:
        """Insert or replace value."""
        ...

    async def delete(self, key: str) -> Result[bool, StoreError]:
        """Delete value. Returns Ok(True) if existed."""
        ...

    async def delete_many(self, keys: tuple[str, ...]) -> Result[int, StoreError]:
        """Delete several values at once. Returns how many existed."""
        ...


__all__ = (
    "StoreError",
    "Store",
)
