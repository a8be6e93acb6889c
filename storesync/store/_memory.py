"""
In-memory store.
"""

from __future__ import annotations

import asyncio

from kungfu import Result, Ok

from storesync.store._types import StoreError


class MemoryStore:
    """
    In-memory key-value store.

    Note: Only for a single process and for tests.
    Data does not survive a restart.
    """

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial or {})
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> Result[str | None, StoreError]:
        async with self._lock:
            return Ok(self._values.get(key))

    async def set(self, key: str, value: str) -> Result[None, StoreError]:
        async with self._lock:
            self._values[key] = value
            return Ok(None)

    async def delete(self, key: str) -> Result[bool, StoreError]:
        async with self._lock:
            if key in self._values:
                del self._values[key]
                return Ok(True)
            return Ok(False)

    async def delete_many(self, keys: tuple[str, ...]) -> Result[int, StoreError]:
        async with self._lock:
            removed = 0
            for key in keys:
                if self._values.pop(key, None) is not None:
                    removed += 1
            return Ok(removed)

    def snapshot(self) -> dict[str, str]:
        """Copy of the raw contents."""
        return dict(self._values)


__all__ = ("MemoryStore",)
