"""
Core types for storesync.

Re-exports from kungfu + the injectable time primitives every component uses.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable, Awaitable

# Re-export from kungfu
from kungfu import Result, Ok, Error, LazyCoroResult

# ═══════════════════════════════════════════════════════════════════════════════
# Lazy Computation Aliases
# ═══════════════════════════════════════════════════════════════════════════════

type Lazy[T, E] = LazyCoroResult[T, E]
"""Lazy async computation that may fail."""

# ═══════════════════════════════════════════════════════════════════════════════
# Time
# ═══════════════════════════════════════════════════════════════════════════════

type Sleep = Callable[[float], Awaitable[None]]
"""Awaitable delay in seconds."""

type Clock = Callable[[], float]
"""Wall clock in seconds since epoch."""


def system_sleep(seconds: float) -> Awaitable[None]:
    return asyncio.sleep(seconds)


def system_clock() -> float:
    return time.time()


def epoch_ms(clock: Clock) -> int:
    """Milliseconds since epoch from a clock."""
    return int(clock() * 1000)


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    # Re-exports from kungfu
    "Result",
    "Ok",
    "Error",
    "LazyCoroResult",
    # Aliases
    "Lazy",
    "Sleep",
    "Clock",
    # Time
    "system_sleep",
    "system_clock",
    "epoch_ms",
)
