"""
Remote types — result envelope and failure taxonomy.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any


# ═══════════════════════════════════════════════════════════════════════════════
# Error Kind
# ═══════════════════════════════════════════════════════════════════════════════


class ErrorKind(Enum):
    """
    Why a remote call failed.

    NETWORK, TIMEOUT: transport level, retryable.
    AUTH: 401, the credential is missing or rejected.
    VALIDATION: other 4xx, the request itself is wrong.
    NOT_FOUND: 404.
    SERVER: 5xx.
    """

    NETWORK = auto()
    TIMEOUT = auto()
    AUTH = auto()
    VALIDATION = auto()
    NOT_FOUND = auto()
    SERVER = auto()

    @property
    def retryable(self) -> bool:
        return self in (ErrorKind.NETWORK, ErrorKind.TIMEOUT)

    @classmethod
    def from_status(cls, status: int) -> ErrorKind:
        if status == 401:
            return cls.AUTH
        if status == 404:
            return cls.NOT_FOUND
        if status >= 500:
            return cls.SERVER
        return cls.VALIDATION


# ═══════════════════════════════════════════════════════════════════════════════
# Remote Error
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class RemoteError:
    """Failure of a single attempt, before it is folded into a RemoteResult."""

    kind: ErrorKind
    message: str
    status: int | None = None
    field_errors: dict[str, list[str]] = field(default_factory=dict)
    cause: Exception | None = None


# ═══════════════════════════════════════════════════════════════════════════════
# Remote Result
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class RemoteResult[T]:
    """
    Outcome of any remote operation.

    success=True with is_local_fallback=True means the server failed and a
    locally synthesized value stands in for its answer.

    Example:
        result = await executor.execute("/api/Cart", "GET")
        if result.success:
            rows = result.data
        elif result.kind is ErrorKind.AUTH:
            ...
    """

    success: bool
    data: T | None = None
    error: str | None = None
    is_local_fallback: bool = False
    kind: ErrorKind | None = None
    status: int | None = None
    field_errors: dict[str, list[str]] = field(default_factory=dict)

    @staticmethod
    def ok(data: Any = None, *, status: int | None = None) -> RemoteResult[Any]:
        return RemoteResult(success=True, data=data, status=status)

    @staticmethod
    def fallback(data: Any, message: str) -> RemoteResult[Any]:
        return RemoteResult(success=True, data=data, error=message, is_local_fallback=True)

    @staticmethod
    def fail(error: RemoteError, message: str | None = None) -> RemoteResult[Any]:
        return RemoteResult(
            success=False,
            error=message or error.message,
            kind=error.kind,
            status=error.status,
            field_errors=error.field_errors,
        )

    @staticmethod
    def invalid(message: str) -> RemoteResult[Any]:
        """Terminal validation failure raised before any network call."""
        return RemoteResult(success=False, error=message, kind=ErrorKind.VALIDATION)

    @property
    def terminal(self) -> bool:
        """Failure that another attempt will not fix."""
        return not self.success and self.kind in (
            ErrorKind.AUTH,
            ErrorKind.VALIDATION,
            ErrorKind.NOT_FOUND,
        )


__all__ = (
    "ErrorKind",
    "RemoteError",
    "RemoteResult",
)
