"""
Remote — HTTP calls to the storefront backend.

    from storesync import remote as R

    executor = R.Executor(
        httpx.AsyncClient(base_url=settings.base_url),
        R.ExecutorPolicy.from_settings(settings),
    )
    requests = R.Requests(executor, state)

    result = await requests.get(R.E.Cart.for_user(user_id))
    if not result.success and result.kind is R.ErrorKind.AUTH:
        ...

Every operation returns a RemoteResult; nothing here raises on HTTP or
transport failure.
"""

from storesync.remote import _endpoints as E
from storesync.remote._types import (
    ErrorKind,
    RemoteError,
    RemoteResult,
)
from storesync.remote._policy import (
    RetryPolicy,
    NO_RETRY,
    ExecutorPolicy,
)
from storesync.remote._messages import (
    NETWORK_MESSAGE,
    TIMEOUT_MESSAGE,
    SERVER_MESSAGE,
    extract_message,
)
from storesync.remote._executor import (
    Executor,
    ORDER_FALLBACK_MESSAGE,
)
from storesync.remote._auth import (
    bearer,
    Requests,
)

__all__ = (
    # Endpoints
    "E",
    # Types
    "ErrorKind",
    "RemoteError",
    "RemoteResult",
    # Policy
    "RetryPolicy",
    "NO_RETRY",
    "ExecutorPolicy",
    # Messages
    "NETWORK_MESSAGE",
    "TIMEOUT_MESSAGE",
    "SERVER_MESSAGE",
    "extract_message",
    # Execution
    "Executor",
    "ORDER_FALLBACK_MESSAGE",
    "bearer",
    "Requests",
)
