"""
Authenticated request builder.

Every call reads the current token from LocalState and sends it as a bearer
credential, except the bootstrap account-creation call.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from storesync.remote._endpoints import UNAUTHENTICATED
from storesync.remote._executor import Executor
from storesync.remote._types import RemoteResult
from storesync.store import LocalState

logger = logging.getLogger(__name__)

BEARER = "Bearer "


def bearer(token: str) -> str:
    """Authorization value; an already-prefixed token is passed through."""
    return token if token.startswith(BEARER) else f"{BEARER}{token}"


class Requests:
    """
    Executor wrapper that attaches credentials.

    Example:
        requests = Requests(executor, state)
        result = await requests.get(E.Cart.for_user(user_id))
    """

    def __init__(self, executor: Executor, state: LocalState) -> None:
        self._executor = executor
        self._state = state

    @property
    def executor(self) -> Executor:
        return self._executor

    async def headers_for(self, endpoint: str) -> dict[str, str]:
        if endpoint.split("?", 1)[0] in UNAUTHENTICATED:
            logger.debug("Skipping auth token for %s", endpoint)
            return {}

        token = await self._state.token()
        if not token:
            logger.debug("No auth token stored; calling %s unauthenticated", endpoint)
            return {}

        logger.debug("Using auth token %s... for %s", token[:10], endpoint)
        return {"Authorization": bearer(token)}

    async def send(
        self,
        endpoint: str,
        method: str = "GET",
        body: Any = None,
        *,
        headers: Mapping[str, str] | None = None,
        retry: bool = True,
    ) -> RemoteResult[Any]:
        auth = await self.headers_for(endpoint)
        return await self._executor.execute(
            endpoint,
            method,
            body,
            headers={**auth, **(headers or {})},
            retry=retry,
        )

    async def get(self, endpoint: str, *, retry: bool = True) -> RemoteResult[Any]:
        return await self.send(endpoint, "GET", retry=retry)

    async def post(
        self,
        endpoint: str,
        body: Any = None,
        *,
        headers: Mapping[str, str] | None = None,
    ) -> RemoteResult[Any]:
        return await self.send(endpoint, "POST", body, headers=headers)

    async def put(self, endpoint: str, body: Any = None) -> RemoteResult[Any]:
        return await self.send(endpoint, "PUT", body)

    async def delete(self, endpoint: str) -> RemoteResult[Any]:
        return await self.send(endpoint, "DELETE")


__all__ = (
    "BEARER",
    "bearer",
    "Requests",
)
