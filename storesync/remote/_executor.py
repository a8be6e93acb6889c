"""
Request executor — one remote call with timeout race, classification, retry.

    executor = Executor(httpx.AsyncClient(base_url=settings.base_url), policy)
    result = await executor.execute("/api/Cart", "GET")

Only GET is retried, and only on transport failures (network, timeout).
Everything else resolves on the first attempt.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

import httpx
from kungfu import LazyCoroResult, Result, Ok, Error

from storesync._types import Clock, Lazy, Sleep, epoch_ms, system_clock, system_sleep
from storesync.config import DEFAULT_USER_AGENT
from storesync.remote._endpoints import HEALTH, Orders
from storesync.remote._messages import (
    NETWORK_MESSAGE,
    SERVER_MESSAGE,
    TIMEOUT_MESSAGE,
    extract_message,
)
from storesync.remote._policy import NO_RETRY, ExecutorPolicy
from storesync.remote._types import ErrorKind, RemoteError, RemoteResult

logger = logging.getLogger(__name__)

ORDER_FALLBACK_MESSAGE = "Order processed locally due to server error"
NO_ADDRESSES_MARKER = "No addresses found"


def _path(endpoint: str) -> str:
    return endpoint.split("?", 1)[0]


# ═══════════════════════════════════════════════════════════════════════════════
# Executor
# ═══════════════════════════════════════════════════════════════════════════════


class Executor:
    """
    Executes remote calls against one base URL.

    The httpx client is owned by the caller. `sleep` and `clock` are injected
    so retry delays and synthesized ids are controllable in tests.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        policy: ExecutorPolicy = ExecutorPolicy(),
        *,
        user_agent: str = DEFAULT_USER_AGENT,
        sleep: Sleep = system_sleep,
        clock: Clock = system_clock,
    ) -> None:
        self._client = client
        self._policy = policy
        self._user_agent = user_agent
        self._sleep = sleep
        self._clock = clock

    @property
    def policy(self) -> ExecutorPolicy:
        return self._policy

    def default_headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "ngrok-skip-browser-warning": "true",
            "User-Agent": self._user_agent,
            "Cache-Control": "no-cache",
            "Origin": str(self._client.base_url).rstrip("/"),
        }

    # ─────────────────────────────────────────────────────────────────────────
    # Single attempt
    # ─────────────────────────────────────────────────────────────────────────

    def attempt(
        self,
        endpoint: str,
        method: str,
        body: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> Lazy[RemoteResult[Any], RemoteError]:
        """One call raced against the timeout. Lazy; nothing runs until awaited."""
        timeout = self._policy.timeout.total_seconds()
        merged = {**self.default_headers(), **(headers or {})}

        async def execute() -> Result[RemoteResult[Any], RemoteError]:
            try:
                response = await asyncio.wait_for(
                    self._client.request(
                        method,
                        endpoint,
                        json=body,
                        headers=merged,
                    ),
                    timeout=timeout,
                )
            except (TimeoutError, httpx.TimeoutException) as e:
                return Error(RemoteError(ErrorKind.TIMEOUT, "Request timeout", cause=e))
            except httpx.RequestError as e:
                return Error(RemoteError(ErrorKind.NETWORK, f"Network request failed: {e}", cause=e))

            return self._interpret(response, endpoint, method)

        return LazyCoroResult(execute)

    def _interpret(
        self,
        response: httpx.Response,
        endpoint: str,
        method: str,
    ) -> Result[RemoteResult[Any], RemoteError]:
        status = response.status_code

        if response.is_success:
            if status == 204:
                return Ok(RemoteResult.ok(None, status=status))
            if "application/json" not in response.headers.get("content-type", ""):
                return Ok(RemoteResult.ok(None, status=status))
            try:
                return Ok(RemoteResult.ok(response.json(), status=status))
            except ValueError:
                logger.warning("Malformed JSON from %s %s", method, endpoint)
                return Ok(RemoteResult.ok(None, status=status))

        text = response.text

        if status == 401:
            logger.error("Unauthorized: %s %s", method, endpoint)
            return Error(RemoteError(
                ErrorKind.AUTH,
                f"Authentication failed: {text or 'Unauthorized'}. Please sign in again.",
                status=status,
            ))

        if status == 500 and method == "POST" and _path(endpoint) == Orders.CREATE:
            order_id = f"local-{epoch_ms(self._clock)}"
            logger.warning("Order creation hit a server error; continuing with local order %s", order_id)
            return Ok(RemoteResult.fallback(
                {"orderId": order_id, "message": ORDER_FALLBACK_MESSAGE},
                ORDER_FALLBACK_MESSAGE,
            ))

        if NO_ADDRESSES_MARKER in text and _path(endpoint).startswith("/api/Address"):
            logger.info("No addresses on record (%s)", status)
            return Ok(RemoteResult.ok([], status=status))

        if status == 404 and method == "DELETE" and "not found" in text.lower():
            logger.info("Delete of missing object treated as done: %s", endpoint)
            return Ok(RemoteResult.ok(None, status=status))

        message, errors = extract_message(text, status)
        logger.error("API error (%s) on %s %s: %s", status, method, endpoint, message)
        return Error(RemoteError(
            ErrorKind.from_status(status),
            message,
            status=status,
            field_errors=errors,
        ))

    # ─────────────────────────────────────────────────────────────────────────
    # Execute with retry
    # ─────────────────────────────────────────────────────────────────────────

    async def execute(
        self,
        endpoint: str,
        method: str = "GET",
        body: Any = None,
        *,
        headers: Mapping[str, str] | None = None,
        retry: bool = True,
    ) -> RemoteResult[Any]:
        """
        Run a call to completion.

        GET with `retry=True` gets `1 + retries` attempts on retryable
        failures; every other call gets exactly one.
        """
        method = method.upper()
        policy = self._policy.retry if retry and method == "GET" else NO_RETRY
        delay = policy.delay.total_seconds()

        last: RemoteError | None = None
        for attempt in range(policy.max_attempts):
            if attempt > 0:
                logger.info("Retry attempt %d for %s", attempt, endpoint)
                await self._sleep(delay)

            match await self.attempt(endpoint, method, body, headers):
                case Ok(result):
                    return result
                case Error(e):
                    last = e
                    logger.warning(
                        "Request attempt %d failed for %s: %s", attempt + 1, endpoint, e.message
                    )
                    if not e.kind.retryable:
                        break

        assert last is not None
        return self._final(last)

    def _final(self, error: RemoteError) -> RemoteResult[Any]:
        match error.kind:
            case ErrorKind.NETWORK:
                return RemoteResult.fail(error, NETWORK_MESSAGE)
            case ErrorKind.TIMEOUT:
                return RemoteResult.fail(error, TIMEOUT_MESSAGE)
            case ErrorKind.SERVER:
                return RemoteResult.fail(error, SERVER_MESSAGE)
            case _:
                return RemoteResult.fail(error)

    # ─────────────────────────────────────────────────────────────────────────
    # Health
    # ─────────────────────────────────────────────────────────────────────────

    async def check_connection(self) -> bool:
        """Probe the health endpoint; the request is aborted at the health timeout."""
        headers = {
            "ngrok-skip-browser-warning": "true",
            "User-Agent": self._user_agent,
            "Cache-Control": "no-cache",
        }
        try:
            async with asyncio.timeout(self._policy.health_timeout.total_seconds()):
                response = await self._client.get(HEALTH, headers=headers)
        except TimeoutError:
            logger.warning("API connection check timed out")
            return False
        except httpx.RequestError as e:
            logger.warning("API connection check failed: %s", e)
            return False

        if not response.is_success:
            logger.warning("API connection check failed with status: %s", response.status_code)
        return response.is_success


__all__ = (
    "Executor",
    "ORDER_FALLBACK_MESSAGE",
)
