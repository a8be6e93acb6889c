"""
Executor policy — timeout and retry configuration.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import timedelta

from storesync.config import Settings


# ═══════════════════════════════════════════════════════════════════════════════
# Retry Policy
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """
    Retry settings for idempotent reads.

    `retries` counts attempts after the first one. Only retryable failures
    (network, timeout) consume the budget; the delay between attempts is fixed.

    Example:
        policy = RetryPolicy().with_retries(3).with_delay(seconds=1)

    Note: Immutable — each method returns a new RetryPolicy.
    """

    retries: int = 3
    delay: timedelta = timedelta(seconds=1)

    def with_retries(self, retries: int) -> RetryPolicy:
        return replace(self, retries=max(0, retries))

    def with_delay(
        self,
        *,
        seconds: float | None = None,
        delta: timedelta | None = None,
    ) -> RetryPolicy:
        return replace(self, delay=delta if delta is not None else timedelta(seconds=seconds or 0))

    @property
    def max_attempts(self) -> int:
        return 1 + self.retries


NO_RETRY = RetryPolicy(retries=0, delay=timedelta(0))


# ═══════════════════════════════════════════════════════════════════════════════
# Executor Policy
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class ExecutorPolicy:
    """
    Full executor configuration.

    Example:
        policy = (
            ExecutorPolicy()
            .with_timeout(seconds=60)
            .with_retry(RetryPolicy().with_retries(3))
        )
    """

    timeout: timedelta = timedelta(seconds=60)
    health_timeout: timedelta = timedelta(seconds=10)
    retry: RetryPolicy = RetryPolicy()

    def with_timeout(self, *, seconds: float) -> ExecutorPolicy:
        return replace(self, timeout=timedelta(seconds=seconds))

    def with_health_timeout(self, *, seconds: float) -> ExecutorPolicy:
        return replace(self, health_timeout=timedelta(seconds=seconds))

    def with_retry(self, retry: RetryPolicy) -> ExecutorPolicy:
        return replace(self, retry=retry)

    @classmethod
    def from_settings(cls, settings: Settings) -> ExecutorPolicy:
        return (
            cls()
            .with_timeout(seconds=settings.timeout)
            .with_health_timeout(seconds=settings.health_timeout)
            .with_retry(
                RetryPolicy()
                .with_retries(settings.max_retries)
                .with_delay(seconds=settings.retry_delay)
            )
        )


__all__ = (
    "RetryPolicy",
    "NO_RETRY",
    "ExecutorPolicy",
)
