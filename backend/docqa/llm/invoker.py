"""Resilient provider invocation with exponential backoff on transient overload.

Implements a bounded retry policy for exactly one failure class:
- Transient overload (ProviderOverloadSignal) is retried after a delay that
  doubles on every retry, up to max_retries additional attempts
- Every other failure propagates immediately, unchanged
- Exhausted retries raise ProviderOverloaded

The backoff suspends with an awaitable sleep, so only the requesting call chain
waits.
"""

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from backend.docqa.errors import DocQAError, ProviderOverloaded, ProviderOverloadSignal
from backend.docqa.utils.logging import StructuredProviderLogger
from backend.docqa.utils.metrics import ProviderMetrics

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Backoff configuration for transient overload."""

    max_retries: int = 3
    initial_delay_seconds: float = 2.0
    multiplier: float = 2.0

    def delays(self) -> list[float]:
        """Delay before each retry, in order."""
        return [
            self.initial_delay_seconds * (self.multiplier**i) for i in range(self.max_retries)
        ]


class ResilientInvoker:
    """Executes provider calls under a RetryPolicy."""

    def __init__(
        self,
        policy: RetryPolicy | None = None,
        metrics: ProviderMetrics | None = None,
        logger: StructuredProviderLogger | None = None,
        sleep_fn: Callable[[float], Awaitable[None]] | None = None,
    ) -> None:
        """Initialize invoker.

        Args:
            policy: Retry policy (default: 3 retries starting at 2s)
            metrics: Metrics recorder (optional, defaults to no-op)
            logger: Structured attempt logger
            sleep_fn: Injectable sleep function (default: asyncio.sleep)
        """
        self.policy = policy or RetryPolicy()
        self._metrics = metrics or ProviderMetrics()
        self._logger = logger or StructuredProviderLogger()
        self._sleep = sleep_fn or asyncio.sleep

    async def invoke(self, call: Callable[[], Awaitable[T]], *, operation: str = "generate") -> T:
        """Run call, retrying only on transient overload.

        Args:
            call: Zero-argument coroutine factory; invoked once per attempt
            operation: Label for logs and metrics

        Returns:
            Result of the first successful attempt

        Raises:
            ProviderOverloaded: Overloaded on every attempt
            Exception: Any non-overload failure, on the attempt it occurred
        """
        delays = self.policy.delays()
        total_attempts = len(delays) + 1

        for attempt in range(1, total_attempts + 1):
            attempt_start = time.monotonic()
            try:
                result = await call()
            except ProviderOverloadSignal as e:
                elapsed_ms = (time.monotonic() - attempt_start) * 1000
                self._metrics.record_latency(operation, "overloaded", elapsed_ms)
                self._metrics.inc_error(operation, "overloaded")

                if attempt == total_attempts:
                    self._logger.log_attempt(
                        operation, attempt, "overloaded", elapsed_ms, error_reason=str(e)
                    )
                    raise ProviderOverloaded(attempts=attempt) from e

                delay = delays[attempt - 1]
                self._logger.log_attempt(
                    operation,
                    attempt,
                    "overloaded",
                    elapsed_ms,
                    delay_seconds=delay,
                    error_reason=str(e),
                )
                self._metrics.inc_retry(operation)
                await self._sleep(delay)
                continue
            except Exception as e:
                elapsed_ms = (time.monotonic() - attempt_start) * 1000
                reason = e.reason if isinstance(e, DocQAError) and e.reason else type(e).__name__
                self._metrics.record_latency(operation, "error", elapsed_ms)
                self._metrics.inc_error(operation, reason)
                self._logger.log_attempt(
                    operation, attempt, "error", elapsed_ms, error_reason=reason
                )
                raise

            elapsed_ms = (time.monotonic() - attempt_start) * 1000
            self._metrics.record_latency(operation, "success", elapsed_ms)
            self._logger.log_attempt(operation, attempt, "success", elapsed_ms)
            return result

        # Unreachable: the loop either returns or raises
        raise ProviderOverloaded(attempts=total_attempts)
