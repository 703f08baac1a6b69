"""
Retry Backoff
=============
Exponential backoff retry for classified Mixpost failures.
"""

import asyncio
import random
from typing import Awaitable, Callable, Optional, TypeVar

import structlog
from tenacity import AsyncRetrying, RetryCallState, retry_if_exception, stop_after_attempt

from ..errors import EnhancedError, RequestContext, enhance_error
from .models import RetryPolicy

logger = structlog.get_logger(__name__)

T = TypeVar("T")

# 2 ** 62 already exceeds any sane delay ceiling
MAX_EXPONENT = 62


def calculate_backoff_delay(
    attempt: int,
    base_delay: float,
    max_delay: float,
    rng: Callable[[], float] = random.random,
) -> float:
    """
    Delay before retrying after a failed attempt.

    The exponential delay ``base_delay * 2 ** attempt`` is scaled by a
    random factor in [0.5, 1.0) and clamped to ``max_delay``.

    Args:
        attempt: Zero-based number of the attempt that just failed
        base_delay: Initial delay in seconds
        max_delay: Maximum delay in seconds
        rng: Source of uniform values in [0, 1)

    Returns:
        Delay in seconds
    """
    exponential = base_delay * (2 ** min(attempt, MAX_EXPONENT))
    jittered = exponential * (0.5 + rng() * 0.5)
    return min(jittered, max_delay)


class RetryOrchestrator:
    """
    Drives repeated attempts of an operation.

    Every failure is classified into an EnhancedError stamped with the
    attempt count. The request is retried while attempts remain and the
    policy predicate (the classifier's retryable flag by default) allows
    it; otherwise the EnhancedError is raised.

    Retries assume idempotent operations.
    """

    def __init__(
        self,
        policy: Optional[RetryPolicy] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        rng: Callable[[], float] = random.random,
    ):
        self.policy = policy or RetryPolicy()
        self._sleep = sleep
        self._rng = rng

    def backoff_delay(self, attempt: int) -> float:
        return calculate_backoff_delay(
            attempt,
            self.policy.base_delay,
            self.policy.max_delay,
            self._rng,
        )

    def should_retry(self, error: BaseException) -> bool:
        """Apply the policy predicate to a classified failure."""
        if not isinstance(error, EnhancedError):
            return False
        if self.policy.should_retry is not None:
            return self.policy.should_retry(error)
        return error.retryable

    def _wait(self, retry_state: RetryCallState) -> float:
        return self.backoff_delay(retry_state.attempt_number - 1)

    def _log_retry(self, retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception()
        logger.warning(
            "request_retry_scheduled",
            attempt=retry_state.attempt_number,
            delay=retry_state.next_action.sleep,
            code=error.code.value,
            status=error.status,
            endpoint=error.context.endpoint,
        )

    async def run(
        self,
        operation: Callable[[], Awaitable[T]],
        context: Optional[RequestContext] = None,
    ) -> T:
        """
        Execute an operation with exponential backoff retry.

        Args:
            operation: Zero-argument coroutine function to attempt
            context: Endpoint and method for diagnostics

        Returns:
            Result of the first successful attempt

        Raises:
            EnhancedError: Once retries are exhausted or the failure is not
                retryable
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.policy.max_retries + 1),
            wait=self._wait,
            retry=retry_if_exception(self.should_retry),
            before_sleep=self._log_retry,
            sleep=self._sleep,
            reraise=True,
        )

        try:
            async for attempt in retrying:
                with attempt:
                    retry_count = attempt.retry_state.attempt_number - 1
                    try:
                        return await operation()
                    except Exception as exc:
                        raise enhance_error(exc, context, retry_count) from exc
        except EnhancedError as exc:
            logger.error(
                "request_failed",
                code=exc.code.value,
                status=exc.status,
                retry_count=exc.context.retry_count,
                endpoint=exc.context.endpoint,
            )
            raise

        # Unreachable with reraise=True; satisfies the declared return type
        raise RuntimeError("retry loop finished without a result")
