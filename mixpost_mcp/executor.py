"""
Resilient Executor
==================
Single entry point for every Mixpost API call.

The circuit breaker wraps the retry orchestrator, which wraps the raw
operation. A request that exhausts its retries counts as one breaker
failure.
"""

import asyncio
import random
import time
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

import structlog

from .circuit_breaker import CircuitBreaker, CircuitBreakerConfig
from .errors import RequestContext, enhance_error
from .retry import RetryOrchestrator, RetryPolicy

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class ResilientExecutor:
    """
    Composes circuit breaking and retries around an operation.

    Each executor owns exactly one CircuitBreaker; breakers are never
    shared between executors.

    Example:
        executor = ResilientExecutor(RetryPolicy(max_retries=2))

        posts = await executor.execute(
            fetch_posts,
            RequestContext(endpoint="/posts", method="GET"),
        )
    """

    def __init__(
        self,
        policy: Optional[RetryPolicy] = None,
        breaker_config: Optional[CircuitBreakerConfig] = None,
        enabled: bool = True,
        name: str = "mixpost",
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
        rng: Callable[[], float] = random.random,
    ):
        self.enabled = enabled
        self.retry = RetryOrchestrator(policy, sleep=sleep, rng=rng)
        self.circuit_breaker = CircuitBreaker(name, breaker_config, clock=clock)

    async def execute(
        self,
        operation: Callable[[], Awaitable[T]],
        context: Optional[RequestContext] = None,
    ) -> T:
        """
        Run an operation through the breaker and retry policy.

        With resilience disabled the operation is attempted once, and a
        failure is still classified before it is raised.

        Raises:
            EnhancedError: On final failure or when the circuit is open
        """
        if not self.enabled:
            try:
                return await operation()
            except Exception as exc:
                error = enhance_error(exc, context)
                logger.error(
                    "request_failed",
                    code=error.code.value,
                    status=error.status,
                    endpoint=error.context.endpoint,
                )
                raise error from exc

        return await self.circuit_breaker.execute(
            lambda: self.retry.run(operation, context)
        )

    def get_circuit_breaker_state(self) -> Dict[str, Any]:
        """Breaker snapshot for diagnostics."""
        return self.circuit_breaker.get_state()
