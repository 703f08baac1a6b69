"""
Circuit Breaker Core
====================
In-memory circuit breaker guarding calls to one downstream service.

State is owned by a single breaker instance and never shared. Every
read-modify-write of the counters happens between suspension points, so
interleaved requests on one event loop see consistent transitions
without a lock.
"""

import math
import time
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

import structlog

from ..errors import EnhancedError, RawFailure, enhance_error
from .models import CircuitBreakerConfig, CircuitBreakerState, CircuitState

logger = structlog.get_logger(__name__)

T = TypeVar("T")

CIRCUIT_OPEN_MESSAGE = "Circuit breaker is open - service temporarily unavailable"


class CircuitBreaker:
    """
    Async circuit breaker.

    Example:
        breaker = CircuitBreaker("mixpost")

        try:
            result = await breaker.execute(lambda: client.get("/accounts"))
        except EnhancedError as exc:
            if exc.code == ErrorCode.CIRCUIT_OPEN:
                ...
    """

    def __init__(
        self,
        name: str,
        config: Optional[CircuitBreakerConfig] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.name = name
        self.config = config or CircuitBreakerConfig()
        self._clock = clock
        self._state = CircuitBreakerState()

    @property
    def state(self) -> CircuitState:
        """Current circuit state."""
        return self._state.state

    def get_state(self) -> Dict[str, Any]:
        """Read-only snapshot of the breaker phase and counters."""
        return {
            "state": self._state.state.value,
            "consecutive_failures": self._state.consecutive_failures,
            "half_open_successes": self._state.half_open_successes,
        }

    @property
    def metrics(self) -> Dict[str, Any]:
        """Get circuit breaker metrics."""
        return {
            "name": self.name,
            **self.get_state(),
            "opened_at": self._state.opened_at,
            "total_calls": self._state.total_calls,
            "total_failures": self._state.total_failures,
            "total_successes": self._state.total_successes,
            "total_rejections": self._state.total_rejections,
        }

    def reset(self) -> None:
        """Force the breaker back to CLOSED (for testing/admin)."""
        self._state = CircuitBreakerState()
        logger.info("circuit_reset", breaker=self.name)

    def _remaining_open_time(self, now: float) -> float:
        opened_at = self._state.opened_at if self._state.opened_at is not None else now
        return opened_at + self.config.reset_timeout - now

    def _check_state(self) -> bool:
        """Check and possibly transition state. Returns True if allowed."""
        if self._state.state != CircuitState.OPEN:
            return True

        if self._remaining_open_time(self._clock()) > 0:
            self._state.total_rejections += 1
            return False

        self._state.state = CircuitState.HALF_OPEN
        self._state.half_open_successes = 0
        logger.info("circuit_half_open", breaker=self.name)
        return True

    def _record_success(self) -> None:
        self._state.total_calls += 1
        self._state.total_successes += 1

        if self._state.state == CircuitState.HALF_OPEN:
            self._state.half_open_successes += 1
            if self._state.half_open_successes >= self.config.success_threshold:
                self._state.state = CircuitState.CLOSED
                self._state.consecutive_failures = 0
                self._state.opened_at = None
                logger.info("circuit_closed", breaker=self.name)

        elif self._state.state == CircuitState.CLOSED:
            # Failures decay by one per success instead of resetting
            self._state.consecutive_failures = max(0, self._state.consecutive_failures - 1)

    def _record_failure(self) -> None:
        self._state.total_calls += 1
        self._state.total_failures += 1
        self._state.consecutive_failures += 1

        if self._state.consecutive_failures >= self.config.failure_threshold:
            self._state.state = CircuitState.OPEN
            self._state.opened_at = self._clock()
            logger.warning(
                "circuit_opened",
                breaker=self.name,
                failures=self._state.consecutive_failures,
            )

    def _open_error(self) -> EnhancedError:
        wait_seconds = math.ceil(self._remaining_open_time(self._clock()))
        return enhance_error(
            RawFailure.circuit_open(
                message=CIRCUIT_OPEN_MESSAGE,
                suggestion=(
                    "Service is experiencing issues. "
                    f"Circuit will reset in {wait_seconds} seconds"
                ),
            )
        )

    async def execute(self, operation: Callable[[], Awaitable[T]]) -> T:
        """
        Execute an operation with circuit breaker protection.

        Args:
            operation: Zero-argument coroutine function to call

        Returns:
            Result of the operation

        Raises:
            EnhancedError: With code CIRCUIT_OPEN when the circuit is open;
                the operation is not called in that case
        """
        if not self._check_state():
            logger.debug("circuit_rejected", breaker=self.name)
            raise self._open_error()

        try:
            result = await operation()
        except Exception:
            self._record_failure()
            raise

        self._record_success()
        return result
