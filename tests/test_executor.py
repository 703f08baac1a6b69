"""
Unit Tests for Resilient Executor
=================================
Composition of the circuit breaker around the retry orchestrator.
"""

import httpx
import pytest

from mixpost_mcp.circuit_breaker import CircuitBreakerConfig
from mixpost_mcp.errors import EnhancedError, ErrorCode, RequestContext
from mixpost_mcp.executor import ResilientExecutor
from mixpost_mcp.retry import RetryPolicy


class CountingOperation:
    def __init__(self, status=None, result="ok"):
        self.status = status
        self.result = result
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.status is None:
            return self.result
        request = httpx.Request("GET", "https://mixpost.test/mixpost/api/ws-1/accounts")
        response = httpx.Response(self.status, request=request, json={"message": "nope"})
        raise httpx.HTTPStatusError("failed", request=request, response=response)


def _executor(sleeps, clock, max_retries=2, threshold=2, enabled=True):
    return ResilientExecutor(
        policy=RetryPolicy(max_retries=max_retries, base_delay=0.01, max_delay=0.05),
        breaker_config=CircuitBreakerConfig(failure_threshold=threshold, reset_timeout=10.0),
        enabled=enabled,
        sleep=sleeps,
        clock=clock,
    )


class TestResilientExecutor:
    """Tests for ResilientExecutor.execute."""

    @pytest.mark.asyncio
    async def test_success(self, sleeps, clock):
        """Should return the operation result."""
        executor = _executor(sleeps, clock)

        assert await executor.execute(CountingOperation()) == "ok"
        assert executor.get_circuit_breaker_state()["state"] == "CLOSED"

    @pytest.mark.asyncio
    async def test_exhausted_request_is_one_breaker_failure(self, sleeps, clock):
        """A request that exhausts its retries should count once toward the breaker."""
        executor = _executor(sleeps, clock, max_retries=2, threshold=3)
        operation = CountingOperation(status=500)

        with pytest.raises(EnhancedError) as exc_info:
            await executor.execute(operation, RequestContext("/accounts", "GET"))

        assert operation.calls == 3
        assert exc_info.value.context.retry_count == 2
        assert executor.get_circuit_breaker_state()["consecutive_failures"] == 1

    @pytest.mark.asyncio
    async def test_opens_and_short_circuits(self, sleeps, clock):
        """Once open, calls should fail with CIRCUIT_OPEN without reaching the operation."""
        executor = _executor(sleeps, clock, max_retries=1, threshold=2)
        operation = CountingOperation(status=503)

        for _ in range(2):
            with pytest.raises(EnhancedError):
                await executor.execute(operation)
        calls_before = operation.calls
        retries_before = len(sleeps.delays)

        with pytest.raises(EnhancedError) as exc_info:
            await executor.execute(operation)

        assert exc_info.value.code == ErrorCode.CIRCUIT_OPEN
        assert exc_info.value.status == 503
        assert operation.calls == calls_before
        assert len(sleeps.delays) == retries_before

    @pytest.mark.asyncio
    async def test_non_retryable_counts_toward_breaker(self, sleeps, clock):
        """Client errors should still count as breaker failures."""
        executor = _executor(sleeps, clock, threshold=2)
        operation = CountingOperation(status=404)

        for _ in range(2):
            with pytest.raises(EnhancedError) as exc_info:
                await executor.execute(operation)
            assert exc_info.value.code == ErrorCode.NOT_FOUND

        assert operation.calls == 2
        assert executor.get_circuit_breaker_state()["state"] == "OPEN"

    @pytest.mark.asyncio
    async def test_recovers_after_reset_timeout(self, sleeps, clock):
        """After the reset timeout the breaker should let a trial call through."""
        executor = _executor(sleeps, clock, max_retries=0, threshold=1)
        with pytest.raises(EnhancedError):
            await executor.execute(CountingOperation(status=500))

        clock.advance(10.0)

        assert await executor.execute(CountingOperation()) == "ok"
        assert executor.get_circuit_breaker_state()["state"] == "HALF_OPEN"


class TestDisabledExecutor:
    """Tests for the retry-disabled path."""

    @pytest.mark.asyncio
    async def test_single_attempt_still_classified(self, sleeps, clock):
        """Disabled resilience should attempt once and still raise an EnhancedError."""
        executor = _executor(sleeps, clock, enabled=False)
        operation = CountingOperation(status=500)

        with pytest.raises(EnhancedError) as exc_info:
            await executor.execute(operation, RequestContext("/accounts", "get"))

        error = exc_info.value
        assert operation.calls == 1
        assert error.code == ErrorCode.INTERNAL_SERVER_ERROR
        assert error.message == "nope"
        assert error.context.method == "GET"
        assert error.context.retry_count is None
        assert sleeps.delays == []

    @pytest.mark.asyncio
    async def test_breaker_untouched(self, sleeps, clock):
        """Disabled resilience should bypass the breaker entirely."""
        executor = _executor(sleeps, clock, threshold=1, enabled=False)

        for _ in range(3):
            with pytest.raises(EnhancedError):
                await executor.execute(CountingOperation(status=503))

        assert executor.get_circuit_breaker_state() == {
            "state": "CLOSED",
            "consecutive_failures": 0,
            "half_open_successes": 0,
        }
