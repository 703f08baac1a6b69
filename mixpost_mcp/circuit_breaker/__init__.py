"""
Mixpost MCP - Circuit Breaker
=============================
Async circuit breaker for the Mixpost API.

States:

1. CLOSED: Normal operation, requests flow through
2. OPEN: Service is failing, requests are immediately rejected
3. HALF_OPEN: Trial requests test whether the service has recovered

Usage:
    from mixpost_mcp.circuit_breaker import CircuitBreaker, CircuitBreakerConfig

    breaker = CircuitBreaker("mixpost", CircuitBreakerConfig(failure_threshold=3))
    accounts = await breaker.execute(fetch_accounts)
"""

from .models import (
    CircuitState,
    CircuitBreakerConfig,
    CircuitBreakerState,
)

from .breaker import CircuitBreaker

__all__ = [
    # Models
    "CircuitState",
    "CircuitBreakerConfig",
    "CircuitBreakerState",
    # Breaker
    "CircuitBreaker",
]
