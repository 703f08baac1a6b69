"""
Circuit Breaker Models
======================
Configuration and runtime state for the circuit breaker.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class CircuitState(str, Enum):
    """Circuit breaker states."""
    CLOSED = "CLOSED"        # Normal operation
    OPEN = "OPEN"            # Failing, reject requests
    HALF_OPEN = "HALF_OPEN"  # Testing recovery


@dataclass(frozen=True)
class CircuitBreakerConfig:
    """Configuration for a circuit breaker."""
    failure_threshold: int = 5        # Failures before opening
    reset_timeout: float = 60.0       # Seconds to stay open before half-open
    monitoring_period: float = 60.0   # Reserved for windowed failure accounting
    success_threshold: int = 3        # Successes to close from half-open

    def __post_init__(self):
        if self.failure_threshold < 1:
            raise ValueError("failure_threshold must be at least 1")
        if self.reset_timeout <= 0:
            raise ValueError("reset_timeout must be positive")
        if self.monitoring_period <= 0:
            raise ValueError("monitoring_period must be positive")
        if self.success_threshold < 1:
            raise ValueError("success_threshold must be at least 1")


@dataclass
class CircuitBreakerState:
    """Runtime state of a circuit breaker."""
    state: CircuitState = CircuitState.CLOSED
    consecutive_failures: int = 0
    half_open_successes: int = 0
    opened_at: Optional[float] = None

    # Metrics
    total_calls: int = 0
    total_failures: int = 0
    total_successes: int = 0
    total_rejections: int = 0
