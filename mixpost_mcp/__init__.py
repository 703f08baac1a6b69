"""
Mixpost MCP
===========
Resilient Mixpost API client exposed as MCP tools.
"""

__version__ = "1.0.0"

# Errors
from mixpost_mcp.errors import (
    ErrorCode,
    EnhancedError,
    ErrorContext,
    RequestContext,
    RawFailure,
    enhance_error,
    is_retryable,
)

# Circuit Breaker
from mixpost_mcp.circuit_breaker import (
    CircuitBreaker,
    CircuitBreakerConfig,
    CircuitState,
)

# Retry
from mixpost_mcp.retry import (
    RetryPolicy,
    RetryOrchestrator,
    calculate_backoff_delay,
)

# Executor
from mixpost_mcp.executor import ResilientExecutor

# Config
from mixpost_mcp.config import MixpostConfig, ConfigurationError

# Client
from mixpost_mcp.http import MixpostClient

__all__ = [
    # Errors
    "ErrorCode",
    "EnhancedError",
    "ErrorContext",
    "RequestContext",
    "RawFailure",
    "enhance_error",
    "is_retryable",
    # Circuit Breaker
    "CircuitBreaker",
    "CircuitBreakerConfig",
    "CircuitState",
    # Retry
    "RetryPolicy",
    "RetryOrchestrator",
    "calculate_backoff_delay",
    # Executor
    "ResilientExecutor",
    # Config
    "MixpostConfig",
    "ConfigurationError",
    # Client
    "MixpostClient",
]
