"""
Mixpost MCP - Retry
===================
Exponential backoff with jitter for transient Mixpost failures.
"""

from .models import RetryPolicy
from .backoff import RetryOrchestrator, calculate_backoff_delay

__all__ = [
    "RetryPolicy",
    "RetryOrchestrator",
    "calculate_backoff_delay",
]
