"""
Retry Models
============
Immutable retry policy shared by every request of an executor.
"""

from dataclasses import dataclass
from typing import Callable, Optional

from ..errors import EnhancedError


@dataclass(frozen=True)
class RetryPolicy:
    """
    Retry configuration.

    Attributes:
        max_retries: Retries after the initial attempt
        base_delay: Delay in seconds before the first retry
        max_delay: Ceiling for any single delay, in seconds
        should_retry: Predicate replacing the classifier's retryable flag
    """
    max_retries: int = 3
    base_delay: float = 1.0
    max_delay: float = 10.0
    should_retry: Optional[Callable[[EnhancedError], bool]] = None

    def __post_init__(self):
        if self.max_retries < 0:
            raise ValueError("max_retries must be non-negative")
        if self.base_delay <= 0:
            raise ValueError("base_delay must be positive")
        if self.max_delay < self.base_delay:
            raise ValueError("max_delay must be at least base_delay")
