"""
Enhanced Errors
===============
The normalized error raised by every resilient request.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .codes import ErrorCode, is_retryable


@dataclass(frozen=True)
class RequestContext:
    """Call-site metadata supplied by an API method."""
    endpoint: Optional[str] = None
    method: Optional[str] = None


@dataclass
class ErrorContext:
    """Diagnostic context stamped onto an enhanced error."""
    endpoint: Optional[str] = None
    method: Optional[str] = None
    timestamp: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
    request_id: Optional[str] = None
    retry_count: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"timestamp": self.timestamp}
        if self.endpoint is not None:
            data["endpoint"] = self.endpoint
        if self.method is not None:
            data["method"] = self.method
        if self.request_id is not None:
            data["request_id"] = self.request_id
        if self.retry_count is not None:
            data["retry_count"] = self.retry_count
        return data


class EnhancedError(Exception):
    """
    Classified failure of a Mixpost API request.

    Attributes:
        message: Human readable message, never empty
        status: HTTP-style status (500 without a response, 503 for an open circuit)
        code: Classified error kind
        suggestion: Actionable hint for the caller
        validation_errors: Field name to ordered list of messages
        context: Endpoint, method, timestamp, request id and retry count
    """

    def __init__(
        self,
        message: str,
        status: int,
        code: ErrorCode,
        suggestion: str,
        validation_errors: Optional[Dict[str, List[str]]] = None,
        context: Optional[ErrorContext] = None,
    ):
        self.message = message
        self.status = status
        self.code = code
        self.suggestion = suggestion
        self.validation_errors = validation_errors
        self.context = context or ErrorContext()
        super().__init__(f"[{code.value}] {message} (Status: {status})")

    @property
    def retryable(self) -> bool:
        return is_retryable(self.status, self.code)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for tool responses and structured logs."""
        data: Dict[str, Any] = {
            "message": self.message,
            "status": self.status,
            "code": self.code.value,
            "retryable": self.retryable,
            "suggestion": self.suggestion,
            "context": self.context.to_dict(),
        }
        if self.validation_errors:
            data["errors"] = {k: list(v) for k, v in self.validation_errors.items()}
        return data
