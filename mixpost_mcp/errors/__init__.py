"""
Mixpost MCP - Errors
====================
Error classification for Mixpost API failures.

Usage:
    from mixpost_mcp.errors import enhance_error, EnhancedError

    try:
        response = await client.get("/posts")
        response.raise_for_status()
    except Exception as exc:
        raise enhance_error(exc, RequestContext("/posts", "GET"))
"""

from .codes import ErrorCode, TransportCode, STATUS_CODES, is_retryable
from .exceptions import EnhancedError, ErrorContext, RequestContext
from .classifier import (
    FailureKind,
    RawFailure,
    enhance_error,
    extract_validation_errors,
    get_suggestion,
)

__all__ = [
    # Codes
    "ErrorCode",
    "TransportCode",
    "STATUS_CODES",
    "is_retryable",
    # Exceptions
    "EnhancedError",
    "ErrorContext",
    "RequestContext",
    # Classifier
    "FailureKind",
    "RawFailure",
    "enhance_error",
    "extract_validation_errors",
    "get_suggestion",
]
