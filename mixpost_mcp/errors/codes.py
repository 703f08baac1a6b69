"""
Error Codes
===========
Normalized error kinds produced by the classifier.
"""

from enum import Enum


class ErrorCode(str, Enum):
    """Classified error kinds."""
    # Client errors (4xx)
    BAD_REQUEST = "BAD_REQUEST"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"
    CONFLICT = "CONFLICT"
    UNPROCESSABLE_ENTITY = "UNPROCESSABLE_ENTITY"
    TOO_MANY_REQUESTS = "TOO_MANY_REQUESTS"

    # Server errors (5xx)
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"
    BAD_GATEWAY = "BAD_GATEWAY"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    GATEWAY_TIMEOUT = "GATEWAY_TIMEOUT"

    # Transport errors
    NETWORK_ERROR = "NETWORK_ERROR"
    TIMEOUT = "TIMEOUT"
    CONNECTION_REFUSED = "CONNECTION_REFUSED"

    # Circuit breaker
    CIRCUIT_OPEN = "CIRCUIT_OPEN"


class TransportCode(str, Enum):
    """Transport-level failure markers carried by raw failures."""
    CONNECTION_ABORTED = "ECONNABORTED"
    CONNECTION_REFUSED = "ECONNREFUSED"


STATUS_CODES = {
    400: ErrorCode.BAD_REQUEST,
    401: ErrorCode.UNAUTHORIZED,
    403: ErrorCode.FORBIDDEN,
    404: ErrorCode.NOT_FOUND,
    405: ErrorCode.METHOD_NOT_ALLOWED,
    409: ErrorCode.CONFLICT,
    422: ErrorCode.UNPROCESSABLE_ENTITY,
    429: ErrorCode.TOO_MANY_REQUESTS,
    500: ErrorCode.INTERNAL_SERVER_ERROR,
    502: ErrorCode.BAD_GATEWAY,
    503: ErrorCode.SERVICE_UNAVAILABLE,
    504: ErrorCode.GATEWAY_TIMEOUT,
}

TIMEOUT_STATUS = 408
CIRCUIT_OPEN_STATUS = 503
NO_RESPONSE_STATUS = 500


def is_retryable(status: int, code: ErrorCode) -> bool:
    """
    Decide whether a classified failure is worth another attempt.

    Among client errors only rate limiting (429) and timeouts (408) are
    retryable. Server errors are retryable. An open circuit never is.
    """
    if code == ErrorCode.CIRCUIT_OPEN:
        return False
    if 400 <= status < 500:
        return status in (408, 429)
    return True
