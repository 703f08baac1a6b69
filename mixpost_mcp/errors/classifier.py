"""
Error Classifier
================
Maps raw transport and HTTP failures onto EnhancedError.

Whatever was raised is first normalized into a RawFailure. Status, code,
message, suggestion and validation errors are then resolved from that
normalized shape in a fixed priority order, so the rules can be audited
and tested without a live transport.
"""

import asyncio
import errno
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

import httpx

from .codes import (
    CIRCUIT_OPEN_STATUS,
    NO_RESPONSE_STATUS,
    STATUS_CODES,
    TIMEOUT_STATUS,
    ErrorCode,
    TransportCode,
)
from .exceptions import EnhancedError, ErrorContext, RequestContext

REQUEST_ID_HEADER = "X-Request-ID"
NETWORK_ERROR_MESSAGE = "Network Error"
DEFAULT_MESSAGE = "An unexpected error occurred"

# Not a real transport code: marks a rejection synthesized by the breaker.
CIRCUIT_OPEN_MARKER = ErrorCode.CIRCUIT_OPEN.value
NETWORK_MARKER = "ERR_NETWORK"

SUGGESTIONS = {
    ErrorCode.UNAUTHORIZED: (
        "Check your API key and ensure it is valid and has the necessary permissions"
    ),
    ErrorCode.FORBIDDEN: (
        "You do not have permission to access this resource. Check your workspace access"
    ),
    ErrorCode.NOT_FOUND: (
        "The requested resource was not found. Verify the ID and that it exists"
    ),
    ErrorCode.TOO_MANY_REQUESTS: (
        "Rate limit exceeded. Please wait before making additional requests"
    ),
    ErrorCode.UNPROCESSABLE_ENTITY: (
        "Validation failed. Check the validation errors for the fields that need fixing"
    ),
    ErrorCode.TIMEOUT: (
        "Request timed out. The server may be slow or unresponsive. Try again later"
    ),
    ErrorCode.NETWORK_ERROR: (
        "Network connection failed. Check your internet connection and server URL"
    ),
    ErrorCode.SERVICE_UNAVAILABLE: (
        "Service is temporarily unavailable. This is usually temporary, please try again later"
    ),
}
CIRCUIT_OPEN_SUGGESTION = "Service is experiencing issues. Please wait before retrying"
DEFAULT_SUGGESTION = (
    "An error occurred. If this persists, please check the API documentation "
    "or contact support"
)

_TRANSPORT_CODES = {
    TransportCode.CONNECTION_ABORTED.value: ErrorCode.TIMEOUT,
    TransportCode.CONNECTION_REFUSED.value: ErrorCode.CONNECTION_REFUSED,
    CIRCUIT_OPEN_MARKER: ErrorCode.CIRCUIT_OPEN,
}

_STATUS_OVERRIDES = {
    ErrorCode.TIMEOUT: TIMEOUT_STATUS,
    ErrorCode.CIRCUIT_OPEN: CIRCUIT_OPEN_STATUS,
}

_ENHANCED_TRANSPORT = {code: marker for marker, code in _TRANSPORT_CODES.items()}
_ENHANCED_TRANSPORT[ErrorCode.NETWORK_ERROR] = NETWORK_MARKER


class FailureKind(str, Enum):
    """Shape of a raw failure, in classification priority order."""
    TRANSPORT = "transport"  # carries a transport code
    RESPONSE = "response"    # a response was received
    MESSAGE = "message"      # a bare message, or nothing at all


@dataclass(frozen=True)
class RawFailure:
    """Normalized view of anything raised by the transport."""
    status: Optional[int] = None
    has_response: bool = False
    transport_code: Optional[str] = None
    message: Optional[str] = None
    body: Any = None
    validation_errors: Any = None
    suggestion: Optional[str] = None
    endpoint: Optional[str] = None
    method: Optional[str] = None
    request_id: Optional[str] = None

    @property
    def kind(self) -> FailureKind:
        if self.transport_code is not None:
            return FailureKind.TRANSPORT
        if self.has_response:
            return FailureKind.RESPONSE
        return FailureKind.MESSAGE

    @classmethod
    def circuit_open(cls, message: str, suggestion: str) -> "RawFailure":
        """Failure synthesized locally when a breaker rejects a call."""
        return cls(
            status=CIRCUIT_OPEN_STATUS,
            transport_code=CIRCUIT_OPEN_MARKER,
            message=message,
            suggestion=suggestion,
        )

    @classmethod
    def from_error(cls, error: Any) -> "RawFailure":
        """
        Normalize a raised error.

        Args:
            error: Exception, API-error shaped mapping, or any other object

        Returns:
            RawFailure describing what is known about the failure
        """
        if isinstance(error, RawFailure):
            return error
        if isinstance(error, EnhancedError):
            return cls._from_enhanced(error)
        if isinstance(error, httpx.HTTPStatusError):
            return cls._from_response(error.response, error.request)
        if isinstance(error, httpx.TimeoutException):
            return cls(
                transport_code=TransportCode.CONNECTION_ABORTED.value,
                message=str(error) or "Request timed out",
                **_request_details(error),
            )
        if isinstance(error, httpx.ConnectError) and _is_refused(error):
            return cls(
                transport_code=TransportCode.CONNECTION_REFUSED.value,
                message=str(error) or "Connection refused",
                **_request_details(error),
            )
        if isinstance(error, httpx.TransportError):
            return cls(
                transport_code=NETWORK_MARKER,
                message=NETWORK_ERROR_MESSAGE,
                **_request_details(error),
            )
        if isinstance(error, (TimeoutError, asyncio.TimeoutError)):
            return cls(
                transport_code=TransportCode.CONNECTION_ABORTED.value,
                message=str(error) or "Request timed out",
            )
        if isinstance(error, ConnectionRefusedError):
            return cls(
                transport_code=TransportCode.CONNECTION_REFUSED.value,
                message=str(error) or "Connection refused",
            )
        if isinstance(error, Mapping):
            return cls._from_mapping(error)
        if isinstance(error, BaseException):
            return cls(message=str(error) or None)
        return cls()

    @classmethod
    def _from_enhanced(cls, error: EnhancedError) -> "RawFailure":
        marker = _ENHANCED_TRANSPORT.get(error.code)
        return cls(
            status=error.status,
            has_response=marker is None,
            transport_code=marker,
            message=error.message,
            validation_errors=error.validation_errors,
            suggestion=error.suggestion,
            endpoint=error.context.endpoint,
            method=error.context.method,
            request_id=error.context.request_id,
        )

    @classmethod
    def _from_response(
        cls,
        response: httpx.Response,
        request: httpx.Request,
    ) -> "RawFailure":
        try:
            body = response.json()
        except (ValueError, httpx.ResponseNotRead):
            body = None

        return cls(
            status=response.status_code,
            has_response=True,
            body=body,
            endpoint=request.url.path,
            method=request.method,
            request_id=(
                request.headers.get(REQUEST_ID_HEADER)
                or response.headers.get(REQUEST_ID_HEADER)
            ),
        )

    @classmethod
    def _from_mapping(cls, error: Mapping) -> "RawFailure":
        status = _as_status(error.get("status"))
        response = error.get("response")
        body = error.get("data")
        if isinstance(response, Mapping):
            if status is None:
                status = _as_status(response.get("status"))
            if body is None:
                body = response.get("data")

        code = error.get("code")
        message = error.get("message")
        suggestion = error.get("suggestion")
        return cls(
            status=status,
            has_response=response is not None,
            transport_code=code if isinstance(code, str) else None,
            message=message if isinstance(message, str) and message else None,
            body=body,
            validation_errors=error.get("errors"),
            suggestion=suggestion if isinstance(suggestion, str) else None,
        )


def _as_status(value: Any) -> Optional[int]:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None


def _request_details(error: httpx.RequestError) -> Dict[str, Optional[str]]:
    try:
        request = error.request
    except RuntimeError:
        # Raised by httpx when the error was built without a request
        return {}
    return {
        "endpoint": request.url.path,
        "method": request.method,
        "request_id": request.headers.get(REQUEST_ID_HEADER),
    }


def _is_refused(error: BaseException) -> bool:
    seen = set()
    current: Optional[BaseException] = error
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        if isinstance(current, ConnectionRefusedError):
            return True
        if isinstance(current, OSError) and current.errno == errno.ECONNREFUSED:
            return True
        if "refused" in str(current).lower():
            return True
        current = current.__cause__ or current.__context__
    return False


def _resolve_code(raw: RawFailure, status: int) -> ErrorCode:
    if raw.kind is FailureKind.TRANSPORT and raw.transport_code in _TRANSPORT_CODES:
        return _TRANSPORT_CODES[raw.transport_code]

    # Only a failure that never got a response is a network error
    if not raw.has_response and (
        raw.transport_code == NETWORK_MARKER or raw.message == NETWORK_ERROR_MESSAGE
    ):
        return ErrorCode.NETWORK_ERROR

    code = STATUS_CODES.get(status)
    if code is not None:
        return code
    return ErrorCode.INTERNAL_SERVER_ERROR if status >= 500 else ErrorCode.BAD_REQUEST


def _resolve_message(raw: RawFailure) -> str:
    if raw.message:
        return raw.message

    if isinstance(raw.body, Mapping):
        for key in ("message", "error"):
            value = raw.body.get(key)
            if isinstance(value, str) and value:
                return value

    if raw.has_response and raw.status is not None:
        return f"Request failed with status code {raw.status}"
    return DEFAULT_MESSAGE


def _normalize_messages(value: Any) -> List[str]:
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value]
    if value is None:
        return []
    return [str(value)]


def extract_validation_errors(raw: RawFailure) -> Optional[Dict[str, List[str]]]:
    """
    Collect field validation messages from a raw failure.

    Every value is normalized to a list of strings. Fields left without
    messages are dropped, and None is returned when no field survives.
    """
    source = raw.validation_errors
    if not isinstance(source, Mapping) and isinstance(raw.body, Mapping):
        source = raw.body.get("errors")
    if not isinstance(source, Mapping):
        return None

    result: Dict[str, List[str]] = {}
    for field_name, value in source.items():
        messages = _normalize_messages(value)
        if messages:
            result[str(field_name)] = messages
    return result or None


def get_suggestion(code: ErrorCode, raw_suggestion: Optional[str] = None) -> str:
    """Actionable hint for a classified error."""
    if code == ErrorCode.CIRCUIT_OPEN:
        return raw_suggestion or CIRCUIT_OPEN_SUGGESTION
    return SUGGESTIONS.get(code, DEFAULT_SUGGESTION)


def enhance_error(
    error: Any,
    context: Optional[RequestContext] = None,
    retry_count: Optional[int] = None,
) -> EnhancedError:
    """
    Classify a raw failure into an EnhancedError.

    Never raises: any input, including an empty dict, yields a value.

    Args:
        error: Whatever the operation raised
        context: Endpoint and method of the call site
        retry_count: Attempt number to stamp onto the error context

    Returns:
        EnhancedError ready to be raised by the caller
    """
    raw = RawFailure.from_error(error)

    base_status = raw.status if raw.status is not None else NO_RESPONSE_STATUS
    code = _resolve_code(raw, base_status)
    status = _STATUS_OVERRIDES.get(code, base_status)

    endpoint = (context.endpoint if context else None) or raw.endpoint
    method = (context.method if context else None) or raw.method

    return EnhancedError(
        message=_resolve_message(raw),
        status=status,
        code=code,
        suggestion=get_suggestion(code, raw.suggestion),
        validation_errors=extract_validation_errors(raw),
        context=ErrorContext(
            endpoint=endpoint,
            method=method.upper() if method else None,
            request_id=raw.request_id,
            retry_count=retry_count,
        ),
    )
