"""
Error Utility Module

This module defines the single error type raised by the Weaviate client and the tool
layer. Rather than a hierarchy of subclasses, every failure is a ``WeaviateApiError``
tagged with an ``ErrorKind`` and carrying the payload that belongs to that kind
(retry-after seconds for rate limits, per-field messages for validation failures).

Author: Weaviate Team
Version: 1.0.0
"""

from enum import Enum
from typing import Any, Dict, List, Optional

DEFAULT_RETRY_AFTER_SECONDS = 60

# Substrings that mark a plain exception as a transient network failure
_RETRYABLE_HINTS = ("network", "timeout", "econnreset")


class ErrorKind(str, Enum):
    RATE_LIMIT = "rate_limit"
    AUTHENTICATION = "authentication"
    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    SCHEMA = "schema"
    API = "api"


# Machine-readable codes surfaced in error responses
ERROR_CODES = {
    ErrorKind.RATE_LIMIT: "RATE_LIMIT_EXCEEDED",
    ErrorKind.AUTHENTICATION: "AUTHENTICATION_FAILED",
    ErrorKind.NOT_FOUND: "NOT_FOUND",
    ErrorKind.VALIDATION: "VALIDATION_ERROR",
    ErrorKind.SCHEMA: "SCHEMA_ERROR",
    ErrorKind.API: "WEAVIATE_ERROR",
}


class WeaviateApiError(Exception):
    """
    A classified failure from the Weaviate API or from argument validation.

    Instances are built through the kind-specific constructors (``rate_limit``,
    ``authentication``, ``not_found``, ``validation``, ``schema``, ``api``) and are
    read-only afterwards.

    Attributes:
        kind (ErrorKind): Which variant of the taxonomy this error is
        message (str): Human-readable description
        status_code (Optional[int]): HTTP status the error was derived from
        retryable (bool): Whether repeating the call may succeed
        retry_after_seconds (Optional[int]): Rate-limit back-off hint
        details (Dict[str, List[str]]): Field-level messages for validation errors
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        status_code: Optional[int] = None,
        retryable: bool = False,
        retry_after_seconds: Optional[int] = None,
        details: Optional[Dict[str, List[str]]] = None,
    ):
        super().__init__(message)
        self._kind = ErrorKind(kind)
        self._message = message
        self._status_code = status_code
        self._retryable = retryable
        self._retry_after_seconds = retry_after_seconds
        self._details = dict(details or {})

    @classmethod
    def rate_limit(cls, message: str, retry_after_seconds: int = DEFAULT_RETRY_AFTER_SECONDS) -> "WeaviateApiError":
        return cls(ErrorKind.RATE_LIMIT, message, 429, True, retry_after_seconds=retry_after_seconds)

    @classmethod
    def authentication(cls, message: str) -> "WeaviateApiError":
        return cls(ErrorKind.AUTHENTICATION, message, 401, False)

    @classmethod
    def not_found(cls, entity_type: str, identifier: str) -> "WeaviateApiError":
        return cls(ErrorKind.NOT_FOUND, f"{entity_type} with ID '{identifier}' not found", 404, False)

    @classmethod
    def validation(cls, message: str, details: Optional[Dict[str, List[str]]] = None) -> "WeaviateApiError":
        return cls(ErrorKind.VALIDATION, message, 400, False, details=details)

    @classmethod
    def schema(cls, message: str) -> "WeaviateApiError":
        return cls(ErrorKind.SCHEMA, message, 422, False)

    @classmethod
    def api(cls, message: str, status_code: Optional[int] = None) -> "WeaviateApiError":
        return cls(ErrorKind.API, message, status_code, False)

    @property
    def kind(self) -> ErrorKind:
        return self._kind

    @property
    def message(self) -> str:
        return self._message

    @property
    def status_code(self) -> Optional[int]:
        return self._status_code

    @property
    def retryable(self) -> bool:
        return self._retryable

    @property
    def retry_after_seconds(self) -> Optional[int]:
        return self._retry_after_seconds

    @property
    def details(self) -> Dict[str, List[str]]:
        return dict(self._details)

    @property
    def code(self) -> str:
        return ERROR_CODES[self._kind]

    def __repr__(self) -> str:
        return f"WeaviateApiError(kind={self._kind.value!r}, message={self._message!r}, status_code={self._status_code!r})"


def is_retryable_error(error: BaseException) -> bool:
    """
    Decide whether an error is worth retrying.

    Classified errors answer from their own flag. Any other exception is judged by a
    substring heuristic on its message (network, timeout, connection reset); this is
    a hint for callers, not a guarantee.

    Args:
        error (BaseException): Error raised by the client or the transport

    Returns:
        bool: True if the caller may retry the call
    """
    if isinstance(error, WeaviateApiError):
        return error.retryable
    if isinstance(error, Exception):
        msg = str(error).lower()
        return any(hint in msg for hint in _RETRYABLE_HINTS)
    return False


def format_error_for_logging(error: BaseException) -> Dict[str, Any]:
    """
    Produce a JSON-safe description of an error, including kind-specific payload.

    Args:
        error (BaseException): Error to describe

    Returns:
        Dict[str, Any]: Structured error description
    """
    if isinstance(error, WeaviateApiError):
        info: Dict[str, Any] = {
            "name": "WeaviateApiError",
            "kind": error.kind.value,
            "message": error.message,
            "code": error.code,
            "status_code": error.status_code,
            "retryable": error.retryable,
        }
        if error.kind is ErrorKind.RATE_LIMIT:
            info["retry_after_seconds"] = error.retry_after_seconds
        elif error.kind is ErrorKind.VALIDATION:
            info["details"] = error.details
        return info
    return {
        "name": type(error).__name__,
        "message": str(error),
    }
