"""
Exception hierarchy and error helpers for vscodebridge.

Provides:
- Bridge exception classes with error codes
- Error categorization (retryable, fatal, timeout, ...)
- Safe error message formatting (no sensitive data leak)
- Error message extraction for handler failures
"""

from __future__ import annotations

import asyncio
import json
import re
from enum import Enum
from typing import Any


class ErrorCategory(Enum):
    """Error categories for classification."""
    RECOVERABLE = "recoverable"
    RETRYABLE = "retryable"
    FATAL = "fatal"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    PERMISSION = "permission"
    TIMEOUT = "timeout"


class BridgeError(Exception):
    """Base exception for all vscodebridge errors."""

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        category: ErrorCategory = ErrorCategory.FATAL,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.code,
            "message": self.message,
            "category": self.category.value,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class BridgeTransportError(BridgeError):
    """Socket level failure: connect refused, write error, unexpected close."""

    def __init__(self, message: str, code: str = "TRANSPORT_ERROR", details: dict[str, Any] | None = None):
        super().__init__(message, code=code, category=ErrorCategory.RETRYABLE, details=details)


class NotConnectedError(BridgeTransportError):
    """Raised by send_request while the client is not connected."""

    def __init__(self, state: str | None = None):
        details = {"state": state} if state else None
        super().__init__("IPC socket is not connected", code="NOT_CONNECTED", details=details)


class ConnectionClosedError(BridgeTransportError):
    """Raised for requests still pending when the connection goes away."""

    def __init__(self, message: str = "Connection closed"):
        super().__init__(message, code="CONNECTION_CLOSED")


class FramingError(BridgeError):
    """A single inbound message could not be decoded."""

    def __init__(self, message: str, request_id: str | None = None):
        details = {"request_id": request_id} if request_id else None
        super().__init__(message, code="FRAMING_ERROR", category=ErrorCategory.VALIDATION, details=details)
        self.request_id = request_id


class RequestTimeoutError(BridgeError):
    """No response arrived within the request timeout."""

    def __init__(self, command: str, timeout_seconds: float):
        super().__init__(
            "Request timeout",
            code="TIMEOUT",
            category=ErrorCategory.TIMEOUT,
            details={"command": command, "timeout_seconds": timeout_seconds},
        )


class CommandError(BridgeError):
    """The remote side answered a request with an error string."""

    def __init__(self, message: str, command: str | None = None):
        details = {"command": command} if command else None
        super().__init__(message, code="COMMAND_ERROR", category=ErrorCategory.RECOVERABLE, details=details)


class ConfigurationError(BridgeError):
    """Missing or invalid bridge configuration."""

    def __init__(self, message: str, field: str | None = None):
        details = {"field": field} if field else None
        super().__init__(message, code="CONFIG_ERROR", category=ErrorCategory.VALIDATION, details=details)


_SENSITIVE_PATTERNS = [
    re.compile(r"(api[_-]?key|token|secret|password|auth)[=:]\s*['\"]?([^\s'\"]+)['\"]?", re.IGNORECASE),
    re.compile(r"bearer\s+[a-zA-Z0-9\-._~+/]+=*", re.IGNORECASE),
    re.compile(r"[a-zA-Z0-9]{32,}"),
]


def sanitize_error_message(message: str, replacement: str = "[REDACTED]") -> str:
    """Remove sensitive information from error messages."""
    sanitized = message
    for pattern in _SENSITIVE_PATTERNS:
        sanitized = pattern.sub(replacement, sanitized)
    return sanitized


def classify_exception(exc: BaseException) -> tuple[str, ErrorCategory, bool]:
    """
    Classify an exception and return (error_code, category, should_retry).

    Returns:
        Tuple of (error_code, category, should_retry)
    """
    if isinstance(exc, BridgeError):
        return exc.code, exc.category, exc.category is ErrorCategory.RETRYABLE

    if isinstance(exc, FileNotFoundError):
        return "FILE_NOT_FOUND", ErrorCategory.NOT_FOUND, False

    if isinstance(exc, FileExistsError):
        return "FILE_EXISTS", ErrorCategory.VALIDATION, False

    if isinstance(exc, PermissionError):
        return "PERMISSION_DENIED", ErrorCategory.PERMISSION, False

    if isinstance(exc, asyncio.TimeoutError):
        return "TIMEOUT", ErrorCategory.TIMEOUT, True

    if isinstance(exc, ConnectionError):
        return "CONNECTION_ERROR", ErrorCategory.RETRYABLE, True

    if isinstance(exc, json.JSONDecodeError):
        return "JSON_PARSE_ERROR", ErrorCategory.VALIDATION, False

    if isinstance(exc, (ValueError, KeyError, TypeError)):
        return "INVALID_ARGUMENT", ErrorCategory.VALIDATION, False

    exc_str = str(exc).lower()
    if "timeout" in exc_str or "timed out" in exc_str:
        return "TIMEOUT", ErrorCategory.TIMEOUT, True

    if "not found" in exc_str:
        return "NOT_FOUND", ErrorCategory.NOT_FOUND, False

    if "connection" in exc_str:
        return "CONNECTION_ERROR", ErrorCategory.RETRYABLE, True

    return "INTERNAL_ERROR", ErrorCategory.FATAL, False


def error_message(exc: BaseException) -> str:
    """Message to report for an exception, never empty."""
    if isinstance(exc, BridgeError):
        return exc.message
    if isinstance(exc, KeyError) and exc.args:
        return f"Missing argument: {exc.args[0]}"
    text = str(exc).strip()
    return text or type(exc).__name__
