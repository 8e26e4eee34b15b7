"""Utility functions for vscodebridge."""

from vscodebridge.utils.exceptions import (
    BridgeError,
    BridgeTransportError,
    CommandError,
    ConfigurationError,
    ConnectionClosedError,
    ErrorCategory,
    FramingError,
    NotConnectedError,
    RequestTimeoutError,
    classify_exception,
    error_message,
    sanitize_error_message,
)

__all__ = [
    "BridgeError",
    "BridgeTransportError",
    "CommandError",
    "ConfigurationError",
    "ConnectionClosedError",
    "ErrorCategory",
    "FramingError",
    "NotConnectedError",
    "RequestTimeoutError",
    "classify_exception",
    "error_message",
    "sanitize_error_message",
]
