"""Tests for vscodebridge.utils.exceptions module."""

from __future__ import annotations

import asyncio
import json

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


class TestExceptionClasses:
    """Test bridge exception classes."""

    def test_bridge_error_to_dict(self) -> None:
        exc = BridgeError("test message", code="TEST_CODE")
        assert exc.to_dict() == {
            "error": "TEST_CODE",
            "message": "test message",
            "category": ErrorCategory.FATAL.value,
            "details": {},
        }
        assert str(exc) == "[TEST_CODE] test message"

    def test_not_connected_is_transport_error(self) -> None:
        exc = NotConnectedError("reconnecting")
        assert isinstance(exc, BridgeTransportError)
        assert exc.code == "NOT_CONNECTED"
        assert exc.message == "IPC socket is not connected"
        assert exc.details == {"state": "reconnecting"}

    def test_connection_closed_default_message(self) -> None:
        exc = ConnectionClosedError()
        assert exc.code == "CONNECTION_CLOSED"
        assert exc.message == "Connection closed"
        assert exc.category == ErrorCategory.RETRYABLE

    def test_timeout_error_details(self) -> None:
        exc = RequestTimeoutError("renameFile", 5.0)
        assert exc.code == "TIMEOUT"
        assert exc.category == ErrorCategory.TIMEOUT
        assert exc.message == "Request timeout"
        assert exc.details == {"command": "renameFile", "timeout_seconds": 5.0}

    def test_framing_error_keeps_request_id(self) -> None:
        exc = FramingError("bad", request_id="req_1")
        assert exc.request_id == "req_1"
        assert exc.details == {"request_id": "req_1"}
        assert FramingError("bad").request_id is None

    def test_command_error_message_is_remote_text(self) -> None:
        exc = CommandError("Unknown command: nope", command="nope")
        assert exc.message == "Unknown command: nope"
        assert exc.details == {"command": "nope"}

    def test_configuration_error(self) -> None:
        exc = ConfigurationError("missing", field="socket_path")
        assert exc.code == "CONFIG_ERROR"
        assert exc.category == ErrorCategory.VALIDATION


class TestSanitizeErrorMessage:
    def test_redacts_token_assignment(self) -> None:
        assert "abc123" not in sanitize_error_message("token=abc123 failed")

    def test_redacts_bearer(self) -> None:
        out = sanitize_error_message("Authorization: Bearer abcdef.ghijk")
        assert "abcdef" not in out

    def test_plain_message_untouched(self) -> None:
        assert sanitize_error_message("file not found") == "file not found"


class TestClassifyException:
    def test_bridge_error_uses_own_code(self) -> None:
        code, category, retry = classify_exception(ConnectionClosedError())
        assert code == "CONNECTION_CLOSED"
        assert category == ErrorCategory.RETRYABLE
        assert retry is True

    def test_builtin_mappings(self) -> None:
        assert classify_exception(FileNotFoundError("x"))[0] == "FILE_NOT_FOUND"
        assert classify_exception(FileExistsError("x"))[0] == "FILE_EXISTS"
        assert classify_exception(asyncio.TimeoutError())[1] == ErrorCategory.TIMEOUT
        assert classify_exception(ConnectionResetError())[0] == "CONNECTION_ERROR"
        assert classify_exception(json.JSONDecodeError("x", "doc", 0))[0] == "JSON_PARSE_ERROR"
        assert classify_exception(ValueError("x"))[0] == "INVALID_ARGUMENT"

    def test_fallback_is_internal(self) -> None:
        assert classify_exception(RuntimeError("boom")) == ("INTERNAL_ERROR", ErrorCategory.FATAL, False)


class TestErrorMessage:
    def test_bridge_error_message_without_code(self) -> None:
        assert error_message(CommandError("nope")) == "nope"

    def test_plain_exception_text(self) -> None:
        assert error_message(RuntimeError("boom")) == "boom"

    def test_empty_exception_falls_back_to_class_name(self) -> None:
        assert error_message(RuntimeError()) == "RuntimeError"

    def test_key_error_is_readable(self) -> None:
        assert error_message(KeyError("oldUri")) == "Missing argument: oldUri"
