"""Command dispatch with an error boundary around every handler."""

from __future__ import annotations

import inspect
from typing import Any, Awaitable, Callable

from loguru import logger

from vscodebridge.protocol.messages import RequestEnvelope, ResponseEnvelope
from vscodebridge.utils.exceptions import BridgeError, classify_exception, error_message, sanitize_error_message

CommandHandler = Callable[[dict[str, Any]], Awaitable[Any] | Any]


def unknown_command_response(request: RequestEnvelope) -> ResponseEnvelope:
    """Build the standard unknown-command response."""
    return ResponseEnvelope.failure(request.id, f"Unknown command: {request.command}")


def handler_error_response(request: RequestEnvelope, exc: Exception) -> ResponseEnvelope:
    """Map a handler failure to an error response and log it."""
    message = error_message(exc)
    if isinstance(exc, BridgeError):
        logger.warning("Command {} failed with {}: {}", request.command, exc.code, exc.message)
    else:
        code, category, _ = classify_exception(exc)
        logger.opt(exception=exc).error(
            "Command {} failed with [{}/{}]: {}",
            request.command,
            code,
            category.value,
            sanitize_error_message(message),
        )
    return ResponseEnvelope.failure(request.id, message)


class CommandDispatcher:
    """Maps command names to handlers and turns outcomes into responses."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}

    @property
    def commands(self) -> list[str]:
        return sorted(self._handlers)

    def __contains__(self, command: object) -> bool:
        return command in self._handlers

    def register(self, command: str, handler: CommandHandler) -> None:
        if not command:
            raise ValueError("command name must be non-empty")
        if command in self._handlers:
            raise ValueError(f"handler already registered for command: {command}")
        self._handlers[command] = handler

    def register_many(self, handlers: dict[str, CommandHandler]) -> None:
        for command, handler in handlers.items():
            self.register(command, handler)

    async def dispatch(self, request: RequestEnvelope) -> ResponseEnvelope:
        handler = self._handlers.get(request.command)
        if handler is None:
            logger.warning("Unknown command: {}", request.command)
            return unknown_command_response(request)
        try:
            outcome = handler(request.arguments)
            result = await outcome if inspect.isawaitable(outcome) else outcome
        except Exception as exc:
            return handler_error_response(request, exc)
        return ResponseEnvelope.success(request.id, result)
