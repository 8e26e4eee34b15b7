"""Persistent client for the editor bridge with bounded reconnection."""

from __future__ import annotations

import asyncio
import contextlib
from enum import Enum
from typing import TYPE_CHECKING, Any

from loguru import logger

from vscodebridge.client.pending import PendingRequests
from vscodebridge.protocol.codec import decode_response, encode_request
from vscodebridge.protocol.messages import RequestEnvelope
from vscodebridge.transport.base import Transport, TransportFactory
from vscodebridge.utils.exceptions import (
    BridgeError,
    BridgeTransportError,
    ConnectionClosedError,
    FramingError,
    NotConnectedError,
)

if TYPE_CHECKING:
    from vscodebridge.config.schema import BridgeSettings

DEFAULT_REQUEST_TIMEOUT = 5.0
DEFAULT_RECONNECT_DELAY = 1.0
DEFAULT_MAX_RECONNECT_ATTEMPTS = 5


class ConnectionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    RECONNECTING = "reconnecting"


class BridgeClient:
    """Sends commands to the editor host and correlates the responses.

    Lifecycle: ``connect()`` once (failures propagate), then
    ``send_request()`` any number of times concurrently, then ``close()``.
    After an unexpected drop the client retries every ``reconnect_delay``
    seconds, at most ``max_reconnect_attempts`` times; requests issued in the
    meantime fail immediately instead of being queued.
    """

    def __init__(
        self,
        transport_factory: TransportFactory,
        *,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        reconnect_delay: float = DEFAULT_RECONNECT_DELAY,
        max_reconnect_attempts: int = DEFAULT_MAX_RECONNECT_ATTEMPTS,
    ):
        self.transport_factory = transport_factory
        self.request_timeout = request_timeout
        self.reconnect_delay = reconnect_delay
        self.max_reconnect_attempts = max_reconnect_attempts

        self._state = ConnectionState.DISCONNECTED
        self._transport: Transport | None = None
        self._pending = PendingRequests()
        self._receive_task: asyncio.Task[None] | None = None
        self._reconnect_task: asyncio.Task[None] | None = None
        self._reconnect_attempts = 0
        self._connect_lock = asyncio.Lock()
        self._close_generation = 0

    @classmethod
    def from_settings(cls, settings: BridgeSettings) -> BridgeClient:
        from vscodebridge.transport import create_transport_factory

        return cls(
            create_transport_factory(settings),
            request_timeout=settings.request_timeout,
            reconnect_delay=settings.reconnect_delay,
            max_reconnect_attempts=settings.max_reconnect_attempts,
        )

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def connected(self) -> bool:
        return self._state is ConnectionState.CONNECTED

    @property
    def reconnect_attempts(self) -> int:
        return self._reconnect_attempts

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    async def __aenter__(self) -> BridgeClient:
        await self.connect()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def connect(self) -> None:
        """Open the connection; the first failure is raised to the caller."""
        async with self._connect_lock:
            if self._state is ConnectionState.CONNECTED:
                return
            self._cancel_reconnect()
            self._state = ConnectionState.CONNECTING
            generation = self._close_generation
            transport = self.transport_factory()
            try:
                await transport.connect()
            except BaseException:
                self._state = ConnectionState.DISCONNECTED
                await self._close_transport(transport)
                raise
            if generation != self._close_generation:
                await self._close_transport(transport)
                raise ConnectionClosedError("Client closed while connecting")
            self._attach(transport)
            logger.info("Connected to VSCode extension")

    async def send_request(
        self,
        command: str,
        arguments: dict[str, Any] | None = None,
        *,
        timeout: float | None = None,
    ) -> Any:
        """Send one command and wait for its result.

        Raises NotConnectedError, CommandError (remote error string),
        RequestTimeoutError or ConnectionClosedError.
        """
        transport = self._transport
        if self._state is not ConnectionState.CONNECTED or transport is None:
            raise NotConnectedError(self._state.value)
        req_id = self._pending.next_id()
        request = RequestEnvelope(id=req_id, command=command, arguments=dict(arguments or {}))
        future = self._pending.create(req_id, command, timeout if timeout is not None else self.request_timeout)
        try:
            await transport.send(encode_request(request))
        except (BridgeError, asyncio.CancelledError):
            self._pending.cancel(req_id)
            raise
        except Exception as exc:
            self._pending.cancel(req_id)
            raise BridgeTransportError(f"failed to send {command}: {exc}") from exc
        try:
            return await future
        except asyncio.CancelledError:
            self._pending.cancel(req_id)
            raise

    def cancel_request(self, request_id: str) -> bool:
        return self._pending.cancel(request_id)

    async def close(self) -> None:
        """Disconnect for good; pending callers get ConnectionClosedError."""
        self._state = ConnectionState.DISCONNECTED
        self._close_generation += 1
        self._cancel_reconnect()
        transport, self._transport = self._transport, None
        receive_task, self._receive_task = self._receive_task, None
        failed = self._pending.fail_all(ConnectionClosedError)
        if failed:
            logger.debug("Failed {} pending request(s) on close", failed)
        if receive_task is not None and receive_task is not asyncio.current_task():
            receive_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await receive_task
        if transport is not None:
            await self._close_transport(transport)
            logger.info("Closed connection to VSCode extension")

    def _attach(self, transport: Transport) -> None:
        self._transport = transport
        self._state = ConnectionState.CONNECTED
        self._reconnect_attempts = 0
        self._receive_task = asyncio.create_task(self._receive_loop(transport), name="vscodebridge-receive")

    async def _receive_loop(self, transport: Transport) -> None:
        try:
            async for message in transport.messages():
                self._handle_message(message)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.error("IPC error: {}", exc)
        if transport is self._transport:
            await self._handle_disconnect(transport)

    def _handle_message(self, message: str) -> None:
        try:
            response = decode_response(message)
        except FramingError as exc:
            logger.warning("Discarding malformed frame from VSCode extension: {}", exc.message)
            return
        self._pending.resolve(response)

    async def _handle_disconnect(self, transport: Transport) -> None:
        logger.info("Disconnected from VSCode extension")
        self._transport = None
        self._receive_task = None
        self._state = ConnectionState.RECONNECTING
        failed = self._pending.fail_all(ConnectionClosedError)
        if failed:
            logger.warning("Failed {} pending request(s) after disconnect", failed)
        self._reconnect_task = asyncio.create_task(self._reconnect_loop(), name="vscodebridge-reconnect")
        await self._close_transport(transport)

    async def _reconnect_loop(self) -> None:
        while self._reconnect_attempts < self.max_reconnect_attempts:
            self._reconnect_attempts += 1
            logger.warning(
                "Attempting to reconnect ({}/{})...",
                self._reconnect_attempts,
                self.max_reconnect_attempts,
            )
            await asyncio.sleep(self.reconnect_delay)
            transport = self.transport_factory()
            try:
                await transport.connect()
            except Exception as exc:
                logger.warning("Reconnection failed: {}", exc)
                await self._close_transport(transport)
                continue
            if self._state is not ConnectionState.RECONNECTING:
                await self._close_transport(transport)
                return
            self._reconnect_task = None
            self._attach(transport)
            logger.info("Reconnected to VSCode extension")
            return
        self._reconnect_task = None
        self._state = ConnectionState.DISCONNECTED
        logger.error("Max reconnection attempts reached ({}), giving up", self.max_reconnect_attempts)

    def _cancel_reconnect(self) -> None:
        task, self._reconnect_task = self._reconnect_task, None
        if task is not None and task is not asyncio.current_task():
            task.cancel()

    @staticmethod
    async def _close_transport(transport: Transport) -> None:
        try:
            await transport.close()
        except Exception as exc:
            logger.debug("Ignoring error while closing transport: {}", exc)
