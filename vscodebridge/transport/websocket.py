"""WebSocket transport: one JSON document per text frame."""

from __future__ import annotations

from typing import Any, AsyncIterator

import websockets
from loguru import logger
from websockets.exceptions import ConnectionClosed, InvalidHandshake, InvalidURI

from vscodebridge.utils.exceptions import BridgeTransportError, NotConnectedError


class WebSocketTransport:
    """Client side of the editor's WebSocket endpoint."""

    def __init__(self, url: str, *, open_timeout: float = 10.0):
        self.url = url
        self.open_timeout = open_timeout
        self._ws: Any = None
        self._closed = True

    @property
    def connected(self) -> bool:
        return self._ws is not None and not self._closed

    async def connect(self) -> None:
        try:
            self._ws = await websockets.connect(
                self.url,
                open_timeout=self.open_timeout,
                ping_interval=20,
                ping_timeout=10,
            )
        except (OSError, TimeoutError, InvalidHandshake, InvalidURI) as exc:
            raise BridgeTransportError(
                f"failed to connect to {self.url}: {exc}",
                code="CONNECT_FAILED",
                details={"url": self.url},
            ) from exc
        self._closed = False
        logger.debug("WebSocket transport connected to {}", self.url)

    async def send(self, message: str) -> None:
        if not self.connected:
            raise NotConnectedError()
        try:
            await self._ws.send(message)
        except (ConnectionClosed, OSError) as exc:
            raise BridgeTransportError(f"send to {self.url} failed: {exc}") from exc

    async def messages(self) -> AsyncIterator[str]:
        ws = self._ws
        if ws is None:
            return
        try:
            async for message in ws:
                yield message.decode("utf-8", errors="replace") if isinstance(message, bytes) else message
        except ConnectionClosed as exc:
            logger.debug("WebSocket {} closed: {}", self.url, exc)
        finally:
            self._closed = True

    async def close(self) -> None:
        ws = self._ws
        self._ws = None
        self._closed = True
        if ws is not None:
            await ws.close()
