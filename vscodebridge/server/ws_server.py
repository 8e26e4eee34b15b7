"""WebSocket server: one request or response per text frame."""

from __future__ import annotations

from typing import Any

import websockets
from loguru import logger
from websockets.exceptions import ConnectionClosed

from vscodebridge.server.dispatcher import CommandDispatcher
from vscodebridge.server.peer import PeerConnection
from vscodebridge.server.registry import ConnectionRegistry


class WebSocketPeer(PeerConnection):
    def __init__(self, dispatcher: CommandDispatcher, websocket: Any):
        super().__init__(dispatcher, "ws")
        self.websocket = websocket

    async def _write(self, frame: str) -> None:
        await self.websocket.send(frame)

    async def serve(self) -> None:
        try:
            async for message in self.websocket:
                if isinstance(message, bytes):
                    message = message.decode("utf-8", errors="replace")
                self.handle_frame(message)
        except ConnectionClosed as exc:
            logger.debug("WebSocket {} closed: {}", self.label, exc)

    async def close(self) -> None:
        await self.cancel_tasks()
        await self.websocket.close()


class WebSocketServer:
    """Accepts MCP server connections over WebSocket on localhost."""

    def __init__(self, dispatcher: CommandDispatcher, host: str = "localhost", port: int = 3000):
        self.dispatcher = dispatcher
        self.host = host
        self.port = port
        self.registry = ConnectionRegistry()
        self._server: Any = None

    @property
    def is_running(self) -> bool:
        return self._server is not None

    @property
    def client_count(self) -> int:
        return len(self.registry)

    @property
    def url(self) -> str:
        return f"ws://{self.host}:{self.port}"

    async def start(self) -> str:
        """Start listening and return the server URL."""
        if self._server is not None:
            logger.info("WebSocket server already running")
            return self.url
        self._server = await websockets.serve(self._handle_connection, self.host, self.port)
        sockets = list(getattr(self._server, "sockets", None) or [])
        if sockets:
            self.port = sockets[0].getsockname()[1]
        logger.info("WebSocket server started on {}", self.url)
        return self.url

    async def stop(self) -> None:
        server, self._server = self._server, None
        if server is None:
            return
        server.close()
        closed = await self.registry.close_all()
        await server.wait_closed()
        logger.info("WebSocket server stopped ({} connection(s) closed)", closed)

    async def _handle_connection(self, websocket: Any) -> None:
        peer = WebSocketPeer(self.dispatcher, websocket)
        self.registry.add(peer)
        logger.info("Client connected ({})", peer.label)
        try:
            await peer.serve()
        finally:
            self.registry.discard(peer)
            await peer.cancel_tasks()
            logger.info("Client disconnected ({})", peer.label)
