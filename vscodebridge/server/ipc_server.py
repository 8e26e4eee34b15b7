"""IPC server: newline-delimited JSON over a Unix socket or named pipe."""

from __future__ import annotations

import asyncio
import contextlib
import sys
from typing import Any

from loguru import logger

from vscodebridge.protocol.codec import LineFramer, encode_line
from vscodebridge.server.dispatcher import CommandDispatcher
from vscodebridge.server.peer import PeerConnection
from vscodebridge.server.registry import ConnectionRegistry
from vscodebridge.server.socket_path import SOCKET_PATH_ENV_VAR, generate_socket_path, remove_socket_file
from vscodebridge.transport.stream import READ_CHUNK_SIZE


class StreamPeer(PeerConnection):
    """Accepted stream connection with its own line buffer."""

    def __init__(self, dispatcher: CommandDispatcher, reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
        super().__init__(dispatcher, "ipc")
        self.reader = reader
        self.writer = writer
        self._framer = LineFramer()

    async def _write(self, frame: str) -> None:
        self.writer.write(encode_line(frame))
        await self.writer.drain()

    async def serve(self) -> None:
        while True:
            try:
                chunk = await self.reader.read(READ_CHUNK_SIZE)
            except OSError as exc:
                logger.error("Client error on {}: {}", self.label, exc)
                return
            if not chunk:
                return
            for line in self._framer.feed(chunk):
                self.handle_frame(line)

    async def close(self) -> None:
        await self.cancel_tasks()
        if self.writer.is_closing():
            return
        self.writer.close()
        with contextlib.suppress(OSError):
            await self.writer.wait_closed()


class IpcServer:
    """Accepts MCP server connections on a local socket."""

    def __init__(self, dispatcher: CommandDispatcher, socket_path: str | None = None):
        self.dispatcher = dispatcher
        self.registry = ConnectionRegistry()
        self._requested_path = socket_path
        self._socket_path: str | None = None
        self._server: asyncio.AbstractServer | None = None
        self._pipe_servers: list[Any] = []

    @property
    def socket_path(self) -> str | None:
        return self._socket_path

    @property
    def is_running(self) -> bool:
        return self._server is not None or bool(self._pipe_servers)

    @property
    def client_count(self) -> int:
        return len(self.registry)

    async def start(self) -> str:
        """Start listening and return the socket path."""
        current = self._socket_path
        if self.is_running and current is not None:
            logger.info("IPC server already running")
            return current
        path = self._requested_path or generate_socket_path()
        if sys.platform == "win32":
            loop = asyncio.get_running_loop()
            self._pipe_servers = await loop.start_serving_pipe(self._pipe_protocol, path)  # type: ignore[attr-defined]
        else:
            remove_socket_file(path)
            self._server = await asyncio.start_unix_server(self._handle_connection, path=path)
        self._socket_path = path
        logger.info("IPC server started on {}", path)
        logger.info("To connect manually: export {}={}", SOCKET_PATH_ENV_VAR, path)
        return path

    def _pipe_protocol(self) -> asyncio.StreamReaderProtocol:
        reader = asyncio.StreamReader()
        return asyncio.StreamReaderProtocol(reader, self._handle_connection)

    async def stop(self) -> None:
        if not self.is_running:
            return
        server, self._server = self._server, None
        pipe_servers, self._pipe_servers = self._pipe_servers, []
        if server is not None:
            server.close()
        for pipe_server in pipe_servers:
            pipe_server.close()
        closed = await self.registry.close_all()
        if server is not None:
            await server.wait_closed()
        path, self._socket_path = self._socket_path, None
        if path:
            try:
                remove_socket_file(path)
            except OSError as exc:
                logger.warning("Could not remove socket file {}: {}", path, exc)
        logger.info("IPC server stopped ({} connection(s) closed)", closed)

    async def _handle_connection(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        peer = StreamPeer(self.dispatcher, reader, writer)
        self.registry.add(peer)
        logger.info("Client connected ({})", peer.label)
        try:
            await peer.serve()
        finally:
            self.registry.discard(peer)
            await peer.close()
            logger.info("Client disconnected ({})", peer.label)
