"""Newline-delimited JSON over a Unix domain socket or Windows named pipe."""

from __future__ import annotations

import asyncio
import contextlib
import sys
from typing import AsyncIterator

from loguru import logger

from vscodebridge.protocol.codec import LineFramer, encode_line
from vscodebridge.utils.exceptions import BridgeTransportError, NotConnectedError

READ_CHUNK_SIZE = 64 * 1024


async def open_stream_connection(path: str) -> tuple[asyncio.StreamReader, asyncio.StreamWriter]:
    """Open a stream to `path`; named pipes on Windows, Unix sockets elsewhere."""
    if sys.platform == "win32":
        loop = asyncio.get_running_loop()
        reader = asyncio.StreamReader(loop=loop)
        protocol = asyncio.StreamReaderProtocol(reader, loop=loop)
        transport, _ = await loop.create_pipe_connection(lambda: protocol, path)  # type: ignore[attr-defined]
        writer = asyncio.StreamWriter(transport, protocol, reader, loop)
        return reader, writer
    return await asyncio.open_unix_connection(path)


class StreamTransport:
    """Client side of the IPC socket."""

    def __init__(self, path: str, *, read_size: int = READ_CHUNK_SIZE):
        self.path = path
        self.read_size = read_size
        self._reader: asyncio.StreamReader | None = None
        self._writer: asyncio.StreamWriter | None = None
        self._framer = LineFramer()

    @property
    def connected(self) -> bool:
        return self._writer is not None and not self._writer.is_closing()

    async def connect(self) -> None:
        try:
            self._reader, self._writer = await open_stream_connection(self.path)
        except OSError as exc:
            raise BridgeTransportError(
                f"failed to connect to {self.path}: {exc}",
                code="CONNECT_FAILED",
                details={"path": self.path},
            ) from exc
        logger.debug("Stream transport connected to {}", self.path)

    async def send(self, message: str) -> None:
        writer = self._writer
        if writer is None or writer.is_closing():
            raise NotConnectedError()
        try:
            writer.write(encode_line(message))
            await writer.drain()
        except OSError as exc:
            raise BridgeTransportError(f"write to {self.path} failed: {exc}") from exc

    async def messages(self) -> AsyncIterator[str]:
        reader = self._reader
        if reader is None:
            return
        while True:
            try:
                chunk = await reader.read(self.read_size)
            except OSError as exc:
                raise BridgeTransportError(f"read from {self.path} failed: {exc}") from exc
            if not chunk:
                return
            for line in self._framer.feed(chunk):
                yield line

    async def close(self) -> None:
        writer = self._writer
        self._writer = None
        self._reader = None
        self._framer.reset()
        if writer is None:
            return
        writer.close()
        with contextlib.suppress(OSError):
            await writer.wait_closed()
