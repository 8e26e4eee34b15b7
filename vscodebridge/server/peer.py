"""Per-connection request processing shared by the IPC and WebSocket servers."""

from __future__ import annotations

import asyncio
import itertools

from loguru import logger

from vscodebridge.protocol.codec import decode_request, encode_response
from vscodebridge.protocol.messages import ResponseEnvelope
from vscodebridge.server.dispatcher import CommandDispatcher
from vscodebridge.utils.exceptions import FramingError

_peer_ids = itertools.count(1)


class PeerConnection:
    """One accepted connection.

    Each inbound frame is dispatched in its own task, so a slow handler does
    not hold up later requests from the same peer. Writes are serialized.
    """

    def __init__(self, dispatcher: CommandDispatcher, kind: str):
        self.dispatcher = dispatcher
        self.label = f"{kind}#{next(_peer_ids)}"
        self._send_lock = asyncio.Lock()
        self._tasks: set[asyncio.Task[None]] = set()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.label}>"

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    async def _write(self, frame: str) -> None:
        raise NotImplementedError

    async def close(self) -> None:
        raise NotImplementedError

    def handle_frame(self, frame: str) -> None:
        task = asyncio.create_task(self._process(frame))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _process(self, frame: str) -> None:
        try:
            request = decode_request(frame)
        except FramingError as exc:
            logger.warning("Error parsing message from {}: {}", self.label, exc.message)
            if exc.request_id is not None:
                await self.send_response(ResponseEnvelope.failure(exc.request_id, f"Invalid request: {exc.message}"))
            return
        logger.debug("{} -> {} ({})", self.label, request.command, request.id)
        response = await self.dispatcher.dispatch(request)
        await self.send_response(response)

    async def send_response(self, response: ResponseEnvelope) -> None:
        try:
            frame = encode_response(response)
        except (TypeError, ValueError) as exc:
            logger.error("Result of request {} is not JSON serializable: {}", response.id, exc)
            frame = encode_response(ResponseEnvelope.failure(response.id, f"Result is not JSON serializable: {exc}"))
        try:
            async with self._send_lock:
                await self._write(frame)
        except Exception as exc:
            logger.warning("Failed to send response {} to {}: {}", response.id, self.label, exc)

    async def cancel_tasks(self) -> None:
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
