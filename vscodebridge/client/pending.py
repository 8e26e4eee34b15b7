"""Correlation of in-flight requests with their responses."""

from __future__ import annotations

import asyncio
import itertools
import time
from dataclasses import dataclass
from typing import Any, Callable

from loguru import logger

from vscodebridge.protocol.messages import ResponseEnvelope
from vscodebridge.utils.exceptions import CommandError, RequestTimeoutError


@dataclass(slots=True)
class PendingRequest:
    """Bookkeeping for one request awaiting its response."""

    id: str
    command: str
    future: asyncio.Future[Any]
    timer: asyncio.TimerHandle | None = None


class PendingRequests:
    """Pending-request map keyed by correlation id.

    Every way of retiring an entry goes through `dict.pop`, so whichever of
    response, timeout, disconnect or cancel runs first wins and the others
    find nothing to do. All methods must run on the owning event loop.
    """

    def __init__(self) -> None:
        self._pending: dict[str, PendingRequest] = {}
        self._counter = itertools.count(1)

    def __len__(self) -> int:
        return len(self._pending)

    def __contains__(self, request_id: object) -> bool:
        return request_id in self._pending

    def next_id(self) -> str:
        while True:
            req_id = f"req_{next(self._counter)}_{int(time.time() * 1000)}"
            if req_id not in self._pending:
                return req_id

    def create(self, request_id: str, command: str, timeout: float) -> asyncio.Future[Any]:
        if request_id in self._pending:
            raise ValueError(f"request id already pending: {request_id}")
        loop = asyncio.get_running_loop()
        future: asyncio.Future[Any] = loop.create_future()
        entry = PendingRequest(id=request_id, command=command, future=future)
        entry.timer = loop.call_later(timeout, self._expire, request_id, timeout)
        self._pending[request_id] = entry
        return future

    def _take(self, request_id: str) -> PendingRequest | None:
        entry = self._pending.pop(request_id, None)
        if entry is not None and entry.timer is not None:
            entry.timer.cancel()
        return entry

    def resolve(self, response: ResponseEnvelope) -> bool:
        """Settle the matching caller; unknown ids are dropped."""
        entry = self._take(response.id)
        if entry is None:
            logger.debug("Dropping response for unknown request id {}", response.id)
            return False
        if entry.future.done():
            return False
        if response.error is not None:
            entry.future.set_exception(CommandError(response.error, command=entry.command))
        else:
            entry.future.set_result(response.result)
        return True

    def _expire(self, request_id: str, timeout: float) -> None:
        entry = self._take(request_id)
        if entry is None or entry.future.done():
            return
        logger.warning("Request {} ({}) timed out after {}s", request_id, entry.command, timeout)
        entry.future.set_exception(RequestTimeoutError(entry.command, timeout))

    def cancel(self, request_id: str) -> bool:
        """Retire a request without an outcome; an awaiting caller sees CancelledError."""
        entry = self._take(request_id)
        if entry is None:
            return False
        entry.future.cancel()
        return True

    def fail_all(self, make_error: Callable[[], BaseException]) -> int:
        """Reject every pending request with a fresh error; returns how many were failed."""
        failed = 0
        while self._pending:
            _, entry = self._pending.popitem()
            if entry.timer is not None:
                entry.timer.cancel()
            if not entry.future.done():
                entry.future.set_exception(make_error())
                failed += 1
        return failed
