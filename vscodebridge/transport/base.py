"""Transport contract shared by the client connection and the correlator."""

from __future__ import annotations

from typing import AsyncIterator, Callable, Protocol, runtime_checkable


@runtime_checkable
class Transport(Protocol):
    """One bidirectional message channel.

    `messages()` yields complete frames and ends when the peer closes; it
    may raise on socket errors. A transport is used for one connection only.
    """

    @property
    def connected(self) -> bool: ...

    async def connect(self) -> None: ...
    async def send(self, message: str) -> None: ...
    def messages(self) -> AsyncIterator[str]: ...
    async def close(self) -> None: ...


TransportFactory = Callable[[], Transport]
