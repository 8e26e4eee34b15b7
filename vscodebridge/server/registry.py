"""Registry of open peer connections for bulk teardown."""

from __future__ import annotations

import asyncio
import threading
from typing import Protocol

from loguru import logger


class Closable(Protocol):
    async def close(self) -> None: ...


class ConnectionRegistry:
    """Set of live peers; add on accept, discard on close."""

    def __init__(self) -> None:
        self._peers: set[Closable] = set()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._peers)

    def __contains__(self, peer: object) -> bool:
        with self._lock:
            return peer in self._peers

    def add(self, peer: Closable) -> None:
        with self._lock:
            self._peers.add(peer)

    def discard(self, peer: Closable) -> None:
        with self._lock:
            self._peers.discard(peer)

    def snapshot(self) -> list[Closable]:
        with self._lock:
            return list(self._peers)

    async def close_all(self) -> int:
        """Close every peer; one failing close never stops the others."""
        with self._lock:
            peers = list(self._peers)
            self._peers.clear()
        if not peers:
            return 0
        results = await asyncio.gather(*(peer.close() for peer in peers), return_exceptions=True)
        failed = 0
        for peer, result in zip(peers, results):
            if isinstance(result, BaseException):
                failed += 1
                logger.warning("Failed to close connection {}: {}", peer, result)
        return len(peers) - failed
