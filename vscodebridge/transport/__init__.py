"""Transports carrying bridge frames."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .base import Transport, TransportFactory
from .stream import StreamTransport, open_stream_connection
from .websocket import WebSocketTransport

if TYPE_CHECKING:
    from vscodebridge.config.schema import BridgeSettings


def create_transport_factory(settings: BridgeSettings) -> TransportFactory:
    """Pick the transport the settings point at; a fresh instance per connection."""
    kind, target = settings.transport_target()
    if kind == "ipc":
        return lambda: StreamTransport(target)
    return lambda: WebSocketTransport(target)


__all__ = [
    "StreamTransport",
    "Transport",
    "TransportFactory",
    "WebSocketTransport",
    "create_transport_factory",
    "open_stream_connection",
]
