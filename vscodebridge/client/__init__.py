"""Client side of the bridge: correlator, reconnecting connection, command facade."""

from .client import BridgeClient, ConnectionState
from .commands import EditorCommands
from .pending import PendingRequests

__all__ = ["BridgeClient", "ConnectionState", "EditorCommands", "PendingRequests"]
