"""Server side of the bridge: dispatcher, connection registry, listeners."""

from .dispatcher import CommandDispatcher, CommandHandler
from .ipc_server import IpcServer, StreamPeer
from .peer import PeerConnection
from .registry import ConnectionRegistry
from .socket_path import SOCKET_PATH_ENV_VAR, generate_socket_path
from .ws_server import WebSocketPeer, WebSocketServer

__all__ = [
    "CommandDispatcher",
    "CommandHandler",
    "ConnectionRegistry",
    "IpcServer",
    "PeerConnection",
    "SOCKET_PATH_ENV_VAR",
    "StreamPeer",
    "WebSocketPeer",
    "WebSocketServer",
    "generate_socket_path",
]
