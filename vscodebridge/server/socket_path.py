"""Socket path helpers for the IPC server."""

from __future__ import annotations

import os
import secrets
import sys
import tempfile
from pathlib import Path

SOCKET_PATH_ENV_VAR = "VSCODE_MCP_SOCKET_PATH"


def is_named_pipe(path: str) -> bool:
    return path.startswith("\\\\.\\pipe\\")


def generate_socket_path(prefix: str = "vscode-mcp") -> str:
    """Unique socket path: a named pipe on Windows, a temp-dir socket file elsewhere."""
    suffix = secrets.token_hex(6)
    if sys.platform == "win32":
        return f"\\\\.\\pipe\\{prefix}-{suffix}"
    return str(Path(tempfile.gettempdir()) / f"{prefix}-{suffix}.sock")


def remove_socket_file(path: str) -> bool:
    """Unlink a leftover socket file; named pipes need no cleanup."""
    if is_named_pipe(path) or not os.path.exists(path):
        return False
    os.unlink(path)
    return True
