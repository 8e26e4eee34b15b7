"""Bridge configuration using Pydantic settings.

Values come from ~/.vscodebridge/config.json and VSCODE_MCP_* environment
variables (e.g. VSCODE_MCP_SOCKET_PATH).
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from vscodebridge.utils.exceptions import ConfigurationError

LEGACY_WS_URL_ENV_VAR = "VSCODE_WS_URL"


class BridgeSettings(BaseSettings):
    """Settings shared by the client and the standalone server."""

    socket_path: str | None = None  # Unix socket path or \\.\pipe\ name
    ws_url: str | None = None  # e.g. "ws://localhost:3000"
    request_timeout: float = Field(default=5.0, gt=0)
    reconnect_delay: float = Field(default=1.0, ge=0)
    max_reconnect_attempts: int = Field(default=5, ge=0)

    # Server side
    ws_host: str = "localhost"
    ws_port: int = Field(default=3000, ge=0, le=65535)
    settings_file: Path | None = None

    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_prefix="VSCODE_MCP_", extra="ignore")

    @model_validator(mode="after")
    def _legacy_ws_url(self) -> BridgeSettings:
        if not self.ws_url:
            self.ws_url = os.environ.get(LEGACY_WS_URL_ENV_VAR) or None
        return self

    def transport_target(self) -> tuple[Literal["ipc", "ws"], str]:
        """Which transport to use and where; the socket path wins over the URL."""
        if self.socket_path:
            return "ipc", self.socket_path
        if self.ws_url:
            return "ws", self.ws_url
        raise ConfigurationError("VSCODE_MCP_SOCKET_PATH environment variable is not set", field="socket_path")
