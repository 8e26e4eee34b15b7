"""Reference command handlers for a standalone bridge host."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from vscodebridge.protocol.messages import VSCodeCommand
from vscodebridge.server.dispatcher import CommandDispatcher

from .files import register_file_handlers, rename_file, uri_to_path
from .settings import SettingsStore, register_settings_handlers, split_key


def ping(arguments: dict[str, Any]) -> str:
    return "pong"


def build_default_dispatcher(settings_file: Path | None = None) -> CommandDispatcher:
    """Dispatcher with ping, settings and file-rename commands registered."""
    dispatcher = CommandDispatcher()
    dispatcher.register(VSCodeCommand.PING.value, ping)
    register_settings_handlers(dispatcher, SettingsStore(path=settings_file))
    register_file_handlers(dispatcher)
    return dispatcher


__all__ = [
    "SettingsStore",
    "build_default_dispatcher",
    "ping",
    "register_file_handlers",
    "register_settings_handlers",
    "rename_file",
    "split_key",
    "uri_to_path",
]
