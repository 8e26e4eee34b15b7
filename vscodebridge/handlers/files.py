"""Filesystem-backed renameFile handler for hosts without an editor workspace."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any
from urllib.parse import unquote, urlparse

from loguru import logger

from vscodebridge.protocol.messages import RenameFileArgs, VSCodeCommand


def uri_to_path(uri: str) -> Path:
    """Convert an absolute file:// URI into a local path."""
    parsed = urlparse(uri)
    if parsed.scheme != "file":
        raise ValueError(f"Only file:// URIs are supported: {uri}")
    path = unquote(parsed.path)
    if os.name == "nt" and path.startswith("/") and len(path) > 2 and path[2] == ":":
        path = path[1:]
    if parsed.netloc and parsed.netloc != "localhost":
        path = f"//{parsed.netloc}{path}"
    return Path(path)


def rename_file(arguments: dict[str, Any]) -> dict[str, Any]:
    args = RenameFileArgs.model_validate(arguments)
    source = uri_to_path(args.old_uri)
    target = uri_to_path(args.new_uri)
    if not source.exists():
        raise FileNotFoundError(f"Source file does not exist: {args.old_uri}")
    if target.exists():
        raise FileExistsError(f"Target file already exists: {args.new_uri}")
    target.parent.mkdir(parents=True, exist_ok=True)
    source.rename(target)
    logger.info("Renamed file: {} -> {}", args.old_uri, args.new_uri)
    return {"success": True}


def register_file_handlers(dispatcher: Any) -> None:
    dispatcher.register(VSCodeCommand.RENAME_FILE.value, rename_file)
