"""Typed editor commands on top of BridgeClient, used by the MCP tool layer."""

from __future__ import annotations

from typing import Any, Protocol

from loguru import logger

from vscodebridge.protocol.codec import safe_dict
from vscodebridge.protocol.messages import (
    UPDATE_IMPORTS_SETTING,
    GetSettingArgs,
    RenameFileArgs,
    RenameSymbolArgs,
    SetSettingArgs,
    SettingScope,
    UpdateImportsArgs,
    UpdateImportsValue,
    VSCodeCommand,
)
from vscodebridge.utils.exceptions import BridgeError


class RequestSender(Protocol):
    async def send_request(self, command: str, arguments: dict[str, Any] | None = None) -> Any: ...


class EditorCommands:
    """Editor operations expressed as bridge requests."""

    def __init__(self, client: RequestSender):
        self.client = client

    async def ping(self) -> Any:
        return await self.client.send_request(VSCodeCommand.PING.value, {})

    async def get_setting(self, key: str, scope: SettingScope = "workspace") -> Any:
        args = GetSettingArgs(key=key, scope=scope)
        result = await self.client.send_request(VSCodeCommand.GET_SETTING.value, args.to_arguments())
        return safe_dict(result).get("value")

    async def set_setting(self, key: str, value: Any, scope: SettingScope = "workspace") -> dict[str, Any]:
        args = SetSettingArgs(key=key, value=value, scope=scope)
        result = await self.client.send_request(VSCodeCommand.SET_SETTING.value, args.to_arguments())
        return safe_dict(result)

    async def get_update_imports_setting(self) -> Any:
        return await self.get_setting(UPDATE_IMPORTS_SETTING, "workspace")

    async def set_update_imports_setting(self, value: UpdateImportsValue) -> dict[str, Any]:
        args = UpdateImportsArgs(value=value)
        return await self.set_setting(UPDATE_IMPORTS_SETTING, args.value, "workspace")

    async def ensure_update_imports(self) -> bool:
        """Make sure moved files get their imports rewritten.

        Returns True when the workspace setting is "always" afterwards.
        """
        current = await self.get_update_imports_setting()
        if current == "always":
            return True
        await self.set_update_imports_setting("always")
        return True

    async def rename_file(self, old_uri: str, new_uri: str) -> dict[str, Any]:
        args = RenameFileArgs(old_uri=old_uri, new_uri=new_uri)
        try:
            imports_updated = await self.ensure_update_imports()
        except BridgeError as exc:
            logger.warning("Could not ensure {} setting: {}", UPDATE_IMPORTS_SETTING, exc)
            imports_updated = False
        result = await self.client.send_request(VSCodeCommand.RENAME_FILE.value, args.to_arguments())
        return {"result": result, "importsUpdated": imports_updated}

    async def rename_symbol(self, uri: str, original_name: str, new_name: str) -> Any:
        args = RenameSymbolArgs(uri=uri, original_name=original_name, new_name=new_name)
        return await self.client.send_request(VSCodeCommand.RENAME_SYMBOL.value, args.to_arguments())
