"""Request/response envelopes and the editor command vocabulary."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


@dataclass(slots=True)
class RequestEnvelope:
    """Request frame sent from the MCP side to the editor host."""

    id: str
    command: str
    arguments: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class ResponseEnvelope:
    """Response frame; exactly one of result/error is meaningful."""

    id: str
    result: Any = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, request_id: str, result: Any) -> ResponseEnvelope:
        return cls(id=request_id, result=result)

    @classmethod
    def failure(cls, request_id: str, error: str) -> ResponseEnvelope:
        return cls(id=request_id, error=error)


class VSCodeCommand(str, Enum):
    """Commands understood by the editor host."""

    PING = "ping"
    RENAME_FILE = "renameFile"
    GET_SETTING = "getSetting"
    SET_SETTING = "setSetting"
    RENAME_SYMBOL = "renameSymbol"


SettingScope = Literal["workspace", "user"]
UpdateImportsValue = Literal["always", "prompt", "never"]

UPDATE_IMPORTS_SETTING = "typescript.updateImportsOnFileMove.enabled"


class CommandArgs(BaseModel):
    """Base for command arguments; camelCase on the wire."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    def to_arguments(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class RenameFileArgs(CommandArgs):
    old_uri: str = Field(alias="oldUri", min_length=1)
    new_uri: str = Field(alias="newUri", min_length=1)


class RenameSymbolArgs(CommandArgs):
    uri: str = Field(min_length=1)
    original_name: str = Field(alias="originalName", min_length=1)
    new_name: str = Field(alias="newName", min_length=1)


class GetSettingArgs(CommandArgs):
    key: str = Field(min_length=1)
    scope: SettingScope = "workspace"


class SetSettingArgs(CommandArgs):
    key: str = Field(min_length=1)
    value: Any = None
    scope: SettingScope = "workspace"


class UpdateImportsArgs(CommandArgs):
    value: UpdateImportsValue
