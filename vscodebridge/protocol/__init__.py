"""Wire protocol shared by the bridge client and server."""

from .codec import (
    LineFramer,
    decode_request,
    decode_response,
    encode_line,
    encode_request,
    encode_response,
    safe_dict,
)
from .messages import (
    UPDATE_IMPORTS_SETTING,
    GetSettingArgs,
    RenameFileArgs,
    RenameSymbolArgs,
    RequestEnvelope,
    ResponseEnvelope,
    SetSettingArgs,
    UpdateImportsArgs,
    VSCodeCommand,
)

__all__ = [
    "GetSettingArgs",
    "LineFramer",
    "RenameFileArgs",
    "RenameSymbolArgs",
    "RequestEnvelope",
    "ResponseEnvelope",
    "SetSettingArgs",
    "UPDATE_IMPORTS_SETTING",
    "UpdateImportsArgs",
    "VSCodeCommand",
    "decode_request",
    "decode_response",
    "encode_line",
    "encode_request",
    "encode_response",
    "safe_dict",
]
