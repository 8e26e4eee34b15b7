"""Serialization helpers for bridge frames."""

from __future__ import annotations

import json
from typing import Any

from loguru import logger

from vscodebridge.protocol.messages import RequestEnvelope, ResponseEnvelope
from vscodebridge.utils.exceptions import FramingError

DEFAULT_MAX_LINE_BYTES = 16 * 1024 * 1024


def safe_dict(value: Any) -> dict[str, Any]:
    """Return the value when dict-like, otherwise an empty dict."""
    return value if isinstance(value, dict) else {}


def encode_request(request: RequestEnvelope) -> str:
    """Encode a request frame into one line of JSON."""
    payload = {"id": request.id, "command": request.command, "arguments": request.arguments}
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":"))


def encode_response(response: ResponseEnvelope) -> str:
    """Encode a response frame; `error` wins over `result` when both are set."""
    payload: dict[str, Any] = {"id": response.id}
    if response.error is not None:
        payload["error"] = response.error
    else:
        payload["result"] = response.result
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":"))


def _load_object(text: str | bytes) -> dict[str, Any]:
    try:
        payload = json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise FramingError(f"malformed JSON frame: {exc}") from exc
    if not isinstance(payload, dict):
        raise FramingError(f"frame is not a JSON object: {type(payload).__name__}")
    return payload


def _require_id(payload: dict[str, Any]) -> str:
    req_id = payload.get("id")
    if isinstance(req_id, bool) or not isinstance(req_id, (str, int)):
        raise FramingError("frame has no usable id")
    return str(req_id)


def decode_request(text: str | bytes) -> RequestEnvelope:
    """Decode one request frame. FramingError carries the id when one was readable."""
    payload = _load_object(text)
    req_id = _require_id(payload)
    command = payload.get("command")
    if not isinstance(command, str) or not command:
        raise FramingError("request has no command", request_id=req_id)
    arguments = payload.get("arguments")
    if arguments is None:
        arguments = {}
    if not isinstance(arguments, dict):
        raise FramingError("request arguments must be an object", request_id=req_id)
    return RequestEnvelope(id=req_id, command=command, arguments=arguments)


def decode_response(text: str | bytes) -> ResponseEnvelope:
    """Decode one response frame."""
    payload = _load_object(text)
    req_id = _require_id(payload)
    error = payload.get("error")
    if error is not None:
        if isinstance(error, dict):
            error = error.get("message") or json.dumps(error, ensure_ascii=False)
        return ResponseEnvelope.failure(req_id, str(error))
    return ResponseEnvelope.success(req_id, payload.get("result"))


class LineFramer:
    """Newline framing for stream transports.

    Bytes are buffered until a full line is available so that a UTF-8
    sequence split across reads is decoded in one piece.
    """

    def __init__(self, max_line_bytes: int = DEFAULT_MAX_LINE_BYTES):
        self.max_line_bytes = max_line_bytes
        self._buffer = bytearray()

    @property
    def pending_bytes(self) -> int:
        return len(self._buffer)

    def feed(self, chunk: bytes | str) -> list[str]:
        if isinstance(chunk, str):
            chunk = chunk.encode("utf-8")
        self._buffer.extend(chunk)
        *complete, rest = self._buffer.split(b"\n")
        self._buffer = bytearray(rest)
        if len(self._buffer) > self.max_line_bytes:
            logger.warning("Dropping oversized partial frame ({} bytes)", len(self._buffer))
            self._buffer.clear()
        lines: list[str] = []
        for raw in complete:
            text = raw.decode("utf-8", errors="replace").strip()
            if text:
                lines.append(text)
        return lines

    def reset(self) -> None:
        self._buffer.clear()


def encode_line(frame: str) -> bytes:
    """Append the frame delimiter for stream transports."""
    return (frame + "\n").encode("utf-8")
