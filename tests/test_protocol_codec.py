import json

import pytest

from vscodebridge.protocol.codec import (
    LineFramer,
    decode_request,
    decode_response,
    encode_line,
    encode_request,
    encode_response,
)
from vscodebridge.protocol.messages import RequestEnvelope, ResponseEnvelope
from vscodebridge.utils.exceptions import FramingError


def test_encode_request_shape():
    line = encode_request(RequestEnvelope(id="1", command="ping", arguments={}))
    assert json.loads(line) == {"id": "1", "command": "ping", "arguments": {}}
    assert "\n" not in line


def test_encode_response_has_exactly_one_of_result_or_error():
    ok = json.loads(encode_response(ResponseEnvelope.success("1", None)))
    assert ok == {"id": "1", "result": None}
    failed = json.loads(encode_response(ResponseEnvelope.failure("2", "boom")))
    assert failed == {"id": "2", "error": "boom"}


def test_encode_response_rejects_unserializable_result():
    with pytest.raises(TypeError):
        encode_response(ResponseEnvelope.success("1", object()))


def test_decode_request_defaults_arguments():
    request = decode_request('{"id":"x","command":"ping"}')
    assert request == RequestEnvelope(id="x", command="ping", arguments={})


def test_decode_request_numeric_id_becomes_string():
    assert decode_request('{"id":7,"command":"ping","arguments":{}}').id == "7"


@pytest.mark.parametrize("text", ["not json", "[1,2]", '{"command":"ping"}', '{"id":true,"command":"ping"}'])
def test_decode_request_without_usable_id(text):
    with pytest.raises(FramingError) as info:
        decode_request(text)
    assert info.value.request_id is None


def test_decode_request_invalid_fields_keep_id():
    with pytest.raises(FramingError) as info:
        decode_request('{"id":"x","command":"ping","arguments":[1]}')
    assert info.value.request_id == "x"
    with pytest.raises(FramingError) as info:
        decode_request('{"id":"y","arguments":{}}')
    assert info.value.request_id == "y"


def test_decode_response_result_and_error():
    assert decode_response('{"id":"1","result":{"value":3}}') == ResponseEnvelope(id="1", result={"value": 3})
    failed = decode_response('{"id":"2","error":"Unknown command: x"}')
    assert failed.ok is False
    assert failed.error == "Unknown command: x"


def test_decode_response_null_error_means_success():
    response = decode_response('{"id":"1","result":"pong","error":null}')
    assert response.ok is True
    assert response.result == "pong"


def test_decode_response_structured_error_uses_message():
    response = decode_response('{"id":"1","error":{"code":"E","message":"bad thing"}}')
    assert response.error == "bad thing"


def test_line_framer_carries_partial_line_forward():
    framer = LineFramer()
    assert framer.feed(b'{"id":"1","res') == []
    assert framer.pending_bytes > 0
    assert framer.feed(b'ult":1}\n{"id":"2"') == ['{"id":"1","result":1}']
    assert framer.feed(b',"result":2}\n') == ['{"id":"2","result":2}']
    assert framer.pending_bytes == 0


def test_line_framer_multiple_lines_and_blank_lines():
    framer = LineFramer()
    assert framer.feed(b"a\n\n  \nb\nc") == ["a", "b"]
    assert framer.feed(b"\n") == ["c"]


def test_line_framer_reassembles_split_utf8():
    framer = LineFramer()
    data = encode_line('{"id":"1","result":"héllo"}')
    cut = data.index("é".encode("utf-8")) + 1
    assert framer.feed(data[:cut]) == []
    assert framer.feed(data[cut:]) == ['{"id":"1","result":"héllo"}']


def test_line_framer_drops_oversized_partial_line():
    framer = LineFramer(max_line_bytes=8)
    assert framer.feed(b"ok\n0123456789") == ["ok"]
    assert framer.pending_bytes == 0
    assert framer.feed(b"next\n") == ["next"]


def test_malformed_line_does_not_affect_following_frames():
    framer = LineFramer()
    lines = framer.feed(b'garbage{\n{"id":"1","result":"pong"}\n')
    decoded = []
    for line in lines:
        try:
            decoded.append(decode_response(line))
        except FramingError:
            continue
    assert decoded == [ResponseEnvelope(id="1", result="pong")]
