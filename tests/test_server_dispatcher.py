import asyncio

import pytest

from vscodebridge.protocol.messages import RequestEnvelope, ResponseEnvelope
from vscodebridge.server.dispatcher import (
    CommandDispatcher,
    handler_error_response,
    unknown_command_response,
)
from vscodebridge.utils.exceptions import CommandError


def _request(command: str, **arguments) -> RequestEnvelope:
    return RequestEnvelope(id="r1", command=command, arguments=arguments)


def test_unknown_command_response_shape():
    assert unknown_command_response(_request("nope")) == ResponseEnvelope(id="r1", error="Unknown command: nope")


def test_handler_error_response_uses_raw_message():
    response = handler_error_response(_request("x"), RuntimeError("disk on fire"))
    assert response.error == "disk on fire"
    response = handler_error_response(_request("x"), CommandError("bad key"))
    assert response.error == "bad key"


def test_register_rejects_duplicates_and_empty_names():
    dispatcher = CommandDispatcher()
    dispatcher.register("ping", lambda args: "pong")
    with pytest.raises(ValueError):
        dispatcher.register("ping", lambda args: "again")
    with pytest.raises(ValueError):
        dispatcher.register("", lambda args: None)
    assert "ping" in dispatcher
    assert dispatcher.commands == ["ping"]


def test_register_many_sorted_commands():
    dispatcher = CommandDispatcher()
    dispatcher.register_many({"b": lambda a: 1, "a": lambda a: 2})
    assert dispatcher.commands == ["a", "b"]


@pytest.mark.asyncio
async def test_dispatch_sync_and_async_handlers():
    dispatcher = CommandDispatcher()

    async def slow_echo(arguments):
        await asyncio.sleep(0)
        return arguments

    dispatcher.register("ping", lambda args: "pong")
    dispatcher.register("echo", slow_echo)
    assert await dispatcher.dispatch(_request("ping")) == ResponseEnvelope(id="r1", result="pong")
    assert (await dispatcher.dispatch(_request("echo", a=1))).result == {"a": 1}


@pytest.mark.asyncio
async def test_dispatch_none_result_is_success():
    dispatcher = CommandDispatcher()
    dispatcher.register("noop", lambda args: None)
    response = await dispatcher.dispatch(_request("noop"))
    assert response.ok
    assert response.result is None


@pytest.mark.asyncio
async def test_dispatch_unknown_command():
    response = await CommandDispatcher().dispatch(_request("renameFile"))
    assert response.error == "Unknown command: renameFile"


@pytest.mark.asyncio
async def test_dispatch_handler_exception_becomes_error_response():
    dispatcher = CommandDispatcher()

    def needs_key(arguments):
        return arguments["key"]

    async def explode(arguments):
        raise ValueError("Invalid configuration key format")

    dispatcher.register("needsKey", needs_key)
    dispatcher.register("explode", explode)
    assert (await dispatcher.dispatch(_request("needsKey"))).error == "Missing argument: key"
    assert (await dispatcher.dispatch(_request("explode"))).error == "Invalid configuration key format"


@pytest.mark.asyncio
async def test_dispatch_never_raises_for_empty_exception():
    dispatcher = CommandDispatcher()

    def bare(arguments):
        raise RuntimeError()

    dispatcher.register("bare", bare)
    assert (await dispatcher.dispatch(_request("bare"))).error == "RuntimeError"
