"""CLI commands for vscodebridge.

`serve` runs a standalone bridge host, `call` and `ping` talk to a running one.
"""

from __future__ import annotations

import asyncio
import json
import time
from pathlib import Path
from typing import Any

import typer
from rich.console import Console

from vscodebridge import __version__
from vscodebridge.cli.logging_utils import configure_console, ensure_rotating_log_file
from vscodebridge.client.client import BridgeClient
from vscodebridge.config.loader import load_settings
from vscodebridge.config.schema import BridgeSettings
from vscodebridge.handlers import build_default_dispatcher
from vscodebridge.server.ipc_server import IpcServer
from vscodebridge.server.socket_path import SOCKET_PATH_ENV_VAR
from vscodebridge.server.ws_server import WebSocketServer
from vscodebridge.utils.exceptions import BridgeError

app = typer.Typer(
    name="vscodebridge",
    help="vscodebridge - request/response bridge between an MCP server and an editor host",
    no_args_is_help=True,
)

console = Console()


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"vscodebridge v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(False, "--version", "-v", callback=_version_callback, is_eager=True),
) -> None:
    """vscodebridge - request/response bridge between an MCP server and an editor host."""


def _settings(config: Path | None, **overrides: Any) -> BridgeSettings:
    try:
        settings = load_settings(config)
    except ValueError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(2) from exc
    updates = {key: value for key, value in overrides.items() if value is not None}
    if updates:
        settings = settings.model_copy(update=updates)
    return settings


def _print_result(result: Any) -> None:
    try:
        console.print_json(data=result)
    except TypeError:
        console.print(repr(result))


@app.command()
def serve(
    transport: str = typer.Option("ipc", "--transport", "-t", help="ipc (Unix socket / named pipe) or ws"),
    socket_path: str | None = typer.Option(None, "--socket-path", help="Socket path (generated when omitted)"),
    host: str | None = typer.Option(None, "--host", help="WebSocket host"),
    port: int | None = typer.Option(None, "--port", "-p", help="WebSocket port"),
    settings_file: Path | None = typer.Option(None, "--settings-file", help="JSON file backing getSetting/setSetting"),
    config: Path | None = typer.Option(None, "--config", "-c", help="Config file path"),
    log_level: str | None = typer.Option(None, "--log-level", help="Log level"),
):
    """Run a bridge host answering ping, getSetting, setSetting and renameFile."""
    settings = _settings(
        config,
        socket_path=socket_path,
        ws_host=host,
        ws_port=port,
        settings_file=settings_file,
        log_level=log_level,
    )
    configure_console(settings.log_level)
    log_path = ensure_rotating_log_file("serve", settings.log_level)
    dispatcher = build_default_dispatcher(settings.settings_file)

    if transport == "ipc":
        server: IpcServer | WebSocketServer = IpcServer(dispatcher, settings.socket_path)
    elif transport == "ws":
        server = WebSocketServer(dispatcher, settings.ws_host, settings.ws_port)
    else:
        raise typer.BadParameter("transport must be 'ipc' or 'ws'", param_hint="--transport")

    async def _run() -> None:
        address = await server.start()
        console.print(f"[green]✓[/green] Listening on {address}")
        if isinstance(server, IpcServer):
            console.print(f"  To connect manually: export {SOCKET_PATH_ENV_VAR}={address}")
        console.print(f"  Commands: {', '.join(dispatcher.commands)}")
        console.print(f"  Logs: {log_path}")
        try:
            await asyncio.Event().wait()
        finally:
            await server.stop()

    try:
        asyncio.run(_run())
    except KeyboardInterrupt:
        console.print("\nShutting down...")


async def _call(settings: BridgeSettings, command: str, arguments: dict[str, Any]) -> Any:
    async with BridgeClient.from_settings(settings) as client:
        return await client.send_request(command, arguments)


@app.command()
def call(
    command: str = typer.Argument(..., help="Command name, e.g. getSetting"),
    args: str = typer.Option("{}", "--args", "-a", help="Command arguments as a JSON object"),
    socket_path: str | None = typer.Option(None, "--socket-path", help="Socket path"),
    ws_url: str | None = typer.Option(None, "--ws-url", help="WebSocket URL"),
    timeout: float | None = typer.Option(None, "--timeout", help="Request timeout in seconds"),
    config: Path | None = typer.Option(None, "--config", "-c", help="Config file path"),
):
    """Send one command to a running bridge host and print the result."""
    try:
        arguments = json.loads(args)
    except json.JSONDecodeError as exc:
        raise typer.BadParameter(f"invalid JSON: {exc}", param_hint="--args") from exc
    if not isinstance(arguments, dict):
        raise typer.BadParameter("arguments must be a JSON object", param_hint="--args")
    settings = _settings(config, socket_path=socket_path, ws_url=ws_url, request_timeout=timeout)
    configure_console("WARNING")
    try:
        result = asyncio.run(_call(settings, command, arguments))
    except BridgeError as exc:
        console.print(f"[red]Error:[/red] {exc.message}")
        raise typer.Exit(1) from exc
    _print_result(result)


@app.command()
def ping(
    socket_path: str | None = typer.Option(None, "--socket-path", help="Socket path"),
    ws_url: str | None = typer.Option(None, "--ws-url", help="WebSocket URL"),
    config: Path | None = typer.Option(None, "--config", "-c", help="Config file path"),
):
    """Check that a bridge host answers."""
    settings = _settings(config, socket_path=socket_path, ws_url=ws_url)
    configure_console("WARNING")
    started = time.monotonic()
    try:
        result = asyncio.run(_call(settings, "ping", {}))
    except BridgeError as exc:
        console.print(f"[red]✗[/red] {exc.message}")
        raise typer.Exit(1) from exc
    elapsed_ms = (time.monotonic() - started) * 1000
    console.print(f"[green]✓[/green] {result} ({elapsed_ms:.1f} ms)")


if __name__ == "__main__":
    app()
