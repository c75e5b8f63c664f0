#!/usr/bin/env python3

from __future__ import annotations
import asyncio
from pathlib import Path
from typing import Optional

import typer
import websockets
from aioconsole import ainput
from rich.console import Console
from rich.table import Table

from client.transport import WebsocketTransport
from client.ws_client import SessionStateError, WsClient
from shared.config import ConfigError, load_config
from shared.log import configure_root_logging, get_logger
from wire.consts import MsgType, Scope
from wire.errors import WireError
from wire.frame import Frame
from wire.identifiers import get_encoder
from wire.messages import ChatMessage, ErrorMessage, body_for

app = typer.Typer(help="wscluster chat client")
console = Console()
logger = get_logger(__name__)

HELP = "/tell <id> <msg>, /group <id> <msg>, /all <msg>, /quit"


def _render(frame: Frame) -> None:
    try:
        body = body_for(frame)
    except WireError as e:
        console.print(f"[red]Bad {getattr(frame.msg_type, 'name', frame.msg_type)} body[/]: {e}")
        return
    if isinstance(body, ChatMessage):
        label = {Scope.GROUP: "Group", Scope.BROADCAST: "All"}.get(frame.scope, "DM")
        console.print(f"[bold cyan]{label}[/] from {body.from_}: {body.text}")
    elif isinstance(body, ErrorMessage):
        console.print(f"[red]ERROR {body.code}[/]: {body.detail}")
    else:
        console.print(f"[dim]recv {getattr(frame.msg_type, 'name', frame.msg_type)} ({len(frame.payload)} bytes)[/]")


def handle_line(client: WsClient, line: str) -> bool:
    """Run one console command. Returns False when the user wants to quit."""
    if line in {"/quit", "/exit"}:
        return False
    if line == "/help":
        console.print(HELP)
        return True
    try:
        if line.startswith("/tell ") or line.startswith("/group "):
            parts = line.split(" ", 2)
            if len(parts) < 3 or not parts[2].strip():
                console.print(f"Usage: {parts[0]} <id> <message>")
                return True
            scope = Scope.GROUP if parts[0] == "/group" else Scope.CLIENT
            client.send_chat(parts[1], parts[2].strip(), scope=scope)
        elif line.startswith("/all "):
            client.send_chat(None, line[len("/all "):].strip(), scope=Scope.BROADCAST)
        else:
            console.print(f"Unknown command. Try {HELP}")
    except (WireError, SessionStateError) as e:
        console.print(f"[red]Not sent[/]: {e}")
    return True


@app.command()
def frame(
    to: str = typer.Option("1", help="Recipient identifier"),
    msg_type: str = typer.Option("chat", help="Message type name"),
    scope: str = typer.Option("client", help="client | group | broadcast"),
    payload: str = typer.Option("", help="Payload text, sent as raw UTF-8"),
    encoding: str = typer.Option("numeric", help="Identifier encoding: numeric | codepoint"),
):
    """Print the wire encoding of one frame and exit."""
    try:
        frame = Frame.build(
            MsgType.from_string(msg_type),
            Scope[scope.upper()],
            get_encoder(encoding).encode(to),
            payload,
        )
    except (KeyError, ValueError) as e:
        console.print(f"[red]{e}[/]")
        raise typer.Exit(code=1)
    data = frame.to_bytes()
    table = Table(title="Frame")
    table.add_column("Field")
    table.add_column("Value")
    for name in ("version", "field_count", "msg_type", "scope", "to"):
        table.add_row(name, str(getattr(frame.header, name)))
    table.add_row("payload", f"{len(frame.payload)} bytes")
    console.print(table)
    console.print(data.hex(" "))
    console.print(list(data))


@app.command()
def run(
    identity: str = typer.Argument(..., help="Client id to log in as"),
    server: Optional[str] = typer.Option(None, help="WebSocket URL of the hub"),
    secret: Optional[str] = typer.Option(None, help="Shared secret for login"),
    config: Optional[Path] = typer.Option(None, help="YAML config file"),
    auth_mode: Optional[str] = typer.Option(None, help="plain | digest"),
):
    """Connect, log in and chat from the console."""
    try:
        cfg = load_config(config, url=server, secret=secret, auth_mode=auth_mode)
    except ConfigError as e:
        console.print(f"[red]Config error[/]: {e}")
        raise typer.Exit(code=1)
    configure_root_logging(cfg.log_level)
    console.print(f"[bold green]wschat starting[/] as {identity} on {cfg.url}")

    async def main_loop() -> None:
        client = WsClient(cfg)
        transport = WebsocketTransport(
            cfg.url,
            max_message_size=cfg.max_message_size,
            ping_interval=cfg.ping_interval,
            ping_timeout=cfg.ping_timeout,
        )
        client.set_on_message(_render)
        client.set_on_error(lambda data, exc: console.print(f"[red]Dropped frame[/]: {exc}"))
        client.set_on_close(lambda: console.print("[yellow]Disconnected[/]"))
        client.attach(transport)
        client.login(identity)

        await transport.connect()
        recv_task = asyncio.create_task(transport.recv_loop())
        try:
            while not recv_task.done():
                line = (await ainput(": ")).strip()
                if not line:
                    continue
                if not handle_line(client, line):
                    break
        finally:
            logger.info("Console loop finished for %s", identity)
            client.close()
            try:
                await asyncio.wait_for(recv_task, timeout=2.0)
            except asyncio.TimeoutError:
                recv_task.cancel()

    try:
        asyncio.run(main_loop())
    except (OSError, websockets.exceptions.WebSocketException) as e:
        console.print(f"[red]Connection failed[/]: {e}")
        raise typer.Exit(code=1)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
