"""Main entry point for the SimpleIPC CLI."""

from __future__ import annotations

import asyncio
import time

import httpx
import typer
from simple_ipc import IpcInterface, SimpleIPCError, get_config
from simple_ipc.api import HealthResponse
from simple_ipc.infrastructure.logging import LoggingConfig, LogLevel, setup_logging

from simple_ipc_cli import __version__
from simple_ipc_cli.messages import Ping

app = typer.Typer(help="Exchange messages with a SimpleIPC partner process.")


def _configure_logging(log_level: LogLevel, json_logs: bool) -> None:
    setup_logging(LoggingConfig(level=log_level, json_format=json_logs))


async def _send_pings(port: int, partner_port: int, count: int, text: str) -> float:
    async with IpcInterface(port, partner_port) as ipc:
        elapsed = 0.0
        for sequence in range(count):
            start = time.perf_counter()
            await ipc.send_message(Ping(sequence=sequence, text=text))
            elapsed += time.perf_counter() - start
    return elapsed


async def _receive_pings(
    port: int | None, partner_port: int | None, count: int, timeout: float
) -> int:
    loop = asyncio.get_running_loop()
    done = asyncio.Event()
    received = 0

    def on_ping(message: Ping) -> None:
        nonlocal received
        latency_ms = (time.time() - message.sent_at) * 1000
        typer.echo(f"#{message.sequence} {message.text} ({latency_ms:.3f} ms)")
        received += 1
        if count and received >= count:
            loop.call_soon_threadsafe(done.set)

    async with IpcInterface(port, partner_port) as ipc:
        ipc.on(Ping, on_ping)
        typer.echo(f"Listening on port {ipc.port} (partner {ipc.partner_port})")
        try:
            await asyncio.wait_for(done.wait(), timeout=timeout or None)
        except TimeoutError:
            typer.echo(f"Timed out after {timeout}s with {received} message(s)", err=True)
    return received


@app.command()  # type: ignore[misc]
def version() -> None:
    """Show the SimpleIPC CLI version."""
    typer.echo(f"SimpleIPC CLI version {__version__}")


@app.command()  # type: ignore[misc]
def ping(
    partner_port: int = typer.Option(..., help="Port of the partner interface"),
    port: int = typer.Option(0, help="Port to listen on (0 lets the OS choose)"),
    count: int = typer.Option(1, min=1, help="Number of messages to send"),
    text: str = typer.Option("ping", help="Text carried by every message"),
    log_level: LogLevel = typer.Option(LogLevel.WARNING, help="Log level"),
    json_logs: bool = typer.Option(False, help="Emit JSON log lines"),
) -> None:
    """Send Ping messages to a partner interface."""
    _configure_logging(log_level, json_logs)

    try:
        elapsed = asyncio.run(_send_pings(port, partner_port, count, text))
    except SimpleIPCError as e:
        typer.echo(f"Error: {e.message}", err=True)
        raise typer.Exit(code=1) from e

    typer.echo(
        f"Sent {count} message(s) to port {partner_port}, "
        f"average {elapsed / count * 1000:.3f} ms"
    )


@app.command()  # type: ignore[misc]
def listen(
    port: int | None = typer.Option(None, help="Port to listen on (default from config)"),
    partner_port: int | None = typer.Option(None, help="Port of the partner interface"),
    count: int = typer.Option(0, min=0, help="Exit after this many messages (0 runs forever)"),
    timeout: float = typer.Option(0.0, min=0.0, help="Give up after this many seconds"),
    log_level: LogLevel = typer.Option(LogLevel.WARNING, help="Log level"),
    json_logs: bool = typer.Option(False, help="Emit JSON log lines"),
) -> None:
    """Print Ping messages received from a partner interface."""
    _configure_logging(log_level, json_logs)

    try:
        received = asyncio.run(_receive_pings(port, partner_port, count, timeout))
    except SimpleIPCError as e:
        typer.echo(f"Error: {e.message}", err=True)
        raise typer.Exit(code=1) from e

    if count and received < count:
        raise typer.Exit(code=1)


@app.command()  # type: ignore[misc]
def health(
    port: int = typer.Option(..., help="Listening port of the interface to query"),
) -> None:
    """Show the port pair and message types of a running interface."""
    url = f"http://{get_config().ports.host}:{port}/health"
    try:
        response = httpx.get(url, timeout=get_config().timeouts.send_timeout)
        response.raise_for_status()
    except httpx.HTTPError as e:
        typer.echo(f"Error: {url} is not reachable ({e})", err=True)
        raise typer.Exit(code=1) from e

    info = HealthResponse.model_validate(response.json())
    typer.echo(f"port={info.port} partner_port={info.partner_port}")
    typer.echo(f"message_types={','.join(info.message_types) or '-'}")
    typer.echo(f"pending_handlers={info.pending_handlers}")


if __name__ == "__main__":
    app()
