"""hostbridge CLI entry point."""

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import TypeVar

import click
from rich.console import Console
from rich.logging import RichHandler

from hostbridge.bridge import BridgeError, CommandBridge
from hostbridge.config import DEFAULT_ORIGIN, BridgeConfig, HostConfig
from hostbridge.reload import LiveReloadClient

console = Console()

T = TypeVar("T")


def setup_logging(verbose: bool = False) -> None:
    """Configure logging with rich handler."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, console=console)],
    )


def with_bridge(config: BridgeConfig, call: Callable[[CommandBridge], Awaitable[T]]) -> T:
    """Run one bridge call in a fresh event loop."""

    async def wrapped() -> T:
        async with CommandBridge(config) as bridge:
            return await call(bridge)

    return asyncio.run(wrapped())


def host_config(root: Path, args: tuple[str, ...], dev: bool) -> HostConfig:
    """Build the host config; an HTML file root serves its directory with that file as index."""
    root = root.resolve()
    if root.is_file():
        return HostConfig(root_dir=root.parent, index_file=root.name, args=list(args), dev=dev)
    return HostConfig(root_dir=root, args=list(args), dev=dev)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose logging")
@click.option("--origin", default=DEFAULT_ORIGIN, show_default=True, help="Origin of the host")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, origin: str) -> None:
    """hostbridge - frontend/host bridge for webview applications."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["config"] = BridgeConfig(origin=origin)
    setup_logging(verbose)


@cli.command()
@click.argument("root", type=click.Path(exists=True, path_type=Path))
@click.argument("args", nargs=-1)
@click.option("--host", default="127.0.0.1", help="Host to bind to")
@click.option("--port", default=8080, help="Port to bind to")
@click.option("--dev/--no-dev", default=False, help="Watch assets and broadcast live reloads")
def serve(root: Path, args: tuple[str, ...], host: str, port: int, dev: bool) -> None:
    """Serve ROOT under /app along with the bridge API.

    ROOT is a directory or an HTML file. ARGS are returned by core/getArgs.
    """
    import uvicorn

    from hostbridge.host import create_app

    config = host_config(root, args, dev)

    console.print(f"[bold green]Server running at http://{host}:{port}[/bold green]")
    console.print(f"   - App: http://{host}:{port}/app/")
    console.print(f"   - API: http://{host}:{port}/api")
    console.print(f"   - Health: http://{host}:{port}/health")
    if dev:
        console.print(f"   - Live reload: ws://{host}:{port}/ws")

    uvicorn.run(create_app(config), host=host, port=port)


@cli.command()
@click.option("--retry-delay", default=1.0, show_default=True, help="Seconds before reloading a closed channel")
@click.pass_context
def listen(ctx: click.Context, retry_delay: float) -> None:
    """Follow the host's live-reload channel.

    Each reload starts a new channel, the way a reloaded page would.
    """
    config: BridgeConfig = ctx.obj["config"]
    config.retry_delay = retry_delay

    async def run_listener() -> None:
        reloaded = asyncio.Event()

        def on_reload() -> None:
            console.print("[bold yellow]Reload[/bold yellow]")
            reloaded.set()

        while True:
            client = LiveReloadClient.from_config(config, on_reload)
            if not client.supported:
                raise click.BadParameter(f"No live reload channel for {config.origin}", param_hint="--origin")

            reloaded.clear()
            await client.run()
            await reloaded.wait()

    try:
        asyncio.run(run_listener())
    except KeyboardInterrupt:
        console.print("\n[yellow]Listener stopped[/yellow]")


@cli.command()
@click.argument("message")
@click.pass_context
def log(ctx: click.Context, message: str) -> None:
    """Send MESSAGE to the host log."""

    async def call(bridge: CommandBridge) -> list[str]:
        await bridge.log(message)
        return [d.message for d in bridge.diagnostics]

    failures = with_bridge(ctx.obj["config"], call)
    for failure in failures:
        console.print(f"[red]Log not delivered: {failure}[/red]")
    if failures:
        ctx.exit(1)


@cli.command("convert-src")
@click.argument("file_path")
@click.pass_context
def convert_src(ctx: click.Context, file_path: str) -> None:
    """Print the frontend URL for FILE_PATH."""

    async def call(bridge: CommandBridge) -> str:
        return await bridge.core.convert_file_src(file_path)

    click.echo(with_bridge(ctx.obj["config"], call))


@cli.command()
@click.option("--json", "as_json", is_flag=True, help="Print as a JSON array")
@click.pass_context
def args(ctx: click.Context, as_json: bool) -> None:
    """Print the host's launch arguments."""

    async def call(bridge: CommandBridge) -> list[str]:
        return await bridge.core.get_args()

    try:
        result = with_bridge(ctx.obj["config"], call)
    except BridgeError as e:
        raise click.ClickException(str(e)) from e

    if as_json:
        click.echo(json.dumps(result))
    else:
        for arg in result:
            click.echo(arg)


if __name__ == "__main__":
    cli()
