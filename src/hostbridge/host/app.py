"""FastAPI application factory for the reference host."""

import asyncio
import contextlib
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import RedirectResponse

from hostbridge import __version__
from hostbridge.config import HostConfig
from hostbridge.host.connections import ConnectionManager
from hostbridge.host.routes import api, files, pages, ws
from hostbridge.host.watcher import AssetChange, AssetWatcher
from hostbridge.reload.client import RELOAD_TOKEN

logger = logging.getLogger(__name__)


def reload_broadcaster(connections: ConnectionManager):
    """Build a watcher callback that tells every page to reload."""

    async def broadcast(changes: list[AssetChange]) -> None:
        logger.info(f"Sending reload signal to {connections.connection_count} connected clients")
        await connections.broadcast(RELOAD_TOKEN)

    return broadcast


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    config: HostConfig = app.state.config
    watcher: AssetWatcher | None = None
    watch_task: asyncio.Task | None = None

    if config.dev:
        logger.info("Development mode enabled")
        watcher = AssetWatcher(config.root_dir, config.watch_extensions)
        watch_task = asyncio.create_task(
            watcher.watch_loop(
                reload_broadcaster(app.state.connections),
                poll_interval=config.poll_interval,
                debounce_seconds=config.debounce_seconds,
            )
        )

    yield

    if watcher is not None and watch_task is not None:
        watcher.stop()
        with contextlib.suppress(asyncio.CancelledError):
            await watch_task
        logger.info("Asset watcher stopped")


def create_app(config: HostConfig | None = None) -> FastAPI:
    """Create and configure the host application."""
    config = config or HostConfig()

    app = FastAPI(
        title="hostbridge",
        description="Reference host for the frontend command bridge",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.connections = ConnectionManager()

    app.include_router(api.router, prefix="/api", tags=["api"])
    app.include_router(files.router, prefix="/file", tags=["files"])
    app.include_router(pages.router, prefix="/app", tags=["pages"])
    if config.dev:
        app.include_router(ws.router, prefix="/ws", tags=["websocket"])

    @app.get("/", include_in_schema=False)
    async def root() -> RedirectResponse:
        return RedirectResponse(url="/app", status_code=302)

    @app.get("/health")
    async def health_check() -> dict:
        """Health check endpoint."""
        return {"status": "healthy", "version": __version__}

    return app
