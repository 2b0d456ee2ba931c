"""FastAPI dependencies."""

from fastapi import Request, WebSocket

from hostbridge.config import HostConfig
from hostbridge.host.connections import ConnectionManager


async def get_config(request: Request) -> HostConfig:
    """Get the host configuration from app state."""
    return request.app.state.config


async def get_connections(websocket: WebSocket) -> ConnectionManager:
    """Get the live-reload connection registry from app state."""
    return websocket.app.state.connections
