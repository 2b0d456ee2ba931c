"""WebSocket endpoint for live-reload notifications."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, WebSocket

from hostbridge.host.connections import ConnectionManager
from hostbridge.host.deps import get_connections

logger = logging.getLogger(__name__)

router = APIRouter()


@router.websocket("")
async def websocket_endpoint(
    websocket: WebSocket,
    connections: Annotated[ConnectionManager, Depends(get_connections)],
) -> None:
    """Live-reload channel.

    The host only sends; the text frame ``reload`` tells the page to
    reload. Incoming frames are read and discarded to detect disconnects.
    """
    await websocket.accept()
    await connections.add(websocket)

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                logger.debug("Live reload client disconnected")
                break
    finally:
        await connections.remove(websocket)
