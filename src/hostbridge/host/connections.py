"""Live-reload channel registry for broadcasting to connected pages."""

import asyncio
import logging

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Tracks open live-reload WebSockets and broadcasts text to them."""

    def __init__(self) -> None:
        self._connections: set[WebSocket] = set()
        self._lock = asyncio.Lock()

    async def add(self, websocket: WebSocket) -> None:
        async with self._lock:
            self._connections.add(websocket)
            logger.info(f"WebSocket connection added. Total connections: {len(self._connections)}")

    async def remove(self, websocket: WebSocket) -> None:
        async with self._lock:
            if websocket in self._connections:
                self._connections.discard(websocket)
                logger.info(f"WebSocket connection removed. Total connections: {len(self._connections)}")

    async def broadcast(self, message: str) -> int:
        """Send a text message to every connection.

        Connections that fail to receive are dropped.

        Returns:
            Number of connections the message was delivered to.
        """
        delivered = 0
        async with self._lock:
            for websocket in list(self._connections):
                try:
                    await websocket.send_text(message)
                    delivered += 1
                except Exception as e:
                    logger.error(f"Error sending WebSocket message: {e}")
                    self._connections.discard(websocket)
        return delivered

    @property
    def connection_count(self) -> int:
        return len(self._connections)
