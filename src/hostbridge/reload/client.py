"""Live-reload notification channel.

Keeps a best-effort WebSocket channel open to the host's ``/ws`` endpoint
during development and reloads the page when the host sends ``reload``.

Connection lifecycle:
1. CONNECTING -> OPEN when the channel is established
2. OPEN: ``reload`` triggers one reload, any other payload is ignored
3. OPEN/CONNECTING -> CLOSED on termination or transport error
4. CLOSED: one reload is scheduled after ``retry_delay``, keyed by the
   channel generation so a reopen before it fires turns it into a no-op
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from contextlib import AbstractAsyncContextManager
from enum import Enum
from typing import Any
from urllib.parse import urlsplit, urlunsplit

from websockets.asyncio.client import connect as ws_connect
from websockets.exceptions import WebSocketException

from hostbridge.config import BridgeConfig

logger = logging.getLogger(__name__)

RELOAD_TOKEN = "reload"

# Page scheme -> channel scheme
CHANNEL_SCHEMES = {"http": "ws", "https": "wss"}

CHANNEL_ERRORS = (WebSocketException, OSError, TimeoutError)

ReloadCallback = Callable[[], Awaitable[None] | None]
Connector = Callable[[str], AbstractAsyncContextManager[Any]]


class ConnectionState(str, Enum):
    """Live-reload channel states."""

    CONNECTING = "connecting"
    OPEN = "open"
    CLOSED = "closed"


def channel_url(page_url: str, channel_path: str = "/ws") -> str:
    """Derive the live-reload channel URL from the page URL.

    Args:
        page_url: URL the page was loaded from (http or https).
        channel_path: Path of the channel on the page's host.

    Returns:
        ``ws://host/ws`` for plain pages, ``wss://host/ws`` for secure ones.

    Raises:
        ValueError: If the page scheme has no channel counterpart.
    """
    parts = urlsplit(page_url)
    scheme = CHANNEL_SCHEMES.get(parts.scheme.lower())
    if scheme is None or not parts.netloc:
        raise ValueError(f"Cannot derive a live reload channel from {page_url!r}")

    # Like location.host: drop any userinfo, keep the port
    host = parts.netloc.rpartition("@")[2]
    return urlunsplit((scheme, host, "/" + channel_path.lstrip("/"), "", ""))


class LiveReloadClient:
    """Self-healing live-reload channel for one page.

    Becomes a no-op when there is no channel support: no connector, or a
    page that was not served over http(s).

    Usage::

        client = LiveReloadClient("http://127.0.0.1:8080/app/", reload=page.reload)
        await client.run()
    """

    def __init__(
        self,
        page_url: str,
        reload: ReloadCallback,
        *,
        channel_path: str = "/ws",
        retry_delay: float = 1.0,
        connect: Connector | None = ws_connect,
    ):
        self.page_url = page_url
        self.retry_delay = retry_delay
        self._reload = reload
        self._connect = connect

        self.url: str | None = None
        if connect is not None:
            try:
                self.url = channel_url(page_url, channel_path)
            except ValueError as e:
                logger.debug(f"Live reload disabled: {e}")

        self._state = ConnectionState.CLOSED
        self._generation = 0
        self._retries: set[asyncio.Task[None]] = set()

    @classmethod
    def from_config(
        cls,
        config: BridgeConfig,
        reload: ReloadCallback,
        connect: Connector | None = ws_connect,
    ) -> "LiveReloadClient":
        """Create a client for the page origin in ``config``."""
        return cls(
            config.origin,
            reload,
            channel_path=config.channel_path,
            retry_delay=config.retry_delay,
            connect=connect,
        )

    @property
    def supported(self) -> bool:
        """Whether this environment can open a live-reload channel."""
        return self.url is not None

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def generation(self) -> int:
        """Number of channels opened so far."""
        return self._generation

    @property
    def pending_retries(self) -> int:
        return len(self._retries)

    async def run(self) -> None:
        """Open the channel and handle messages until it closes.

        Channel errors never escape: they are logged and lead to the
        CLOSED transition and the retry policy.

        Raises:
            RuntimeError: If a channel is already connecting or open.
        """
        if not self.supported:
            logger.debug("Live reload unavailable, skipping")
            return
        if self._state is not ConnectionState.CLOSED:
            raise RuntimeError("Live reload channel is already active")

        self._generation += 1
        generation = self._generation
        self._state = ConnectionState.CONNECTING
        reloaded = False

        try:
            async with self._connect(self.url) as channel:
                self._state = ConnectionState.OPEN
                logger.info("Live reload connected")

                async for message in channel:
                    if message == RELOAD_TOKEN:
                        logger.info("Live reload triggered")
                        reloaded = True
                        await self._trigger_reload()
                        # The reload replaces this page, stop listening
                        break
                    logger.debug(f"Ignoring live reload payload: {message!r}")

        except CHANNEL_ERRORS as e:
            logger.info(f"Live reload error: {e}")

        finally:
            self._state = ConnectionState.CLOSED

        logger.info("Live reload disconnected")

        if not reloaded:
            self._schedule_retry(generation)

    async def wait_for_retries(self) -> None:
        """Wait until every scheduled retry has fired."""
        if self._retries:
            await asyncio.gather(*self._retries)

    def _schedule_retry(self, generation: int) -> None:
        task = asyncio.create_task(self._retry_after(generation))
        self._retries.add(task)
        task.add_done_callback(self._retries.discard)

    async def _retry_after(self, generation: int) -> None:
        await asyncio.sleep(self.retry_delay)

        if self._state is ConnectionState.CLOSED and self._generation == generation:
            logger.info("Live reload channel still closed, reloading")
            await self._trigger_reload()
        else:
            logger.debug(f"Skipping stale live reload retry (generation {generation})")

    async def _trigger_reload(self) -> None:
        try:
            result = self._reload()
            if asyncio.iscoroutine(result):
                await result
        except Exception as e:
            logger.error(f"Reload callback error: {e}")
