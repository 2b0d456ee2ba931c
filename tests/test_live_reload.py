"""Tests for the live-reload client."""

import asyncio
from contextlib import asynccontextmanager

import pytest
from websockets.asyncio.server import serve

from hostbridge.config import BridgeConfig
from hostbridge.reload import RELOAD_TOKEN, ConnectionState, LiveReloadClient, channel_url

RETRY = 0.05


class Script:
    """What a scripted channel does once opened."""

    def __init__(
        self,
        messages: list = (),
        error: Exception | None = None,
        open_error: Exception | None = None,
        hold: asyncio.Event | None = None,
    ):
        self.messages = list(messages)
        self.error = error
        self.open_error = open_error
        self.hold = hold
        self.closed = False


class ScriptedChannel:
    def __init__(self, script: Script):
        self.script = script

    async def __aiter__(self):
        for message in self.script.messages:
            yield message
        if self.script.hold is not None:
            await self.script.hold.wait()
        if self.script.error is not None:
            raise self.script.error


class ScriptedConnector:
    """Connector that plays one script per opened channel."""

    def __init__(self, *scripts: Script):
        self.scripts = list(scripts)
        self.urls: list[str] = []

    @asynccontextmanager
    async def __call__(self, url: str):
        self.urls.append(url)
        script = self.scripts.pop(0)
        if script.open_error is not None:
            raise script.open_error
        try:
            yield ScriptedChannel(script)
        finally:
            script.closed = True


class ReloadCounter:
    def __init__(self) -> None:
        self.count = 0

    def __call__(self) -> None:
        self.count += 1


def make_client(connector, reload, page_url: str = "http://127.0.0.1:8080/app/") -> LiveReloadClient:
    return LiveReloadClient(page_url, reload, retry_delay=RETRY, connect=connector)


class TestChannelUrl:
    """Tests for deriving the channel target from the page origin."""

    def test_plain_page_uses_ws(self):
        assert channel_url("http://localhost:8080/app/index.html") == "ws://localhost:8080/ws"

    def test_secure_page_uses_wss(self):
        assert channel_url("https://example.test/app") == "wss://example.test/ws"

    def test_query_and_fragment_dropped(self):
        assert channel_url("http://127.0.0.1:5000/app/?x=1#top") == "ws://127.0.0.1:5000/ws"

    def test_userinfo_dropped(self):
        assert channel_url("http://user:pw@localhost:81/") == "ws://localhost:81/ws"

    def test_custom_channel_path(self):
        assert channel_url("http://localhost/", "live") == "ws://localhost/live"

    @pytest.mark.parametrize("page_url", ["file:///tmp/index.html", "about:blank", "not a url"])
    def test_unsupported_page_raises(self, page_url: str):
        with pytest.raises(ValueError):
            channel_url(page_url)


class TestUnsupportedEnvironment:
    """Tests for the no-op client."""

    async def test_no_connector_is_noop(self):
        reload = ReloadCounter()
        client = LiveReloadClient("http://localhost:8080/", reload, connect=None)

        assert not client.supported
        await client.run()

        assert client.state is ConnectionState.CLOSED
        assert client.generation == 0
        assert client.pending_retries == 0
        assert reload.count == 0

    async def test_file_page_is_noop(self):
        connector = ScriptedConnector()
        client = make_client(connector, ReloadCounter(), page_url="file:///tmp/index.html")

        await client.run()

        assert connector.urls == []
        assert client.pending_retries == 0


class TestMessages:
    """Tests for reload signal handling."""

    async def test_reload_token_reloads_once(self):
        reload = ReloadCounter()
        script = Script(messages=[RELOAD_TOKEN])
        client = make_client(ScriptedConnector(script), reload)

        await client.run()
        await asyncio.sleep(RETRY * 3)

        assert reload.count == 1
        assert script.closed
        assert client.pending_retries == 0

    async def test_other_payloads_ignored(self):
        reload = ReloadCounter()
        hold = asyncio.Event()
        script = Script(messages=["Reload", "reload ", "{}", "", b"reload", "refresh"], hold=hold)
        client = make_client(ScriptedConnector(script), reload)

        task = asyncio.create_task(client.run())
        await asyncio.sleep(0.01)

        assert client.state is ConnectionState.OPEN
        assert reload.count == 0

        hold.set()
        await task
        await client.wait_for_retries()

        # Only the close-retry reloads, never the payloads
        assert reload.count == 1

    async def test_reload_after_ignored_payloads(self):
        reload = ReloadCounter()
        client = make_client(ScriptedConnector(Script(messages=["noise", RELOAD_TOKEN, RELOAD_TOKEN])), reload)

        await client.run()

        assert reload.count == 1

    async def test_async_reload_callback(self):
        reloaded = asyncio.Event()

        async def reload() -> None:
            reloaded.set()

        client = make_client(ScriptedConnector(Script(messages=[RELOAD_TOKEN])), reload)
        await client.run()

        assert reloaded.is_set()

    async def test_reload_callback_errors_are_logged(self, caplog: pytest.LogCaptureFixture):
        def reload() -> None:
            raise RuntimeError("navigation blocked")

        client = make_client(ScriptedConnector(Script(messages=[RELOAD_TOKEN])), reload)
        await client.run()

        assert "navigation blocked" in caplog.text


class TestRetry:
    """Tests for the close/retry policy."""

    async def test_close_schedules_single_reload(self):
        reload = ReloadCounter()
        client = make_client(ScriptedConnector(Script()), reload)

        await client.run()

        assert client.state is ConnectionState.CLOSED
        assert client.pending_retries == 1
        assert reload.count == 0

        await client.wait_for_retries()
        assert reload.count == 1

    async def test_retry_waits_for_delay(self):
        reload = ReloadCounter()
        client = LiveReloadClient(
            "http://localhost/", reload, retry_delay=0.5, connect=ScriptedConnector(Script())
        )

        await client.run()
        await asyncio.sleep(0.05)

        assert reload.count == 0
        await client.wait_for_retries()
        assert reload.count == 1

    @pytest.mark.parametrize(
        "script",
        [
            Script(open_error=OSError("Connection refused")),
            Script(open_error=TimeoutError()),
            Script(messages=["noise"], error=OSError("Connection reset")),
        ],
    )
    async def test_transport_errors_route_to_closed(self, script: Script):
        reload = ReloadCounter()
        client = make_client(ScriptedConnector(script), reload)

        await client.run()

        assert client.state is ConnectionState.CLOSED
        await client.wait_for_retries()
        assert reload.count == 1

    async def test_reopen_before_timer_makes_retry_stale(self):
        reload = ReloadCounter()
        hold = asyncio.Event()
        connector = ScriptedConnector(Script(), Script(hold=hold))
        client = make_client(connector, reload)

        await client.run()
        assert client.generation == 1

        # A fresh channel opens before the retry fires
        second = asyncio.create_task(client.run())
        await asyncio.sleep(RETRY * 3)

        assert client.state is ConnectionState.OPEN
        assert client.generation == 2
        assert reload.count == 0

        # When the new channel drops, its own retry applies
        hold.set()
        await second
        await client.wait_for_retries()
        assert reload.count == 1

    async def test_retry_stale_while_reconnecting(self):
        reload = ReloadCounter()
        opened = asyncio.Event()
        release = asyncio.Event()

        @asynccontextmanager
        async def slow_connect(url: str):
            if not opened.is_set():
                opened.set()
                yield ScriptedChannel(Script())
                return
            await release.wait()
            raise OSError("still down")

        client = make_client(slow_connect, reload)
        await client.run()

        pending = asyncio.create_task(client.run())
        await asyncio.sleep(RETRY * 3)

        assert client.state is ConnectionState.CONNECTING
        assert reload.count == 0

        release.set()
        await pending
        await client.wait_for_retries()
        assert reload.count == 1


class TestSingleChannel:
    """Tests for the one-channel-per-client invariant."""

    async def test_second_run_while_open_raises(self):
        hold = asyncio.Event()
        client = make_client(ScriptedConnector(Script(hold=hold)), ReloadCounter())

        first = asyncio.create_task(client.run())
        await asyncio.sleep(0.01)

        with pytest.raises(RuntimeError):
            await client.run()

        hold.set()
        await first
        await client.wait_for_retries()

    def test_from_config(self):
        config = BridgeConfig(origin="https://app.test", channel_path="/live", retry_delay=2.5)
        client = LiveReloadClient.from_config(config, ReloadCounter(), connect=ScriptedConnector())

        assert client.url == "wss://app.test/live"
        assert client.retry_delay == 2.5


class TestRealChannel:
    """Tests against a real WebSocket server on localhost."""

    async def test_reload_over_websocket(self):
        async def handler(websocket) -> None:
            await websocket.send("hello")
            await websocket.send(RELOAD_TOKEN)
            await websocket.wait_closed()

        reload = ReloadCounter()
        async with serve(handler, "127.0.0.1", 0) as server:
            port = server.sockets[0].getsockname()[1]
            client = LiveReloadClient(f"http://127.0.0.1:{port}/app/", reload, retry_delay=RETRY)

            await asyncio.wait_for(client.run(), timeout=5)

        await asyncio.sleep(RETRY * 3)
        assert reload.count == 1

    async def test_server_close_triggers_retry(self):
        async def handler(websocket) -> None:
            await websocket.close()

        reload = ReloadCounter()
        async with serve(handler, "127.0.0.1", 0) as server:
            port = server.sockets[0].getsockname()[1]
            client = LiveReloadClient(f"http://127.0.0.1:{port}/", reload, retry_delay=RETRY)

            await asyncio.wait_for(client.run(), timeout=5)

        await client.wait_for_retries()
        assert reload.count == 1
