"""Command bridge: host capabilities as async functions.

Every capability call maps to exactly one HTTP request against the host:
- a GET without body for capabilities that take no arguments
- a POST with a JSON body for capabilities that take arguments

The response status is checked before the body is parsed. ``log`` and
``core.convert_file_src`` recover from every bridge failure locally and
record it in ``CommandBridge.diagnostics``; ``core.get_args`` propagates.
"""

import logging
from collections.abc import Mapping
from typing import Any, TypeVar

import httpx
from pydantic import TypeAdapter, ValidationError

from hostbridge.bridge.errors import BridgeError, SerializationError, TransportError
from hostbridge.bridge.models import (
    ARGS_RESULT,
    FILE_SRC_RESULT,
    Capability,
    ConvertFileSrcRequest,
    DiagnosticLog,
    LogRequest,
)
from hostbridge.config import BridgeConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _validate(adapter: TypeAdapter[T], capability: Capability, value: Any, expected: str) -> T:
    """Check a parsed response against the capability's result type."""
    try:
        return adapter.validate_python(value, strict=True)
    except ValidationError as e:
        raise SerializationError(
            capability.value, f"expected {expected}, got {type(value).__name__}"
        ) from e


class CoreCommands:
    """Capabilities grouped under the ``core`` namespace."""

    def __init__(self, bridge: "CommandBridge"):
        self._bridge = bridge

    async def convert_file_src(self, file_path: str) -> str:
        """Rewrite a local file path into a URL the frontend can load.

        Falls back to returning ``file_path`` unchanged if the host call fails.
        """
        request = ConvertFileSrcRequest(file_path=file_path)
        try:
            result = await self._bridge.invoke(
                Capability.CONVERT_FILE_SRC, request.model_dump(by_alias=True)
            )
            return _validate(FILE_SRC_RESULT, Capability.CONVERT_FILE_SRC, result, "a string")
        except BridgeError as e:
            self._bridge.absorb(Capability.CONVERT_FILE_SRC, e)
            return file_path

    async def get_args(self) -> list[str]:
        """Get the host process's launch arguments.

        Raises:
            TransportError: Host unreachable or non-success status.
            SerializationError: Body is not a JSON list of strings.
        """
        result = await self._bridge.invoke(Capability.GET_ARGS)
        return _validate(ARGS_RESULT, Capability.GET_ARGS, result, "a list of strings")


class CommandBridge:
    """Invokes host capabilities over HTTP.

    Holds no per-call state: one instance is created per frontend context
    and passed to the code that needs it. Concurrent calls are independent
    and may complete in any order.

    Usage::

        async with CommandBridge(BridgeConfig(origin="http://127.0.0.1:8080")) as bridge:
            await bridge.log("started")
            src = await bridge.core.convert_file_src("file:///tmp/x.png")
            args = await bridge.core.get_args()
    """

    def __init__(
        self,
        config: BridgeConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.config = config or BridgeConfig()
        self._client = client or httpx.AsyncClient()
        self._owns_client = client is None
        self.diagnostics = DiagnosticLog()
        self.core = CoreCommands(self)

    async def __aenter__(self) -> "CommandBridge":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client if the bridge created it."""
        if self._owns_client:
            await self._client.aclose()

    def url_for(self, capability: Capability | str) -> str:
        """Build the request URL for a capability."""
        name = capability.value if isinstance(capability, Capability) else capability
        origin = self.config.origin.rstrip("/")
        path = "/".join(p for p in (self.config.api_prefix.strip("/"), name.strip("/")) if p)
        return f"{origin}/{path}"

    async def invoke(
        self,
        capability: Capability | str,
        arguments: Mapping[str, Any] | None = None,
    ) -> Any:
        """Send one capability request and return the parsed JSON response.

        Args:
            capability: Capability name, may contain ``/``-separated namespaces.
            arguments: Named arguments sent as a JSON body. ``None`` sends a GET.

        Returns:
            The JSON value the host returned.

        Raises:
            TransportError: Request failed or status is outside 2xx.
            SerializationError: Body is not valid JSON.
        """
        name = capability.value if isinstance(capability, Capability) else capability
        url = self.url_for(name)

        try:
            if arguments is None:
                response = await self._client.get(url)
            else:
                response = await self._client.post(url, json=dict(arguments))
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise TransportError(None, f"Request to {name} failed: {e}") from e

        if not response.is_success:
            raise TransportError(response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise SerializationError(name, str(e)) from e

    async def log(self, message: str) -> None:
        """Send a message to the host's logging sink.

        Never raises; failures are recorded in ``diagnostics``.
        """
        try:
            await self.invoke(Capability.LOG, LogRequest(message=message).model_dump())
        except BridgeError as e:
            self.absorb(Capability.LOG, e)

    def absorb(self, capability: Capability, error: BridgeError) -> None:
        """Record a recovered failure in ``diagnostics`` and log it."""
        self.diagnostics.record(capability, error)
        logger.error(f"Error invoking {capability.value}: {error}")
