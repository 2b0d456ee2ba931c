"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from hostbridge.bridge import CommandBridge
from hostbridge.config import BridgeConfig, HostConfig
from hostbridge.host import create_app


@pytest.fixture
def host_config(tmp_path: Path) -> HostConfig:
    """Host configuration rooted in a temporary directory."""
    return HostConfig(root_dir=tmp_path, args=["--profile", "dev"])


@pytest.fixture
def host_app(host_config: HostConfig) -> FastAPI:
    return create_app(host_config)


@pytest.fixture
async def client(host_app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client for the host."""
    transport = ASGITransport(app=host_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def bridge(client: AsyncClient) -> CommandBridge:
    """Command bridge wired to the in-process host."""
    return CommandBridge(BridgeConfig(origin="http://test"), client=client)
