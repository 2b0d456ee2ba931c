"""Live-reload notification channel."""

from hostbridge.reload.client import (
    RELOAD_TOKEN,
    ConnectionState,
    LiveReloadClient,
    channel_url,
)

__all__ = ["RELOAD_TOKEN", "ConnectionState", "LiveReloadClient", "channel_url"]
