"""Reference host: capability routes, file serving and live-reload broadcasts."""

from hostbridge.host.app import create_app
from hostbridge.host.connections import ConnectionManager
from hostbridge.host.paths import convert_file_src
from hostbridge.host.watcher import AssetChange, AssetWatcher

__all__ = ["AssetChange", "AssetWatcher", "ConnectionManager", "convert_file_src", "create_app"]
