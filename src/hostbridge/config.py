"""Configuration for the bridge clients and the reference host."""

from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_ORIGIN = "http://127.0.0.1:8080"


@dataclass
class BridgeConfig:
    """Configuration shared by the frontend-side clients."""

    # Origin of the page the frontend was loaded from
    origin: str = DEFAULT_ORIGIN

    # Prefix joined with a capability name to form the request path
    api_prefix: str = "/api"

    # Well-known live-reload channel path on the page host
    channel_path: str = "/ws"

    # Seconds to wait after a channel close before reloading
    retry_delay: float = 1.0


@dataclass
class HostConfig:
    """Configuration for the reference host server."""

    root_dir: Path = field(default_factory=Path.cwd)

    # Page served for directory requests under /app
    index_file: str = "index.html"

    # Launch arguments returned by core/getArgs
    args: list[str] = field(default_factory=list)

    # Enable the asset watcher and live-reload broadcasts
    dev: bool = False

    watch_extensions: list[str] = field(
        default_factory=lambda: [".html", ".css", ".js", ".json", ".xml"]
    )
    poll_interval: float = 0.25
    debounce_seconds: float = 0.1
