"""Frontend asset watching for live reload.

Polls the served directory for changes to web assets (HTML, CSS, JS,
JSON, XML) and reports them in debounced batches, so a build that writes
many files produces one reload.
"""

import asyncio
import hashlib
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS = (".html", ".css", ".js", ".json", ".xml")
IGNORED_PARTS = ("__pycache__", ".git", "node_modules", ".venv")


@dataclass
class AssetChange:
    """A detected change to a watched asset."""

    path: Path
    change_type: str  # "modified", "created", "deleted"
    detected_at: datetime = field(default_factory=lambda: datetime.now(UTC))


class AssetWatcher:
    """Detects changes to frontend assets under a root directory.

    Uses file hashes so rewriting a file with identical content is not
    reported.
    """

    def __init__(
        self,
        root_dir: str | Path,
        extensions: list[str] | tuple[str, ...] = DEFAULT_EXTENSIONS,
    ):
        self.root_dir = Path(root_dir)
        self.extensions = tuple(ext.lower() for ext in extensions)
        self._file_states: dict[Path, str] = {}
        self._initialized = False
        self._stopped = asyncio.Event()

    def _is_watched(self, path: Path) -> bool:
        if any(part in IGNORED_PARTS for part in path.relative_to(self.root_dir).parts):
            return False
        return path.suffix.lower() in self.extensions

    def _scan_files(self) -> dict[Path, str]:
        files: dict[Path, str] = {}
        if not self.root_dir.exists():
            return files

        for path in self.root_dir.rglob("*"):
            if not path.is_file() or not self._is_watched(path):
                continue
            try:
                files[path] = hashlib.sha256(path.read_bytes()).hexdigest()
            except OSError as e:
                logger.debug(f"Error scanning {path}: {e}")

        return files

    def initialize(self) -> None:
        """Record the current state of all watched files."""
        self._file_states = self._scan_files()
        self._initialized = True
        logger.info(f"Asset watcher started for {self.root_dir} ({len(self._file_states)} files)")

    def detect_changes(self) -> list[AssetChange]:
        """Detect changes since the last scan.

        The first call only initializes state and reports nothing.
        """
        if not self._initialized:
            self.initialize()
            return []

        current = self._scan_files()
        changes: list[AssetChange] = []

        for path, file_hash in current.items():
            old_hash = self._file_states.get(path)
            if old_hash is None:
                changes.append(AssetChange(path=path, change_type="created"))
            elif old_hash != file_hash:
                changes.append(AssetChange(path=path, change_type="modified"))

        for path in self._file_states:
            if path not in current:
                changes.append(AssetChange(path=path, change_type="deleted"))

        self._file_states = current
        return changes

    def stop(self) -> None:
        """Ask a running watch loop to exit after its current poll."""
        self._stopped.set()

    async def watch_loop(
        self,
        callback: Callable[[list[AssetChange]], Awaitable[None]],
        poll_interval: float = 0.25,
        debounce_seconds: float = 0.1,
    ) -> None:
        """Poll for changes and call back once they settle.

        Args:
            callback: Async function called with each batch of changes.
            poll_interval: Seconds between scans.
            debounce_seconds: Quiet period required before a batch is delivered.
        """
        self.initialize()
        loop = asyncio.get_running_loop()
        pending: list[AssetChange] = []
        last_change: float | None = None

        while not self._stopped.is_set():
            changes = self.detect_changes()
            if changes:
                for change in changes:
                    logger.info(f"File changed: {change.path}")
                pending.extend(changes)
                last_change = loop.time()

            if pending and last_change is not None and loop.time() - last_change >= debounce_seconds:
                await callback(pending)
                pending = []
                last_change = None

            try:
                await asyncio.wait_for(self._stopped.wait(), timeout=poll_interval)
            except TimeoutError:
                pass
