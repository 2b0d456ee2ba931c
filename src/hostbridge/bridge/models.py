"""Wire models and diagnostics for host capabilities."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class Capability(str, Enum):
    """Host capabilities reachable through the bridge.

    Values are the request path segments joined with the API prefix.
    """

    LOG = "log"
    CONVERT_FILE_SRC = "core/convertFileSrc"
    GET_ARGS = "core/getArgs"


class LogRequest(BaseModel):
    """Arguments for the log capability."""

    message: str


class ConvertFileSrcRequest(BaseModel):
    """Arguments for the path conversion capability."""

    model_config = ConfigDict(populate_by_name=True)

    file_path: str = Field(alias="filePath")


class LogResponse(BaseModel):
    """Acknowledgement returned by the host log sink."""

    status: str = "ok"


# Narrow result types, one per capability
FILE_SRC_RESULT: TypeAdapter[str] = TypeAdapter(str)
ARGS_RESULT: TypeAdapter[list[str]] = TypeAdapter(list[str])


@dataclass
class Diagnostic:
    """A failure absorbed by a recovering capability."""

    capability: Capability
    error: Exception
    recorded_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def message(self) -> str:
        return str(self.error)


class DiagnosticLog:
    """In-memory record of failures the bridge recovered from.

    Callers never see these failures; the log lets code and tests
    observe that they happened.
    """

    def __init__(self, limit: int = 100) -> None:
        self._entries: list[Diagnostic] = []
        self._limit = limit

    def record(self, capability: Capability, error: Exception) -> Diagnostic:
        diagnostic = Diagnostic(capability=capability, error=error)
        self._entries.append(diagnostic)
        if len(self._entries) > self._limit:
            del self._entries[: len(self._entries) - self._limit]
        return diagnostic

    def for_capability(self, capability: Capability) -> list[Diagnostic]:
        return [d for d in self._entries if d.capability == capability]

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(list(self._entries))
