"""Request/response invocation of host capabilities."""

from hostbridge.bridge.client import CommandBridge, CoreCommands
from hostbridge.bridge.errors import BridgeError, SerializationError, TransportError
from hostbridge.bridge.models import Capability, Diagnostic, DiagnosticLog

__all__ = [
    "BridgeError",
    "Capability",
    "CommandBridge",
    "CoreCommands",
    "Diagnostic",
    "DiagnosticLog",
    "SerializationError",
    "TransportError",
]
