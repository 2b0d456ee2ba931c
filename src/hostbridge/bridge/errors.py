"""Errors raised by the command bridge."""


class BridgeError(Exception):
    """Base class for command invocation failures."""


class TransportError(BridgeError):
    """Raised when the host answers with a non-success status or cannot be reached."""

    def __init__(self, status_code: int | None, message: str | None = None):
        self.status_code = status_code
        if message is None:
            message = (
                f"HTTP error! status: {status_code}" if status_code is not None else "Host unreachable"
            )
        self.message = message
        super().__init__(message)


class SerializationError(BridgeError):
    """Raised when a response body is not valid JSON or has the wrong shape."""

    def __init__(self, capability: str, reason: str):
        self.capability = capability
        self.reason = reason
        super().__init__(f"Invalid response for {capability}: {reason}")
