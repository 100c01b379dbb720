"""Exceptions raised by the bridge.

Every error here is fatal to a relay session: it is logged by the entry
point and the process exits with a non-zero status.
"""

from __future__ import annotations


class BridgeError(Exception):
    """Base class for all bridge errors."""

    pass


class ProtocolViolation(BridgeError):
    """The server or engine sent a line of an unexpected shape."""

    def __init__(self, message: str, received: str | None = None) -> None:
        if received is not None:
            message = f"{message} (received {received!r})"
        super().__init__(message)
        self.received = received


class ParseError(BridgeError):
    """A move, square, seek, option or numeric field could not be parsed."""

    pass


class StreamClosed(BridgeError):
    """A line stream ended while more input was expected."""

    def __init__(self, name: str) -> None:
        super().__init__(f"{name} stream closed unexpectedly")
        self.name = name


class AuthFailure(BridgeError):
    """The server rejected the login credentials."""

    pass


class OptionMismatch(BridgeError):
    """The engine cannot be configured to a required option value."""

    def __init__(self, name: str, value: int, assumed_default: int) -> None:
        super().__init__(
            f"Requested option {name!r}={value} differs from the assumed default "
            f"{assumed_default}, and the engine does not support configuring it"
        )
        self.name = name
        self.value = value
        self.assumed_default = assumed_default


class SeekNotFound(BridgeError):
    """No open seek matched the requested opponent."""

    pass
