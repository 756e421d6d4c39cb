"""
Error types for ByteCourier.

Source-file and destination-file failures surface as the built-in OSError.
Connection failures on the client surface as httpx.TransportError.
"""

from typing import Optional


class CourierError(Exception):
    """Base class for ByteCourier errors."""


class DecodeError(CourierError, ValueError):
    """Request body could not be decoded with the selected encoding."""

    def __init__(self, encoding: str, reason: str):
        self.encoding = encoding
        self.reason = reason
        super().__init__(f"Cannot decode {encoding} body: {reason}")


class RouteNotFound(CourierError, LookupError):
    """No encoding is registered for the requested path."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"No upload route for path: {path}")


class BodyLengthMismatch(CourierError):
    """Fewer body bytes arrived than the Content-Length header declared."""

    def __init__(self, declared: int, received: Optional[int]):
        self.declared = declared
        self.received = received
        super().__init__(
            f"Body length mismatch: declared {declared} bytes, received {received}"
        )
