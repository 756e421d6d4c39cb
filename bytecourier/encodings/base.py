"""
Base Codec interface for ByteCourier.

Every encoding implements this interface.
"""

from abc import ABC, abstractmethod


class Codec(ABC):
    """
    Base class for payload codecs.

    Both directions work on bytes: text encodings return their text already
    encoded as ASCII, so len(encode(payload)) is the length that goes on the wire.
    For every payload, decode(encode(payload)) == payload.
    """

    @abstractmethod
    def encode(self, payload: bytes) -> bytes:
        """
        Serialize a payload into a request body.

        Args:
            payload: Raw payload bytes

        Returns:
            bytes: Request body
        """
        pass

    @abstractmethod
    def decode(self, body: bytes) -> bytes:
        """
        Reconstruct the payload from a request body.

        Args:
            body: Complete request body

        Returns:
            bytes: Original payload

        Raises:
            DecodeError: If the body is not valid for this encoding
        """
        pass
