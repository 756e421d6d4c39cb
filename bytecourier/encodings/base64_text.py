"""
Base64 text codec.

Standard alphabet, padded, no line breaks.
"""

import base64
import binascii

from bytecourier.encodings.base import Codec
from bytecourier.encodings.encoding import Encoding
from bytecourier.errors import DecodeError


class Base64Codec(Codec):
    """Payload travels as standard base64 text."""

    def encode(self, payload: bytes) -> bytes:
        return base64.b64encode(payload)

    def decode(self, body: bytes) -> bytes:
        try:
            # validate=True rejects characters outside the alphabet instead of skipping them
            payload = base64.b64decode(body, validate=True)
        except (binascii.Error, ValueError) as e:
            raise DecodeError(Encoding.BASE64.value, str(e)) from e

        # b64decode ignores surplus padding after a complete quantum (AQL/=)
        if base64.b64encode(payload) != bytes(body):
            raise DecodeError(Encoding.BASE64.value, "non-canonical padding")
        return payload
