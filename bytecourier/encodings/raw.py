"""Raw octet-stream codec."""

from bytecourier.encodings.base import Codec


class RawCodec(Codec):
    """Identity codec: the body is the payload."""

    def encode(self, payload: bytes) -> bytes:
        return bytes(payload)

    def decode(self, body: bytes) -> bytes:
        return bytes(body)
