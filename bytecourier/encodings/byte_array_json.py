"""
JSON byte-array codec.

The payload travels as a JSON array holding one integer (0-255) per byte,
in order. Decoding also accepts the object form {"type": "Buffer", "data": [...]}
that JavaScript's Buffer.toJSON() produces.
"""

import json
from typing import Any, List

from bytecourier.encodings.base import Codec
from bytecourier.encodings.encoding import Encoding
from bytecourier.errors import DecodeError


def _fail(reason: str) -> DecodeError:
    return DecodeError(Encoding.JSON_ARRAY.value, reason)


def _extract_values(document: Any) -> List[Any]:
    """Return the list of byte values from a parsed document."""
    if isinstance(document, list):
        return document

    if isinstance(document, dict):
        data = document.get("data")
        if not isinstance(data, list):
            raise _fail("object body must carry a 'data' array")
        kind = document.get("type", "Buffer")
        if kind != "Buffer":
            raise _fail(f"unsupported object type: {kind!r}")
        return data

    raise _fail(f"expected a JSON array, got {type(document).__name__}")


class ByteArrayJSONCodec(Codec):
    """Payload travels as a JSON array of byte values."""

    def encode(self, payload: bytes) -> bytes:
        return json.dumps(list(payload), separators=(",", ":")).encode("ascii")

    def decode(self, body: bytes) -> bytes:
        try:
            document = json.loads(body.decode("utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError, RecursionError) as e:
            raise _fail(f"invalid JSON: {e}") from e

        values = _extract_values(document)

        for index, value in enumerate(values):
            # bool is an int subclass; true/false are not byte values
            if isinstance(value, bool) or not isinstance(value, int):
                raise _fail(f"element {index} is not an integer: {value!r}")
            if not 0 <= value <= 255:
                raise _fail(f"element {index} out of range 0-255: {value}")

        return bytes(values)
