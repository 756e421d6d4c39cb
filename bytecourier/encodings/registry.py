"""
Strategy table for ByteCourier.

Binds each Encoding to its upload path, content type, output file label
and codec. The table is fixed: three entries, built at import time.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Union

from bytecourier.encodings.base import Codec
from bytecourier.encodings.base64_text import Base64Codec
from bytecourier.encodings.byte_array_json import ByteArrayJSONCodec
from bytecourier.encodings.encoding import Encoding
from bytecourier.encodings.raw import RawCodec


@dataclass(frozen=True)
class Strategy:
    """One encode/decode/path/content-type bundle."""

    encoding: Encoding
    path: str
    content_type: str
    file_label: str
    codec: Codec

    def encode(self, payload: bytes) -> bytes:
        return self.codec.encode(payload)

    def decode(self, body: bytes) -> bytes:
        return self.codec.decode(body)


_STRATEGIES: Dict[Encoding, Strategy] = {
    Encoding.RAW: Strategy(
        encoding=Encoding.RAW,
        path="/binary",
        content_type="application/octet-stream",
        file_label="octet",
        codec=RawCodec(),
    ),
    Encoding.BASE64: Strategy(
        encoding=Encoding.BASE64,
        path="/base64",
        content_type="text/plain",
        file_label="base64",
        codec=Base64Codec(),
    ),
    Encoding.JSON_ARRAY: Strategy(
        encoding=Encoding.JSON_ARRAY,
        path="/buffer",
        content_type="application/json",
        file_label="buffer",
        codec=ByteArrayJSONCodec(),
    ),
}

_BY_PATH: Dict[str, Strategy] = {s.path: s for s in _STRATEGIES.values()}


def get_strategy(encoding: Union[Encoding, str]) -> Strategy:
    """
    Look up the strategy for an encoding.

    Args:
        encoding: Encoding member or its string value ("raw", "base64", "json-array")

    Returns:
        Strategy for that encoding

    Raises:
        ValueError: If the string does not name an encoding
    """
    return _STRATEGIES[Encoding(encoding)]


def strategy_for_path(path: str) -> Optional[Strategy]:
    """Return the strategy served at an upload path, or None."""
    return _BY_PATH.get(path)


def all_strategies() -> List[Strategy]:
    """All strategies in declaration order (raw, base64, json-array)."""
    return list(_STRATEGIES.values())
