"""
Encoder/decoder set for ByteCourier.

Provides the Encoding enum, the Codec interface, the three codecs, and the
strategy table that ties each encoding to its path and content type.
"""

from bytecourier.encodings.encoding import Encoding
from bytecourier.encodings.base import Codec
from bytecourier.encodings.raw import RawCodec
from bytecourier.encodings.base64_text import Base64Codec
from bytecourier.encodings.byte_array_json import ByteArrayJSONCodec
from bytecourier.encodings.registry import (
    Strategy,
    get_strategy,
    strategy_for_path,
    all_strategies,
)

__all__ = [
    "Encoding",
    "Codec",
    "RawCodec",
    "Base64Codec",
    "ByteArrayJSONCodec",
    "Strategy",
    "get_strategy",
    "strategy_for_path",
    "all_strategies",
]
