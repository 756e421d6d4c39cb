"""
Encoding enum for ByteCourier.

Defines the three supported wire encodings.
"""

from enum import Enum


class Encoding(str, Enum):
    """
    Wire encoding enumeration.

    Values are strings so they can be given on the command line and logged as-is.
    """
    RAW = "raw"
    BASE64 = "base64"
    JSON_ARRAY = "json-array"
