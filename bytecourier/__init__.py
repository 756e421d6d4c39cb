"""
ByteCourier.

Moves one binary payload over HTTP using one of three wire encodings
(raw octets, base64 text, JSON byte array) and writes the reconstructed
bytes on the receiving side.
"""

__version__ = "0.1.0"
