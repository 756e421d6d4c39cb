"""
HTTP upload client for ByteCourier.

Reads a source file, encodes it with one of the three encodings and POSTs it
to the matching upload path. Stateless: every send builds a fresh request.
"""

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Union

import httpx

from bytecourier.config import DEFAULT_HOST, DEFAULT_PORT, CourierConfig
from bytecourier.encodings import Encoding, Strategy, all_strategies, get_strategy

logger = logging.getLogger(__name__)

ChunkCallback = Callable[[Encoding, bytes], None]
CompleteCallback = Callable[[Encoding, int], None]


@dataclass(frozen=True)
class UploadRequest:
    """One POST, ready to send."""

    method: str
    path: str
    headers: Dict[str, str]
    body: bytes

    @property
    def content_length(self) -> int:
        return len(self.body)


def build_request(strategy: Strategy, payload: bytes) -> UploadRequest:
    """
    Encode a payload and wrap it in a request for the strategy's path.

    The content-length header is the byte length of the encoded body, not
    the length of the original payload.
    """
    body = strategy.encode(payload)
    headers = {
        "content-type": strategy.content_type,
        "content-length": str(len(body)),
    }
    return UploadRequest(method="POST", path=strategy.path, headers=headers, body=body)


def read_payload(source_path: Union[str, Path]) -> bytes:
    """
    Read the whole source file.

    Raises:
        OSError: If the file is missing or unreadable
    """
    return Path(source_path).read_bytes()


def _log_chunk(encoding: Encoding, chunk: bytes) -> None:
    logger.info(f"[{encoding.value}] response chunk: {chunk!r}")


def _log_complete(encoding: Encoding, status_code: int) -> None:
    logger.info(f"[{encoding.value}] entire response received (status {status_code})")


class CourierClient:
    """
    Client for the ByteCourier upload server.

    Response bodies are streamed to on_chunk as they arrive and on_complete is
    called once the response ends. Both default to logging.
    """

    def __init__(
        self,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        timeout: Optional[float] = None,
        on_chunk: Optional[ChunkCallback] = None,
        on_complete: Optional[CompleteCallback] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Initialize upload client.

        Args:
            host: Server host (default: localhost)
            port: Server port (default: 5566)
            timeout: Seconds per network operation, None to wait indefinitely
            on_chunk: Called with (encoding, chunk) for every response body chunk
            on_complete: Called with (encoding, status_code) when a response ends
            transport: httpx transport override, e.g. httpx.MockTransport in tests
        """
        self.host = host
        self.port = port
        self.base_url = f"http://{host}:{port}"
        self.timeout = timeout
        self.on_chunk = on_chunk or _log_chunk
        self.on_complete = on_complete or _log_complete
        self.transport = transport

    @classmethod
    def from_config(cls, config: CourierConfig) -> "CourierClient":
        return cls(host=config.host, port=config.port, timeout=config.client_timeout_sec)

    def send(self, encoding: Union[Encoding, str], source_path: Union[str, Path]) -> Optional[int]:
        """
        Upload a file with one encoding.

        Args:
            encoding: Encoding to send with
            source_path: File to upload

        Returns:
            Response status code, or None if the connection failed

        Raises:
            OSError: If the source file cannot be read
        """
        strategy = get_strategy(encoding)
        payload = read_payload(source_path)
        return self.send_payload(strategy.encoding, payload)

    def send_payload(self, encoding: Union[Encoding, str], payload: bytes) -> Optional[int]:
        """
        Upload in-memory bytes with one encoding.

        Returns:
            Response status code, or None if the connection failed
        """
        strategy = get_strategy(encoding)
        request = build_request(strategy, payload)
        url = f"{self.base_url}{request.path}"

        logger.debug(
            f"[{strategy.encoding.value}] POST {url} "
            f"({len(payload)} payload bytes, {request.content_length} body bytes)"
        )

        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                with client.stream(
                    request.method, url, content=request.body, headers=request.headers
                ) as response:
                    for chunk in response.iter_bytes():
                        self.on_chunk(strategy.encoding, chunk)
                    self.on_complete(strategy.encoding, response.status_code)
                    return response.status_code
        except httpx.TransportError as e:
            # No retry: this request is abandoned, others are unaffected
            logger.error(f"[{strategy.encoding.value}] Request to {url} failed: {e!r}")
            return None

    def send_all(
        self,
        encodings: Optional[Iterable[Union[Encoding, str]]],
        source_path: Union[str, Path],
    ) -> List[threading.Thread]:
        """
        Upload a file once per encoding without waiting between requests.

        Requests may interleave; there is no ordering guarantee between them.

        Args:
            encodings: Encodings to send with, None for all three
            source_path: File to upload

        Returns:
            The started threads, one per request
        """
        if encodings is None:
            encodings = [s.encoding for s in all_strategies()]

        threads = []
        for encoding in encodings:
            encoding = Encoding(encoding)
            thread = threading.Thread(
                target=self._send_logged,
                args=(encoding, source_path),
                daemon=True,
                name=f"CourierSend-{encoding.value}",
            )
            thread.start()
            threads.append(thread)
        return threads

    def _send_logged(self, encoding: Encoding, source_path: Union[str, Path]) -> None:
        try:
            self.send(encoding, source_path)
        except OSError as e:
            logger.error(f"[{encoding.value}] Cannot read source file {source_path}: {e}")
