"""
HTTP upload server for ByteCourier.

Accepts POST /binary, /base64 and /buffer, decodes the body with the matching
encoding and writes the reconstructed bytes to the output directory.
"""

import json
import logging
import os
import tempfile
import threading
from dataclasses import dataclass
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Optional, Tuple, Union
from urllib.parse import urlsplit

from bytecourier.config import CourierConfig
from bytecourier.encodings import Strategy, strategy_for_path
from bytecourier.errors import BodyLengthMismatch, DecodeError, RouteNotFound

logger = logging.getLogger(__name__)


def output_path(
    output_dir: Union[str, Path],
    strategy: Strategy,
    content_length: str,
    file_stem: str = "gh-woman",
    file_extension: str = ".jpeg",
) -> Path:
    """
    Build the destination path for an upload.

    The content length is the raw Content-Length header value and only serves
    as a label; the same (strategy, content_length) pair always maps to the
    same file.

    Args:
        output_dir: Directory uploads are written to
        strategy: Strategy the upload arrived with
        content_length: Raw Content-Length header value
        file_stem: File name prefix
        file_extension: File name extension, including the dot

    Returns:
        Path like {output_dir}/gh-woman-base64-upload-1234.jpeg
    """
    name = f"{file_stem}-{strategy.file_label}-upload-{content_length}{file_extension}"
    return Path(output_dir) / name


def write_atomically(destination: Path, payload: bytes) -> None:
    """
    Write payload to destination, replacing any existing file.

    Writes to a temporary file in the same directory first so readers never
    see a partially written upload.

    Raises:
        OSError: If the directory is not writable
    """
    fd, tmp_name = tempfile.mkstemp(
        dir=str(destination.parent),
        prefix=f".{destination.name}.",
        suffix=".part",
    )
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(payload)
        os.replace(tmp_name, destination)
    except Exception:
        try:
            os.unlink(tmp_name)
        except OSError:
            pass
        raise


@dataclass(frozen=True)
class UploadContext:
    """Per-server state shared by every request handler."""

    output_dir: Path
    file_stem: str = "gh-woman"
    file_extension: str = ".jpeg"
    read_chunk_size: int = 8192

    def output_path(self, strategy: Strategy, content_length: str) -> Path:
        return output_path(
            self.output_dir,
            strategy,
            content_length,
            file_stem=self.file_stem,
            file_extension=self.file_extension,
        )


def make_upload_handler(context: UploadContext):
    """Create an UploadHandler class bound to a server context."""

    class UploadHandler(BaseHTTPRequestHandler):
        """HTTP request handler for upload endpoints."""

        def __init__(self, *args, **kwargs):
            # Dependencies injected from outer scope
            self.context = context
            super().__init__(*args, **kwargs)

        def do_POST(self):
            """Handle POST requests."""
            path = urlsplit(self.path).path
            strategy = strategy_for_path(path)

            if strategy is None:
                self._discard_body()
                logger.info(f"Rejected upload to unknown path {path}")
                self._send_error_response(404, str(RouteNotFound(path)))
                return

            self._handle_upload(strategy)

        def do_GET(self):
            self._reject_method()

        def do_PUT(self):
            self._reject_method()

        def do_DELETE(self):
            self._reject_method()

        def _reject_method(self):
            path = urlsplit(self.path).path
            if strategy_for_path(path) is not None:
                self._send_error_response(405, f"{self.command} not allowed on {path}")
            else:
                self._send_error_response(404, str(RouteNotFound(path)))

        def _handle_upload(self, strategy: Strategy):
            """Receive the body, decode it, write it. Each failure ends this request only."""
            raw_length = self.headers.get("Content-Length")
            if raw_length is None:
                self._send_error_response(411, "Content-Length header is required")
                return

            raw_length = raw_length.strip()
            if not (raw_length.isascii() and raw_length.isdigit()):
                self._send_error_response(400, f"Invalid Content-Length: {raw_length!r}")
                return

            # Receiving
            try:
                body = self._read_body(int(raw_length))
            except BodyLengthMismatch as e:
                logger.warning(f"[{strategy.encoding.value}] {e}")
                self._send_error_response(400, str(e))
                return

            # Decoding
            try:
                payload = strategy.decode(body)
            except DecodeError as e:
                logger.warning(f"[{strategy.encoding.value}] {e}")
                self._send_error_response(400, str(e))
                return

            # Done
            destination = self.context.output_path(strategy, raw_length)
            try:
                write_atomically(destination, payload)
            except OSError as e:
                logger.error(f"[{strategy.encoding.value}] Cannot write {destination}: {e}")
                self._send_error_response(500, "Could not store upload")
                return

            logger.info(
                f"[{strategy.encoding.value}] Stored {len(payload)} bytes "
                f"({len(body)} on the wire) at {destination}"
            )
            self.send_response(200)
            self.send_header("Content-Length", "0")
            self.end_headers()

        def _read_body(self, declared: int) -> bytes:
            """
            Read exactly `declared` body bytes.

            Raises:
                BodyLengthMismatch: If the peer closes before all bytes arrive
            """
            chunks = []
            remaining = declared
            while remaining > 0:
                chunk = self.rfile.read(min(self.context.read_chunk_size, remaining))
                if not chunk:
                    raise BodyLengthMismatch(declared, declared - remaining)
                chunks.append(chunk)
                remaining -= len(chunk)
            return b"".join(chunks)

        def _discard_body(self):
            """Drain an unwanted body so the peer is not reset mid-send."""
            try:
                self._read_body(int(self.headers.get("Content-Length", 0)))
            except (ValueError, BodyLengthMismatch, OSError):
                self.close_connection = True

        def _send_error_response(self, status_code: int, error_message: str):
            """Send error response in JSON format."""
            response = json.dumps({
                "status": "error",
                "error": error_message
            }).encode('utf-8')
            self.send_response(status_code)
            self.send_header("Content-Type", "application/json")
            self.send_header("Content-Length", str(len(response)))
            self.end_headers()
            self.wfile.write(response)

        def log_message(self, format, *args):
            """Override to use our logger."""
            logger.debug(f"{self.address_string()} - {format % args}")

    return UploadHandler


class UploadServer:
    """HTTP server receiving uploads in any of the three encodings."""

    def __init__(
        self,
        host: str,
        port: int,
        output_dir: Union[str, Path],
        file_stem: str = "gh-woman",
        file_extension: str = ".jpeg",
        read_chunk_size: int = 8192,
    ):
        """
        Initialize upload server.

        Args:
            host: Host to bind to
            port: Port to bind to (0 picks a free port)
            output_dir: Directory uploads are written to
            file_stem: Output file name prefix
            file_extension: Output file name extension, including the dot
            read_chunk_size: Bytes read from the socket per body chunk
        """
        self.host = host
        self.port = port
        self.context = UploadContext(
            output_dir=Path(output_dir),
            file_stem=file_stem,
            file_extension=file_extension,
            read_chunk_size=read_chunk_size,
        )
        self.server: Optional[ThreadingHTTPServer] = None
        self.server_thread: Optional[threading.Thread] = None
        self._shutdown = False

    @classmethod
    def from_config(cls, config: CourierConfig) -> "UploadServer":
        return cls(
            host=config.host,
            port=config.port,
            output_dir=config.output_dir,
            file_stem=config.file_stem,
            file_extension=config.file_extension,
            read_chunk_size=config.read_chunk_size,
        )

    @property
    def address(self) -> Tuple[str, int]:
        """Bound (host, port); the real port once an ephemeral one was requested."""
        if self.server is None:
            return (self.host, self.port)
        host, port = self.server.server_address[:2]
        return (host, port)

    def _bind(self) -> None:
        if self.server is not None:
            raise RuntimeError("Server already started")

        self.context.output_dir.mkdir(parents=True, exist_ok=True)
        handler_class = make_upload_handler(self.context)
        # ThreadingHTTPServer gives each connection its own thread
        self.server = ThreadingHTTPServer((self.host, self.port), handler_class)
        self._shutdown = False

    def start(self) -> None:
        """Start HTTP server in a background thread."""
        self._bind()

        self.server_thread = threading.Thread(
            target=self._run_server,
            daemon=True,
            name="UploadServer"
        )
        self.server_thread.start()

        host, port = self.address
        logger.info(f"Upload server started on http://{host}:{port} (output: {self.context.output_dir})")

    def serve_forever(self) -> None:
        """Bind and serve in the calling thread until stop() or KeyboardInterrupt."""
        self._bind()
        host, port = self.address
        logger.info(f"Server is running on http://{host}:{port} (output: {self.context.output_dir})")
        try:
            self.server.serve_forever()
        finally:
            self.server.server_close()
            self.server = None

    def _run_server(self):
        """Run server (called in background thread)."""
        try:
            self.server.serve_forever()
        except Exception as e:
            if not self._shutdown:
                logger.error(f"HTTP server error: {e}")

    def stop(self) -> None:
        """Stop HTTP server."""
        if self.server is None:
            return

        self._shutdown = True

        server = self.server
        server.shutdown()
        server.server_close()

        if self.server_thread:
            self.server_thread.join(timeout=2.0)

        self.server = None
        self.server_thread = None

        logger.info("Upload server stopped")
