#!/usr/bin/env python3
"""
ByteCourier main entry point.

    python3 -m bytecourier serve   # run the upload server
    python3 -m bytecourier send    # upload the source file once per encoding
"""

import argparse
import logging
import sys
from typing import List, Optional

from bytecourier.client import CourierClient
from bytecourier.config import load_config
from bytecourier.encodings import Encoding
from bytecourier.logs import configure_logging
from bytecourier.server import UploadServer

logger = logging.getLogger("bytecourier")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bytecourier",
        description="Transfer a binary file over HTTP as raw bytes, base64 text or a JSON byte array"
    )
    parser.add_argument("--host", type=str, help="Server host (overrides env)")
    parser.add_argument("--port", type=int, help="Server port (overrides env)")

    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the upload server")
    serve.add_argument(
        "--output-dir",
        type=str,
        help="Directory uploads are written to (overrides env)"
    )

    send = subparsers.add_parser("send", help="Upload the source file once per encoding")
    send.add_argument(
        "--source",
        type=str,
        help="File to upload (overrides env)"
    )
    send.add_argument(
        "--encoding",
        action="append",
        choices=[e.value for e in Encoding],
        help="Encoding to send with; repeat for several (default: all three)"
    )
    send.add_argument(
        "--timeout",
        type=float,
        help="Client timeout in seconds (default: none)"
    )

    return parser


def _serve(server: UploadServer) -> int:
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Server shutdown requested")
    return 0


def _send(client: CourierClient, encodings: Optional[List[str]], source_path: str) -> int:
    threads = client.send_all(encodings, source_path)
    try:
        for thread in threads:
            thread.join()
    except KeyboardInterrupt:
        logger.info("Send interrupted")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    try:
        config = load_config()
        if args.host is not None:
            config.host = args.host
        if args.port is not None:
            config.port = args.port
        if getattr(args, "output_dir", None) is not None:
            config.output_dir = args.output_dir
        if getattr(args, "source", None) is not None:
            config.source_path = args.source
        if getattr(args, "timeout", None) is not None:
            config.client_timeout_sec = args.timeout
        config.validate()
    except ValueError as e:
        print(f"bytecourier: {e}", file=sys.stderr)
        return 1

    configure_logging(config)

    if args.command == "serve":
        try:
            server = UploadServer.from_config(config)
            return _serve(server)
        except OSError as e:
            logger.error(f"Server failed to start: {e}", exc_info=True)
            return 1

    client = CourierClient.from_config(config)
    return _send(client, args.encoding, config.source_path)


if __name__ == "__main__":
    sys.exit(main())
