"""
Shared pytest fixtures for ByteCourier contract tests.
"""
import os
import socket

import pytest

from bytecourier.client import CourierClient
from bytecourier.server import UploadServer


SAMPLE_PAYLOAD = bytes(range(256)) * 40 + b"\x00\xff\x01"


def find_free_port() -> int:
    """Find an available ephemeral port."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        s.listen(1)
        port = s.getsockname()[1]
    return port


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep COURIER_* settings from the developer's shell out of the tests."""
    for key in list(os.environ):
        if key.startswith("COURIER_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("COURIER_ENV_FILE", str(tmp_path / "missing.env"))


@pytest.fixture
def output_dir(tmp_path):
    path = tmp_path / "uploads"
    path.mkdir()
    return path


@pytest.fixture
def upload_server(output_dir):
    """Run an UploadServer on an ephemeral port and yield it."""
    server = UploadServer(host="127.0.0.1", port=0, output_dir=output_dir)
    server.start()
    try:
        yield server
    finally:
        server.stop()


@pytest.fixture
def base_url(upload_server):
    host, port = upload_server.address
    return f"http://{host}:{port}"


@pytest.fixture
def sample_payload():
    return SAMPLE_PAYLOAD


@pytest.fixture
def source_file(tmp_path, sample_payload):
    path = tmp_path / "source.jpeg"
    path.write_bytes(sample_payload)
    return path


@pytest.fixture
def client(upload_server):
    host, port = upload_server.address
    return CourierClient(host=host, port=port, timeout=5.0)


@pytest.fixture
def free_port():
    """A local port with nothing listening on it."""
    return find_free_port()
