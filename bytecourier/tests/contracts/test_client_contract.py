"""
Contract tests for the ByteCourier upload client.

Covers request building, live uploads, response streaming callbacks and
connection failure handling.
"""

import logging
from unittest.mock import Mock

import httpx
import pytest

from bytecourier.client import CourierClient, build_request, read_payload
from bytecourier.encodings import Encoding, get_strategy


class TestBuildRequest:
    """Requests carry the strategy's path, content type and exact body length."""

    @pytest.mark.parametrize("encoding", list(Encoding))
    def test_content_length_is_body_length(self, encoding, sample_payload):
        request = build_request(get_strategy(encoding), sample_payload)

        assert request.method == "POST"
        assert request.headers["content-length"] == str(len(request.body))
        assert request.content_length == len(request.body)

    def test_text_encodings_change_the_length(self):
        payload = b"\x01\x02\xff"

        raw = build_request(get_strategy(Encoding.RAW), payload)
        b64 = build_request(get_strategy(Encoding.BASE64), payload)
        arr = build_request(get_strategy(Encoding.JSON_ARRAY), payload)

        assert (raw.headers["content-length"], raw.body) == ("3", payload)
        assert (b64.headers["content-length"], b64.body) == ("4", b"AQL/")
        assert (arr.headers["content-length"], arr.body) == ("9", b"[1,2,255]")

    @pytest.mark.parametrize("encoding,path,content_type", [
        (Encoding.RAW, "/binary", "application/octet-stream"),
        (Encoding.BASE64, "/base64", "text/plain"),
        (Encoding.JSON_ARRAY, "/buffer", "application/json"),
    ])
    def test_path_and_content_type(self, encoding, path, content_type):
        request = build_request(get_strategy(encoding), b"x")

        assert request.path == path
        assert request.headers["content-type"] == content_type

    def test_empty_payload(self):
        request = build_request(get_strategy(Encoding.JSON_ARRAY), b"")

        assert request.body == b"[]"
        assert request.headers["content-length"] == "2"


class TestReadPayload:

    def test_reads_whole_file(self, source_file, sample_payload):
        assert read_payload(source_file) == sample_payload

    def test_missing_file_raises_oserror(self, tmp_path):
        with pytest.raises(OSError):
            read_payload(tmp_path / "nope.jpeg")


class TestMockTransport:
    """What goes on the wire, checked without a socket."""

    def _client(self, handler, **kwargs):
        return CourierClient(
            host="localhost", port=5566, transport=httpx.MockTransport(handler), **kwargs
        )

    @pytest.mark.parametrize("encoding", list(Encoding))
    def test_wire_request(self, encoding, sample_payload):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200)

        status = self._client(handler).send_payload(encoding, sample_payload)

        strategy = get_strategy(encoding)
        assert status == 200
        assert len(seen) == 1
        request = seen[0]
        assert request.method == "POST"
        assert request.url == f"http://localhost:5566{strategy.path}"
        assert request.headers["content-type"] == strategy.content_type
        assert request.headers["content-length"] == str(len(request.content))
        assert strategy.decode(request.content) == sample_payload

    def test_response_chunks_then_completion(self):
        events = []
        client = self._client(
            lambda request: httpx.Response(404, content=b"not here"),
            on_chunk=lambda encoding, chunk: events.append(("chunk", encoding, chunk)),
            on_complete=lambda encoding, status: events.append(("done", encoding, status)),
        )

        status = client.send_payload(Encoding.BASE64, b"abc")

        assert status == 404
        assert events[-1] == ("done", Encoding.BASE64, 404)
        chunks = [e[2] for e in events if e[0] == "chunk"]
        assert b"".join(chunks) == b"not here"

    def test_transport_error_is_logged_not_raised(self, caplog):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        on_complete = Mock()
        client = self._client(handler, on_complete=on_complete)

        with caplog.at_level(logging.ERROR, logger="bytecourier.client"):
            status = client.send_payload(Encoding.RAW, b"abc")

        assert status is None
        on_complete.assert_not_called()
        assert "failed" in caplog.text


class TestLiveUploads:
    """Uploads against a running UploadServer."""

    @pytest.mark.timeout(10)
    @pytest.mark.parametrize("encoding", list(Encoding))
    def test_send_writes_identical_copy(self, encoding, client, source_file, output_dir, sample_payload):
        status = client.send(encoding, source_file)

        strategy = get_strategy(encoding)
        body_length = len(strategy.encode(sample_payload))
        written = output_dir / f"gh-woman-{strategy.file_label}-upload-{body_length}.jpeg"
        assert status == 200
        assert written.read_bytes() == sample_payload

    @pytest.mark.timeout(10)
    def test_send_accepts_encoding_name(self, client, source_file):
        assert client.send("json-array", source_file) == 200

    @pytest.mark.timeout(10)
    def test_completion_reported_once_with_empty_body(self, upload_server, source_file):
        host, port = upload_server.address
        on_chunk = Mock()
        on_complete = Mock()
        client = CourierClient(host=host, port=port, timeout=5.0,
                               on_chunk=on_chunk, on_complete=on_complete)

        client.send(Encoding.RAW, source_file)

        on_chunk.assert_not_called()
        on_complete.assert_called_once_with(Encoding.RAW, 200)

    @pytest.mark.timeout(10)
    def test_missing_source_raises_before_sending(self, client, tmp_path, output_dir):
        with pytest.raises(OSError):
            client.send(Encoding.RAW, tmp_path / "nope.jpeg")
        assert list(output_dir.iterdir()) == []


class TestConnectionFailure:
    """Refused connections are logged and abandoned, never retried."""

    @pytest.mark.timeout(10)
    def test_refused_connection_returns_none(self, source_file, caplog, free_port):
        client = CourierClient(host="127.0.0.1", port=free_port, timeout=2.0)

        with caplog.at_level(logging.ERROR, logger="bytecourier.client"):
            status = client.send(Encoding.BASE64, source_file)

        assert status is None
        assert "[base64]" in caplog.text


class TestSendAll:
    """One request per encoding, started back to back."""

    @pytest.mark.timeout(20)
    def test_all_three_by_default(self, client, source_file, output_dir, sample_payload):
        threads = client.send_all(None, source_file)

        assert len(threads) == 3
        for thread in threads:
            thread.join(timeout=10.0)
            assert not thread.is_alive()

        written = sorted(p.name for p in output_dir.iterdir())
        assert len(written) == 3
        assert [n.split("-")[2] for n in written] == ["base64", "buffer", "octet"]
        for path in output_dir.iterdir():
            assert path.read_bytes() == sample_payload

    @pytest.mark.timeout(20)
    def test_selected_encodings_only(self, client, source_file, output_dir):
        threads = client.send_all(["raw"], source_file)
        for thread in threads:
            thread.join(timeout=10.0)

        assert [p.name.split("-")[2] for p in output_dir.iterdir()] == ["octet"]

    @pytest.mark.timeout(20)
    def test_missing_source_logged_in_each_thread(self, client, tmp_path, caplog):
        with caplog.at_level(logging.ERROR, logger="bytecourier.client"):
            threads = client.send_all(None, tmp_path / "nope.jpeg")
            for thread in threads:
                thread.join(timeout=10.0)
                assert not thread.is_alive()

        assert caplog.text.count("Cannot read source file") == 3
