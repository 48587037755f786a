"""
HTTP Transport Unit Tests
"""

import json
import threading
from datetime import timedelta
from unittest.mock import MagicMock

import pytest
import requests

from retro_http.client.canceller import Canceller
from retro_http.client.http_client import ProgressBody, RequestsTransport
from retro_http.exceptions import FailureCategory, TransportFailure
from retro_http.forms import FilePart, MultipartBody
from retro_http.models import HttpMethod, RequestDescriptor, ResponseType
from retro_http.utils.logger import RequestLogger


def make_request(**overrides) -> RequestDescriptor:
    values = {"method": HttpMethod.GET, "url": "https://api.x.com/users"}
    values.update(overrides)
    return RequestDescriptor(**values)


class TestRequestsTransport:
    """Tests for RequestsTransport.execute"""

    @pytest.fixture
    def transport(self, stub_adapter) -> RequestsTransport:
        transport = RequestsTransport()
        transport.session.mount("https://", stub_adapter)
        return transport

    def test_json_success(self, transport: RequestsTransport, stub_adapter):
        stub_adapter.queue(200, [{"id": 1}])

        response = transport.execute(make_request())

        assert response.status_code == 200
        assert response.data == [{"id": 1}]

    def test_sends_headers_and_query(self, transport: RequestsTransport, stub_adapter):
        stub_adapter.queue(204)

        transport.execute(make_request(
            headers={"Authorization": "Bearer t"},
            query_parameters={"page": 2, "tag": ["a", "b"]},
        ))

        sent = stub_adapter.sent[0]
        assert sent.method == "GET"
        assert sent.headers["Authorization"] == "Bearer t"
        assert sent.headers["Accept"] == "application/json"
        assert sent.url == "https://api.x.com/users?page=2&tag=a&tag=b"

    def test_empty_success_body_is_none(self, transport: RequestsTransport, stub_adapter):
        stub_adapter.queue(204)
        assert transport.execute(make_request()).data is None

    def test_json_body(self, transport: RequestsTransport, stub_adapter):
        stub_adapter.queue(201, {"id": 9})

        transport.execute(make_request(method=HttpMethod.POST, body={"name": "retro"}))

        sent = stub_adapter.sent[0]
        assert sent.headers["Content-Type"] == "application/json"
        assert json.loads(stub_adapter.bodies[0]) == {"name": "retro"}

    def test_caller_content_type_kept_for_json(self, transport: RequestsTransport, stub_adapter):
        stub_adapter.queue(200)

        transport.execute(make_request(
            method=HttpMethod.PUT,
            body={"a": 1},
            headers={"content-type": "application/merge-patch+json"},
        ))

        assert stub_adapter.sent[0].headers["Content-Type"] == "application/merge-patch+json"

    def test_multipart_body(self, transport: RequestsTransport, stub_adapter):
        stub_adapter.queue(200)
        form = MultipartBody(
            fields=(("name", "retro"),),
            files=(("file", FilePart("a.txt", b"hello")),),
        )

        transport.execute(make_request(
            method=HttpMethod.POST,
            form_body=form,
            headers={"Content-Type": "application/json"},
        ))

        content_type = stub_adapter.sent[0].headers["Content-Type"]
        assert content_type.startswith("multipart/form-data; boundary=")
        boundary = content_type.split("boundary=")[1]
        assert boundary.encode() in stub_adapter.bodies[0]
        assert b'filename="a.txt"' in stub_adapter.bodies[0]

    def test_upload_progress(self, transport: RequestsTransport, stub_adapter):
        stub_adapter.queue(200)
        progress = []
        payload = {"data": "x" * 40000}

        transport.execute(make_request(
            method=HttpMethod.POST,
            body=payload,
            on_progress=lambda sent, total: progress.append((sent, total)),
        ))

        total = len(json.dumps(payload).encode("utf-8"))
        assert stub_adapter.sent[0].headers["Content-Length"] == str(total)
        assert progress[-1] == (total, total)
        assert len(progress) > 1
        assert [sent for sent, _ in progress] == sorted(sent for sent, _ in progress)

    def test_timeout_tuple(self, transport: RequestsTransport, stub_adapter):
        stub_adapter.queue(200)

        transport.execute(make_request(
            send_timeout=timedelta(seconds=3),
            receive_timeout=timedelta(milliseconds=500),
        ))

        assert stub_adapter.timeouts[0] == (3.0, 0.5)

    def test_plain_response(self, transport: RequestsTransport, stub_adapter):
        stub_adapter.queue(200, '{"a": 1}')
        response = transport.execute(make_request(response_type=ResponseType.PLAIN))
        assert response.data == '{"a": 1}'

    def test_bytes_response(self, transport: RequestsTransport, stub_adapter):
        stub_adapter.queue(200, b"\x00\x01")
        response = transport.execute(make_request(response_type=ResponseType.BYTES))
        assert response.data == b"\x00\x01"

    def test_stream_response(self, transport: RequestsTransport, stub_adapter):
        stub_adapter.queue(200, b"chunked-data")
        response = transport.execute(make_request(response_type=ResponseType.STREAM))
        assert b"".join(response.data) == b"chunked-data"

    def test_non_json_falls_back_to_text(self, transport: RequestsTransport, stub_adapter):
        stub_adapter.queue(200, "<html>ok</html>")
        assert transport.execute(make_request()).data == "<html>ok</html>"

    def test_bad_response_with_body(self, transport: RequestsTransport, stub_adapter):
        stub_adapter.queue(404, {"message": "not found"})

        with pytest.raises(TransportFailure) as exc_info:
            transport.execute(make_request())

        failure = exc_info.value
        assert failure.category == FailureCategory.BAD_RESPONSE
        assert failure.status_code == 404
        assert failure.response_body == {"message": "not found"}

    def test_bad_response_without_body(self, transport: RequestsTransport, stub_adapter):
        stub_adapter.queue(503)

        with pytest.raises(TransportFailure) as exc_info:
            transport.execute(make_request())

        assert exc_info.value.status_code == 503
        assert exc_info.value.has_body is False

    @pytest.mark.parametrize(
        "error, category",
        [
            (requests.exceptions.ConnectTimeout("slow"), FailureCategory.CONNECTION_TIMEOUT),
            (requests.exceptions.ReadTimeout("slow"), FailureCategory.RECEIVE_TIMEOUT),
            (requests.exceptions.Timeout("slow"), FailureCategory.SEND_TIMEOUT),
            (requests.exceptions.SSLError("cert"), FailureCategory.BAD_CERTIFICATE),
            (requests.exceptions.ConnectionError("refused"), FailureCategory.CONNECTION_ERROR),
            (requests.exceptions.TooManyRedirects("loop"), FailureCategory.UNKNOWN),
        ],
    )
    def test_requests_errors(self, transport: RequestsTransport, stub_adapter, error, category):
        stub_adapter.queue_error(error)

        with pytest.raises(TransportFailure) as exc_info:
            transport.execute(make_request())

        assert exc_info.value.category == category
        assert exc_info.value.cause is error

    def test_cancelled_before_send(self, transport: RequestsTransport, stub_adapter):
        canceller = Canceller()
        canceller.cancel()

        with pytest.raises(TransportFailure) as exc_info:
            transport.execute(make_request(canceller=canceller))

        assert exc_info.value.category == FailureCategory.CANCEL
        assert stub_adapter.sent == []

    def test_cancelled_error_wins(self, transport: RequestsTransport, stub_adapter):
        """A transport error after cancel is reported as a cancellation"""
        canceller = Canceller()

        class CancellingAdapter(type(stub_adapter)):
            def send(self, request, **kwargs):
                canceller.cancel()
                raise requests.exceptions.ConnectionError("closed")

        transport.session.mount("https://", CancellingAdapter())

        with pytest.raises(TransportFailure) as exc_info:
            transport.execute(make_request(canceller=canceller))

        assert exc_info.value.category == FailureCategory.CANCEL

    def test_cancelled_during_upload(self, transport: RequestsTransport, stub_adapter):
        canceller = Canceller()
        stub_adapter.queue(200)

        def on_progress(sent, total):
            canceller.cancel()

        with pytest.raises(TransportFailure) as exc_info:
            transport.execute(make_request(
                method=HttpMethod.POST,
                body={"data": "x" * 40000},
                on_progress=on_progress,
                canceller=canceller,
            ))

        assert exc_info.value.category == FailureCategory.CANCEL

    def test_cancelled_while_waiting_for_headers(self, transport: RequestsTransport, stub_adapter):
        """A cancel during a slow send wins over the 2xx answer that follows"""
        canceller = Canceller()
        released = threading.Event()
        canceller.add_listener(released.set)

        class SlowAdapter(type(stub_adapter)):
            def send(self, request, **kwargs):
                released.wait(timeout=5)
                return super().send(request, **kwargs)

        slow = SlowAdapter()
        slow.queue(200, {"ok": True})
        transport.session.mount("https://", slow)
        timer = threading.Timer(0.05, canceller.cancel)
        timer.start()

        try:
            with pytest.raises(TransportFailure) as exc_info:
                transport.execute(make_request(canceller=canceller))
        finally:
            timer.cancel()

        assert exc_info.value.category == FailureCategory.CANCEL
        assert slow.responses[0].raw.closed

    def test_cancelled_before_body_read(self, transport: RequestsTransport, stub_adapter):
        """Headers arrive after cancel; the body is never reported as success"""
        canceller = Canceller()

        class CancelOnSendAdapter(type(stub_adapter)):
            def send(self, request, **kwargs):
                response = super().send(request, **kwargs)
                canceller.cancel()
                return response

        adapter = CancelOnSendAdapter()
        adapter.queue(200, {"ok": True})
        transport.session.mount("https://", adapter)

        with pytest.raises(TransportFailure) as exc_info:
            transport.execute(make_request(canceller=canceller))

        assert exc_info.value.category == FailureCategory.CANCEL

    def test_stream_cancelled_while_reading(self, transport: RequestsTransport, stub_adapter):
        canceller = Canceller()
        stub_adapter.queue(200, b"x" * 40000)

        response = transport.execute(
            make_request(response_type=ResponseType.STREAM, canceller=canceller)
        )
        chunks = iter(response.data)
        assert next(chunks)
        canceller.cancel()

        with pytest.raises(TransportFailure) as exc_info:
            next(chunks)

        assert exc_info.value.category == FailureCategory.CANCEL
        assert stub_adapter.responses[0].raw.closed

    def test_stream_closed_when_abandoned(self, transport: RequestsTransport, stub_adapter):
        """Stopping part-way releases the response"""
        canceller = Canceller()
        stub_adapter.queue(200, b"x" * 40000)

        response = transport.execute(
            make_request(response_type=ResponseType.STREAM, canceller=canceller)
        )
        next(response.data)
        response.data.close()

        assert stub_adapter.responses[0].raw.closed

    def test_zero_timeout_means_none(self, transport: RequestsTransport, stub_adapter):
        stub_adapter.queue(200)

        transport.execute(make_request(
            send_timeout=timedelta(0),
            receive_timeout=timedelta(0),
        ))

        assert stub_adapter.timeouts[0] is None

    def test_request_logger_hooks(self, transport: RequestsTransport, stub_adapter):
        request_logger = MagicMock(spec=RequestLogger)
        stub_adapter.queue(200, {"ok": True})
        stub_adapter.queue(500)

        request = make_request()
        transport.execute(request, request_logger)
        with pytest.raises(TransportFailure):
            transport.execute(request, request_logger)

        assert request_logger.on_request.call_count == 2
        response = request_logger.on_response.call_args[0][1]
        assert response.data == {"ok": True}
        failure = request_logger.on_error.call_args[0][1]
        assert failure.status_code == 500

    def test_close(self):
        session = MagicMock(spec=requests.Session)
        transport = RequestsTransport(session)

        with transport:
            pass

        session.close.assert_called_once()


class TestProgressBody:
    """Tests for ProgressBody"""

    def test_reads_in_chunks_and_reports(self):
        progress = []
        body = ProgressBody(b"abcdefghij", lambda s, t: progress.append((s, t)), chunk_size=4)

        assert len(body) == 10
        assert list(body) == [b"abcd", b"efgh", b"ij"]
        assert progress == [(4, 10), (8, 10), (10, 10)]

    def test_read_all(self):
        body = ProgressBody(b"abc")
        assert body.read() == b"abc"
        assert body.read() == b""

    def test_cancelled_read(self):
        canceller = Canceller()
        canceller.cancel()
        body = ProgressBody(b"abc", canceller=canceller)

        with pytest.raises(TransportFailure):
            body.read(1)
