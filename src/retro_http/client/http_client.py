"""
HTTP transport layer
Executes request descriptors with requests and reports failures by category
"""

import json
import logging
import time
import uuid
from typing import Any, Callable, Iterator, Optional, Protocol, Tuple

import requests
from requests.adapters import HTTPAdapter

from retro_http.client.canceller import Canceller
from retro_http.exceptions import FailureCategory, TransportFailure
from retro_http.models.request import ProgressCallback, RequestDescriptor, ResponseType
from retro_http.models.response import TransportResponse
from retro_http.utils.logger import RequestLogger

# Logger for this module
logger = logging.getLogger(__name__)

CHUNK_SIZE = 16 * 1024


class HttpTransport(Protocol):
    """Performs the network I/O for a request descriptor"""

    def execute(
        self,
        request: RequestDescriptor,
        request_logger: Optional[RequestLogger] = None,
    ) -> TransportResponse: ...

    def close(self) -> None: ...


class ProgressBody:
    """
    Streaming request body reporting upload progress

    ``requests`` sends it as a file-like object with a known length; each
    read reports ``(sent, total)`` and a cancelled handle stops the upload.
    """

    def __init__(
        self,
        payload: bytes,
        on_progress: Optional[ProgressCallback] = None,
        canceller: Optional[Canceller] = None,
        chunk_size: int = CHUNK_SIZE,
    ) -> None:
        self._payload = payload
        self._on_progress = on_progress
        self._canceller = canceller
        self._chunk_size = chunk_size
        self._offset = 0

    def __len__(self) -> int:
        return len(self._payload)

    def read(self, size: int = -1) -> bytes:
        if self._canceller is not None and self._canceller.is_cancelled:
            raise TransportFailure.cancelled()
        if size is None or size < 0:
            size = len(self._payload) - self._offset
        chunk = self._payload[self._offset:self._offset + size]
        self._offset += len(chunk)
        if chunk and self._on_progress is not None:
            self._on_progress(self._offset, len(self._payload))
        return chunk

    def __iter__(self) -> Iterator[bytes]:
        while True:
            chunk = self.read(self._chunk_size)
            if not chunk:
                break
            yield chunk


class RequestsTransport:
    """
    HttpTransport backed by a requests session

    Features:
    - JSON and multipart bodies
    - Upload progress reporting
    - Cooperative cancellation before send, during upload and between
      response chunks
    - Request ID generation for log correlation

    Example:
        >>> transport = RequestsTransport()
        >>> response = transport.execute(descriptor)
        >>> print(response.data)
    """

    def __init__(self, session: Optional[requests.Session] = None) -> None:
        self._session = session or self._create_session()

    def _create_session(self) -> requests.Session:
        """Create requests session; retries are disabled"""
        session = requests.Session()

        session.headers.update({
            "Accept": "application/json",
        })

        adapter = HTTPAdapter(max_retries=0)
        session.mount("http://", adapter)
        session.mount("https://", adapter)

        return session

    @property
    def session(self) -> requests.Session:
        return self._session

    def _generate_request_id(self) -> str:
        """Generate unique request ID for log correlation"""
        timestamp = hex(int(time.time() * 1000))[2:]
        unique_id = uuid.uuid4().hex[:8]
        return f"retro-{timestamp}-{unique_id}"

    def _encode_body(self, request: RequestDescriptor) -> Tuple[Optional[bytes], Optional[str]]:
        """Serialize the request body; returns (payload, content type)"""
        if request.form_body is not None:
            return request.form_body.encode()
        if request.body is not None:
            return json.dumps(request.body).encode("utf-8"), "application/json"
        return None, None

    def _prepare(self, request: RequestDescriptor) -> requests.PreparedRequest:
        headers = dict(request.headers)
        payload, content_type = self._encode_body(request)
        data: Any = None

        if payload is not None:
            if request.is_multipart:
                # Boundary must match the encoded payload
                headers = {k: v for k, v in headers.items() if k.lower() != "content-type"}
                headers["Content-Type"] = content_type
            elif not any(k.lower() == "content-type" for k in headers):
                headers["Content-Type"] = content_type

            if request.on_progress is not None:
                data = ProgressBody(payload, request.on_progress, request.canceller)
            else:
                data = payload

        prepared = requests.Request(
            method=request.method.value,
            url=request.url,
            headers=headers,
            params=request.query_parameters or None,
            data=data,
        )
        return self._session.prepare_request(prepared)

    def _to_failure(self, error: requests.exceptions.RequestException) -> TransportFailure:
        """Map a requests exception to a failure category"""
        if isinstance(error, requests.exceptions.ConnectTimeout):
            category = FailureCategory.CONNECTION_TIMEOUT
        elif isinstance(error, requests.exceptions.ReadTimeout):
            category = FailureCategory.RECEIVE_TIMEOUT
        elif isinstance(error, requests.exceptions.Timeout):
            category = FailureCategory.SEND_TIMEOUT
        elif isinstance(error, requests.exceptions.SSLError):
            category = FailureCategory.BAD_CERTIFICATE
        elif isinstance(error, requests.exceptions.ConnectionError):
            category = FailureCategory.CONNECTION_ERROR
        else:
            category = FailureCategory.UNKNOWN
        return TransportFailure(category, str(error), cause=error)

    def _read_content(
        self, response: requests.Response, canceller: Optional[Canceller]
    ) -> bytes:
        content = bytearray()
        for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
            self._check_cancelled(canceller)
            if chunk:
                content.extend(chunk)
        # A listener may have closed the response, which ends the loop early
        self._check_cancelled(canceller)
        return bytes(content)

    @staticmethod
    def _check_cancelled(canceller: Optional[Canceller]) -> None:
        if canceller is not None and canceller.is_cancelled:
            raise TransportFailure.cancelled()

    def _stream_content(
        self, response: requests.Response, canceller: Optional[Canceller]
    ) -> Iterator[bytes]:
        """
        Iterate a 2xx response body chunk by chunk

        The canceller stays attached until the iterator is exhausted or
        closed, and the response is closed either way.
        """

        def close_response() -> None:
            response.close()

        if canceller is not None:
            canceller.add_listener(close_response)
        return self._iter_stream(response, canceller, close_response)

    def _iter_stream(
        self,
        response: requests.Response,
        canceller: Optional[Canceller],
        close_response: Callable[[], None],
    ) -> Iterator[bytes]:
        try:
            for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                self._check_cancelled(canceller)
                if chunk:
                    yield chunk
            self._check_cancelled(canceller)
        except TransportFailure:
            raise
        except requests.exceptions.RequestException as e:
            if canceller is not None and canceller.is_cancelled:
                raise TransportFailure.cancelled(cause=e) from e
            raise self._to_failure(e) from e
        except Exception as e:
            if canceller is not None and canceller.is_cancelled:
                raise TransportFailure.cancelled(cause=e) from e
            raise
        finally:
            if canceller is not None:
                canceller.remove_listener(close_response)
            response.close()

    @staticmethod
    def _text(response: requests.Response, content: bytes) -> str:
        encoding = response.encoding or "utf-8"
        try:
            return content.decode(encoding, errors="replace")
        except LookupError:
            return content.decode("utf-8", errors="replace")

    def _decode(
        self,
        response: requests.Response,
        content: bytes,
        response_type: ResponseType,
    ) -> Any:
        """Decode a body per response type; empty bodies decode to None"""
        if not content:
            return None
        if response_type == ResponseType.BYTES:
            return content
        text = self._text(response, content)
        if response_type == ResponseType.PLAIN:
            return text
        try:
            return json.loads(text)
        except ValueError:
            return text

    def execute(
        self,
        request: RequestDescriptor,
        request_logger: Optional[RequestLogger] = None,
    ) -> TransportResponse:
        """
        Execute a request

        Args:
            request: Resolved request descriptor
            request_logger: Optional interceptor called around the send

        Returns:
            TransportResponse for 2xx responses

        Raises:
            TransportFailure: For cancellation, non-2xx responses and
                requests-level errors
        """
        canceller = request.canceller
        request_id = self._generate_request_id()
        start_time = time.time()

        if request_logger is not None:
            request_logger.on_request(request, request_id)

        try:
            result = self._send(request, canceller)
        except TransportFailure as failure:
            if request_logger is not None:
                duration = int((time.time() - start_time) * 1000)
                request_logger.on_error(request, failure, request_id, duration)
            raise

        if request_logger is not None:
            duration = int((time.time() - start_time) * 1000)
            request_logger.on_response(request, result, request_id, duration)
        return result

    def _send(
        self, request: RequestDescriptor, canceller: Optional[Canceller]
    ) -> TransportResponse:
        if canceller is not None and canceller.is_cancelled:
            raise TransportFailure.cancelled()

        response: Optional[requests.Response] = None

        def close_response() -> None:
            if response is not None:
                response.close()

        try:
            prepared = self._prepare(request)
            response = self._session.send(
                prepared,
                stream=True,
                timeout=request.timeout_seconds(),
            )
            # requests cannot interrupt the wait for headers; a cancel that
            # arrived meanwhile is honoured as soon as send returns
            if canceller is not None and canceller.is_cancelled:
                response.close()
                raise TransportFailure.cancelled()

            if request.response_type == ResponseType.STREAM and 200 <= response.status_code < 300:
                return TransportResponse(
                    status_code=response.status_code,
                    data=self._stream_content(response, canceller),
                    headers=dict(response.headers),
                )

            if canceller is not None:
                canceller.add_listener(close_response)

            content = self._read_content(response, canceller)
        except TransportFailure:
            raise
        except requests.exceptions.RequestException as e:
            if canceller is not None and canceller.is_cancelled:
                raise TransportFailure.cancelled(cause=e) from e
            raise self._to_failure(e) from e
        except Exception as e:
            if canceller is not None and canceller.is_cancelled:
                raise TransportFailure.cancelled(cause=e) from e
            raise
        finally:
            if canceller is not None:
                canceller.remove_listener(close_response)

        response_type = request.response_type
        if response_type == ResponseType.STREAM:
            response_type = ResponseType.BYTES
        data = self._decode(response, content, response_type)

        if not 200 <= response.status_code < 300:
            logger.debug(f"{request.method.value} {request.url} -> {response.status_code}")
            raise TransportFailure.bad_response(response.status_code, data)

        return TransportResponse(
            status_code=response.status_code,
            data=data,
            headers=dict(response.headers),
        )

    def close(self) -> None:
        """Close the HTTP session"""
        self._session.close()

    def __enter__(self) -> "RequestsTransport":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
