"""
Shared fixtures for unit tests
"""

import io
import json
from typing import Any, Dict, List, Optional

import pytest
import requests
from requests.adapters import BaseAdapter
from requests.structures import CaseInsensitiveDict

from retro_http.client.retro_client import RetroClient
from retro_http.client.token_provider import default_token_provider
from retro_http.models.response import TransportResponse


class ClosableRaw(io.BytesIO):
    """Raw body that reads empty once closed, as urllib3 responses do"""

    def read(self, size=-1):
        if self.closed:
            return b""
        return super().read(size)


class StubAdapter(BaseAdapter):
    """requests adapter answering from a queue instead of the network"""

    def __init__(self) -> None:
        super().__init__()
        self._outcomes: List[Any] = []
        self.sent: List[requests.PreparedRequest] = []
        self.bodies: List[bytes] = []
        self.timeouts: List[Any] = []
        self.responses: List[requests.Response] = []

    def queue(
        self,
        status: int = 200,
        body: Any = b"",
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        if isinstance(body, (dict, list)):
            body = json.dumps(body).encode("utf-8")
            headers = {"Content-Type": "application/json", **(headers or {})}
        elif isinstance(body, str):
            body = body.encode("utf-8")
        self._outcomes.append((status, body, headers or {}))

    def queue_error(self, error: Exception) -> None:
        self._outcomes.append(error)

    def send(self, request, stream=False, timeout=None, verify=True, cert=None, proxies=None):
        self.sent.append(request)
        self.timeouts.append(timeout)
        self.bodies.append(self._read_body(request.body))

        outcome = self._outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome

        status, content, headers = outcome
        response = requests.Response()
        response.status_code = status
        response.headers = CaseInsensitiveDict(headers)
        response.raw = ClosableRaw(content)
        response.url = request.url
        response.request = request
        response.encoding = "utf-8"
        self.responses.append(response)
        return response

    def close(self) -> None:
        pass

    @staticmethod
    def _read_body(body: Any) -> bytes:
        if body is None:
            return b""
        if isinstance(body, bytes):
            return body
        if isinstance(body, str):
            return body.encode("utf-8")
        return b"".join(body)


class FakeTransport:
    """HttpTransport double returning a fixed response or raising a fixed error"""

    def __init__(
        self,
        response: Optional[TransportResponse] = None,
        error: Optional[Exception] = None,
    ) -> None:
        self.response = response or TransportResponse(status_code=200, data=None)
        self.error = error
        self.requests: List[Any] = []
        self.loggers: List[Any] = []
        self.closed = False

    def execute(self, request, request_logger=None):
        self.requests.append(request)
        self.loggers.append(request_logger)
        if self.error is not None:
            raise self.error
        return self.response

    def close(self) -> None:
        self.closed = True


@pytest.fixture(autouse=True)
def reset_global_state():
    """Process-wide token and shared client must not leak between tests"""
    default_token_provider.set_token(None)
    RetroClient._shared = None
    yield
    default_token_provider.set_token(None)
    RetroClient._shared = None


@pytest.fixture
def stub_adapter() -> StubAdapter:
    return StubAdapter()


@pytest.fixture
def fake_transport() -> FakeTransport:
    return FakeTransport()
