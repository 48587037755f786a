"""
Request Logger Unit Tests
"""

import logging

import pytest

from retro_http.exceptions import TransportFailure
from retro_http.forms import FilePart, MultipartBody
from retro_http.models import HttpMethod, RequestDescriptor, TransportResponse
from retro_http.utils.logger import (
    MAX_BODY_LOG_LENGTH,
    REDACTED,
    PrettyRequestLogger,
    RequestLogger,
    redact_sensitive_data,
    resolve_request_logger,
)


class TestRedaction:
    """Tests for redact_sensitive_data"""

    def test_redacts_sensitive_keys(self):
        data = {"Authorization": "Bearer t", "user": "ann", "password": "p"}

        assert redact_sensitive_data(data) == {
            "Authorization": REDACTED,
            "user": "ann",
            "password": REDACTED,
        }

    def test_redacts_nested(self):
        data = {"items": [{"access_token": "x", "id": 1}], "meta": {"api_key": "k"}}

        assert redact_sensitive_data(data) == {
            "items": [{"access_token": REDACTED, "id": 1}],
            "meta": {"api_key": REDACTED},
        }

    def test_passes_scalars_through(self):
        assert redact_sensitive_data("text") == "text"
        assert redact_sensitive_data(5) == 5
        assert redact_sensitive_data(None) is None


class TestPrettyRequestLogger:
    """Tests for PrettyRequestLogger output"""

    @pytest.fixture
    def request_logger(self) -> PrettyRequestLogger:
        return PrettyRequestLogger(response_header=True)

    def test_logs_request(self, request_logger, caplog):
        request = RequestDescriptor(
            method=HttpMethod.POST,
            url="https://api.x.com/login",
            headers={"Authorization": "Bearer secret-token"},
            body={"user": "ann", "password": "hunter2"},
        )

        with caplog.at_level(logging.INFO, logger="retro_http.requests"):
            request_logger.on_request(request, "req-1")

        assert "--> POST https://api.x.com/login [req-1]" in caplog.text
        assert "ann" in caplog.text
        assert "secret-token" not in caplog.text
        assert "hunter2" not in caplog.text

    def test_logs_form_summary(self, request_logger, caplog):
        request = RequestDescriptor(
            method=HttpMethod.POST,
            url="https://api.x.com/upload",
            form_body=MultipartBody(
                fields=(("title", "report"),),
                files=(("file", FilePart("a.pdf", b"%PDF-1.7")),),
            ),
        )

        with caplog.at_level(logging.INFO, logger="retro_http.requests"):
            request_logger.on_request(request, "req-2")

        assert "title" in caplog.text
        assert "file=a.pdf (8 bytes)" in caplog.text
        assert "%PDF" not in caplog.text

    def test_logs_response(self, request_logger, caplog):
        request = RequestDescriptor(method=HttpMethod.GET, url="https://api.x.com/users")
        response = TransportResponse(200, {"id": 1}, {"Set-Cookie": "sid=1"})

        with caplog.at_level(logging.INFO, logger="retro_http.requests"):
            request_logger.on_response(request, response, "req-3", 12)

        assert "<-- 200 GET https://api.x.com/users [req-3] (12ms)" in caplog.text
        assert "sid=1" not in caplog.text

    def test_logs_error_as_warning(self, request_logger, caplog):
        request = RequestDescriptor(method=HttpMethod.GET, url="https://api.x.com/users")
        failure = TransportFailure.bad_response(404, {"message": "not found"})

        with caplog.at_level(logging.INFO, logger="retro_http.requests"):
            request_logger.on_error(request, failure, "req-4", 3)

        record = caplog.records[-1]
        assert record.levelno == logging.WARNING
        assert "404" in record.getMessage()
        assert "not found" in record.getMessage()

    def test_truncates_long_bodies(self, request_logger, caplog):
        request = RequestDescriptor(method=HttpMethod.GET, url="https://api.x.com/big")
        response = TransportResponse(200, "x" * (MAX_BODY_LOG_LENGTH + 100))

        with caplog.at_level(logging.INFO, logger="retro_http.requests"):
            request_logger.on_response(request, response, "req-5", 1)

        assert "x" * MAX_BODY_LOG_LENGTH + "..." in caplog.text
        assert "x" * (MAX_BODY_LOG_LENGTH + 1) not in caplog.text


class TestResolveRequestLogger:
    """Tests for resolve_request_logger"""

    def test_custom_logger_wins(self):
        custom = RequestLogger()
        assert resolve_request_logger(True, custom) is custom
        assert resolve_request_logger(False, custom) is custom

    def test_default_logger(self):
        assert isinstance(resolve_request_logger(True), PrettyRequestLogger)

    def test_disabled(self):
        assert resolve_request_logger(False) is None
