"""
Request/response logging
Interceptor hooks invoked by transports around each request
"""

import logging
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional

if TYPE_CHECKING:
    from retro_http.exceptions import TransportFailure
    from retro_http.models.request import RequestDescriptor
    from retro_http.models.response import TransportResponse


# Sensitive fields that should be redacted in logs
SENSITIVE_FIELDS = [
    "authorization",
    "x-api-key",
    "api_key",
    "apikey",
    "password",
    "token",
    "secret",
    "cookie",
]

REDACTED = "[REDACTED]"

# Longest body excerpt written to the log
MAX_BODY_LOG_LENGTH = 2000


def redact_sensitive_data(obj: Any) -> Any:
    """Redact sensitive data from object for logging"""
    if obj is None or isinstance(obj, str):
        return obj

    if isinstance(obj, (list, tuple)):
        return [redact_sensitive_data(item) for item in obj]

    if isinstance(obj, Mapping):
        redacted = {}
        for key, value in obj.items():
            lower_key = str(key).lower()
            if any(name in lower_key for name in SENSITIVE_FIELDS):
                redacted[key] = REDACTED
            elif isinstance(value, (Mapping, list, tuple)):
                redacted[key] = redact_sensitive_data(value)
            else:
                redacted[key] = value
        return redacted

    return obj


class RequestLogger:
    """
    Interceptor invoked around HttpTransport.execute

    Subclass and override any of the hooks. The base implementation
    does nothing.
    """

    def on_request(self, request: "RequestDescriptor", request_id: str) -> None:
        pass

    def on_response(
        self,
        request: "RequestDescriptor",
        response: "TransportResponse",
        request_id: str,
        duration: int,
    ) -> None:
        pass

    def on_error(
        self,
        request: "RequestDescriptor",
        failure: "TransportFailure",
        request_id: str,
        duration: int,
    ) -> None:
        pass


class PrettyRequestLogger(RequestLogger):
    """Default RequestLogger writing redacted summaries to ``logging``"""

    def __init__(
        self,
        request_header: bool = True,
        request_body: bool = True,
        response_header: bool = False,
        response_body: bool = True,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.request_header = request_header
        self.request_body = request_body
        self.response_header = response_header
        self.response_body = response_body
        self._logger = logger or logging.getLogger("retro_http.requests")

    def on_request(self, request: "RequestDescriptor", request_id: str) -> None:
        lines = [f"--> {request.method.value} {request.url} [{request_id}]"]
        if request.query_parameters:
            lines.append(f"    query: {request.query_parameters}")
        if self.request_header and request.headers:
            lines.append(f"    headers: {redact_sensitive_data(request.headers)}")
        if self.request_body:
            if request.form_body is not None:
                form = request.form_body
                fields = redact_sensitive_data([{k: v} for k, v in form.fields])
                files = [f"{k}={part.filename} ({len(part)} bytes)" for k, part in form.files]
                lines.append(f"    form fields: {fields}")
                if files:
                    lines.append(f"    form files: {', '.join(files)}")
            elif request.body is not None:
                lines.append(f"    body: {self._excerpt(redact_sensitive_data(request.body))}")
        self._logger.info("\n".join(lines))

    def on_response(
        self,
        request: "RequestDescriptor",
        response: "TransportResponse",
        request_id: str,
        duration: int,
    ) -> None:
        lines = [
            f"<-- {response.status_code} {request.method.value} {request.url} "
            f"[{request_id}] ({duration}ms)"
        ]
        if self.response_header and response.headers:
            lines.append(f"    headers: {redact_sensitive_data(dict(response.headers))}")
        if self.response_body and response.data is not None:
            lines.append(f"    body: {self._excerpt(redact_sensitive_data(response.data))}")
        self._logger.info("\n".join(lines))

    def on_error(
        self,
        request: "RequestDescriptor",
        failure: "TransportFailure",
        request_id: str,
        duration: int,
    ) -> None:
        status = failure.status_code if failure.status_code is not None else "---"
        lines = [
            f"<-- {status} {request.method.value} {request.url} "
            f"[{request_id}] ({duration}ms) {failure.category.value}: {failure.message}"
        ]
        if self.response_body and failure.response_body is not None:
            lines.append(
                f"    body: {self._excerpt(redact_sensitive_data(failure.response_body))}"
            )
        self._logger.warning("\n".join(lines))

    @staticmethod
    def _excerpt(value: Any) -> str:
        if isinstance(value, (bytes, bytearray)):
            return f"<{len(value)} bytes>"
        text = str(value)
        if len(text) > MAX_BODY_LOG_LENGTH:
            return text[:MAX_BODY_LOG_LENGTH] + "..."
        return text


def resolve_request_logger(
    logging_enabled: bool, custom_logger: Optional[RequestLogger] = None
) -> Optional[RequestLogger]:
    """Pick the logger to use for a call: custom first, then the default"""
    if custom_logger is not None:
        return custom_logger
    if logging_enabled:
        return _default_logger
    return None


_default_logger = PrettyRequestLogger()


__all__ = [
    "RequestLogger",
    "PrettyRequestLogger",
    "redact_sensitive_data",
    "resolve_request_logger",
    "SENSITIVE_FIELDS",
]
