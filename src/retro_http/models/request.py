"""Request models"""

from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional

if TYPE_CHECKING:
    from retro_http.client.canceller import Canceller
    from retro_http.forms.form_data import MultipartBody


ProgressCallback = Callable[[int, int], None]


class HttpMethod(str, Enum):
    """HTTP method types supported"""
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"


class ResponseType(str, Enum):
    """How a response body is decoded"""
    JSON = "json"
    PLAIN = "plain"
    BYTES = "bytes"
    STREAM = "stream"


@dataclass(frozen=True)
class RequestDescriptor:
    """Fully resolved request, ready for a transport"""
    method: HttpMethod
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    query_parameters: Dict[str, Any] = field(default_factory=dict)
    body: Optional[Any] = None
    form_body: Optional["MultipartBody"] = None
    send_timeout: Optional[timedelta] = None
    receive_timeout: Optional[timedelta] = None
    response_type: ResponseType = ResponseType.JSON
    on_progress: Optional[ProgressCallback] = None
    canceller: Optional["Canceller"] = None

    def __post_init__(self) -> None:
        if self.body is not None and self.form_body is not None:
            raise ValueError("A request cannot carry both a body and a form body")

    @property
    def is_multipart(self) -> bool:
        return self.form_body is not None

    def timeout_seconds(self) -> Optional[tuple]:
        """
        (connect, read) timeout tuple in seconds, or None

        A zero duration means no timeout for that phase.
        """
        connect = _seconds(self.send_timeout)
        read = _seconds(self.receive_timeout)
        if connect is None and read is None:
            return None
        return (connect, read)


def _seconds(duration: Optional[timedelta]) -> Optional[float]:
    if duration is None or duration <= timedelta(0):
        return None
    return duration.total_seconds()
