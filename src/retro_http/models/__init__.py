"""
Data models
"""

from retro_http.models.request import (
    HttpMethod,
    ResponseType,
    RequestDescriptor,
    ProgressCallback,
)
from retro_http.models.response import (
    Success,
    Failure,
    ResultOutcome,
    RawResult,
    TransportResponse,
)

__all__ = [
    "HttpMethod",
    "ResponseType",
    "RequestDescriptor",
    "ProgressCallback",
    "Success",
    "Failure",
    "ResultOutcome",
    "RawResult",
    "TransportResponse",
]
