"""
HTTP Client module for retro-http
"""

from retro_http.client.retro_client import RetroClient
from retro_http.client.http_client import (
    HttpTransport,
    RequestsTransport,
    ProgressBody,
)
from retro_http.client.request_builder import (
    RequestOptionsBuilder,
    combine_base_urls,
    join_url,
    to_duration,
    resolve_response_type,
)
from retro_http.client.classifier import ErrorClassifier
from retro_http.client.canceller import Canceller
from retro_http.client.token_provider import TokenProvider, default_token_provider

__all__ = [
    "RetroClient",
    "HttpTransport",
    "RequestsTransport",
    "ProgressBody",
    "RequestOptionsBuilder",
    "combine_base_urls",
    "join_url",
    "to_duration",
    "resolve_response_type",
    "ErrorClassifier",
    "Canceller",
    "TokenProvider",
    "default_token_provider",
]
