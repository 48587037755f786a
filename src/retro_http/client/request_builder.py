"""
Request options builder
Merges call-level options with the instance configuration into a RequestDescriptor
"""

from datetime import timedelta
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urljoin, urlparse

from retro_http.client.canceller import Canceller
from retro_http.client.token_provider import TokenProvider
from retro_http.config.retro_config import ClientConfig, TimeUnit
from retro_http.exceptions import ClassifiedError, ErrorKind
from retro_http.forms.form_data import MultipartBody
from retro_http.models.request import (
    HttpMethod,
    ProgressCallback,
    RequestDescriptor,
    ResponseType,
)


def combine_base_urls(
    instance_base_url: Optional[str], call_base_url: Optional[str]
) -> Optional[str]:
    """
    Resolve the effective base URL for a call

    A blank call-level value falls back to the instance base URL, an
    absolute one replaces it, and a relative one is resolved against it
    (RFC 3986 reference resolution).

    Returns:
        The base URL, or None when neither level provides one
    """
    if instance_base_url is None and call_base_url is None:
        return None
    if call_base_url is None or call_base_url.strip() == "":
        return instance_base_url
    if urlparse(call_base_url).scheme:
        return call_base_url
    if instance_base_url is None:
        return None
    return urljoin(instance_base_url, call_base_url)


def join_url(base_url: str, path: str) -> str:
    """Append a path to a base URL with exactly one separating slash"""
    if path.startswith(("http://", "https://")):
        return path
    if not path:
        return base_url
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"


def to_duration(value: Optional[int], time_unit: TimeUnit) -> Optional[timedelta]:
    """Convert a timeout value in the configured unit to a timedelta"""
    if value is None:
        return None
    return time_unit.to_timedelta(value)


def resolve_response_type(
    result_type: Optional[type] = None,
    explicit: Optional[ResponseType] = None,
) -> ResponseType:
    """
    Pick how the response body is decoded

    Byte and stream decoding, once selected, are never overridden. A
    ``str`` result type asks for plain text and any other result type
    for JSON.
    """
    if explicit in (ResponseType.BYTES, ResponseType.STREAM):
        return explicit
    if result_type is str:
        return ResponseType.PLAIN
    if result_type is not None:
        return ResponseType.JSON
    return explicit or ResponseType.JSON


class RequestOptionsBuilder:
    """
    Builds transport-ready request descriptors

    The builder reads a configuration snapshot and a token provider and
    never mutates either.
    """

    def __init__(self, token_provider: TokenProvider) -> None:
        self._token_provider = token_provider

    def resolve_token(
        self, use_auth_token: bool, authorization_token: Optional[str]
    ) -> Optional[str]:
        """Per-call token first, then the default token when allowed"""
        if use_auth_token and authorization_token is None:
            return self._token_provider.get_token()
        return authorization_token

    def build(
        self,
        config: ClientConfig,
        path: str,
        method: HttpMethod,
        base_url: Optional[str] = None,
        headers: Optional[Mapping[str, Any]] = None,
        query_parameters: Optional[Mapping[str, Any]] = None,
        body: Optional[Any] = None,
        form_body: Optional[MultipartBody] = None,
        use_auth_token: bool = True,
        authorization_token: Optional[str] = None,
        on_progress: Optional[ProgressCallback] = None,
        canceller: Optional[Canceller] = None,
        response_type: Optional[ResponseType] = None,
        result_type: Optional[type] = None,
    ) -> RequestDescriptor:
        """
        Build a RequestDescriptor

        Raises:
            ClassifiedError: BAD_REQUEST (400) when no base URL can be resolved
        """
        resolved_base = combine_base_urls(config.base_url, base_url)
        if resolved_base is None:
            raise ClassifiedError(
                ErrorKind.BAD_REQUEST,
                "Base URL cannot be null",
                status_code=400,
            )

        token = self.resolve_token(use_auth_token, authorization_token)
        timeout = to_duration(config.timeout, config.time_unit)

        return RequestDescriptor(
            method=HttpMethod(method),
            url=join_url(resolved_base, path),
            headers=self.merge_headers(token, headers),
            query_parameters=self.clean_query_parameters(query_parameters),
            body=body,
            form_body=form_body,
            send_timeout=timeout,
            receive_timeout=timeout,
            response_type=resolve_response_type(result_type, response_type),
            on_progress=on_progress,
            canceller=canceller,
        )

    @staticmethod
    def merge_headers(
        token: Optional[str], headers: Optional[Mapping[str, Any]] = None
    ) -> Dict[str, str]:
        """Authorization header first; caller headers override on collision"""
        merged: Dict[str, str] = {}
        if token is not None:
            merged["Authorization"] = token
        if headers:
            for key, value in headers.items():
                if value is not None:
                    merged[key] = str(value)
        return merged

    @staticmethod
    def clean_query_parameters(
        query_parameters: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Drop None-valued query parameters"""
        if not query_parameters:
            return {}
        return {k: v for k, v in query_parameters.items() if v is not None}
