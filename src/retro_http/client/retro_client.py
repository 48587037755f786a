"""
retro-http client
Public entry point: configuration, raw and typed calls, error classification
"""

import logging
import threading
from dataclasses import replace
from pathlib import Path
from typing import Any, Callable, Iterator, Mapping, Optional, TypeVar, Union

from retro_http.client.canceller import Canceller
from retro_http.client.classifier import ErrorClassifier
from retro_http.client.http_client import HttpTransport, RequestsTransport
from retro_http.client.request_builder import RequestOptionsBuilder
from retro_http.client.token_provider import TokenProvider, default_token_provider
from retro_http.config.config_loader import ConfigLoader
from retro_http.config.retro_config import ClientConfig, ClientConfigPatch, TimeUnit
from retro_http.exceptions import ClassifiedError, ErrorKind, TransportFailure
from retro_http.forms.form_data import RetroFormData
from retro_http.models.request import (
    HttpMethod,
    ProgressCallback,
    RequestDescriptor,
    ResponseType,
)
from retro_http.models.response import Failure, RawResult, ResultOutcome, Success
from retro_http.utils.logger import RequestLogger, resolve_request_logger

T = TypeVar("T")

logger = logging.getLogger(__name__)


class RetroClient:
    """
    HTTP client with layered configuration and classified errors

    Configuration comes from three levels: the process-wide default token,
    the instance defaults set through ``init``, and per-call arguments.
    Transport and protocol failures surface as ``ClassifiedError``; error
    payloads from the server below status 500 are returned as failed
    results.

    Example:
        >>> client = RetroClient(base_url="https://api.example.com", timeout=30)
        >>> result = client.call("/users", HttpMethod.GET)
        >>> if result.is_successful:
        ...     print(result.data)
    """

    _shared: Optional["RetroClient"] = None
    _shared_lock = threading.Lock()

    def __init__(
        self,
        use_logger: bool = True,
        base_url: Optional[str] = None,
        logging_interceptor: Optional[RequestLogger] = None,
        auth_token: Optional[str] = None,
        timeout: Optional[int] = None,
        time_unit: Optional[TimeUnit] = None,
        strict_auth_classification: Optional[bool] = None,
        transport: Optional[HttpTransport] = None,
        token_provider: Optional[TokenProvider] = None,
    ) -> None:
        """
        Create a client

        Args:
            use_logger: Log requests with the default PrettyRequestLogger
            base_url: Default base URL for relative paths
            logging_interceptor: RequestLogger used instead of the default
            auth_token: Default authorization token (written to the token provider)
            timeout: Send and receive timeout, in time_unit
            time_unit: Unit for timeout (seconds by default)
            strict_auth_classification: Raise AUTHORIZATION_ERROR on 401/403
                for plain calls too
            transport: HttpTransport to use (requests-backed by default)
            token_provider: Source of the default token (process-wide by default)
        """
        self._config = ClientConfig()
        self._loader = ConfigLoader()
        self._transport: HttpTransport = transport or RequestsTransport()
        self._token_provider = token_provider or default_token_provider
        self._builder = RequestOptionsBuilder(self._token_provider)
        self.init(
            use_logger=use_logger,
            base_url=base_url,
            logging_interceptor=logging_interceptor,
            auth_token=auth_token,
            timeout=timeout,
            time_unit=time_unit,
            strict_auth_classification=strict_auth_classification,
        )

    @classmethod
    def shared(cls) -> "RetroClient":
        """Process-wide default client, created on first use"""
        with cls._shared_lock:
            if cls._shared is None:
                cls._shared = cls()
            return cls._shared

    @classmethod
    def from_config(
        cls,
        file: Optional[Union[str, Path]] = None,
        env: bool = True,
        transport: Optional[HttpTransport] = None,
        token_provider: Optional[TokenProvider] = None,
        **overrides: Any,
    ) -> "RetroClient":
        """
        Create a client from a JSON file, RETRO_* environment variables and
        keyword overrides (later sources win)
        """
        patch = ConfigLoader().load(file=file, env=env, config=overrides)
        client = cls(transport=transport, token_provider=token_provider)
        client.apply_patch(patch)
        return client

    def init(
        self,
        use_logger: Optional[bool] = None,
        base_url: Optional[str] = None,
        logging_interceptor: Optional[RequestLogger] = None,
        auth_token: Optional[str] = None,
        timeout: Optional[int] = None,
        time_unit: Optional[TimeUnit] = None,
        strict_auth_classification: Optional[bool] = None,
    ) -> None:
        """
        Update instance configuration

        Only the arguments given (not None) change; everything else keeps
        its current value. A given ``auth_token`` becomes the default token
        of this client's token provider.

        ``use_logger`` defaults to None, meaning "not supplied", so a later
        ``init`` never switches logging back on by accident. The constructor
        passes True, so a new client logs unless told otherwise. Pass False
        to disable the default logger.

        A ``timeout`` of 0 disables the send and receive timeouts.

        Raises:
            ValidationError: If the resulting configuration is invalid
        """
        self.apply_patch(ClientConfigPatch(
            base_url=base_url,
            timeout=timeout,
            time_unit=time_unit,
            logging_enabled=use_logger,
            custom_logger=logging_interceptor,
            strict_auth_classification=strict_auth_classification,
            auth_token=auth_token,
        ))

    def apply_patch(self, patch: ClientConfigPatch) -> None:
        """Merge a config patch by presence and swap the result in"""
        self._config = self._loader.apply(self._config, patch)
        if patch.auth_token is not None:
            self._token_provider.set_token(patch.auth_token)

    @classmethod
    def set_auth_token(cls, auth_token: Optional[str]) -> None:
        """Set the process-wide default authorization token"""
        default_token_provider.set_token(auth_token)

    @property
    def config(self) -> ClientConfig:
        """Current configuration snapshot"""
        return self._config

    @property
    def token_provider(self) -> TokenProvider:
        return self._token_provider

    @property
    def transport(self) -> HttpTransport:
        return self._transport

    def call(
        self,
        path: str,
        method: HttpMethod,
        base_url: Optional[str] = None,
        on_progress: Optional[ProgressCallback] = None,
        canceller: Optional[Canceller] = None,
        use_auth_token: bool = True,
        authorization_token: Optional[str] = None,
        body: Optional[Any] = None,
        headers: Optional[Mapping[str, Any]] = None,
        query_parameters: Optional[Mapping[str, Any]] = None,
        response_type: Optional[ResponseType] = None,
        result_type: Optional[type] = None,
    ) -> RawResult:
        """
        Perform a request with an optional JSON body

        Returns:
            RawResult: successful for 2xx responses, failed for error
            payloads below status 500

        Raises:
            ClassifiedError: For transport and protocol failures
        """
        config = self._config
        try:
            request = self._builder.build(
                config,
                path=path,
                method=method,
                base_url=base_url,
                headers=headers,
                query_parameters=query_parameters,
                body=body,
                use_auth_token=use_auth_token,
                authorization_token=authorization_token,
                on_progress=on_progress,
                canceller=canceller,
                response_type=response_type,
                result_type=result_type,
            )
        except ClassifiedError:
            raise
        except Exception as e:
            raise ErrorClassifier.classify_exception(e) from e

        classifier = ErrorClassifier(config.strict_auth_classification)
        return self._dispatch(request, config, classifier)

    def form_data_call(
        self,
        path: str,
        method: HttpMethod,
        form_data: RetroFormData,
        base_url: Optional[str] = None,
        on_progress: Optional[ProgressCallback] = None,
        canceller: Optional[Canceller] = None,
        use_auth_token: bool = True,
        authorization_token: Optional[str] = None,
        headers: Optional[Mapping[str, Any]] = None,
        query_parameters: Optional[Mapping[str, Any]] = None,
        response_type: Optional[ResponseType] = None,
        result_type: Optional[type] = None,
    ) -> RawResult:
        """
        Perform a multipart/form-data request

        Same as ``call`` except that 401 and 403 responses always raise an
        AUTHORIZATION_ERROR.

        Raises:
            ClassifiedError: For transport and protocol failures, and for
                unreadable upload files (UNKNOWN_ERROR)
        """
        config = self._config
        try:
            request = self._builder.build(
                config,
                path=path,
                method=method,
                base_url=base_url,
                headers=headers,
                query_parameters=query_parameters,
                use_auth_token=use_auth_token,
                authorization_token=authorization_token,
                on_progress=on_progress,
                canceller=canceller,
                response_type=response_type,
                result_type=result_type,
            )
            # Files are read only once the base URL is known to resolve
            request = replace(request, form_body=form_data.encode())
        except ClassifiedError:
            raise
        except Exception as e:
            raise ErrorClassifier.classify_exception(e) from e

        return self._dispatch(request, config, ErrorClassifier(True))

    def type_safe_call(
        self,
        path: str,
        method: HttpMethod,
        success_from_json: Callable[[Any], T],
        base_url: Optional[str] = None,
        on_progress: Optional[ProgressCallback] = None,
        canceller: Optional[Canceller] = None,
        use_auth_token: bool = True,
        authorization_token: Optional[str] = None,
        body: Optional[Any] = None,
        headers: Optional[Mapping[str, Any]] = None,
        query_parameters: Optional[Mapping[str, Any]] = None,
        response_type: Optional[ResponseType] = None,
        result_type: Optional[type] = None,
    ) -> ResultOutcome[T]:
        """
        Perform a request and decode a successful payload

        Args:
            success_from_json: Converts the decoded body into the result type

        Returns:
            Success with the converted data, or Failure with the error payload
            (the converter is not called for failures)

        Raises:
            ClassifiedError: MAPPING_ERROR when the converter fails, otherwise
                as for ``call``
        """
        try:
            result = self.call(
                path=path,
                method=method,
                base_url=base_url,
                on_progress=on_progress,
                canceller=canceller,
                use_auth_token=use_auth_token,
                authorization_token=authorization_token,
                body=body,
                headers=headers,
                query_parameters=query_parameters,
                response_type=response_type,
                result_type=result_type,
            )
            return self._to_outcome(result, success_from_json)
        except ClassifiedError:
            raise
        except Exception as e:
            raise ErrorClassifier.classify_exception(e) from e

    def type_safe_form_data_call(
        self,
        path: str,
        method: HttpMethod,
        form_data: RetroFormData,
        success_from_json: Callable[[Any], T],
        base_url: Optional[str] = None,
        on_progress: Optional[ProgressCallback] = None,
        canceller: Optional[Canceller] = None,
        use_auth_token: bool = True,
        authorization_token: Optional[str] = None,
        headers: Optional[Mapping[str, Any]] = None,
        query_parameters: Optional[Mapping[str, Any]] = None,
        response_type: Optional[ResponseType] = None,
        result_type: Optional[type] = None,
    ) -> ResultOutcome[T]:
        """Multipart counterpart of ``type_safe_call``"""
        try:
            result = self.form_data_call(
                path=path,
                method=method,
                form_data=form_data,
                base_url=base_url,
                on_progress=on_progress,
                canceller=canceller,
                use_auth_token=use_auth_token,
                authorization_token=authorization_token,
                headers=headers,
                query_parameters=query_parameters,
                response_type=response_type,
                result_type=result_type,
            )
            return self._to_outcome(result, success_from_json)
        except ClassifiedError:
            raise
        except Exception as e:
            raise ErrorClassifier.classify_exception(e) from e

    def _dispatch(
        self,
        request: RequestDescriptor,
        config: ClientConfig,
        classifier: ErrorClassifier,
    ) -> RawResult:
        request_logger = resolve_request_logger(
            config.logging_enabled, config.custom_logger
        )
        try:
            response = self._transport.execute(request, request_logger)
        except TransportFailure as failure:
            outcome = classifier.classify(failure)
            if isinstance(outcome, ClassifiedError):
                raise outcome from failure
            return outcome
        except ClassifiedError:
            raise
        except Exception as e:
            raise ErrorClassifier.classify_exception(e) from e

        data = response.data
        if request.response_type == ResponseType.STREAM and data is not None:
            data = self._classified_stream(data, classifier)
        return RawResult.success(status_code=response.status_code, data=data)

    @staticmethod
    def _classified_stream(
        chunks: Iterator[bytes], classifier: ErrorClassifier
    ) -> Iterator[bytes]:
        """Re-raise failures met while the caller reads a stream as ClassifiedError"""
        try:
            yield from chunks
        except TransportFailure as failure:
            outcome = classifier.classify(failure)
            if isinstance(outcome, ClassifiedError):
                raise outcome from failure
            raise
        finally:
            close = getattr(chunks, "close", None)
            if close is not None:
                close()

    @staticmethod
    def _to_outcome(
        result: RawResult, success_from_json: Callable[[Any], T]
    ) -> ResultOutcome[T]:
        if not result.is_successful:
            return Failure(status_code=result.status_code, error=result.error)

        try:
            data = success_from_json(result.data)
        except Exception as e:
            logger.debug(f"Failed to map response body: {e}", exc_info=True)
            raise ClassifiedError(
                ErrorKind.MAPPING_ERROR,
                str(e),
                status_code=result.status_code,
                cause=e,
            ) from e
        return Success(status_code=result.status_code, data=data)

    def close(self) -> None:
        """Close the underlying transport"""
        self._transport.close()

    def __enter__(self) -> "RetroClient":
        """Context manager entry"""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit"""
        self.close()
