"""
retro-http

HTTP client layer with layered configuration, typed results and a closed
error taxonomy
"""

from retro_http.client import (
    RetroClient,
    HttpTransport,
    RequestsTransport,
    RequestOptionsBuilder,
    ErrorClassifier,
    Canceller,
    TokenProvider,
    default_token_provider,
    combine_base_urls,
)
from retro_http.exceptions import (
    RetroHttpError,
    ClassifiedError,
    ErrorKind,
    FailureCategory,
    TransportFailure,
    ConfigError,
    ValidationError,
)

# Configuration
from retro_http.config import (
    ClientConfig,
    ClientConfigPatch,
    TimeUnit,
    ConfigLoader,
    ConfigValidator,
    ConfigDefaults,
    ENV_VAR_MAPPING,
)

# Forms
from retro_http.forms import (
    RetroFormData,
    MultipartBody,
    FilePart,
    FileSource,
    LocalFileSource,
)

# Models
from retro_http.models import (
    HttpMethod,
    ResponseType,
    RequestDescriptor,
    Success,
    Failure,
    ResultOutcome,
    RawResult,
    TransportResponse,
)

# Logging
from retro_http.utils import RequestLogger, PrettyRequestLogger

__version__ = "0.1.0"

__all__ = [
    # Client
    "RetroClient",
    "HttpTransport",
    "RequestsTransport",
    "RequestOptionsBuilder",
    "ErrorClassifier",
    "Canceller",
    "TokenProvider",
    "default_token_provider",
    "combine_base_urls",
    # Exceptions
    "RetroHttpError",
    "ClassifiedError",
    "ErrorKind",
    "FailureCategory",
    "TransportFailure",
    "ConfigError",
    "ValidationError",
    # Configuration
    "ClientConfig",
    "ClientConfigPatch",
    "TimeUnit",
    "ConfigLoader",
    "ConfigValidator",
    "ConfigDefaults",
    "ENV_VAR_MAPPING",
    # Forms
    "RetroFormData",
    "MultipartBody",
    "FilePart",
    "FileSource",
    "LocalFileSource",
    # Models
    "HttpMethod",
    "ResponseType",
    "RequestDescriptor",
    "Success",
    "Failure",
    "ResultOutcome",
    "RawResult",
    "TransportResponse",
    # Logging
    "RequestLogger",
    "PrettyRequestLogger",
]
