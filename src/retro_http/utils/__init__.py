"""
Utility functions
"""

from retro_http.utils.logger import (
    RequestLogger,
    PrettyRequestLogger,
    redact_sensitive_data,
    resolve_request_logger,
)

__all__ = [
    "RequestLogger",
    "PrettyRequestLogger",
    "redact_sensitive_data",
    "resolve_request_logger",
]
