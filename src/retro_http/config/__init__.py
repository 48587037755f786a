"""
Configuration module
"""

from retro_http.config.retro_config import (
    ClientConfig,
    ClientConfigPatch,
    TimeUnit,
    ENV_VAR_MAPPING,
    ConfigDefaults,
)
from retro_http.config.config_loader import ConfigLoader
from retro_http.config.config_validator import (
    ConfigValidator,
    ValidationResult,
    ValidationErrorDetail,
)

__all__ = [
    "ClientConfig",
    "ClientConfigPatch",
    "TimeUnit",
    "ENV_VAR_MAPPING",
    "ConfigDefaults",
    "ConfigLoader",
    "ConfigValidator",
    "ValidationResult",
    "ValidationErrorDetail",
]
