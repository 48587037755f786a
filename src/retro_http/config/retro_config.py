"""
retro-http Configuration Types and Schema
Type-safe configuration objects for the client
"""

from datetime import timedelta
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator


class TimeUnit(str, Enum):
    """Unit in which a timeout value is expressed"""
    SECONDS = "seconds"
    MILLISECONDS = "milliseconds"

    def to_timedelta(self, value: int) -> timedelta:
        """Convert a value in this unit to a timedelta"""
        if self is TimeUnit.MILLISECONDS:
            return timedelta(milliseconds=value)
        return timedelta(seconds=value)


class ConfigDefaults:
    """Default configuration values"""
    TIME_UNIT = TimeUnit.SECONDS
    LOGGING_ENABLED = True
    STRICT_AUTH_CLASSIFICATION = False


# Environment variable mapping
ENV_VAR_MAPPING = {
    "RETRO_BASE_URL": "base_url",
    "RETRO_TIMEOUT": "timeout",
    "RETRO_TIME_UNIT": "time_unit",
    "RETRO_AUTH_TOKEN": "auth_token",
    "RETRO_LOGGING_ENABLED": "logging_enabled",
    "RETRO_STRICT_AUTH": "strict_auth_classification",
}


def _check_base_url(v: Optional[str]) -> Optional[str]:
    if v is not None and v != "":
        if not v.startswith(("http://", "https://")):
            raise ValueError("base_url must be a valid HTTP/HTTPS URL")
    return v


class ClientConfig(BaseModel):
    """
    Instance-level client configuration

    Values are immutable; updates produce a new instance that replaces
    the previous one as a whole.
    """

    base_url: Optional[str] = Field(
        default=None,
        description="Default base URL for relative paths"
    )
    timeout: Optional[int] = Field(
        default=None,
        description="Send and receive timeout, expressed in time_unit (0 disables it)",
        ge=0
    )
    time_unit: TimeUnit = Field(
        default=ConfigDefaults.TIME_UNIT,
        description="Unit for timeout"
    )
    logging_enabled: bool = Field(
        default=ConfigDefaults.LOGGING_ENABLED,
        description="Log requests and responses with the default logger"
    )
    custom_logger: Optional[Any] = Field(
        default=None,
        description="RequestLogger used instead of the default one"
    )
    strict_auth_classification: bool = Field(
        default=ConfigDefaults.STRICT_AUTH_CLASSIFICATION,
        description="Raise AUTHORIZATION_ERROR for 401/403 on plain calls"
    )

    model_config = {
        "frozen": True,
        "str_strip_whitespace": True,
        "arbitrary_types_allowed": True,
    }

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: Optional[str]) -> Optional[str]:
        """Validate base_url is a valid URL"""
        return _check_base_url(v)

    def get_timeout(self) -> Optional[timedelta]:
        """Timeout as a timedelta, or None when unset"""
        if self.timeout is None:
            return None
        return self.time_unit.to_timedelta(self.timeout)


class ClientConfigPatch(BaseModel):
    """
    Partial configuration applied on init
    A field left as None means "not supplied" and keeps the current value
    """

    base_url: Optional[str] = None
    timeout: Optional[int] = Field(default=None, ge=0)
    time_unit: Optional[TimeUnit] = None
    logging_enabled: Optional[bool] = None
    custom_logger: Optional[Any] = None
    strict_auth_classification: Optional[bool] = None
    auth_token: Optional[str] = None

    model_config = {
        "str_strip_whitespace": True,
        "arbitrary_types_allowed": True,
    }

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: Optional[str]) -> Optional[str]:
        """Validate base_url is a valid URL"""
        return _check_base_url(v)
