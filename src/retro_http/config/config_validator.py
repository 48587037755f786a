"""
Configuration Validator
Validates client configuration with clear error messages
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from retro_http.config.retro_config import TimeUnit


@dataclass
class ValidationErrorDetail:
    """Validation error detail"""
    field: str
    message: str
    value: Optional[Any] = None


@dataclass
class ValidationResult:
    """Validation result"""
    valid: bool
    errors: List[ValidationErrorDetail] = field(default_factory=list)


class ConfigValidator:
    """
    ConfigValidator class
    Validates a configuration dictionary before it is turned into a ClientConfig
    """

    BOOLEAN_FIELDS = ("logging_enabled", "strict_auth_classification")

    def __init__(self) -> None:
        self._errors: List[ValidationErrorDetail] = []

    def validate(self, config: Dict[str, Any]) -> ValidationResult:
        """
        Validate the configuration dictionary

        Args:
            config: Configuration dictionary to validate

        Returns:
            ValidationResult with any errors
        """
        self._errors = []

        self._validate_base_url(config)
        self._validate_timeout(config)
        self._validate_booleans(config)
        self._validate_logger(config)

        return ValidationResult(
            valid=len(self._errors) == 0,
            errors=self._errors.copy()
        )

    def validate_or_raise(self, config: Dict[str, Any]) -> None:
        """
        Validate and raise if invalid

        Raises:
            ValidationError: If configuration is invalid
        """
        from retro_http.exceptions import ValidationError

        result = self.validate(config)
        if not result.valid:
            error_messages = "; ".join(
                f"{e.field}: {e.message}" for e in result.errors
            )
            raise ValidationError(
                f"Configuration validation failed: {error_messages}",
                field=result.errors[0].field,
            )

    def _validate_base_url(self, config: Dict[str, Any]) -> None:
        base_url = config.get("base_url")
        if base_url is None or base_url == "":
            return
        if not isinstance(base_url, str) or not base_url.startswith(("http://", "https://")):
            self._errors.append(ValidationErrorDetail(
                field="base_url",
                message="base_url must be a valid HTTP/HTTPS URL",
                value=base_url
            ))

    def _validate_timeout(self, config: Dict[str, Any]) -> None:
        timeout = config.get("timeout")
        if timeout is not None:
            if isinstance(timeout, bool) or not isinstance(timeout, int) or timeout < 0:
                self._errors.append(ValidationErrorDetail(
                    field="timeout",
                    message="timeout must be a non-negative integer",
                    value=timeout
                ))

        time_unit = config.get("time_unit")
        if time_unit is not None:
            valid_units = [u.value for u in TimeUnit]
            unit_value = time_unit.value if isinstance(time_unit, TimeUnit) else time_unit
            if unit_value not in valid_units:
                self._errors.append(ValidationErrorDetail(
                    field="time_unit",
                    message=f"time_unit must be one of: {', '.join(valid_units)}",
                    value=time_unit
                ))

    def _validate_booleans(self, config: Dict[str, Any]) -> None:
        for field_name in self.BOOLEAN_FIELDS:
            value = config.get(field_name)
            if value is not None and not isinstance(value, bool):
                self._errors.append(ValidationErrorDetail(
                    field=field_name,
                    message=f"{field_name} must be a boolean",
                    value=value
                ))

    def _validate_logger(self, config: Dict[str, Any]) -> None:
        from retro_http.utils.logger import RequestLogger

        custom_logger = config.get("custom_logger")
        if custom_logger is not None and not isinstance(custom_logger, RequestLogger):
            self._errors.append(ValidationErrorDetail(
                field="custom_logger",
                message="custom_logger must be a RequestLogger",
                value=type(custom_logger).__name__
            ))
