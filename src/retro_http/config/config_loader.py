"""
Configuration Loader
Loads client configuration from various sources and merges patches
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

from retro_http.config.retro_config import (
    ClientConfig,
    ClientConfigPatch,
    TimeUnit,
    ENV_VAR_MAPPING,
)
from retro_http.config.config_validator import ConfigValidator
from retro_http.exceptions import ConfigError


class ConfigLoader:
    """
    ConfigLoader class
    Provides multiple ways to load and merge configuration
    """

    def __init__(self) -> None:
        self._validator = ConfigValidator()

    def from_file(self, path: Union[str, Path]) -> Dict[str, Any]:
        """
        Load configuration from a JSON file

        Args:
            path: Path to JSON configuration file

        Returns:
            Loaded configuration dictionary

        Raises:
            ConfigError: If file not found or invalid JSON
        """
        file_path = Path(path).resolve()

        if not file_path.exists():
            raise ConfigError(
                f"Configuration file not found: {file_path}",
                code="CONFIG_FILE_NOT_FOUND"
            )

        try:
            with open(file_path, "r", encoding="utf-8") as f:
                config = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(
                f"Invalid JSON in configuration file: {file_path}",
                code="CONFIG_PARSE_ERROR"
            ) from e

        if not isinstance(config, dict):
            raise ConfigError(
                f"Configuration file must contain a JSON object: {file_path}",
                code="CONFIG_PARSE_ERROR"
            )
        return config

    def from_environment(self) -> Dict[str, Any]:
        """
        Load configuration from environment variables

        Returns:
            Configuration dictionary from environment variables
        """
        config: Dict[str, Any] = {}

        for env_var, config_key in ENV_VAR_MAPPING.items():
            value = os.environ.get(env_var)
            if value is not None and value != "":
                config[config_key] = self._parse_env_value(config_key, value)

        return config

    def merge(self, *sources: Dict[str, Any]) -> Dict[str, Any]:
        """
        Merge multiple configuration sources
        Priority: later sources override earlier sources

        Args:
            sources: Configuration dictionaries in order of increasing priority

        Returns:
            Merged configuration dictionary
        """
        merged: Dict[str, Any] = {}

        for source in sources:
            filtered = self._filter_none(source)
            merged.update(filtered)

        return merged

    def apply(self, config: ClientConfig, patch: ClientConfigPatch) -> ClientConfig:
        """
        Merge a patch into a config by presence

        Fields the patch leaves unset keep their current value. The given
        config is not modified; a new validated instance is returned.

        Raises:
            ValidationError: If the merged configuration is invalid
        """
        current = {name: getattr(config, name) for name in ClientConfig.model_fields}
        updates = {
            name: getattr(patch, name)
            for name in ClientConfig.model_fields
            if name in ClientConfigPatch.model_fields
        }
        merged = self.merge(current, updates)
        self._validator.validate_or_raise(merged)
        return ClientConfig(**merged)

    def load(
        self,
        file: Optional[Union[str, Path]] = None,
        env: bool = True,
        config: Optional[Dict[str, Any]] = None,
    ) -> ClientConfigPatch:
        """
        Load and merge configuration from multiple sources into a patch

        Args:
            file: Path to JSON configuration file (optional)
            env: Whether to load from environment variables (default: True)
            config: Programmatic configuration dictionary (optional)

        Returns:
            ClientConfigPatch ready to be applied on init
        """
        sources: list[Dict[str, Any]] = []

        if file is not None:
            sources.append(self.from_file(file))

        if env:
            sources.append(self.from_environment())

        if config is not None:
            sources.append(config)

        merged = self.merge(*sources)
        self._validator.validate_or_raise(merged)
        return ClientConfigPatch(**merged)

    def create_template(self, path: Union[str, Path]) -> None:
        """
        Create a configuration template file

        Args:
            path: Path to write template
        """
        template = {
            "base_url": "https://api.example.com",
            "timeout": 30,
            "time_unit": TimeUnit.SECONDS.value,
            "auth_token": "Bearer YOUR_TOKEN",
            "logging_enabled": True,
            "strict_auth_classification": False,
        }

        file_path = Path(path)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        with open(file_path, "w", encoding="utf-8") as f:
            json.dump(template, f, indent=2)

    def _parse_env_value(self, key: str, value: str) -> Any:
        """Parse environment variable value to appropriate type"""
        if key in ("logging_enabled", "strict_auth_classification"):
            return value.lower() in ("true", "1", "yes")

        if key == "timeout":
            try:
                return int(value)
            except ValueError:
                return value

        if key == "time_unit":
            try:
                return TimeUnit(value.lower())
            except ValueError:
                return value

        return value

    def _filter_none(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Filter out None values from config dictionary"""
        return {k: v for k, v in config.items() if v is not None}
