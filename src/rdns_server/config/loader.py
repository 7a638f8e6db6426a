"""Configuration loader for the rdns server.

This module handles loading configuration from files, environment variables
and command line overrides, with validation.
"""

import json
import os
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .schema import (
    LoggingConfig,
    RDNSServerConfig,
    ServerConfig,
    ZoneConfig,
    create_default_config,
)

ENV_PREFIX = "RDNS_"


class ConfigLoader:
    """Configuration loader.

    Sources are layered as defaults < file < environment < overrides.
    """

    def __init__(self, config_file: Optional[str] = None):
        """Initialize configuration loader.

        Args:
            config_file: Path to configuration file (YAML or JSON)
        """
        self.config_file = config_file
        self._config: Optional[RDNSServerConfig] = None

    def load_config(
        self, overrides: Optional[Dict[str, Any]] = None
    ) -> RDNSServerConfig:
        """Load configuration from file and environment variables.

        Args:
            overrides: Nested dictionary applied last, e.g. from CLI flags

        Returns:
            Loaded and validated rdns configuration

        Raises:
            FileNotFoundError: If config file is specified but not found
            ValueError: If configuration is invalid
            yaml.YAMLError: If YAML parsing fails
            json.JSONDecodeError: If JSON parsing fails
        """
        config_dict = self._get_default_config_dict()

        if self.config_file:
            file_config = self._load_from_file(self.config_file)
            config_dict = self._merge_configs(config_dict, file_config)

        config_dict = self._apply_env_overrides(config_dict)

        if overrides:
            config_dict = self._merge_configs(config_dict, overrides)

        self._config = self._dict_to_config(config_dict)

        return self._config

    def get_config(self) -> Optional[RDNSServerConfig]:
        """Get current configuration."""
        return self._config

    def _load_from_file(self, file_path: str) -> Dict[str, Any]:
        """Load configuration from YAML or JSON file.

        Args:
            file_path: Path to configuration file

        Returns:
            Configuration dictionary

        Raises:
            FileNotFoundError: If file is not found
            ValueError: If file format is not supported
            yaml.YAMLError: If YAML parsing fails
            json.JSONDecodeError: If JSON parsing fails
        """
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {file_path}")

        with open(path, "r", encoding="utf-8") as f:
            content = f.read()

        if path.suffix.lower() in [".yaml", ".yml"]:
            result = yaml.safe_load(content)
            return result if isinstance(result, dict) else {}
        elif path.suffix.lower() == ".json":
            json_result = json.loads(content)
            return json_result if isinstance(json_result, dict) else {}
        else:
            # Try YAML first, then JSON
            try:
                result = yaml.safe_load(content)
                return result if isinstance(result, dict) else {}
            except yaml.YAMLError:
                try:
                    json_result = json.loads(content)
                    return json_result if isinstance(json_result, dict) else {}
                except json.JSONDecodeError:
                    raise ValueError(f"Unsupported file format: {file_path}")

    def _get_default_config_dict(self) -> Dict[str, Any]:
        """Get default configuration as dictionary."""
        return self._config_to_dict(create_default_config())

    def _config_to_dict(self, config: RDNSServerConfig) -> Dict[str, Any]:
        """Convert configuration object to dictionary."""
        zone = asdict(config.zone)
        # derived, not an input
        zone.pop("prefix", None)
        return {
            "server": asdict(config.server),
            "zone": zone,
            "logging": asdict(config.logging),
        }

    def _dict_to_config(self, config_dict: Dict[str, Any]) -> RDNSServerConfig:
        """Convert dictionary to configuration object.

        Raises:
            ValueError: If configuration is invalid
        """
        sections = {}
        for name, section_cls in (
            ("server", ServerConfig),
            ("zone", ZoneConfig),
            ("logging", LoggingConfig),
        ):
            values = config_dict.get(name) or {}
            if not isinstance(values, dict):
                raise ValueError(f"Configuration section '{name}' must be a mapping")
            try:
                sections[name] = section_cls(**values)
            except TypeError as e:
                raise ValueError(f"Invalid '{name}' configuration: {e}") from e

        return RDNSServerConfig(**sections)

    def _merge_configs(
        self, base: Dict[str, Any], override: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Merge two configuration dictionaries.

        Args:
            base: Base configuration dictionary
            override: Override configuration dictionary

        Returns:
            Merged configuration dictionary
        """
        result = base.copy()

        for key, value in override.items():
            if (
                key in result
                and isinstance(result[key], dict)
                and isinstance(value, dict)
            ):
                result[key] = self._merge_configs(result[key], value)
            else:
                result[key] = value

        return result

    def _apply_env_overrides(self, config_dict: Dict[str, Any]) -> Dict[str, Any]:
        """Apply environment variable overrides to configuration.

        Environment variables use the format RDNS_<SECTION>_<KEY>
        For example: RDNS_ZONE_TTL=60

        Args:
            config_dict: Base configuration dictionary

        Returns:
            Configuration dictionary with environment overrides applied
        """
        for env_key, env_value in os.environ.items():
            if not env_key.startswith(ENV_PREFIX):
                continue

            key_parts = env_key[len(ENV_PREFIX) :].lower().split("_")
            if len(key_parts) < 2:
                continue

            section = key_parts[0]
            config_key = "_".join(key_parts[1:])

            if isinstance(config_dict.get(section), dict):
                config_dict[section] = dict(config_dict[section])
                config_dict[section][config_key] = self._convert_env_value(
                    config_key, env_value
                )

        return config_dict

    def _convert_env_value(self, key: str, value: str) -> Any:
        """Convert environment variable value to appropriate Python type.

        Zone name fields stay strings so that a host prefix such as ``0x``
        is not read as a number.
        """
        if key in ("host_prefix", "domain_suffix", "ns_name", "network", "file"):
            return value

        try:
            return int(value)
        except ValueError:
            pass

        if value.lower() in ("true", "yes", "on"):
            return True
        elif value.lower() in ("false", "no", "off"):
            return False

        return value


def load_config_from_file(
    config_file: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> RDNSServerConfig:
    """Convenience function to load configuration.

    Args:
        config_file: Path to configuration file
        overrides: Values applied on top of file and environment

    Returns:
        Loaded configuration
    """
    return ConfigLoader(config_file).load_config(overrides)
