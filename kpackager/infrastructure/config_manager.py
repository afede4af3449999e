#!/usr/bin/env python3
"""Layered configuration for kpackager.

Configuration is assembled from layers, lowest precedence first:
1. Compiled defaults
2. System config
3. Project config file (kpackager.yaml)
4. Environment variables (KPACKAGER_*)
5. Command-line arguments
6. Runtime updates

Layers are deep-merged: nested mappings combine key by key, while lists
(archives, patterns, exclusions) are replaced wholesale by the higher layer.

Example:
    >>> config = ConfigManager()
    >>> config.load_file("kpackager.yaml")
    >>> config.get("kpackager.package.name", default="defaultpkg")
"""

import copy
import os
import threading
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

import yaml

from kpackager.core.constants import DEFAULT_CONFIG, ConfigKey, ErrorCode

ENV_PREFIX = "KPACKAGER_"

# Separator for list values given through the environment
ENV_LIST_SEPARATOR = ","


class ConfigSource(Enum):
    """Configuration layers in precedence order."""

    COMPILED_DEFAULTS = 1
    SYSTEM_CONFIG = 2
    USER_CONFIG = 3
    ENVIRONMENT = 4
    CLI_ARGS = 5
    RUNTIME = 6


class ConfigError(Exception):
    """Configuration could not be loaded."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.INVALID_INPUT):
        self.message = message
        self.error_code = error_code
        super().__init__(message)


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    """Merge override into a copy of base; lists and scalars are replaced."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(merged.get(key), dict) and isinstance(value, dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _lookup(config: Mapping[str, Any], dotted_key: str) -> Optional[Any]:
    current: Any = config
    for part in dotted_key.split("."):
        if not isinstance(current, dict) or part not in current:
            return None
        current = current[part]
    return current


def _section_paths(
    section: Mapping[str, Any], prefix: Tuple[str, ...] = ()
) -> Iterator[Tuple[Tuple[str, ...], Any]]:
    """Yield (key path, default value) for every leaf of a defaults section."""
    for key, value in section.items():
        if isinstance(value, dict):
            yield from _section_paths(value, prefix + (key,))
        else:
            yield prefix + (key,), value


def _env_name(path: Tuple[str, ...]) -> str:
    return ENV_PREFIX + "_".join(path).upper()


def parse_env_value(value: str, default: Any = None) -> Any:
    """Convert an environment string to the type of the key's default value.

    Keys whose default is a list take comma-separated values. Bool defaults
    accept true/yes/false/no and numeric defaults are converted. Keys with
    a string or unset (None) default keep the raw string.

    Args:
        value: Raw environment value
        default: Compiled default for the key, if any

    Returns:
        Parsed value

    Raises:
        ConfigError: If the value does not fit the default's type
    """
    if isinstance(default, list):
        return [item.strip() for item in value.split(ENV_LIST_SEPARATOR) if item.strip()]

    if isinstance(default, bool):
        lowered = value.lower()
        if lowered in ("true", "yes"):
            return True
        if lowered in ("false", "no"):
            return False
        raise ConfigError(f"Expected a boolean, got {value!r}")

    if isinstance(default, (int, float)):
        try:
            return type(default)(value)
        except ValueError:
            raise ConfigError(f"Expected a {type(default).__name__}, got {value!r}")

    return value


class ConfigManager:
    """Thread-safe layered configuration.

    Each ConfigSource holds one nested dict; reads merge the layers on demand.
    """

    def __init__(self, config_file: Optional[str] = None, load_environment: bool = True):
        """Initialize configuration manager.

        Args:
            config_file: Optional project config file to load
            load_environment: Whether to read KPACKAGER_* variables
        """
        self._lock = threading.RLock()
        self._layers: Dict[ConfigSource, Dict[str, Any]] = {
            ConfigSource.COMPILED_DEFAULTS: copy.deepcopy(DEFAULT_CONFIG),
        }

        if config_file:
            self.load_file(config_file)

        if load_environment:
            self.load_environment()

    def load_file(self, file_path: str, source: ConfigSource = ConfigSource.USER_CONFIG) -> None:
        """Load one layer from a YAML file.

        Args:
            file_path: Path to YAML config file
            source: Layer to replace

        Raises:
            ConfigError: If the file cannot be read or is not a YAML mapping
        """
        path = Path(file_path).expanduser().resolve()

        if not path.exists():
            raise ConfigError(f"Config file not found: {file_path}", ErrorCode.NOT_FOUND)

        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"YAML parse error in {file_path}: {e}")
        except OSError as e:
            raise ConfigError(f"Error loading config {file_path}: {e}", ErrorCode.INTERNAL_ERROR)

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError(f"Invalid config format in {file_path}: expected a mapping")

        with self._lock:
            self._layers[source] = data

    def load_dict(
        self, config_data: Dict[str, Any], source: ConfigSource = ConfigSource.RUNTIME
    ) -> None:
        """Replace one layer with a copy of config_data."""
        with self._lock:
            self._layers[source] = copy.deepcopy(config_data)

    def load_environment(self, environ: Optional[Mapping[str, str]] = None) -> List[str]:
        """Load the environment layer from KPACKAGER_* variables.

        Variable names are derived from the default configuration keys, e.g.
        ``KPACKAGER_CONFIG_ENTRY``, ``KPACKAGER_PACKAGE_NAME``,
        ``KPACKAGER_LOGGING_LEVEL``, ``KPACKAGER_PATTERNS=**.drl,**.bpmn``.
        Unknown KPACKAGER_* variables are ignored.

        Args:
            environ: Variables to read (defaults to os.environ)

        Returns:
            Names of the variables that were applied
        """
        environ = os.environ if environ is None else environ
        section: Dict[str, Any] = {}
        applied = []

        for path, default in _section_paths(DEFAULT_CONFIG[ConfigKey.ROOT]):
            name = _env_name(path)
            if name not in environ:
                continue

            current = section
            for part in path[:-1]:
                current = current.setdefault(part, {})
            value = parse_env_value(environ[name], default)
            if path == (ConfigKey.ARCHIVES,):
                value = [{ConfigKey.ARCHIVE_PATH: archive} for archive in value]
            current[path[-1]] = value
            applied.append(name)

        with self._lock:
            if section:
                self._layers[ConfigSource.ENVIRONMENT] = {ConfigKey.ROOT: section}
            else:
                self._layers.pop(ConfigSource.ENVIRONMENT, None)

        return applied

    def _ordered_layers(self, reverse: bool = False) -> List[Dict[str, Any]]:
        sources = sorted(self._layers, key=lambda s: s.value, reverse=reverse)
        return [self._layers[source] for source in sources]

    def get(self, key: str, default: Any = None) -> Any:
        """Get a value by dotted key from the highest layer that sets it.

        Args:
            key: Dot-separated key path (e.g., "kpackager.package.name")
            default: Value returned when no layer sets the key

        Returns:
            Configuration value or default
        """
        with self._lock:
            for layer in self._ordered_layers(reverse=True):
                value = _lookup(layer, key)
                if value is not None:
                    return value
        return default

    def set(self, key: str, value: Any, source: ConfigSource = ConfigSource.RUNTIME) -> None:
        """Set a value by dotted key in one layer."""
        parts = key.split(".")
        with self._lock:
            current = self._layers.setdefault(source, {})
            for part in parts[:-1]:
                current = current.setdefault(part, {})
            current[parts[-1]] = value

    def get_all(self) -> Dict[str, Any]:
        """Merge every layer, lowest precedence first."""
        merged: Dict[str, Any] = {}
        with self._lock:
            for layer in self._ordered_layers():
                merged = deep_merge(merged, layer)
        return merged

    def get_section(self) -> Dict[str, Any]:
        """Get the merged ``kpackager`` section."""
        return self.get_all().get(ConfigKey.ROOT, {})

    def clear(self, source: Optional[ConfigSource] = None) -> None:
        """Drop one layer, or every layer except the compiled defaults."""
        with self._lock:
            if source is ConfigSource.COMPILED_DEFAULTS:
                return
            if source is not None:
                self._layers.pop(source, None)
                return
            for layer in [s for s in self._layers if s is not ConfigSource.COMPILED_DEFAULTS]:
                del self._layers[layer]


_global_config: Optional[ConfigManager] = None


def get_config_manager(config_file: Optional[str] = None) -> ConfigManager:
    """Get the global configuration manager, creating it if needed."""
    global _global_config
    if _global_config is None:
        _global_config = ConfigManager(config_file)
    return _global_config


def set_global_config(config: Optional[ConfigManager]) -> None:
    """Install a configuration manager globally, or reset with None."""
    global _global_config
    _global_config = config
