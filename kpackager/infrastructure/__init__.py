"""kpackager Infrastructure Layer.

This layer provides core services used by the resolver and the CLI:
- ConfigManager: Hierarchical YAML configuration
- Logger: Structured logging system
"""

from .config_manager import ConfigError
from .config_manager import ConfigManager as Config
from .config_manager import ConfigSource, get_config_manager, set_global_config
from .logger import ContextFormatter, Logger, LogLevel, get_logger, set_global_logger

__all__ = [
    # Logger exports
    "ContextFormatter",
    "Logger",
    "LogLevel",
    "get_logger",
    "set_global_logger",
    # ConfigManager exports
    "ConfigSource",
    "ConfigError",
    "Config",
    "get_config_manager",
    "set_global_config",
]
