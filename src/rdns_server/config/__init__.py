"""
rdns Server Configuration

Configuration schema and loader for the rdns server.
"""

from .loader import ConfigLoader, load_config_from_file
from .schema import (
    LoggingConfig,
    RDNSServerConfig,
    ServerConfig,
    ZoneConfig,
    create_default_config,
)

__all__ = [
    "ConfigLoader",
    "load_config_from_file",
    "LoggingConfig",
    "RDNSServerConfig",
    "ServerConfig",
    "ZoneConfig",
    "create_default_config",
]
