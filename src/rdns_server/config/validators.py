"""
Configuration Validators

This module provides validation functions for rdns server configuration parameters.
"""

import ipaddress
from pathlib import Path
from typing import Optional, Tuple

# RFC 2181 section 8
MAX_TTL = 2**31 - 1


def validate_bind_address(address: str) -> bool:
    """Validate bind address format."""
    if not address:
        return False

    try:
        ipaddress.ip_address(address)
        return True
    except ValueError:
        return False


def validate_boolean(value) -> bool:
    """Validate boolean value."""
    return isinstance(value, bool)


def validate_file_path(path: Optional[str]) -> bool:
    """Validate file path format. An empty path disables the file."""
    if not path:
        return True

    try:
        Path(path)
        return True
    except (TypeError, ValueError):
        return False


def validate_log_level(level: str) -> bool:
    """Validate log level."""
    valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    return isinstance(level, str) and level.upper() in valid_levels


def validate_positive_int(value: int) -> bool:
    """Validate positive integer."""
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def validate_port(port: int) -> bool:
    """Validate port number."""
    return isinstance(port, int) and not isinstance(port, bool) and 1 <= port <= 65535


def validate_ttl(ttl: int) -> bool:
    """Validate a record TTL in seconds."""
    return isinstance(ttl, int) and not isinstance(ttl, bool) and 0 <= ttl <= MAX_TTL


def validate_ipv6_network(network: str) -> bool:
    """Validate IPv6 network CIDR format."""
    try:
        ipaddress.IPv6Network(network, strict=False)
        return True
    except (ValueError, TypeError):
        return False


def validate_byte_aligned(prefixlen: int) -> bool:
    """Check that a mask length falls on a whole-byte boundary."""
    return prefixlen % 8 == 0


def parse_listen_address(value: str, default_port: int = 53) -> Tuple[str, int]:
    """Split a listen address into host and port.

    Accepts ``host:port``, ``[v6]:port``, ``:port``, a bare host or a bare
    IPv6 address. The port may also be the service name ``dns``.

    Raises:
        ValueError: If the address cannot be parsed
    """
    if not value:
        raise ValueError("Empty listen address")

    host, port_str = value, ""
    if value.startswith("["):
        end = value.find("]")
        if end < 0:
            raise ValueError(f"Invalid listen address: {value}")
        host = value[1:end]
        rest = value[end + 1 :]
        if rest:
            if not rest.startswith(":"):
                raise ValueError(f"Invalid listen address: {value}")
            port_str = rest[1:]
    elif value.count(":") == 1:
        host, port_str = value.split(":")

    if not host:
        host = "::"

    if not port_str:
        port = default_port
    elif port_str == "dns":
        port = 53
    else:
        try:
            port = int(port_str)
        except ValueError:
            raise ValueError(f"Invalid listen port: {port_str}")

    if not validate_bind_address(host):
        raise ValueError(f"Invalid listen host: {host}")
    if not validate_port(port):
        raise ValueError(f"Invalid listen port: {port}")

    return host, port
