"""
rdns Server Configuration Schema

Configuration sections for the listener, the synthesized zone and logging.
Every section validates itself on construction; an invalid value raises
ValueError before the server binds a socket.
"""

import ipaddress
from dataclasses import dataclass, field

from .validators import (
    validate_bind_address,
    validate_boolean,
    validate_byte_aligned,
    validate_file_path,
    validate_ipv6_network,
    validate_log_level,
    validate_port,
    validate_positive_int,
    validate_ttl,
)

# Nibbles in a full IPv6 address.
ADDRESS_NIBBLES = 32


@dataclass
class ServerConfig:
    """Server configuration section."""

    bind_address: str = "::"
    dns_port: int = 53

    def __post_init__(self) -> None:
        """Validate server configuration."""
        if not validate_bind_address(self.bind_address):
            raise ValueError(f"Invalid bind address: {self.bind_address}")

        if not validate_port(self.dns_port):
            raise ValueError(f"Invalid DNS port: {self.dns_port}")


@dataclass(frozen=True)
class ZoneConfig:
    """The synthesized zone.

    ``prefix`` is derived from ``network``: the lowercase hex encoding of the
    network's whole bytes. Instances are immutable and can be shared freely
    between concurrent request handlers.
    """

    network: str = "fe80::/64"
    host_prefix: str = "ip-"
    domain_suffix: str = ".v6.example.com."
    ns_name: str = "ns.example.com."
    ttl: int = 3600
    prefix: str = field(init=False, repr=False, compare=False, default="")

    def __post_init__(self) -> None:
        """Validate zone configuration and derive the nibble prefix."""
        if not validate_ipv6_network(self.network):
            raise ValueError(f"Invalid IPv6 network: {self.network}")

        network = ipaddress.IPv6Network(self.network, strict=False)
        if not validate_byte_aligned(network.prefixlen):
            raise ValueError(
                f"Network mask must be a multiple of 8: {self.network}"
            )

        if not isinstance(self.host_prefix, str):
            raise ValueError(f"Host prefix must be a string: {self.host_prefix!r}")

        if not isinstance(self.domain_suffix, str):
            raise ValueError(
                f"Domain suffix must be a string: {self.domain_suffix!r}"
            )

        if not isinstance(self.ns_name, str) or not self.ns_name:
            raise ValueError(f"Invalid name server: {self.ns_name!r}")

        if not validate_ttl(self.ttl):
            raise ValueError(f"Invalid TTL: {self.ttl}")

        prefix = network.network_address.packed[: network.prefixlen // 8].hex()
        object.__setattr__(self, "prefix", prefix)

    @property
    def host_digits(self) -> int:
        """Number of nibbles that identify a host inside the subnet."""
        return ADDRESS_NIBBLES - len(self.prefix)


@dataclass
class LoggingConfig:
    """Logging configuration section."""

    level: str = "INFO"
    format: str = "detailed"
    file: str = ""
    max_size_mb: int = 100
    backup_count: int = 5
    enable_request_logging: bool = True

    def __post_init__(self) -> None:
        """Validate logging configuration."""
        if not validate_log_level(self.level):
            raise ValueError(f"Invalid log level: {self.level}")

        if self.format not in ["simple", "detailed", "structured"]:
            raise ValueError(f"Invalid log format: {self.format}")

        if not validate_file_path(self.file):
            raise ValueError(f"Invalid log file path: {self.file}")

        if not validate_positive_int(self.max_size_mb):
            raise ValueError(f"Max size MB must be positive: {self.max_size_mb}")

        if not validate_positive_int(self.backup_count):
            raise ValueError(f"Backup count must be positive: {self.backup_count}")

        if not validate_boolean(self.enable_request_logging):
            raise ValueError(
                f"Enable request logging must be boolean: {self.enable_request_logging}"
            )


@dataclass
class RDNSServerConfig:
    """Main rdns server configuration."""

    server: ServerConfig = field(default_factory=ServerConfig)
    zone: ZoneConfig = field(default_factory=ZoneConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def create_default_config() -> RDNSServerConfig:
    """Create a default configuration instance."""
    return RDNSServerConfig()
