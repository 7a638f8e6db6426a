"""
Record Synthesizer

Derives NS, PTR and AAAA answers from the query name alone. An address in
the subnet is ``prefix`` followed by the host id; the host id, with leading
zeros trimmed, is the numeric part of the host's forward name.

Every method is a pure function of the zone configuration and its input.
"""

import ipaddress
import logging
from dataclasses import dataclass
from typing import Optional, Union

from ..config.schema import ZoneConfig
from .matchers import REVERSE_SUFFIX, NameMatchers
from .message import (
    DNSRecordType,
    DNSResourceRecord,
    create_aaaa_record,
    create_ns_record,
    create_ptr_record,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NSAnswer:
    """Name server for a reverse zone inside the subnet"""

    target: str
    rtype = DNSRecordType.NS

    def to_record(self, name: str, ttl: int) -> DNSResourceRecord:
        return create_ns_record(name, self.target, ttl)


@dataclass(frozen=True)
class PTRAnswer:
    """Forward name of an address inside the subnet"""

    target: str
    rtype = DNSRecordType.PTR

    def to_record(self, name: str, ttl: int) -> DNSResourceRecord:
        return create_ptr_record(name, self.target, ttl)


@dataclass(frozen=True)
class AAAAAnswer:
    """Address named by a forward name"""

    address: bytes
    rtype = DNSRecordType.AAAA

    @property
    def text(self) -> str:
        return str(ipaddress.IPv6Address(self.address))

    def to_record(self, name: str, ttl: int) -> DNSResourceRecord:
        return create_aaaa_record(name, self.address, ttl)


Answer = Union[NSAnswer, PTRAnswer, AAAAAnswer]


class RecordSynthesizer:
    """Codec between reverse names, forward names and subnet addresses."""

    def __init__(self, zone: ZoneConfig, matchers: Optional[NameMatchers] = None):
        self.zone = zone
        self.matchers = matchers or NameMatchers(zone)

    def _nibbles(self, labels) -> str:
        """Labels in query order to a lowercase nibble string, most significant first."""
        return "".join(labels[::-1]).lower()

    def synthesize_ns(self, name: str) -> Optional[NSAnswer]:
        """NS answer for any reverse name within the subnet's reverse zone."""
        labels = self.matchers.match_zone(name)
        if labels is None:
            return None

        nibbles = self._nibbles(labels)
        if len(nibbles) < len(self.zone.prefix):
            return None
        if not nibbles.startswith(self.zone.prefix):
            return None

        return NSAnswer(target=self.zone.ns_name)

    def synthesize_ptr(self, name: str) -> Optional[PTRAnswer]:
        """PTR answer for the reverse name of an address in the subnet."""
        labels = self.matchers.match_ptr(name)
        if labels is None:
            return None

        nibbles = self._nibbles(labels)
        if not nibbles.startswith(self.zone.prefix):
            return None

        host_id = nibbles[len(self.zone.prefix) :]
        # host id 0 trims to the empty string; kept as is
        trimmed = host_id.lstrip("0")

        return PTRAnswer(
            target=self.zone.host_prefix + trimmed + self.zone.domain_suffix
        )

    def synthesize_aaaa(self, name: str) -> Optional[AAAAAnswer]:
        """AAAA answer for a synthesized forward name."""
        digits = self.matchers.match_aaaa(name)
        if digits is None:
            return None

        padded = digits.rjust(self.zone.host_digits, "0")
        try:
            address = bytes.fromhex(self.zone.prefix + padded)
        except ValueError:
            logger.error(f"Hex decode failed after match for {name!r}")
            return None

        return AAAAAnswer(address=address)

    def contains(self, address: Union[str, ipaddress.IPv6Address]) -> bool:
        """True if ``address`` lies inside the configured subnet."""
        exploded = ipaddress.IPv6Address(address).exploded.replace(":", "")
        return exploded.startswith(self.zone.prefix)

    def reverse_name(
        self, address: Union[str, ipaddress.IPv6Address]
    ) -> Optional[str]:
        """Canonical reverse name of an address in the subnet."""
        if not self.contains(address):
            return None
        nibbles = ipaddress.IPv6Address(address).exploded.replace(":", "")
        return ".".join(nibbles[::-1]) + "." + REVERSE_SUFFIX

    def forward_name(
        self, address: Union[str, ipaddress.IPv6Address]
    ) -> Optional[str]:
        """Synthesized forward name of an address in the subnet."""
        if not self.contains(address):
            return None
        nibbles = ipaddress.IPv6Address(address).exploded.replace(":", "")
        host_id = nibbles[len(self.zone.prefix) :].lstrip("0")
        return self.zone.host_prefix + host_id + self.zone.domain_suffix
