"""
Query Name Matchers

Recognizes the three query-name shapes the zone answers for:

- a reverse name under ``ip6.arpa.`` long enough to lie inside the subnet's
  reverse zone (NS),
- a reverse name naming a full 128-bit address (PTR),
- a forward name ``<host_prefix><hex digits><domain_suffix>`` (AAAA).

Names are split into labels and checked directly; nothing here depends on a
regular expression engine.
"""

import string
from typing import Optional, Tuple

from ..config.schema import ADDRESS_NIBBLES, ZoneConfig

REVERSE_SUFFIX = "ip6.arpa."

HEX_DIGITS = frozenset(string.hexdigits)


def is_hex(text: str) -> bool:
    """True if every character of ``text`` is a hex digit (either case)."""
    return all(c in HEX_DIGITS for c in text)


def split_reverse_name(name: str) -> Optional[Tuple[str, ...]]:
    """Split ``name`` into its nibble labels, in query order.

    Returns None unless ``name`` is zero or more single-hex-digit labels
    followed by ``ip6.arpa.``.
    """
    if not name.endswith(REVERSE_SUFFIX):
        return None

    head = name[: -len(REVERSE_SUFFIX)]
    if not head:
        return ()
    if not head.endswith("."):
        return None

    labels = tuple(head[:-1].split("."))
    for label in labels:
        if len(label) != 1 or label not in HEX_DIGITS:
            return None
    return labels


class NameMatchers:
    """Matchers compiled once from a ZoneConfig.

    Holds no mutable state; one instance is shared by every request.
    """

    def __init__(self, zone: ZoneConfig):
        self.zone = zone
        self.min_zone_labels = len(zone.prefix)
        self.max_host_digits = zone.host_digits

    def match_zone(self, name: str) -> Optional[Tuple[str, ...]]:
        """Match a reverse name with between len(prefix) and 32 nibble labels."""
        labels = split_reverse_name(name)
        if labels is None:
            return None
        if not self.min_zone_labels <= len(labels) <= ADDRESS_NIBBLES:
            return None
        return labels

    def match_ptr(self, name: str) -> Optional[Tuple[str, ...]]:
        """Match a reverse name with exactly 32 nibble labels."""
        labels = split_reverse_name(name)
        if labels is None or len(labels) != ADDRESS_NIBBLES:
            return None
        return labels

    def match_aaaa(self, name: str) -> Optional[str]:
        """Match ``<host_prefix><1..host_digits hex digits><domain_suffix>``.

        Returns the hex digit run as written in the query.
        """
        host_prefix = self.zone.host_prefix
        domain_suffix = self.zone.domain_suffix

        if not name.startswith(host_prefix) or not name.endswith(domain_suffix):
            return None

        start = len(host_prefix)
        end = len(name) - len(domain_suffix)
        digits = name[start:end] if end > start else ""

        if not 1 <= len(digits) <= self.max_host_digits:
            return None
        if not is_hex(digits):
            return None
        return digits
