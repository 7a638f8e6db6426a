"""
rdns Server Core Module

This module exports the zone codec, the query dispatcher and the UDP server.
"""

from .dispatcher import DispatchResult, QueryDispatcher
from .matchers import NameMatchers
from .message import (
    DNSClass,
    DNSHeader,
    DNSMessage,
    DNSOpcode,
    DNSQuestion,
    DNSRecordType,
    DNSResourceRecord,
    DNSResponseCode,
    create_aaaa_record,
    create_ns_record,
    create_ptr_record,
)
from .server import RDNSServer
from .synthesizer import AAAAAnswer, NSAnswer, PTRAnswer, RecordSynthesizer

__all__ = [
    # Main server
    "RDNSServer",
    # Zone codec
    "NameMatchers",
    "RecordSynthesizer",
    "NSAnswer",
    "PTRAnswer",
    "AAAAAnswer",
    "QueryDispatcher",
    "DispatchResult",
    # Message components
    "DNSMessage",
    "DNSQuestion",
    "DNSResourceRecord",
    "DNSHeader",
    # Enums
    "DNSRecordType",
    "DNSClass",
    "DNSResponseCode",
    "DNSOpcode",
    # Helper functions
    "create_aaaa_record",
    "create_ns_record",
    "create_ptr_record",
]
