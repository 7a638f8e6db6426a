"""
DNS Message Codec Module

This module implements RFC 1035 DNS message handling including:
- DNS header parsing/construction
- Question section handling
- Answer/Authority/Additional sections
- Record helpers for the types the server synthesizes (NS, PTR, AAAA)
"""

import logging
import socket
import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, List, Tuple, Union

logger = logging.getLogger(__name__)

# Upper bound on compression pointers followed while decoding one name.
MAX_POINTER_JUMPS = 64

DECIMAL_DIGITS = "0123456789"


class DNSOpcode(IntEnum):
    """DNS Operation Codes"""

    QUERY = 0
    IQUERY = 1
    STATUS = 2
    NOTIFY = 4
    UPDATE = 5


class DNSResponseCode(IntEnum):
    """DNS Response Codes"""

    NOERROR = 0
    FORMERR = 1
    SERVFAIL = 2
    NXDOMAIN = 3
    NOTIMP = 4
    REFUSED = 5


class DNSRecordType(IntEnum):
    """DNS Record Types"""

    A = 1
    NS = 2
    CNAME = 5
    SOA = 6
    PTR = 12
    MX = 15
    TXT = 16
    AAAA = 28
    ANY = 255


class DNSClass(IntEnum):
    """DNS Classes"""

    IN = 1
    CS = 2
    CH = 3
    HS = 4
    ANY = 255


@dataclass
class DNSHeader:
    """DNS Message Header"""

    transaction_id: int
    flags: int = 0
    question_count: int = 0
    answer_count: int = 0
    authority_count: int = 0
    additional_count: int = 0

    # Flag field components
    qr: bool = False  # Query/Response bit
    opcode: int = 0  # Operation code
    aa: bool = False  # Authoritative Answer
    tc: bool = False  # Truncation
    rd: bool = False  # Recursion Desired
    ra: bool = False  # Recursion Available
    z: int = 0  # Reserved
    rcode: int = 0  # Response code

    def __post_init__(self):
        self.flags = self.compose_flags()

    def compose_flags(self) -> int:
        """Pack the individual flag components into the 16-bit flags field"""
        return (
            (int(self.qr) << 15)
            | (self.opcode << 11)
            | (int(self.aa) << 10)
            | (int(self.tc) << 9)
            | (int(self.rd) << 8)
            | (int(self.ra) << 7)
            | (self.z << 4)
            | self.rcode
        )

    @classmethod
    def parse_flags(cls, flags: int) -> Dict[str, Union[bool, int]]:
        """Parse flags field into individual components"""
        return {
            "qr": bool(flags & 0x8000),
            "opcode": (flags >> 11) & 0x0F,
            "aa": bool(flags & 0x0400),
            "tc": bool(flags & 0x0200),
            "rd": bool(flags & 0x0100),
            "ra": bool(flags & 0x0080),
            "z": (flags >> 4) & 0x07,
            "rcode": flags & 0x0F,
        }

    def to_bytes(self) -> bytes:
        """Convert header to bytes"""
        # components may have been changed after construction
        self.flags = self.compose_flags()
        return struct.pack(
            "!HHHHHH",
            self.transaction_id,
            self.flags,
            self.question_count,
            self.answer_count,
            self.authority_count,
            self.additional_count,
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> "DNSHeader":
        """Parse header from bytes"""
        if len(data) < 12:
            raise ValueError("Invalid DNS header: too short")

        tid, flags, qcount, acount, authcount, addcount = struct.unpack(
            "!HHHHHH", data[:12]
        )

        return cls(
            transaction_id=tid,
            flags=flags,
            question_count=qcount,
            answer_count=acount,
            authority_count=authcount,
            additional_count=addcount,
            **cls.parse_flags(flags),
        )


# Label bytes written as "\<char>" in presentation form.
ESCAPED_CHARS = b'"().;\\@$'


def escape_label(raw: bytes) -> str:
    """Presentation form of one wire label.

    Special characters get a backslash, bytes outside printable ASCII are
    written as ``\\DDD``.
    """
    text = []
    for byte in raw:
        if byte in ESCAPED_CHARS:
            text.append("\\" + chr(byte))
        elif 0x20 < byte < 0x7F:
            text.append(chr(byte))
        else:
            text.append(f"\\{byte:03d}")
    return "".join(text)


def split_name(name: str) -> List[bytes]:
    """Split a presentation-form name into wire labels, undoing escapes."""
    labels = []
    label = bytearray()
    i = 0
    while i < len(name):
        char = name[i]
        if char == "\\":
            digits = name[i + 1 : i + 4]
            if digits[:1] and digits[:1] in DECIMAL_DIGITS:
                if len(digits) != 3 or not all(d in DECIMAL_DIGITS for d in digits):
                    raise ValueError(f"Invalid escape in name: {name!r}")
                value = int(digits)
                if value > 255:
                    raise ValueError(f"Invalid escape in name: {name!r}")
                label.append(value)
                i += 4
            elif digits:
                label.extend(digits[0].encode("ascii"))
                i += 2
            else:
                raise ValueError(f"Trailing backslash in name: {name!r}")
        elif char == ".":
            labels.append(bytes(label))
            label = bytearray()
            i += 1
        else:
            label.extend(char.encode("ascii"))
            i += 1
    if label:
        labels.append(bytes(label))
    return labels


def encode_name(name: str) -> bytes:
    """Encode domain name using uncompressed DNS label encoding"""
    if name in (".", ""):
        return b"\x00"

    result = b""
    for label_bytes in split_name(name):
        if not label_bytes:
            raise ValueError(f"Empty label in name: {name!r}")
        if len(label_bytes) > 63:
            raise ValueError(f"Label too long: {escape_label(label_bytes)}")
        result += struct.pack("!B", len(label_bytes)) + label_bytes
    result += b"\x00"
    if len(result) > 255:
        raise ValueError(f"Name too long: {name}")
    return result


def decode_name(data: bytes, offset: int) -> Tuple[str, int]:
    """Decode DNS name with compression support.

    Returns the name in presentation form with a trailing dot and the offset
    just past the name in the original (non-jumped) position.
    """
    labels = []
    original_offset = offset
    jumped = False
    jumps = 0

    while True:
        if offset >= len(data):
            raise ValueError("Invalid name: offset out of bounds")

        length = data[offset]

        if length == 0:
            offset += 1
            break
        elif (length & 0xC0) == 0xC0:
            if offset + 1 >= len(data):
                raise ValueError("Invalid compression pointer")
            jumps += 1
            if jumps > MAX_POINTER_JUMPS:
                raise ValueError("Invalid name: compression loop")
            pointer = ((length & 0x3F) << 8) | data[offset + 1]
            if not jumped:
                original_offset = offset + 2
                jumped = True
            offset = pointer
        elif length & 0xC0:
            raise ValueError(f"Unsupported label type: {length:#04x}")
        else:
            if offset + length + 1 > len(data):
                raise ValueError("Invalid label: length exceeds data")
            labels.append(escape_label(data[offset + 1 : offset + 1 + length]))
            offset += length + 1

    name = ".".join(labels) + "." if labels else "."
    return name, original_offset if jumped else offset


@dataclass
class DNSQuestion:
    """DNS Question Section"""

    name: str
    qtype: int
    qclass: int = DNSClass.IN

    def to_bytes(self) -> bytes:
        """Convert question to bytes"""
        return encode_name(self.name) + struct.pack("!HH", self.qtype, self.qclass)

    @classmethod
    def parse(cls, data: bytes, offset: int) -> Tuple["DNSQuestion", int]:
        """Parse question from bytes at given offset"""
        name, new_offset = decode_name(data, offset)
        if new_offset + 4 > len(data):
            raise ValueError("Invalid question: not enough data for type and class")

        qtype, qclass = struct.unpack("!HH", data[new_offset : new_offset + 4])
        return cls(name=name, qtype=qtype, qclass=qclass), new_offset + 4


@dataclass
class DNSResourceRecord:
    """DNS Resource Record"""

    name: str
    rtype: int
    rclass: int
    ttl: int
    rdata: bytes

    def to_bytes(self) -> bytes:
        """Convert resource record to bytes"""
        header = struct.pack(
            "!HHIH", self.rtype, self.rclass, self.ttl, len(self.rdata)
        )
        return encode_name(self.name) + header + self.rdata

    @classmethod
    def parse(cls, data: bytes, offset: int) -> Tuple["DNSResourceRecord", int]:
        """Parse resource record from bytes at given offset"""
        name, new_offset = decode_name(data, offset)

        if new_offset + 10 > len(data):
            raise ValueError("Invalid resource record: not enough data for header")

        rtype, rclass, ttl, rdlength = struct.unpack(
            "!HHIH", data[new_offset : new_offset + 10]
        )
        new_offset += 10

        if new_offset + rdlength > len(data):
            raise ValueError("Invalid resource record: not enough data for rdata")

        rdata = data[new_offset : new_offset + rdlength]

        return (
            cls(name=name, rtype=rtype, rclass=rclass, ttl=ttl, rdata=rdata),
            new_offset + rdlength,
        )

    def get_readable_rdata(self) -> str:
        """Get human-readable representation of rdata"""
        try:
            if self.rtype == DNSRecordType.AAAA:
                return socket.inet_ntop(socket.AF_INET6, self.rdata)
            elif self.rtype in (DNSRecordType.NS, DNSRecordType.PTR):
                name, _ = decode_name(self.rdata, 0)
                return name
            else:
                return self.rdata.hex()
        except (ValueError, UnicodeDecodeError) as e:
            logger.warning(f"Failed to parse rdata for type {self.rtype}: {e}")
            return self.rdata.hex()


@dataclass
class DNSMessage:
    """Complete DNS Message"""

    header: DNSHeader
    questions: List[DNSQuestion]
    answers: List[DNSResourceRecord]
    authority: List[DNSResourceRecord]
    additional: List[DNSResourceRecord]

    def to_bytes(self) -> bytes:
        """Convert entire message to bytes"""
        self.header.question_count = len(self.questions)
        self.header.answer_count = len(self.answers)
        self.header.authority_count = len(self.authority)
        self.header.additional_count = len(self.additional)

        result = self.header.to_bytes()

        for question in self.questions:
            result += question.to_bytes()

        for section in (self.answers, self.authority, self.additional):
            for record in section:
                result += record.to_bytes()

        return result

    @classmethod
    def from_bytes(cls, data: bytes) -> "DNSMessage":
        """Parse complete DNS message from bytes"""
        if len(data) < 12:
            raise ValueError("Invalid DNS message: too short")

        header = DNSHeader.from_bytes(data)
        offset = 12

        questions = []
        for _ in range(header.question_count):
            question, offset = DNSQuestion.parse(data, offset)
            questions.append(question)

        sections = []
        for count in (
            header.answer_count,
            header.authority_count,
            header.additional_count,
        ):
            records = []
            for _ in range(count):
                record, offset = DNSResourceRecord.parse(data, offset)
                records.append(record)
            sections.append(records)

        return cls(
            header=header,
            questions=questions,
            answers=sections[0],
            authority=sections[1],
            additional=sections[2],
        )

    def is_query(self) -> bool:
        """Check if this is a query message"""
        return not self.header.qr

    def is_response(self) -> bool:
        """Check if this is a response message"""
        return self.header.qr

    def create_response(self, rcode: int = DNSResponseCode.NOERROR) -> "DNSMessage":
        """Create a response message based on this query.

        The transaction id, opcode and RD bit are echoed; recursion is never
        offered.
        """
        response_header = DNSHeader(
            transaction_id=self.header.transaction_id,
            qr=True,
            opcode=self.header.opcode,
            rd=self.header.rd,
            rcode=rcode,
        )

        return DNSMessage(
            header=response_header,
            questions=self.questions.copy(),
            answers=[],
            authority=[],
            additional=[],
        )


def create_ns_record(name: str, target: str, ttl: int = 300) -> DNSResourceRecord:
    """Create an NS record"""
    return DNSResourceRecord(
        name=name,
        rtype=DNSRecordType.NS,
        rclass=DNSClass.IN,
        ttl=ttl,
        rdata=encode_name(target),
    )


def create_ptr_record(name: str, target: str, ttl: int = 300) -> DNSResourceRecord:
    """Create a PTR record"""
    return DNSResourceRecord(
        name=name,
        rtype=DNSRecordType.PTR,
        rclass=DNSClass.IN,
        ttl=ttl,
        rdata=encode_name(target),
    )


def create_aaaa_record(
    name: str, address: Union[str, bytes], ttl: int = 300
) -> DNSResourceRecord:
    """Create an AAAA record from presentation text or 16 raw bytes"""
    if isinstance(address, str):
        rdata = socket.inet_pton(socket.AF_INET6, address)
    else:
        rdata = bytes(address)
    if len(rdata) != 16:
        raise ValueError(f"AAAA address must be 16 bytes, got {len(rdata)}")
    return DNSResourceRecord(
        name=name, rtype=DNSRecordType.AAAA, rclass=DNSClass.IN, ttl=ttl, rdata=rdata
    )
