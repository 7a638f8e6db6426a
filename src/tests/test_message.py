"""Tests for the DNS message codec."""

import struct

import dns.flags
import dns.message
import dns.rdatatype
import pytest

from rdns_server.core.message import (
    DNSClass,
    DNSHeader,
    DNSMessage,
    DNSQuestion,
    DNSRecordType,
    DNSResponseCode,
    create_aaaa_record,
    create_ns_record,
    create_ptr_record,
    decode_name,
    encode_name,
)


class TestDNSHeader:
    def test_header_creation(self):
        header = DNSHeader(
            transaction_id=12345,
            qr=True,
            rd=True,
            aa=True,
            rcode=DNSResponseCode.NXDOMAIN,
            question_count=1,
        )

        assert header.transaction_id == 12345
        assert header.flags == 0x8503

    def test_flags_follow_later_changes(self):
        header = DNSHeader(transaction_id=1, qr=True)
        header.aa = True
        header.rcode = DNSResponseCode.NXDOMAIN

        data = header.to_bytes()

        assert struct.unpack("!H", data[2:4])[0] == 0x8403

    def test_parse(self):
        data = struct.pack("!HHHHHH", 7, 0x0100, 1, 0, 0, 0)
        header = DNSHeader.from_bytes(data)

        assert header.transaction_id == 7
        assert header.rd is True
        assert header.qr is False
        assert header.question_count == 1

    def test_too_short(self):
        with pytest.raises(ValueError, match="too short"):
            DNSHeader.from_bytes(b"\x00" * 11)


class TestNames:
    def test_encode(self):
        assert encode_name("ns.example.com.") == b"\x02ns\x07example\x03com\x00"
        assert encode_name("ns.example.com") == b"\x02ns\x07example\x03com\x00"
        assert encode_name(".") == b"\x00"

    def test_encode_rejects_empty_label(self):
        with pytest.raises(ValueError, match="Empty label"):
            encode_name("a..b.")

    def test_encode_rejects_long_label(self):
        with pytest.raises(ValueError, match="Label too long"):
            encode_name("a" * 64 + ".")

    def test_decode_compression(self):
        data = b"\x07example\x03com\x00" + b"\x02ns\xc0\x00"
        name, offset = decode_name(data, 13)
        assert name == "ns.example.com."
        assert offset == len(data)

    def test_decode_pointer_loop(self):
        with pytest.raises(ValueError, match="compression loop"):
            decode_name(b"\xc0\x00", 0)

    def test_decode_escapes_dot_in_label(self):
        assert decode_name(b"\x03a.b\x00", 0) == ("a\\.b.", 5)

    def test_decode_escapes_non_ascii(self):
        name, _ = decode_name(b"\x01\xff\x02\xc3\xa9\x03ip6\x04arpa\x00", 0)
        assert name == "\\255.\\195\\169.ip6.arpa."

    def test_decode_escapes_specials(self):
        name, _ = decode_name(b'\x04a b\\\x02"@\x00', 0)
        assert name == 'a\\032b\\\\.\\"\\@.'

    def test_escaped_names_encode_to_original_bytes(self):
        for wire in (b"\x03a.b\x00", b"\x01\xff\x03ip6\x04arpa\x00", b'\x04a b\\\x00'):
            name, _ = decode_name(wire, 0)
            assert encode_name(name) == wire

    def test_encode_rejects_bad_escape(self):
        with pytest.raises(ValueError, match="Invalid escape"):
            encode_name("\\25.ip6.arpa.")
        with pytest.raises(ValueError, match="Invalid escape"):
            encode_name("\\256.ip6.arpa.")
        with pytest.raises(ValueError, match="Trailing backslash"):
            encode_name("a\\")

    def test_decode_truncated(self):
        with pytest.raises(ValueError):
            decode_name(b"\x05ab", 0)


class TestRecords:
    def test_ns_record(self):
        record = create_ns_record("f.e.ip6.arpa.", "ns.example.com.", 3600)
        assert record.rtype == DNSRecordType.NS
        assert record.rclass == DNSClass.IN
        assert record.get_readable_rdata() == "ns.example.com."

    def test_ptr_record(self):
        record = create_ptr_record("1.ip6.arpa.", "ip-1.v6.example.com.", 60)
        assert record.ttl == 60
        assert record.get_readable_rdata() == "ip-1.v6.example.com."

    def test_aaaa_record_from_text_and_bytes(self):
        from_text = create_aaaa_record("ip-1.v6.example.com.", "fe80::1")
        from_bytes = create_aaaa_record(
            "ip-1.v6.example.com.", bytes.fromhex("fe80" + "0" * 27 + "1")
        )
        assert from_text == from_bytes
        assert from_text.get_readable_rdata() == "fe80::1"

    def test_aaaa_record_wrong_length(self):
        with pytest.raises(ValueError, match="16 bytes"):
            create_aaaa_record("x.", b"\x00" * 4)


class TestDNSMessage:
    def test_parse_dnspython_query(self):
        wire = dns.message.make_query("ip-1.v6.example.com.", "AAAA").to_wire()
        message = DNSMessage.from_bytes(wire)

        assert message.is_query()
        assert len(message.questions) == 1
        assert message.questions[0].name == "ip-1.v6.example.com."
        assert message.questions[0].qtype == DNSRecordType.AAAA
        assert message.questions[0].qclass == DNSClass.IN

    def test_response_readable_by_dnspython(self):
        query = DNSMessage(
            header=DNSHeader(transaction_id=99, rd=True),
            questions=[DNSQuestion("ip-1.v6.example.com.", DNSRecordType.AAAA)],
            answers=[],
            authority=[],
            additional=[],
        )
        response = query.create_response()
        response.header.aa = True
        response.answers.append(
            create_aaaa_record("ip-1.v6.example.com.", "fe80::1", 3600)
        )

        parsed = dns.message.from_wire(response.to_bytes())

        assert parsed.id == 99
        assert parsed.flags & dns.flags.QR
        assert parsed.flags & dns.flags.AA
        assert not parsed.flags & dns.flags.RA
        [rrset] = parsed.answer
        assert rrset.rdtype == dns.rdatatype.AAAA
        assert rrset.ttl == 3600
        assert rrset[0].address == "fe80::1"

    def test_roundtrip_counts(self):
        message = DNSMessage(
            header=DNSHeader(transaction_id=1, qr=True),
            questions=[DNSQuestion("a.ip6.arpa.", DNSRecordType.NS)],
            answers=[],
            authority=[create_ns_record("a.ip6.arpa.", "ns.example.com.", 10)],
            additional=[],
        )

        parsed = DNSMessage.from_bytes(message.to_bytes())

        assert parsed.header.authority_count == 1
        assert parsed.authority[0].get_readable_rdata() == "ns.example.com."
        assert parsed.is_response()

    def test_create_response_echoes_query(self):
        query = DNSMessage(
            header=DNSHeader(transaction_id=5, rd=False, opcode=0),
            questions=[DNSQuestion("x.", DNSRecordType.PTR)],
            answers=[],
            authority=[],
            additional=[],
        )
        response = query.create_response(DNSResponseCode.NXDOMAIN)

        assert response.header.transaction_id == 5
        assert response.header.rd is False
        assert response.header.ra is False
        assert response.header.rcode == DNSResponseCode.NXDOMAIN
        assert response.questions == query.questions
        assert response.questions is not query.questions
