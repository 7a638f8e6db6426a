"""Tests for the query name matchers."""

import ipaddress

import pytest

from rdns_server.config.schema import ZoneConfig
from rdns_server.core.matchers import NameMatchers, is_hex, split_reverse_name


def reverse(address: str) -> str:
    return ipaddress.IPv6Address(address).reverse_pointer + "."


@pytest.fixture
def matchers():
    return NameMatchers(ZoneConfig())


class TestSplitReverseName:
    def test_full_address(self):
        labels = split_reverse_name(reverse("fe80::1"))
        assert len(labels) == 32
        assert labels[0] == "1"
        assert labels[-4:] == ("0", "8", "e", "f")

    def test_bare_suffix(self):
        assert split_reverse_name("ip6.arpa.") == ()

    def test_requires_trailing_dot(self):
        assert split_reverse_name("1.0.ip6.arpa") is None

    def test_suffix_is_case_sensitive(self):
        assert split_reverse_name("1.0.IP6.ARPA.") is None

    def test_rejects_multi_character_labels(self):
        assert split_reverse_name("10.ip6.arpa.") is None

    def test_rejects_non_hex_labels(self):
        assert split_reverse_name("g.0.ip6.arpa.") is None

    def test_rejects_empty_labels(self):
        assert split_reverse_name("1..0.ip6.arpa.") is None

    def test_rejects_glued_suffix(self):
        assert split_reverse_name("1xip6.arpa.") is None

    def test_uppercase_hex_accepted(self):
        assert split_reverse_name("A.b.ip6.arpa.") == ("A", "b")


def test_is_hex():
    assert is_hex("0123456789abcdefABCDEF")
    assert not is_hex("12g")
    assert not is_hex("1 2")


class TestZoneMatcher:
    def test_minimum_length_is_prefix_length(self, matchers):
        # 16 labels: the /64 reverse zone apex
        apex = "0.0.0.0.0.0.0.0.0.0.0.0.0.8.e.f.ip6.arpa."
        assert len(matchers.match_zone(apex)) == 16
        assert matchers.match_zone(apex.split(".", 1)[1]) is None
        assert matchers.match_zone("8.e.f.ip6.arpa.") is None

    def test_full_address(self, matchers):
        assert len(matchers.match_zone(reverse("fe80::1"))) == 32

    def test_intermediate_length(self, matchers):
        name = "1.0.0.0.0.0.0.0.0.0.0.0.0.0.0.0.0.0.0.0.8.e.f.ip6.arpa."
        assert matchers.match_zone(name) is not None

    def test_more_than_32_labels(self, matchers):
        assert matchers.match_zone("0." + reverse("fe80::1")) is None

    def test_does_not_check_prefix(self, matchers):
        assert matchers.match_zone(reverse("2001:db8::1")) is not None


class TestPTRMatcher:
    def test_exactly_32_labels(self, matchers):
        assert matchers.match_ptr(reverse("fe80::1")) is not None

    def test_31_labels(self, matchers):
        name = reverse("fe80::1").split(".", 1)[1]
        assert matchers.match_ptr(name) is None

    def test_33_labels(self, matchers):
        assert matchers.match_ptr("0." + reverse("fe80::1")) is None

    def test_non_hex(self, matchers):
        name = "x" + reverse("fe80::1")[1:]
        assert matchers.match_ptr(name) is None


class TestAAAAMatcher:
    def test_simple(self, matchers):
        assert matchers.match_aaaa("ip-1.v6.example.com.") == "1"

    def test_keeps_digits_as_written(self, matchers):
        assert matchers.match_aaaa("ip-00Ab.v6.example.com.") == "00Ab"

    def test_maximum_digits(self, matchers):
        assert matchers.match_aaaa("ip-" + "f" * 16 + ".v6.example.com.") == "f" * 16

    def test_too_many_digits(self, matchers):
        assert matchers.match_aaaa("ip-" + "f" * 17 + ".v6.example.com.") is None

    def test_no_digits(self, matchers):
        assert matchers.match_aaaa("ip-.v6.example.com.") is None

    def test_non_hex(self, matchers):
        assert matchers.match_aaaa("ip-12z.v6.example.com.") is None
        assert matchers.match_aaaa("ip-1.2.v6.example.com.") is None

    def test_wrong_prefix_or_suffix(self, matchers):
        assert matchers.match_aaaa("host-1.v6.example.com.") is None
        assert matchers.match_aaaa("ip-1.v6.example.org.") is None
        assert matchers.match_aaaa("ip-1.v6.example.com") is None
        assert matchers.match_aaaa("xip-1.v6.example.com.") is None

    def test_literal_text_is_case_sensitive(self, matchers):
        assert matchers.match_aaaa("IP-1.v6.example.com.") is None
        assert matchers.match_aaaa("ip-1.V6.example.com.") is None

    def test_overlapping_prefix_and_suffix(self):
        matchers = NameMatchers(ZoneConfig(host_prefix="ab", domain_suffix="b."))
        assert matchers.match_aaaa("ab.") is None
        assert matchers.match_aaaa("abb.") is None
        assert matchers.match_aaaa("abcb.") == "c"

    def test_full_length_prefix_never_matches(self):
        matchers = NameMatchers(ZoneConfig(network="fe80::1/128"))
        assert matchers.match_aaaa("ip-1.v6.example.com.") is None
