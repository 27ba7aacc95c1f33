import pytest

from rtxconf.models import AddressRange, NetworkSpec
from rtxconf.notation import (
    format_duration, format_network, is_ipv4, is_ipv6, mask_to_prefix_len,
    optional_int, parse_duration, parse_network, parse_on_off, parse_range,
    prefix_len_to_mask, split_csv,
)


class TestMaskConversion:

    @pytest.mark.parametrize("prefix_len", range(33))
    def test_prefix_round_trip(self, prefix_len):
        assert mask_to_prefix_len(prefix_len_to_mask(prefix_len)) == prefix_len

    @pytest.mark.parametrize("mask", ["255.255.255.0", "255.255.0.0", "255.255.255.252", "0.0.0.0"])
    def test_mask_round_trip(self, mask):
        assert prefix_len_to_mask(mask_to_prefix_len(mask)) == mask

    def test_known_values(self):
        assert prefix_len_to_mask(24) == "255.255.255.0"
        assert prefix_len_to_mask(32) == "255.255.255.255"
        assert prefix_len_to_mask(0) == "0.0.0.0"

    @pytest.mark.parametrize("mask", ["255.0.255.0", "0.255.255.255", "255.255.255.1"])
    def test_non_contiguous_mask_is_sentinel(self, mask):
        assert mask_to_prefix_len(mask) == -1

    def test_garbage_mask_is_sentinel(self):
        assert mask_to_prefix_len("not-a-mask") == -1

    @pytest.mark.parametrize("prefix_len", [-1, 33])
    def test_prefix_out_of_range(self, prefix_len):
        with pytest.raises(ValueError):
            prefix_len_to_mask(prefix_len)


class TestNetworkNotation:

    def test_default_alias_equivalence(self):
        assert parse_network("default") == parse_network("0.0.0.0/0")
        assert parse_network("default") == parse_network("0.0.0.0/0.0.0.0")
        assert parse_network("default").is_default

    def test_cidr(self):
        spec = parse_network("10.0.0.0/8")
        assert spec == NetworkSpec(address="10.0.0.0", mask="255.0.0.0")
        assert spec.prefix_len == 8

    def test_dotted_mask_kept_verbatim(self):
        spec = parse_network("10.0.0.0/255.0.255.0")
        assert spec.mask == "255.0.255.0"
        assert spec.prefix_len == -1

    def test_format_prefers_default_then_cidr(self):
        assert format_network(NetworkSpec("0.0.0.0", "0.0.0.0")) == "default"
        assert format_network(NetworkSpec("172.16.0.0", "255.255.0.0")) == "172.16.0.0/16"

    def test_format_falls_back_to_dotted(self):
        spec = NetworkSpec("10.0.0.0", "255.0.255.0")
        assert format_network(spec) == "10.0.0.0/255.0.255.0"
        assert str(spec) == "10.0.0.0/255.0.255.0"

    @pytest.mark.parametrize("text", ["10.0.0.0", "10.0.0.0/33", "300.0.0.0/8", "10.0.0.0/abc", ""])
    def test_invalid(self, text):
        with pytest.raises(ValueError):
            parse_network(text)


class TestRange:

    def test_decompose(self):
        assert parse_range("192.168.0.2-192.168.0.191/24") == AddressRange(
            start="192.168.0.2", end="192.168.0.191", prefix_len=24,
        )

    def test_reversed_range_is_not_rejected(self):
        r = parse_range("192.168.0.200-192.168.0.100/24")
        assert r.start == "192.168.0.200"
        assert r.end == "192.168.0.100"

    @pytest.mark.parametrize("text", [
        "192.168.0.2-192.168.0.191/33",
        "192.168.0.2-192.168.0.191",
        "192.168.0.2/24",
        "192.168.0.x-192.168.0.191/24",
        "192.168.0.2-192.168.0/24",
    ])
    def test_invalid(self, text):
        with pytest.raises(ValueError):
            parse_range(text)


class TestDuration:

    def test_hours_minutes_and_bare_minutes_agree(self):
        assert parse_duration("12:00") == parse_duration("720") == 43200

    def test_hours_not_wrapped(self):
        assert parse_duration("72:30") == 72 * 3600 + 30 * 60

    @pytest.mark.parametrize("text", ["1:60", "abc", "1:xx", "-5", ""])
    def test_invalid(self, text):
        with pytest.raises(ValueError):
            parse_duration(text)

    def test_format(self):
        assert format_duration(43200) == "12:00"
        assert format_duration(90 * 60) == "1:30"
        assert format_duration(0) == "0:00"

    def test_format_rejects_partial_minutes(self):
        with pytest.raises(ValueError):
            format_duration(90)

    @pytest.mark.parametrize("seconds", [0, 60, 3600, 43200, 86400 * 3])
    def test_round_trip(self, seconds):
        assert parse_duration(format_duration(seconds)) == seconds


class TestTokenHelpers:

    def test_address_checks(self):
        assert is_ipv4("192.168.1.1")
        assert not is_ipv4("192.168.1")
        assert not is_ipv4("")
        assert is_ipv6("2001:db8::1")
        assert not is_ipv6("192.168.1.1")

    def test_on_off(self):
        assert parse_on_off("on") is True
        assert parse_on_off("OFF") is False
        with pytest.raises(ValueError):
            parse_on_off("yes")

    def test_csv_none_means_empty(self):
        assert split_csv("none") == []
        assert split_csv("ssh,http") == ["ssh", "http"]

    def test_optional_int(self):
        assert optional_int("-") is None
        assert optional_int(None) is None
        assert optional_int("20") == 20
