import logging

import pytest

from rtxconf.commands import (
    build_dhcp_client_commands, build_dhcp_relay_commands, build_dhcp_scope_command,
    build_update_plan,
)
from rtxconf.errors import ParseError, SynthesisError, ValidationError
from rtxconf.models import DhcpLeaseType, DhcpRelayConfig, DhcpScope
from rtxconf.parsers import (
    DhcpClientParser, DhcpLeaseTypeParser, DhcpRelayParser, DhcpScopeParser,
    parse_dhcp_scope_line,
)
from rtxconf.validation import (
    validate_dhcp_lease_type, validate_dhcp_relay, validate_dhcp_scope,
)


def scope(**overrides):
    values = dict(
        scope_id=1,
        range_start="192.168.0.2",
        range_end="192.168.0.191",
        prefix_len=24,
        gateway="192.168.0.1",
        dns_servers=["8.8.8.8", "8.8.4.4"],
        lease_seconds=43200,
    )
    values.update(overrides)
    return DhcpScope(**values)


class TestScopeParse:

    def test_full_line(self):
        s = parse_dhcp_scope_line(
            "dhcp scope 1 192.168.0.2-192.168.0.191/24 gateway 192.168.0.1 "
            "dns 8.8.8.8 8.8.4.4 expire 12:00"
        )
        assert s == scope()

    def test_ma_keyword_ignored(self):
        s = parse_dhcp_scope_line(
            "dhcp scope 1 192.168.0.2-192.168.0.191/24 gateway 192.168.0.1 "
            "dns 8.8.8.8 8.8.4.4 ma expire 12:00"
        )
        assert s.dns_servers == ["8.8.8.8", "8.8.4.4"]
        assert s.lease_seconds == 43200

    def test_unknown_keyword_ignored(self):
        s = parse_dhcp_scope_line("dhcp scope 2 10.0.0.10-10.0.0.20/24 frobnicate gateway 10.0.0.1")
        assert s.gateway == "10.0.0.1"

    def test_minutes_and_hhmm_agree(self):
        a = parse_dhcp_scope_line("dhcp scope 1 10.0.0.10-10.0.0.20/24 expire 720")
        b = parse_dhcp_scope_line("dhcp scope 1 10.0.0.10-10.0.0.20/24 expire 12:00")
        assert a.lease_seconds == b.lease_seconds == 43200

    def test_lease_and_maxexpire(self):
        s = parse_dhcp_scope_line("dhcp scope 1 10.0.0.10-10.0.0.20/24 lease 10 maxexpire 24:00")
        assert s.lease_seconds == 600
        assert s.max_expire_seconds == 86400

    def test_expire_after_lease_wins(self):
        s = parse_dhcp_scope_line("dhcp scope 1 10.0.0.10-10.0.0.20/24 lease 10 expire 1:00")
        assert s.lease_seconds == 3600

    def test_lease_after_expire_wins(self):
        s = parse_dhcp_scope_line("dhcp scope 1 10.0.0.10-10.0.0.20/24 expire 1:00 lease 10")
        assert s.lease_seconds == 600

    def test_unspecified_fields_stay_none(self):
        s = parse_dhcp_scope_line("dhcp scope 3 10.0.0.10-10.0.0.20/24")
        assert s.gateway is None
        assert s.dns_servers is None
        assert s.lease_seconds is None

    def test_non_numeric_id(self):
        with pytest.raises(ParseError, match="scope id"):
            DhcpScopeParser().parse("dhcp scope abc 10.0.0.10-10.0.0.20/24")

    def test_bad_range(self):
        with pytest.raises(ParseError):
            DhcpScopeParser().parse("dhcp scope 1 10.0.0.10-10.0.0.20/40")

    def test_bad_duration_aborts(self):
        with pytest.raises(ParseError) as exc:
            DhcpScopeParser().parse("dhcp scope 1 10.0.0.10-10.0.0.20/24\ndhcp scope 2 10.0.1.10-10.0.1.20/24 expire 1:75")
        assert exc.value.line_number == 2

    def test_reversed_range_parses(self):
        s = parse_dhcp_scope_line("dhcp scope 1 192.168.0.200-192.168.0.100/24")
        assert s.range_start == "192.168.0.200"

    def test_other_scope_directives_skipped(self, show_config):
        scopes = DhcpScopeParser().parse(show_config)
        assert [s.scope_id for s in scopes] == [1]

    def test_redefinition_last_wins(self):
        scopes = DhcpScopeParser().parse(
            "dhcp scope 1 10.0.0.10-10.0.0.20/24\n"
            "dhcp scope 1 10.0.0.30-10.0.0.40/24\n"
        )
        assert len(scopes) == 1
        assert scopes[0].range_start == "10.0.0.30"


class TestScopeSynthesize:

    def test_command(self):
        assert build_dhcp_scope_command(scope(max_expire_seconds=86400, domain_name="example.lan")) == (
            "dhcp scope 1 192.168.0.2-192.168.0.191/24 gateway 192.168.0.1 "
            "dns 8.8.8.8 8.8.4.4 expire 12:00 maxexpire 24:00 domain example.lan"
        )

    def test_round_trip(self):
        record = scope(max_expire_seconds=86400, domain_name="example.lan")
        assert parse_dhcp_scope_line(build_dhcp_scope_command(record)) == record

    def test_minimal(self):
        record = DhcpScope(scope_id=5, range_start="10.0.0.10", range_end="10.0.0.20", prefix_len=24)
        assert build_dhcp_scope_command(record) == "dhcp scope 5 10.0.0.10-10.0.0.20/24"

    def test_missing_range(self):
        with pytest.raises(SynthesisError):
            build_dhcp_scope_command(scope(range_start=""))

    def test_partial_minute_lease(self):
        with pytest.raises(SynthesisError):
            build_dhcp_scope_command(scope(lease_seconds=90))

    def test_update_is_delete_then_create(self):
        plan = build_update_plan(scope(), scope(gateway="192.168.0.254"))
        assert plan.delete == ["no dhcp scope 1"]
        assert plan.create == [build_dhcp_scope_command(scope(gateway="192.168.0.254"))]
        assert plan.is_recreate
        assert plan.commands[0] == "no dhcp scope 1"

    def test_update_with_incomplete_target_plans_nothing(self):
        with pytest.raises(SynthesisError):
            build_update_plan(scope(), scope(range_end=""))


class TestScopeValidate:

    def test_valid(self):
        validate_dhcp_scope(scope())

    def test_reversed_range(self):
        with pytest.raises(ValidationError) as exc:
            validate_dhcp_scope(scope(range_start="192.168.0.200", range_end="192.168.0.100"))
        assert exc.value.message == "range_start must be less than range_end"

    def test_equal_bounds(self):
        with pytest.raises(ValidationError):
            validate_dhcp_scope(scope(range_start="192.168.0.10", range_end="192.168.0.10"))

    @pytest.mark.parametrize("overrides, field", [
        ({"scope_id": 0}, "scope_id"),
        ({"prefix_len": 7}, "prefix_len"),
        ({"gateway": "gw"}, "gateway"),
        ({"dns_servers": ["8.8.8.8", "dns"]}, "dns_servers[1]"),
        ({"lease_seconds": 90}, "lease_seconds"),
    ])
    def test_field_errors(self, overrides, field):
        with pytest.raises(ValidationError) as exc:
            validate_dhcp_scope(scope(**overrides))
        assert exc.value.field == field


class TestClient:

    RAW = (
        "dhcp client hostname lan2 rtx-office\n"
        "dhcp client client-identifier lan2 type 1 01:02:03\n"
        "dhcp client require-dns lan2 on\n"
        "dhcp client release linkdown lan2\n"
        "dhcp client hostname pp1 branch\n"
    )

    def test_merge_per_interface(self):
        lan2, pp1 = DhcpClientParser().parse(self.RAW)
        assert lan2.interface == "lan2"
        assert lan2.hostname == "rtx-office"
        assert lan2.client_identifier == "type 1 01:02:03"
        assert lan2.require_dns is True
        assert lan2.release_on_linkdown is True
        assert pp1.hostname == "branch"
        assert pp1.require_dns is None

    def test_bad_on_off_skipped(self):
        errors = []
        clients = DhcpClientParser().parse("dhcp client require-dns lan2 maybe", errors)
        assert clients[0].require_dns is None
        assert len(errors) == 1

    def test_round_trip(self):
        lan2 = DhcpClientParser().parse(self.RAW)[0]
        assert DhcpClientParser().parse("\n".join(build_dhcp_client_commands(lan2))) == [lan2]


class TestRelay:

    def test_parse(self, show_config):
        relay = DhcpRelayParser().parse(show_config + "dhcp relay select 1 10.0.0.10\n")
        assert relay.servers == ["10.0.0.10", "10.0.0.11"]
        assert relay.selects[0].scope_id == 1

    def test_no_servers_is_none(self):
        assert DhcpRelayParser().parse("").servers is None

    def test_parse_keeps_first_four_servers(self, caplog):
        raw = "dhcp relay server " + " ".join(f"10.0.0.{i}" for i in range(1, 6)) + "\n"
        with caplog.at_level(logging.WARNING, logger="rtxconf.parsers"):
            relay = DhcpRelayParser().parse(raw)
        assert relay.servers == ["10.0.0.1", "10.0.0.2", "10.0.0.3", "10.0.0.4"]
        assert "keeping the first 4" in caplog.text
        validate_dhcp_relay(relay)

    def test_truncated_servers_survive_rebuild(self):
        raw = "dhcp relay server " + " ".join(f"10.0.0.{i}" for i in range(1, 6)) + "\n"
        relay = DhcpRelayParser().parse(raw)
        again = DhcpRelayParser().parse("\n".join(build_dhcp_relay_commands(relay)))
        assert again.servers == relay.servers

    def test_too_many_servers(self):
        relay = DhcpRelayConfig(servers=[f"10.0.0.{i}" for i in range(1, 6)])
        with pytest.raises(ValidationError):
            validate_dhcp_relay(relay)

    def test_build_truncates_with_warning(self, caplog):
        relay = DhcpRelayConfig(servers=[f"10.0.0.{i}" for i in range(1, 6)])
        with caplog.at_level(logging.WARNING, logger="rtxconf.commands"):
            commands = build_dhcp_relay_commands(relay)
        assert commands == ["dhcp relay server 10.0.0.1 10.0.0.2 10.0.0.3 10.0.0.4"]
        assert "truncating" in caplog.text


class TestLeaseType:

    def test_parse(self, show_config):
        assert DhcpLeaseTypeParser().parse(show_config) == [DhcpLeaseType(1, "bind-priority")]

    def test_validate(self):
        validate_dhcp_lease_type(DhcpLeaseType(1, "lease-only"))
        with pytest.raises(ValidationError):
            validate_dhcp_lease_type(DhcpLeaseType(1, "forever"))
