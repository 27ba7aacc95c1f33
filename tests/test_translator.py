import pytest

from rtxconf.commands import CommandPlan
from rtxconf.diagnostics import CommandStatus, ParseResult
from rtxconf.errors import (
    ApplyError, NotFoundError, ParseError, PartialApplyError, RtxConfError, ValidationError,
)
from rtxconf.models import DhcpScope, RouteProtocol, StaticRoute
from rtxconf.translator import ConfigTranslator, TranslatorConfig


def scope(**overrides):
    values = dict(scope_id=1, range_start="192.168.0.2", range_end="192.168.0.191", prefix_len=24)
    values.update(overrides)
    return DhcpScope(**values)


class Transport:
    """Records what was sent; raises on the command given as `fail_on`."""

    def __init__(self, fail_on=None):
        self.fail_on = fail_on
        self.sent = []

    def __call__(self, command):
        if command == self.fail_on:
            raise RuntimeError("device rejected command")
        self.sent.append(command)


class TestParse:

    def test_parse(self, translator, show_config):
        routes = translator.parse("static_route", show_config)
        assert all(isinstance(r, StaticRoute) for r in routes)
        assert len(routes) == 3

    def test_routes_dialect_follows_model(self, registry, rtx830_routes, rtx12xx_routes):
        rtx830 = ConfigTranslator(TranslatorConfig(model="RTX830"), registry=registry)
        rtx1220 = ConfigTranslator(TranslatorConfig(model="RTX1220"), registry=registry)
        assert rtx830.parse("routes", rtx830_routes)[1].protocol == RouteProtocol.CONNECTED
        assert rtx1220.parse("routes", rtx12xx_routes)[1].protocol == RouteProtocol.CONNECTED

    def test_not_found(self, registry):
        t = ConfigTranslator(TranslatorConfig(model="RTX5000"), registry=registry)
        with pytest.raises(NotFoundError):
            t.parse("routes", "")

    def test_strict_domain_raises(self, translator):
        with pytest.raises(ParseError):
            translator.parse("dhcp_scope", "dhcp scope x 10.0.0.10-10.0.0.20/24")

    def test_errors_collected(self, translator):
        errors = []
        translator.parse("static_route", "ip route 10.0.0.0/40 gateway 192.168.1.1", errors)
        assert len(errors) == 1

    def test_show_command(self, translator):
        assert translator.show_command("static_route") == 'show config | grep "ip route"'
        with pytest.raises(RtxConfError):
            translator.show_command("nonsense")

    def test_unsupported_model_still_usable(self, registry, caplog):
        t = ConfigTranslator(TranslatorConfig(model="RTX810"), registry=registry)
        assert "not in the supported model list" in caplog.text
        with pytest.raises(NotFoundError):
            t.parse("static_route", "")


class TestParseWithDiagnostics:

    def test_ok(self, translator, show_config):
        result, record = translator.parse_with_diagnostics("dhcp_scope", show_config)
        assert record.parse_result == ParseResult.OK
        assert record.record_count == 1
        assert record.parser_used == "dhcp-scope"
        assert translator.diagnostic.parses == [record]

    def test_partial(self, translator):
        raw = "ip route 10.0.0.0/40 gateway 192.168.1.1\nip route 10.0.0.0/8 gateway 192.168.1.1\n"
        result, record = translator.parse_with_diagnostics("static_route", raw)
        assert len(result) == 1
        assert record.parse_result == ParseResult.PARTIAL
        assert len(record.skipped) == 1

    def test_parse_error_is_recorded(self, translator):
        result, record = translator.parse_with_diagnostics("dhcp_scope", "dhcp scope x 10.0.0.10-10.0.0.20/24")
        assert result is None
        assert record.parse_result == ParseResult.PARSE_ERROR
        assert "scope id" in record.parse_detail
        assert translator.diagnostic.parse_failures() == [record]

    def test_no_match(self, translator):
        result, record = translator.parse_with_diagnostics("bridge", "ip route default gateway 192.168.1.1")
        assert result == []
        assert record.parse_result == ParseResult.NO_MATCH

    def test_empty(self, translator):
        result, record = translator.parse_with_diagnostics("static_route", "   \n")
        assert result == []
        assert record.parse_result == ParseResult.EMPTY_INPUT

    def test_registry_miss_propagates(self, registry):
        t = ConfigTranslator(TranslatorConfig(model="RTX5000"), registry=registry)
        with pytest.raises(NotFoundError):
            t.parse_with_diagnostics("routes", "S 0.0.0.0/0 via 192.168.1.1 dev lan2")


class TestBuild:

    def test_create_validates_first(self, translator):
        with pytest.raises(ValidationError):
            translator.build_create(scope(range_start="192.168.0.200", range_end="192.168.0.100"))

    def test_validation_can_be_disabled(self, registry):
        t = ConfigTranslator(TranslatorConfig(model="RTX1210", validate_before_build=False), registry=registry)
        commands = t.build_create(scope(range_start="192.168.0.200", range_end="192.168.0.100"))
        assert commands == ["dhcp scope 1 192.168.0.200-192.168.0.100/24"]

    def test_update(self, translator):
        plan = translator.build_update(scope(), scope(gateway="192.168.0.1"))
        assert plan.is_recreate

    def test_delete(self, translator):
        assert translator.build_delete(scope()) == ["no dhcp scope 1"]


class TestApply:

    def test_success(self, translator):
        plan = translator.build_update(scope(), scope(gateway="192.168.0.1"))
        send = Transport()
        applied = translator.apply(plan, send)
        assert applied == send.sent == plan.commands
        assert all(c.status == CommandStatus.SUCCESS for c in translator.diagnostic.commands)
        assert [c.phase for c in translator.diagnostic.commands] == ["delete", "create"]

    def test_partial_failure(self, translator):
        plan = translator.build_update(scope(), scope(gateway="192.168.0.1"))
        create = plan.create[0]
        with pytest.raises(PartialApplyError) as exc:
            translator.apply(plan, Transport(fail_on=create))
        assert exc.value.applied == ["no dhcp scope 1"]
        assert exc.value.pending == [create]
        assert exc.value.command == create
        assert [c.status for c in translator.diagnostic.commands] == [
            CommandStatus.SUCCESS, CommandStatus.ERROR,
        ]

    def test_delete_failure_is_not_partial(self, translator):
        plan = translator.build_update(scope(), scope(gateway="192.168.0.1"))
        with pytest.raises(ApplyError) as exc:
            translator.apply(plan, Transport(fail_on="no dhcp scope 1"))
        assert not isinstance(exc.value, PartialApplyError)
        assert exc.value.applied == []
        assert [c.status for c in translator.diagnostic.commands] == [
            CommandStatus.ERROR, CommandStatus.SKIPPED,
        ]

    def test_in_place_failure_is_not_partial(self, translator):
        plan = CommandPlan(create=["timezone +09:00", "console lines infinity"])
        with pytest.raises(ApplyError) as exc:
            translator.apply(plan, Transport(fail_on="timezone +09:00"))
        assert not isinstance(exc.value, PartialApplyError)

    def test_recorded_commands_sanitized(self, translator):
        translator.apply(CommandPlan(create=["login user ops hunter2"]), Transport())
        assert translator.diagnostic.commands[0].command == "login user ops [REDACTED]"
