import json
import logging

import pytest

from rtxconf.diagnostics import (
    REDACTED, CommandRecord, CommandStatus, ParseRecord, ParseResult, SessionDiagnostic,
    dump_parse_summary, is_sensitive, parse_with_diagnostics, sanitize_command, setup_logging,
)
from rtxconf.errors import RtxConfError
from rtxconf.parsers import StaticRouteParser


class TestSanitize:

    @pytest.mark.parametrize("command, expected", [
        ("login user admin s3cret", "login user admin [REDACTED]"),
        ("login user admin encrypted $1$abc", "login user admin encrypted [REDACTED]"),
        ("login password s3cret", "login password [REDACTED]"),
        ("administrator password encrypted $1$abc", "administrator password encrypted [REDACTED]"),
        ("ipsec ike pre-shared-key 1 text s3cret", "ipsec ike pre-shared-key 1 text [REDACTED]"),
        ("snmp community read-only public", "snmp community read-only [REDACTED]"),
        ("pp auth myname user password=s3cret", "pp auth myname user password=[REDACTED]"),
    ])
    def test_redacted(self, command, expected):
        assert sanitize_command(command) == expected
        assert is_sensitive(command)

    @pytest.mark.parametrize("command", [
        "ip route default gateway 192.168.1.1",
        "user attribute admin administrator=on connection=ssh",
        "dhcp scope 1 192.168.0.2-192.168.0.191/24",
        "",
    ])
    def test_untouched(self, command):
        assert sanitize_command(command) == command
        assert not is_sensitive(command)

    def test_idempotent(self):
        once = sanitize_command("login user admin s3cret")
        assert sanitize_command(once) == once
        assert REDACTED in once


class TestSetupLogging:

    def test_null_handler_by_default(self, clean_logger):
        logger = setup_logging()
        assert logger.name == "rtxconf"
        assert [type(h) for h in logger.handlers] == [logging.NullHandler]

    def test_verbose(self, clean_logger):
        logger = setup_logging(verbose=True)
        (handler,) = logger.handlers
        assert isinstance(handler, logging.StreamHandler)
        assert handler.level == logging.INFO

    def test_debug(self, clean_logger):
        (handler,) = setup_logging(debug=True).handlers
        assert handler.level == logging.DEBUG

    def test_log_file(self, clean_logger, tmp_path):
        path = tmp_path / "rtxconf.log"
        logger = setup_logging(log_file=str(path))
        logging.getLogger("rtxconf.parsers").debug("hello from the parser")
        for handler in logger.handlers:
            handler.flush()
        assert "hello from the parser" in path.read_text()
        assert "rtxconf.parsers" in path.read_text()

    def test_reconfigure_replaces_handlers(self, clean_logger):
        setup_logging(verbose=True)
        logger = setup_logging(debug=True)
        assert len(logger.handlers) == 1


class TestParseWrapper:

    def test_outcomes(self):
        parser = StaticRouteParser()
        _, ok = parse_with_diagnostics("static_route", "RTX1210", "ip route default gateway 1.1.1.1", parser)
        assert ok.parse_result == ParseResult.OK
        assert ok.record_count == 1

        _, partial = parse_with_diagnostics(
            "static_route", "RTX1210", "ip route 1.0.0.0/99 gateway 1.1.1.1", parser,
        )
        assert partial.parse_result == ParseResult.PARTIAL

    def test_package_error_recorded(self):
        class Broken:
            def parse(self, raw, errors=None):
                raise RtxConfError("parser state corrupted")

        result, record = parse_with_diagnostics("system", "RTX1210", "timezone +09:00", Broken(), "broken")
        assert result is None
        assert record.parse_result == ParseResult.EXCEPTION
        assert "parser state corrupted" in record.parse_detail


class TestRecords:

    def test_parse_record_dict(self):
        record = ParseRecord(domain="ospf", model="RTX1210", raw_input="a\nb\n", record_count=1)
        d = record.to_dict()
        assert d["raw_input_lines"] == 2
        assert d["parse_result"] == "ok"

    def test_summary_line(self):
        record = ParseRecord(domain="ospf", model="RTX1210", parser_used="ospf", record_count=1)
        assert dump_parse_summary(record) == "[✓] ospf on RTX1210 via ospf: 1 record(s)"

    def test_session_dump(self, tmp_path):
        session = SessionDiagnostic(model="RTX1210")
        session.parses.append(ParseRecord(domain="ospf", model="RTX1210", parse_result=ParseResult.PARSE_ERROR))
        session.commands.append(CommandRecord(command="ospf use on", status=CommandStatus.ERROR))
        path = tmp_path / "session.json"
        session.dump_json(str(path))
        data = json.loads(path.read_text())
        assert data["summary"] == {
            "parses": 1, "parse_failures": 1, "commands": 1, "failed_commands": 1,
        }
        assert data["commands"][0]["status"] == "error"
