"""
Command-line front end for rtxconf.

  python -m rtxconf models
  python -m rtxconf show-command dhcp_scope
  python -m rtxconf parse static_route config.txt --model RTX1210 --commands

Records are rendered as rich tables; synthesized commands are printed
with credentials redacted.
"""

from __future__ import annotations
from dataclasses import fields, is_dataclass
from enum import Enum
from typing import Any, Optional
import sys

from rich.console import Console
from rich.table import Table
from rich.markup import escape
from rich.text import Text

from .commands import SHOW_COMMANDS
from .diagnostics import REDACTED, dump_parse_summary, sanitize_command
from .errors import NotFoundError, ParseError, RtxConfError, SynthesisError, ValidationError
from .models import NetworkSpec
from .registry import ALL_DOMAINS, ALL_KNOWN_MODELS, SUPPORTED_MODELS, new_registry
from .translator import ConfigTranslator, TranslatorConfig

_SECRET_FIELDS = {"password", "login_password", "admin_password"}

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_NOT_FOUND = 2


# ============================================================
# Rendering
# ============================================================

def format_value(value: Any, name: str = "") -> str:
    if value is None:
        return "-"
    if name in _SECRET_FIELDS:
        return REDACTED
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, bool):
        return "on" if value else "off"
    if isinstance(value, NetworkSpec):
        return str(value)
    if isinstance(value, list):
        return ", ".join(format_value(v) for v in value) if value else "none"
    if is_dataclass(value):
        parts = []
        for f in fields(value):
            v = getattr(value, f.name)
            if v is None or v is False or v == []:
                continue
            parts.append(f"{f.name}={format_value(v, f.name)}")
        return " ".join(parts)
    return str(value)


def records_table(domain: str, result: Any) -> Table:
    """One row per record; columns are the record's dataclass fields."""
    records = result if isinstance(result, list) else [result]
    records = [r for r in records if r is not None]

    table = Table(title=domain, show_lines=False)
    if not records or not is_dataclass(records[0]):
        table.add_column("result")
        table.add_row(Text("no records", style="dim"))
        return table

    names = [f.name for f in fields(records[0])]
    for name in names:
        table.add_column(name)
    for record in records:
        table.add_row(*(Text(format_value(getattr(record, n), n)) for n in names))
    return table


def models_table() -> Table:
    registry = new_registry()
    table = Table(title="Device models")
    table.add_column("model")
    table.add_column("supported")
    table.add_column("domains")
    for model in ALL_KNOWN_MODELS:
        domains = [d for d in ALL_DOMAINS if registry.has(d, model)]
        table.add_row(
            model,
            Text("yes", style="green") if model in SUPPORTED_MODELS else Text("no", style="yellow"),
            ", ".join(domains) or "-",
        )
    return table


# ============================================================
# Commands
# ============================================================

def _read_input(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    with open(path, encoding="utf-8", errors="replace") as f:
        return f.read()


def cmd_parse(args, console: Console) -> int:
    config = TranslatorConfig(
        model=args.model,
        log_file=args.log,
        verbose=args.verbose,
        debug=args.debug,
    )
    translator = ConfigTranslator(config, configure_logging=True)
    raw = _read_input(args.file)

    try:
        translator.parser_for(args.domain)
    except NotFoundError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        return EXIT_NOT_FOUND

    result, record = translator.parse_with_diagnostics(args.domain, raw)
    if args.verbose:
        console.print(dump_parse_summary(record), markup=False)
    for skipped in record.skipped:
        console.print(f"[yellow]skipped:[/yellow] {escape(skipped)}")
    if result is None:
        console.print(f"[red]{escape(record.parse_detail)}[/red]")
        return EXIT_ERROR

    console.print(records_table(args.domain, result))

    if args.validate or args.commands:
        records = result if isinstance(result, list) else [result]
        exit_code = EXIT_OK
        for item in records:
            try:
                if args.validate:
                    translator.validate(item)
                if args.commands:
                    for command in translator.build_create(item):
                        console.print(sanitize_command(command), markup=False, highlight=False)
            except (ValidationError, SynthesisError) as e:
                console.print(f"[red]{type(e).__name__}:[/red] {escape(str(e))}")
                exit_code = EXIT_ERROR
        return exit_code

    return EXIT_OK


def main(argv: Optional[list[str]] = None) -> int:
    """
    rtxconf parse dhcp_scope dump.txt --model RTX1220 --commands -v
    """
    import argparse

    parser = argparse.ArgumentParser(
        prog="rtxconf",
        description="Translate Yamaha RTX configuration text to records and back.",
        epilog=(
            "Examples:\n"
            "  rtxconf models\n"
            "  rtxconf show-command static_route\n"
            "  rtxconf parse static_route config.txt --model RTX1210 --commands\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("models", help="List known device models and their domains")

    show = sub.add_parser("show-command", help="Print the device command a domain parses")
    show.add_argument("domain", choices=ALL_DOMAINS)

    parse = sub.add_parser("parse", help="Parse a saved config dump")
    parse.add_argument("domain", choices=ALL_DOMAINS)
    parse.add_argument("file", help="Config dump file, or - for stdin")
    parse.add_argument("-m", "--model", required=True,
                       help="Device model (e.g., RTX1210)")
    parse.add_argument("--validate", action="store_true",
                       help="Run the domain validator on every record")
    parse.add_argument("--commands", action="store_true",
                       help="Print the commands that would recreate each record")
    parse.add_argument("-v", "--verbose", action="store_true")
    parse.add_argument("--debug", action="store_true")
    parse.add_argument("--log", default=None,
                       help="Write debug log to file")

    args = parser.parse_args(argv)
    console = Console()

    if args.command == "models":
        console.print(models_table())
        return EXIT_OK

    if args.command == "show-command":
        console.print(SHOW_COMMANDS[args.domain], markup=False, highlight=False)
        return EXIT_OK

    try:
        return cmd_parse(args, console)
    except ParseError as e:
        console.print(f"[red]parse error:[/red] {escape(str(e))}")
        return EXIT_ERROR
    except RtxConfError as e:
        console.print(f"[red]error:[/red] {escape(str(e))}")
        return EXIT_ERROR
    except OSError as e:
        console.print(f"[red]cannot read {escape(args.file)}:[/red] {escape(str(e))}")
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
