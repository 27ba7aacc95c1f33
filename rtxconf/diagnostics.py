"""
RTX Config Translator — Diagnostics

Structured records of what each parse and each pushed command did, plus
the package logger setup.

  summary line   dump_parse_summary(), printed with --verbose
  ParseRecord    outcome, record count, skipped lines, raw input size
  raw capture    --debug / --log, parser internals at DEBUG

When a domain parser comes back empty the record says which case it
was: empty input, no directives for the domain, malformed lines skipped,
or a strict parser aborted.

Credentials never reach a log line: commands pass through
sanitize_command() before they are logged or displayed.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Any
import json
import logging
import re

from .errors import ParseError, RtxConfError


# ============================================================
# Structured Diagnostic Records
# ============================================================

class ParseResult(Enum):
    OK = "ok"                       # parsed, nothing skipped
    PARTIAL = "partial"             # parsed, some lines skipped as malformed
    NO_MATCH = "no-match"           # input had no lines for this domain
    EMPTY_INPUT = "empty-input"     # nothing to parse
    PARSE_ERROR = "parse-error"     # strict domain aborted
    EXCEPTION = "exception"         # parser threw something unexpected


class CommandStatus(Enum):
    SUCCESS = "success"
    ERROR = "error"                 # transport rejected the command
    SKIPPED = "skipped"             # not sent, an earlier command failed


@dataclass
class ParseRecord:
    """Complete record of one parse call."""
    domain: str
    model: str
    parser_used: str = ""
    timestamp: datetime = field(default_factory=datetime.now)

    raw_input: str = ""
    parse_result: ParseResult = ParseResult.OK
    parse_detail: str = ""
    record_count: int = 0
    skipped: list[str] = field(default_factory=list)   # str(ParseError) per skipped line

    def to_dict(self) -> dict:
        return {
            "domain": self.domain,
            "model": self.model,
            "parser_used": self.parser_used,
            "timestamp": self.timestamp.isoformat(),
            "raw_input_lines": len(self.raw_input.splitlines()),
            "parse_result": self.parse_result.value,
            "parse_detail": self.parse_detail,
            "record_count": self.record_count,
            "skipped": self.skipped,
        }


@dataclass
class CommandRecord:
    """One command pushed (or not) through the transport."""
    command: str                        # already sanitized
    status: CommandStatus = CommandStatus.SUCCESS
    phase: str = "create"               # "delete" or "create"
    error_message: str = ""
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict:
        return {
            "command": self.command,
            "status": self.status.value,
            "phase": self.phase,
            "error_message": self.error_message,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class SessionDiagnostic:
    """Everything recorded by one translator instance."""
    model: str
    parses: list[ParseRecord] = field(default_factory=list)
    commands: list[CommandRecord] = field(default_factory=list)

    def failed_commands(self) -> list[CommandRecord]:
        return [c for c in self.commands if c.status == CommandStatus.ERROR]

    def parse_failures(self) -> list[ParseRecord]:
        return [p for p in self.parses if p.parse_result in (
            ParseResult.PARSE_ERROR, ParseResult.EXCEPTION
        )]

    def to_dict(self) -> dict:
        return {
            "model": self.model,
            "summary": {
                "parses": len(self.parses),
                "parse_failures": len(self.parse_failures()),
                "commands": len(self.commands),
                "failed_commands": len(self.failed_commands()),
            },
            "parses": [p.to_dict() for p in self.parses],
            "commands": [c.to_dict() for c in self.commands],
        }

    def dump_json(self, path: str):
        """Write full diagnostic to JSON file."""
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2, default=str)


# ============================================================
# Secret Redaction
# ============================================================
#
# Anything that might carry a credential is rewritten before it is
# logged or printed. The command actually sent is never modified.
#

REDACTED = "[REDACTED]"

_SECRET_PATTERNS = [
    re.compile(r"^(login\s+user\s+\S+\s+encrypted\s+)(\S+)", re.IGNORECASE),
    re.compile(r"^(login\s+user\s+\S+\s+)(?!encrypted\b)(\S+)$", re.IGNORECASE),
    re.compile(r"^((?:login|administrator)\s+password\s+(?:encrypted\s+)?)(\S+)", re.IGNORECASE),
    re.compile(r"(\bpre-shared-key\s+\d+\s+(?:text\s+)?)(\S+)", re.IGNORECASE),
    re.compile(r"(\bcommunity\s+(?:read-only|read-write)\s+)(\S+)", re.IGNORECASE),
    re.compile(
        r"((?<![\w-])(?:secret|community|password|token|credential|key)(?:\s+|=))"
        r"(?!\[REDACTED\]|encrypted\b|read-only\b|read-write\b)(\S+)",
        re.IGNORECASE,
    ),
]


def sanitize_command(command: str) -> str:
    """'login user admin s3cret' → 'login user admin [REDACTED]'"""
    if not command:
        return command
    sanitized = command
    for pattern in _SECRET_PATTERNS:
        sanitized = pattern.sub(lambda m: m.group(1) + REDACTED, sanitized)
    return sanitized


def sanitize_commands(commands: list[str]) -> list[str]:
    return [sanitize_command(c) for c in commands]


def is_sensitive(command: str) -> bool:
    return sanitize_command(command) != command


# ============================================================
# Logger Setup
# ============================================================
#
# Three output modes, layered:
#
#   (default)       : errors only, nothing on stderr
#   --verbose / -v  : per-parse summaries to stderr
#   --debug         : everything, to file (--log FILE) or stderr
#

def setup_logging(
    log_file: Optional[str] = None,
    debug: bool = False,
    verbose: bool = False,
) -> logging.Logger:
    """
    Configure the package logger.

    - log_file: write debug-level to file
    - debug: debug-level to stderr
    - verbose: info-level to stderr
    """
    logger = logging.getLogger("rtxconf")
    logger.setLevel(logging.DEBUG)
    logger.handlers.clear()

    formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    if log_file:
        fh = logging.FileHandler(log_file, mode="w")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(formatter)
        logger.addHandler(fh)

    if debug or verbose:
        sh = logging.StreamHandler()
        sh.setLevel(logging.DEBUG if debug else logging.INFO)
        sh.setFormatter(formatter)
        logger.addHandler(sh)

    # Quiet unless asked
    if not logger.handlers:
        logger.addHandler(logging.NullHandler())

    return logger


# ============================================================
# Diagnostic-Aware Parse Wrapper
# ============================================================

def _record_count(result: Any) -> int:
    if result is None:
        return 0
    if isinstance(result, list):
        return len(result)
    return 1


def _is_empty_result(result: Any) -> bool:
    if result is None:
        return True
    if isinstance(result, list):
        return not result
    return False


def parse_with_diagnostics(
    domain: str,
    model: str,
    raw_input: str,
    parser: Any,
    parser_name: str = "unknown",
    logger: Optional[logging.Logger] = None,
) -> tuple[Any, ParseRecord]:
    """
    Wrap a domain parser with full diagnostics.

    Returns:
        (parsed_result, parse_record)
        parsed_result is None if the parser raised.
    """
    record = ParseRecord(
        domain=domain,
        model=model,
        raw_input=raw_input or "",
        parser_used=parser_name,
    )

    if not raw_input or not raw_input.strip():
        record.parse_result = ParseResult.EMPTY_INPUT
        record.parse_detail = "Empty or whitespace-only input"
        if logger:
            logger.warning(f"[{model}] Empty input for {domain}")
        return parser.parse(raw_input or ""), record

    skipped: list[ParseError] = []
    try:
        result = parser.parse(raw_input, skipped)

    except ParseError as e:
        record.parse_result = ParseResult.PARSE_ERROR
        record.parse_detail = str(e)
        if logger:
            logger.error(
                f"[{model}] {domain} parse aborted\n"
                f"  Parser: {parser_name}\n"
                f"  Error: {e}"
            )
        return None, record

    except RtxConfError as e:
        record.parse_result = ParseResult.EXCEPTION
        record.parse_detail = f"{type(e).__name__}: {e}"
        if logger:
            logger.error(f"[{model}] {domain} parser error: {e}")
        return None, record

    record.record_count = _record_count(result)
    record.skipped = [str(e) for e in skipped]

    if skipped:
        record.parse_result = ParseResult.PARTIAL
        record.parse_detail = f"{len(skipped)} malformed line(s) skipped"
        if logger:
            logger.warning(
                f"[{model}] {domain}: {len(skipped)} line(s) skipped\n"
                f"{_indent(chr(10).join(record.skipped))}"
            )
    elif _is_empty_result(result):
        record.parse_result = ParseResult.NO_MATCH
        record.parse_detail = "No directives for this domain"
        if logger:
            logger.info(f"[{model}] {domain}: no directives found")
    else:
        record.parse_result = ParseResult.OK
        if logger:
            logger.debug(f"[{model}] Parsed OK: {domain} → {parser_name} ({record.record_count})")

    return result, record


def _indent(text: str, prefix: str = "    ") -> str:
    return "\n".join(prefix + line for line in text.splitlines())


# ============================================================
# Diagnostic Dump Formats
# ============================================================

def dump_parse_summary(record: ParseRecord) -> str:
    """One-line summary for verbose output."""
    icon = {
        ParseResult.OK: "✓",
        ParseResult.PARTIAL: "~",
        ParseResult.NO_MATCH: "○",
        ParseResult.EMPTY_INPUT: "○",
        ParseResult.PARSE_ERROR: "✗",
        ParseResult.EXCEPTION: "✗",
    }.get(record.parse_result, "?")
    detail = f" ({record.parse_detail})" if record.parse_detail else ""
    return (
        f"[{icon}] {record.domain} on {record.model} via {record.parser_used}: "
        f"{record.record_count} record(s){detail}"
    )
