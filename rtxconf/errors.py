"""
RTX Config Translator — Error Taxonomy

Four distinct failure classes, never conflated:
  ParseError       malformed input line (structural decomposition failed)
  ValidationError  record parsed fine but a value is out of range / bad enum
  NotFoundError    registry has no parser for (domain, model)
  SynthesisError   record is missing a field needed to emit a command

Plus the apply-time pair used by the translator when a command plan
is pushed through a caller-supplied transport.
"""

from __future__ import annotations
from typing import Optional


class RtxConfError(Exception):
    """Base for everything this package raises."""


class ParseError(RtxConfError):
    """A line matched a domain's prefix but could not be decomposed."""

    def __init__(
        self,
        message: str,
        line: Optional[str] = None,
        line_number: Optional[int] = None,
    ):
        self.message = message
        self.line = line
        self.line_number = line_number
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.line is None:
            return self.message
        where = f"line {self.line_number}" if self.line_number else "line"
        return f"{self.message} ({where}: {self.line!r})"


class ValidationError(RtxConfError):
    """A field value failed a semantic check."""

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")


class NotFoundError(RtxConfError):
    """No parser registered for the (domain, model) pair."""

    def __init__(self, domain: str, model: str):
        self.domain = domain
        self.model = model
        super().__init__(f"no parser registered for domain {domain!r} on model {model!r}")


class SynthesisError(RtxConfError):
    """Record is incomplete; no command text was produced."""


class ApplyError(RtxConfError):
    """A command in a plan was rejected by the transport."""

    def __init__(self, message: str, command: str, applied: Optional[list[str]] = None):
        self.command = command
        self.applied = list(applied or [])
        super().__init__(message)


class PartialApplyError(ApplyError):
    """
    Delete half of a recreate went through, create half did not.

    The device is now missing the object; callers must surface this
    rather than report success.
    """

    def __init__(
        self,
        message: str,
        command: str,
        applied: list[str],
        pending: list[str],
    ):
        super().__init__(message, command, applied)
        self.pending = list(pending)
