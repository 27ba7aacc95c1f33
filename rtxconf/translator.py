"""
RTX Config Translator — Orchestration Facade

Ties the pieces together for one target device model:

    raw text ──parse──▶ record ──validate──▶ record ──build──▶ CommandPlan ──apply──▶ transport

The translator owns a Registry (built once at construction unless one is
passed in) and a SessionDiagnostic collecting every parse and every
command pushed. It does no I/O of its own: `apply()` takes a `send`
callable supplied by the caller: an SSH session, a console, a test stub.

Partial failure:
    A recreate plan deletes first. If a create command fails after the
    delete half went through, apply() raises PartialApplyError carrying
    what was applied and what was left pending. It never reports success
    for a half-applied plan.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Callable, Optional
import logging

from .commands import (
    CommandPlan, SHOW_COMMANDS,
    build_create_commands, build_delete_commands, build_update_plan,
)
from .diagnostics import (
    CommandRecord, CommandStatus, ParseRecord, SessionDiagnostic,
    parse_with_diagnostics, sanitize_command, setup_logging,
)
from .errors import ApplyError, PartialApplyError, ParseError, RtxConfError
from .parsers import get_parser_name
from .registry import Registry, new_registry, normalize_model, is_model_supported
from .validation import validate as validate_record

logger = logging.getLogger("rtxconf.translator")

SendFunc = Callable[[str], None]


# ============================================================
# Configuration
# ============================================================

@dataclass
class TranslatorConfig:
    model: str

    # Diagnostics
    log_file: Optional[str] = None
    verbose: bool = False
    debug: bool = False

    # Run the domain validator before building create/update commands.
    # Off only for inspecting device state that would not pass write-back.
    validate_before_build: bool = True


# ============================================================
# Translator
# ============================================================

class ConfigTranslator:
    """Parse, validate, synthesize and apply for one device model."""

    def __init__(
        self,
        config: TranslatorConfig,
        registry: Optional[Registry] = None,
        configure_logging: bool = False,
    ):
        self.config = config
        self.model = normalize_model(config.model)
        self.registry = registry if registry is not None else new_registry()
        self.diagnostic = SessionDiagnostic(model=self.model)

        if configure_logging:
            setup_logging(
                log_file=config.log_file,
                debug=config.debug,
                verbose=config.verbose,
            )

        if not is_model_supported(self.model):
            logger.warning(f"model {self.model!r} is not in the supported model list")

    # ── parse ──

    def parser_for(self, domain: str) -> Any:
        """Raises NotFoundError for an unknown (domain, model)."""
        return self.registry.resolve(domain, self.model)

    def parse(self, domain: str, raw: str, errors: Optional[list[ParseError]] = None) -> Any:
        """Parse raw text. Raises ParseError (strict domains) or NotFoundError."""
        parser = self.parser_for(domain)
        logger.debug(f"parsing {domain} for {self.model} with {get_parser_name(parser)}")
        return parser.parse(raw, errors)

    def parse_with_diagnostics(self, domain: str, raw: str) -> tuple[Any, ParseRecord]:
        """
        Like parse() but never raises for parser failures; the outcome is in
        the returned ParseRecord. A registry miss still raises NotFoundError.
        """
        parser = self.parser_for(domain)
        result, record = parse_with_diagnostics(
            domain=domain,
            model=self.model,
            raw_input=raw,
            parser=parser,
            parser_name=get_parser_name(parser),
            logger=logger,
        )
        self.diagnostic.parses.append(record)
        return result, record

    def show_command(self, domain: str) -> str:
        """Device command whose output the domain parser expects."""
        command = SHOW_COMMANDS.get(domain)
        if command is None:
            raise RtxConfError(f"no show command for domain {domain!r}")
        return command

    # ── validate / build ──

    def validate(self, record: Any) -> None:
        validate_record(record)

    def build_create(self, record: Any) -> list[str]:
        if self.config.validate_before_build:
            self.validate(record)
        commands = build_create_commands(record)
        self._log_commands("create", commands)
        return commands

    def build_delete(self, record: Any) -> list[str]:
        commands = build_delete_commands(record)
        self._log_commands("delete", commands)
        return commands

    def build_update(self, old: Any, new: Any) -> CommandPlan:
        if self.config.validate_before_build:
            self.validate(new)
        plan = build_update_plan(old, new)
        self._log_commands("update", plan.commands)
        return plan

    def _log_commands(self, action: str, commands: list[str]) -> None:
        for command in commands:
            logger.debug(f"{action}: {sanitize_command(command)}")

    # ── apply ──

    def apply(self, plan: CommandPlan, send: SendFunc) -> list[str]:
        """
        Push a plan through `send`, delete half first.

        Returns the commands applied. Raises ApplyError if nothing of a
        recreate went through, PartialApplyError if the delete half did
        but the create half did not.
        """
        applied: list[str] = []
        steps = [("delete", c) for c in plan.delete] + [("create", c) for c in plan.create]

        for index, (phase, command) in enumerate(steps):
            try:
                send(command)
            except Exception as e:
                self._record(command, phase, CommandStatus.ERROR, str(e))
                pending = steps[index + 1:]
                for skipped_phase, skipped in pending:
                    self._record(skipped, skipped_phase, CommandStatus.SKIPPED)
                remaining = [command] + [c for _, c in pending]

                if phase == "create" and plan.delete:
                    logger.error(
                        f"partial apply: delete half done, create failed at "
                        f"{sanitize_command(command)!r}: {e}"
                    )
                    raise PartialApplyError(
                        f"object deleted but not recreated: {e}",
                        command=command,
                        applied=applied,
                        pending=remaining,
                    ) from e

                logger.error(f"apply failed at {sanitize_command(command)!r}: {e}")
                raise ApplyError(f"command failed: {e}", command=command, applied=applied) from e

            applied.append(command)
            self._record(command, phase, CommandStatus.SUCCESS)

        logger.info(f"applied {len(applied)} command(s) on {self.model}")
        return applied

    def _record(
        self,
        command: str,
        phase: str,
        status: CommandStatus,
        error: str = "",
    ) -> None:
        self.diagnostic.commands.append(CommandRecord(
            command=sanitize_command(command),
            status=status,
            phase=phase,
            error_message=error,
        ))
