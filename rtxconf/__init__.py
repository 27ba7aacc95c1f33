"""rtxconf — Yamaha RTX configuration text ⇄ typed records."""
from .errors import (
    RtxConfError, ParseError, ValidationError, NotFoundError,
    SynthesisError, ApplyError, PartialApplyError,
)
from .options import Arity, Keyword, OptionGrammar, OptionSet, Strictness
from .registry import Registry, new_registry, ALL_DOMAINS, SUPPORTED_MODELS
from .commands import CommandPlan, build_create_commands, build_delete_commands, build_update_plan
from .validation import validate
from .translator import ConfigTranslator, TranslatorConfig

__version__ = "0.1.0"

__all__ = [
    "RtxConfError", "ParseError", "ValidationError", "NotFoundError",
    "SynthesisError", "ApplyError", "PartialApplyError",
    "Arity", "Keyword", "OptionGrammar", "OptionSet", "Strictness",
    "Registry", "new_registry", "ALL_DOMAINS", "SUPPORTED_MODELS",
    "CommandPlan", "build_create_commands", "build_delete_commands", "build_update_plan",
    "validate",
    "ConfigTranslator", "TranslatorConfig",
]
