"""
RTX Config Translator — Option-Grammar Tokenizer

RTX commands end in free-form option tails:

  ip route 10.0.0.0/8 gateway 192.168.1.1 weight 2 hide
  dhcp scope 1 192.168.0.2-192.168.0.191/24 gateway 192.168.0.1 dns 8.8.8.8 8.8.4.4 expire 12:00
  ipv6 lan1 rtadv send 1 o_flag=on m_flag=off lifetime=1800
  user attribute admin administrator=on connection=ssh,http

Each domain declares a keyword table; the grammar folds the tail
left-to-right into an OptionSet. Two independent strictness knobs:

  unknown  — what to do with a token that is not a keyword
  values   — what to do when a keyword's value fails conversion

LENIENT skips (forward-compatible with firmware that emits flags we do
not model); STRICT raises ParseError. Domains pick per knob.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Iterable, Optional
import logging

from .errors import ParseError

logger = logging.getLogger("rtxconf.options")


class Arity(Enum):
    FLAG = "flag"           # `hide`               → True
    SINGLE = "single"       # `weight 2`           → converted value
    GREEDY = "greedy"       # `dns a b c`          → list, stops at next keyword
    ASSIGN = "assign"       # `o_flag=on`          → converted right-hand side


class Strictness(Enum):
    LENIENT = "lenient"
    STRICT = "strict"


@dataclass(frozen=True)
class Keyword:
    """One entry in a domain's keyword table."""
    name: str
    arity: Arity = Arity.SINGLE
    convert: Optional[Callable[[str], Any]] = None
    repeat: bool = False                # accumulate occurrences into a list
    dest: Optional[str] = None          # result key, when it differs from name

    @property
    def key(self) -> str:
        return self.dest or self.name


@dataclass
class OptionSet:
    """
    Parsed option tail.

    A key missing from `values` was not specified. A key present with an
    empty list or False was explicitly given that way on the line.
    """
    values: dict[str, Any] = field(default_factory=dict)
    unknown: list[str] = field(default_factory=list)
    positional: list[str] = field(default_factory=list)

    def get(self, key: str, default: Any = None) -> Any:
        return self.values.get(key, default)

    def __contains__(self, key: str) -> bool:
        return key in self.values

    def __getitem__(self, key: str) -> Any:
        return self.values[key]

    def flag(self, key: str) -> bool:
        return bool(self.values.get(key, False))


class OptionGrammar:
    """
    Keyword table plus strictness policy for one domain.

    Instances are immutable after construction and safe to share.
    """

    def __init__(
        self,
        keywords: Iterable[Keyword],
        unknown: Strictness = Strictness.LENIENT,
        values: Strictness = Strictness.LENIENT,
        positional: int = 0,
        name: str = "options",
    ):
        self.name = name
        self.unknown = unknown
        self.values = values
        self.positional = positional
        self._keywords: dict[str, Keyword] = {}
        self._assign: dict[str, Keyword] = {}
        for kw in keywords:
            if kw.arity == Arity.ASSIGN:
                self._assign[kw.name] = kw
            else:
                self._keywords[kw.name] = kw

    @property
    def keywords(self) -> list[str]:
        return sorted(set(self._keywords) | set(self._assign))

    def is_keyword(self, token: str) -> bool:
        if token in self._keywords:
            return True
        key, sep, _ = token.partition("=")
        return bool(sep) and key in self._assign

    def parse(self, tail: str | list[str]) -> OptionSet:
        """
        Fold a tail into an OptionSet.

        `positional` leading tokens are taken verbatim before keyword
        matching begins (e.g. the prefix ids after `rtadv send`).
        """
        tokens = tail.split() if isinstance(tail, str) else list(tail)
        result = OptionSet()

        i = 0
        while i < len(tokens) and len(result.positional) < self.positional:
            if self.is_keyword(tokens[i]):
                break
            result.positional.append(tokens[i])
            i += 1

        while i < len(tokens):
            token = tokens[i]

            kw = self._keywords.get(token)
            if kw is not None:
                i = self._consume(kw, tokens, i + 1, result)
                continue

            key, sep, raw_value = token.partition("=")
            if sep and key in self._assign:
                self._store(self._assign[key], raw_value, result)
                i += 1
                continue

            self._unknown_token(token, result)
            i += 1

        return result

    # ── internals ──

    def _consume(self, kw: Keyword, tokens: list[str], i: int, result: OptionSet) -> int:
        if kw.arity == Arity.FLAG:
            self._set(kw, True, result)
            return i

        if kw.arity == Arity.SINGLE:
            if i >= len(tokens) or self.is_keyword(tokens[i]):
                self._bad_value(kw, None, "missing value")
                return i
            self._store(kw, tokens[i], result)
            return i + 1

        # GREEDY: everything up to the next recognised keyword
        collected = []
        while i < len(tokens) and not self.is_keyword(tokens[i]):
            collected.append(tokens[i])
            i += 1
        converted = []
        for raw in collected:
            value = self._convert(kw, raw)
            if value is not _SKIP:
                converted.append(value)
        if kw.repeat and kw.key in result.values:
            result.values[kw.key].extend(converted)
        else:
            result.values[kw.key] = converted
        return i

    def _store(self, kw: Keyword, raw: str, result: OptionSet) -> None:
        value = self._convert(kw, raw)
        if value is not _SKIP:
            self._set(kw, value, result)

    def _set(self, kw: Keyword, value: Any, result: OptionSet) -> None:
        if kw.repeat:
            result.values.setdefault(kw.key, []).append(value)
        else:
            result.values[kw.key] = value

    def _convert(self, kw: Keyword, raw: str) -> Any:
        if kw.convert is None:
            return raw
        try:
            return kw.convert(raw)
        except ValueError as e:
            self._bad_value(kw, raw, str(e))
            return _SKIP

    def _bad_value(self, kw: Keyword, raw: Optional[str], reason: str) -> None:
        if self.values == Strictness.STRICT:
            raise ParseError(f"{self.name}: bad value {raw!r} for {kw.name!r}: {reason}")
        logger.debug(f"{self.name}: skipping {kw.name}={raw!r} ({reason})")

    def _unknown_token(self, token: str, result: OptionSet) -> None:
        if self.unknown == Strictness.STRICT:
            raise ParseError(f"{self.name}: unrecognised option {token!r}")
        result.unknown.append(token)
        logger.debug(f"{self.name}: ignoring unrecognised option {token!r}")


class _Skip:
    def __repr__(self) -> str:
        return "<skip>"


_SKIP = _Skip()
