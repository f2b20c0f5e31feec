"""Expander contract: abbreviation parsing, expansion and extraction.

The tracker and commands depend on the ``Expander`` protocol only, so the
state machine can be driven without a real abbreviation engine.
Implementations raise ``AbbreviationError`` for malformed input and nothing
else.
"""
from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

from emmet_assist.syntax import SyntaxType

if TYPE_CHECKING:
    from emmet_assist.activation import ActivationOptions
    from emmet_assist.config import EmmetConfig

_WORD_START_RE = re.compile(r"^[a-z]", re.IGNORECASE)
_TRAILING_POS_RE = re.compile(r"\s+at\s+\d+$")


class AbbreviationError(ValueError):
    """Malformed abbreviation; ``pos`` is the offending offset."""

    def __init__(self, message: str, pos: int = 0) -> None:
        super().__init__(message)
        self.message = message
        self.pos = pos


@dataclass(frozen=True, slots=True)
class ParsedAbbreviation:
    abbreviation: str
    type: SyntaxType
    simple: bool = False
    # Implementation-specific parse result; expanding a ParsedAbbreviation
    # renders it without parsing the source again
    payload: Any = None


@dataclass(frozen=True, slots=True)
class ExtractedAbbreviation:
    """Abbreviation found in a line; offsets are relative to the line."""

    abbreviation: str
    start: int
    end: int
    location: int


class Expander(Protocol):
    def parse_markup(
        self, abbreviation: str, options: ActivationOptions, config: EmmetConfig | None = None,
    ) -> ParsedAbbreviation: ...

    def parse_stylesheet(
        self, abbreviation: str, options: ActivationOptions, config: EmmetConfig | None = None,
    ) -> ParsedAbbreviation: ...

    def expand(
        self,
        abbreviation: str | ParsedAbbreviation,
        options: ActivationOptions,
        config: EmmetConfig,
        *,
        preview: bool = False,
    ) -> str: ...

    def extract(self, line: str, pos: int, syntax_type: SyntaxType = "markup") -> ExtractedAbbreviation | None: ...

    def reset_cache(self) -> None: ...


def is_simple_markup_abbreviation(children: Sequence[Any]) -> bool:
    """Single element without children that looks like a plain tag or text.

    Works on any node objects exposing ``name`` and ``children``.
    """
    if len(children) == 1 and not children[0].children:
        name = children[0].name
        return not name or bool(_WORD_START_RE.match(name))
    return not children


def error_message(error: AbbreviationError) -> str:
    """First line of the error message without the trailing ``at N``."""
    first = error.message.split("\n")[0]
    return _TRAILING_POS_RE.sub("", first)
