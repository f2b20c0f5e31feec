"""Shared fixtures: editor state factory and a deterministic expander double."""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

import pytest

from emmet_assist.activation import ActivationOptions
from emmet_assist.config import EmmetConfig
from emmet_assist.document import EditorState
from emmet_assist.expander import (
    AbbreviationError,
    ExtractedAbbreviation,
    ParsedAbbreviation,
    is_simple_markup_abbreviation,
)
from emmet_assist.syntax import SyntaxType

_ELEMENT_RE = re.compile(r"^([\w:-]*)((?:[.#][\w-]+)*)(?:\*(\d+))?$")
_STYLESHEET_SNIPPETS = {
    "p": "padding: ${0};",
    "p10": "padding: 10px;",
    "m": "margin: ${0};",
    "c": "color: #${0:000};",
}
_SECTION_SNIPPETS = {"@m": "@media ${0:screen} {\n}"}
_FIELD_RE = re.compile(r"\$\{0(?::([^}]*))?\}")


def _plain_field(index: int, placeholder: str, **kwargs: Any) -> str:
    return placeholder


@dataclass
class FakeNode:
    name: str
    classes: list[str] = field(default_factory=list)
    id: str = ""
    repeat: int = 1
    children: list[FakeNode] = field(default_factory=list)


def parse_fake_markup(abbreviation: str) -> list[FakeNode]:
    """Tiny subset of abbreviation syntax: ``+`` siblings, ``>`` nesting,
    ``.class``, ``#id`` and ``*N``."""
    for opening, closing in ("[]", "()", "{}"):
        if abbreviation.count(opening) != abbreviation.count(closing):
            raise AbbreviationError(f"Unclosed {opening} at {abbreviation.find(opening)}", abbreviation.find(opening))
    if abbreviation and abbreviation[-1] in ">+*":
        raise AbbreviationError(f"Unexpected end of abbreviation at {len(abbreviation)}", len(abbreviation))

    roots: list[FakeNode] = []
    for sibling in abbreviation.split("+"):
        parent_list = roots
        for part in sibling.split(">"):
            match = _ELEMENT_RE.match(part)
            if match is None:
                pos = abbreviation.find(part)
                raise AbbreviationError(f"Unexpected character at {pos}", pos)
            name, attrs, repeat = match.groups()
            node = FakeNode(
                name=name,
                classes=re.findall(r"\.([\w-]+)", attrs),
                id=next(iter(re.findall(r"#([\w-]+)", attrs)), ""),
                repeat=int(repeat or 1),
            )
            parent_list.append(node)
            parent_list = node.children
    return roots


class FakeExpander:
    """``Expander`` double with predictable output and a call log."""

    def __init__(self) -> None:
        self.calls: list[tuple[Any, ...]] = []

    def parse_markup(
        self, abbreviation: str, options: ActivationOptions, config: EmmetConfig | None = None,
    ) -> ParsedAbbreviation:
        self.calls.append(("parse_markup", abbreviation))
        nodes = parse_fake_markup(abbreviation)
        return ParsedAbbreviation(
            abbreviation=abbreviation,
            type="markup",
            simple=is_simple_markup_abbreviation(nodes),
            payload=nodes,
        )

    def parse_stylesheet(
        self, abbreviation: str, options: ActivationOptions, config: EmmetConfig | None = None,
    ) -> ParsedAbbreviation:
        self.calls.append(("parse_stylesheet", abbreviation))
        for ch in "{};":
            if ch in abbreviation:
                pos = abbreviation.index(ch)
                raise AbbreviationError(f"Unexpected {ch} at {pos}", pos)
        return ParsedAbbreviation(abbreviation=abbreviation, type="stylesheet")

    def expand(
        self,
        abbreviation: str | ParsedAbbreviation,
        options: ActivationOptions,
        config: EmmetConfig,
        *,
        preview: bool = False,
    ) -> str:
        source = abbreviation.abbreviation if isinstance(abbreviation, ParsedAbbreviation) else abbreviation
        self.calls.append(("expand", source, preview))
        fill = options.options.get("output.field")
        if preview or fill is None:
            fill = _plain_field

        if options.type == "stylesheet":
            return self._expand_stylesheet(source, options, fill)

        counter = [0]

        def render(node: FakeNode) -> str:
            attrs = ""
            if node.id:
                attrs += f' id="{node.id}"'
            if node.classes:
                attrs += f' class="{" ".join(node.classes)}"'
            name = node.name or "div"
            if node.children:
                inner = "".join(render(child) for child in node.children)
            else:
                counter[0] += 1
                inner = fill(counter[0], "")
            return f"<{name}{attrs}>{inner}</{name}>" * node.repeat

        return "".join(render(node) for node in parse_fake_markup(source))

    def _expand_stylesheet(self, source: str, options: ActivationOptions, fill: Any) -> str:
        scope = options.context.name if options.context is not None else "@@global"
        if source.startswith("#") and not scope.startswith("@@section"):
            digits = source[1:] or "0"
            return "#" + (digits * 3 if len(digits) == 1 else digits)

        if scope == "@@section":
            snippet = _SECTION_SNIPPETS.get(source, "")
        elif scope.startswith("@@"):
            snippet = _STYLESHEET_SNIPPETS.get(source, "")
        else:
            # Property value scope: keywords only
            snippet = ""
        return _FIELD_RE.sub(lambda m: fill(1, m.group(1) or ""), snippet)

    def extract(self, line: str, pos: int, syntax_type: SyntaxType = "markup") -> ExtractedAbbreviation | None:
        self.calls.append(("extract", line, pos))
        start = pos
        while start > 0 and not line[start - 1].isspace():
            start -= 1
        if start == pos:
            return None
        return ExtractedAbbreviation(abbreviation=line[start:pos], start=start, end=pos, location=start)

    def reset_cache(self) -> None:
        self.calls.append(("reset_cache",))


def make_state(text: str, syntax: str = "html", caret: int | None = None, **config: Any) -> EditorState:
    """Editor state; a ``|`` in ``text`` marks the caret when ``caret`` is omitted."""
    if caret is None and "|" in text:
        caret = text.index("|")
        text = text.replace("|", "", 1)
    return EditorState.create(text, EmmetConfig(syntax=syntax, **config), caret=caret)


@pytest.fixture
def expander() -> FakeExpander:
    return FakeExpander()
