"""Expander output options and tab-stop handling."""
from __future__ import annotations

import re
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, TypeAlias

from emmet_assist.ranges import Range
from emmet_assist.syntax import is_html

if TYPE_CHECKING:
    from emmet_assist.document import EditorState, Line

# Markers for tab stop start and end in expanded snippets
TAB_STOP_START = "\ufff0"
TAB_STOP_END = "\ufff1"

_INDENT_RE = re.compile(r"^\s+")

FieldFn: TypeAlias = Callable[..., str]


def get_output_options(state: EditorState, pos: int | None = None, inline: bool = False) -> dict[str, Any]:
    """Expander options for the line at ``pos`` (caret by default)."""
    config = state.config
    syntax = config.syntax or "html"
    if pos is None:
        pos = state.caret

    opt: dict[str, Any] = {
        "output.baseIndent": line_indent(state.line_at(pos)),
        "output.indent": get_indentation(state),
        "output.field": field(),
        "output.format": not inline,
        "output.attributeQuotes": config.attribute_quotes,
        "stylesheet.shortHex": config.short_hex,
    }

    if syntax == "html":
        opt["output.selfClosingStyle"] = config.markup_style
        opt["output.compactBoolean"] = config.markup_style == "html"

    if is_html(syntax):
        if config.comments:
            opt["comment.enabled"] = True
            if config.comments_template:
                opt["comment.after"] = config.comments_template
        opt["bem.enabled"] = config.bem

    return opt


def field() -> FieldFn:
    """Tab stop factory: only the first field index gets selection markers."""
    handled = -1

    def _field(index: int, placeholder: str, **kwargs: Any) -> str:
        nonlocal handled
        if handled == -1 or handled == index:
            handled = index
            return TAB_STOP_START + placeholder + TAB_STOP_END if placeholder else TAB_STOP_START
        return placeholder or ""

    return _field


def preview_field(index: int, placeholder: str, **kwargs: Any) -> str:
    return placeholder


def preview_options(options: dict[str, Any]) -> dict[str, Any]:
    """Copy of ``options`` rendering plain text instead of an editable snippet."""
    return {
        **options,
        "output.field": preview_field,
        "output.indent": "  ",
        "output.baseIndent": "",
    }


def line_indent(line: Line) -> str:
    m = _INDENT_RE.match(line.text)
    return m.group(0) if m else ""


def get_indentation(state: EditorState) -> str:
    """Single indentation unit for the editor."""
    return " " * state.tab_size if state.tab_size else "\t"


def get_selections_from_snippet(snippet: str, base: int = 0) -> tuple[list[Range], str]:
    """Strip tab-stop markers from ``snippet`` and return their ranges.

    Ranges are shifted by ``base``. When the snippet has no tab stops, a single
    caret at its end is returned.
    """
    ranges: list[Range] = []
    parts: list[str] = []
    length = 0
    sel_start: int | None = None
    offset = 0

    for i, ch in enumerate(snippet):
        if ch != TAB_STOP_START and ch != TAB_STOP_END:
            continue
        chunk = snippet[offset:i]
        parts.append(chunk)
        length += len(chunk)
        offset = i + 1

        if ch == TAB_STOP_START:
            if sel_start is not None:
                ranges.append(Range(sel_start, sel_start))
            sel_start = base + length
        elif sel_start is not None:
            ranges.append(Range(sel_start, base + length))
            sel_start = None

    if sel_start is not None:
        ranges.append(Range(sel_start, sel_start))

    parts.append(snippet[offset:])
    result = "".join(parts)
    if not ranges:
        ranges.append(Range(base + len(result), base + len(result)))

    return ranges, result
