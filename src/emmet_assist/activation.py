"""Activation context: may an abbreviation start at a position, and how.

For example, in ``<div title="Sample" style="">Hello world</div>`` it is not
allowed to expand abbreviations inside ``<div ...>`` or ``</div>``, yet it is
allowed inside the ``style`` attribute and between tags.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from emmet_assist.context import get_css_context, get_html_context
from emmet_assist.context_types import CSSContext, HTMLContext
from emmet_assist.output import get_output_options
from emmet_assist.syntax import (
    AbbreviationContext,
    SyntaxType,
    doc_syntax,
    get_markup_abbreviation_context,
    get_stylesheet_abbreviation_context,
    get_syntax_type,
    is_html,
    syntax_info,
)

if TYPE_CHECKING:
    from emmet_assist.document import EditorState


@dataclass(frozen=True, slots=True)
class ActivationOptions:
    """Syntax, abbreviation type, expansion context and output options."""

    syntax: str
    type: SyntaxType
    context: AbbreviationContext | None = None
    options: dict[str, Any] = field(default_factory=dict)
    # Content lines to wrap; expanded into the innermost element of the abbreviation
    text: tuple[str, ...] | None = None


def get_activation_context(state: EditorState, pos: int) -> ActivationOptions | None:
    """Returns expansion options if an abbreviation may start at ``pos``."""
    syntax = doc_syntax(state)
    if state.tree.is_active("css", pos):
        # Stylesheet dialects keep their own syntax name, embedded CSS is plain css
        css_syntax = syntax if get_syntax_type(syntax) == "stylesheet" else "css"
        return _css_activation_context(state, pos, css_syntax, get_css_context(state, pos))

    if is_html(syntax):
        ctx = get_html_context(state, pos)
        if ctx.css is not None:
            return _css_activation_context(state, pos, "css", ctx.css)

        if ctx.current is None:
            return ActivationOptions(
                syntax=syntax,
                type="markup",
                context=get_markup_abbreviation_context(state, ctx),
                options=get_output_options(state, pos),
            )
        return None

    return ActivationOptions(
        syntax=syntax,
        type=get_syntax_type(syntax),
        options=get_output_options(state, pos),
    )


def _css_activation_context(state: EditorState, pos: int, syntax: str, ctx: CSSContext) -> ActivationOptions | None:
    current = ctx.current
    allowed = (
        current is None
        or current.kind in ("property-name", "property-value")
        or is_typing_before_selector(state, pos, ctx)
    )
    if not allowed:
        return None

    return ActivationOptions(
        syntax=syntax,
        type="stylesheet",
        context=get_stylesheet_abbreviation_context(ctx),
        options=get_output_options(state, pos, ctx.inline),
    )


def is_typing_before_selector(state: EditorState, pos: int, ctx: CSSContext) -> bool:
    """Typed character became the first one of a selector on its own line.

    Leading and trailing whitespace on that line is ignored.
    """
    current = ctx.current
    if current is None or current.kind != "selector" or current.range.start != pos - 1:
        return False
    return len(state.line_at(current.range.start).text.strip()) == 1


def get_options(state: EditorState, pos: int) -> ActivationOptions:
    """Expansion options at ``pos`` without the activation check.

    Used by explicit expansion, which is allowed wherever an abbreviation
    can be extracted.
    """
    info = syntax_info(state, pos)
    context = info.context
    abbr_context: AbbreviationContext | None = None
    if isinstance(context, HTMLContext) and context.ancestors:
        abbr_context = get_markup_abbreviation_context(state, context)
    elif isinstance(context, CSSContext):
        abbr_context = get_stylesheet_abbreviation_context(context)

    return ActivationOptions(
        syntax=info.syntax or "html",
        type=info.type,
        context=abbr_context,
        options=get_output_options(state, pos, info.inline),
    )
