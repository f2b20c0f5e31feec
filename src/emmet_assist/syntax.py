"""Emmet syntax families and abbreviation scopes."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal, TypeAlias

from emmet.stylesheet import CSSAbbreviationScope

from emmet_assist.context import get_context, get_tag_attributes
from emmet_assist.context_types import Context, CSSContext, HTMLContext
from emmet_assist.syntax_tree import find_ancestor

if TYPE_CHECKING:
    from emmet_assist.document import EditorState

SyntaxType: TypeAlias = Literal["markup", "stylesheet"]

HTML_SYNTAXES: tuple[str, ...] = ("html", "vue")
JSX_SYNTAXES: tuple[str, ...] = ("jsx", "tsx")
XML_SYNTAXES: tuple[str, ...] = ("xml", "xsl", *JSX_SYNTAXES)
CSS_SYNTAXES: tuple[str, ...] = ("css", "scss", "less")
MARKUP_SYNTAXES: tuple[str, ...] = ("haml", "jade", "pug", "slim", *HTML_SYNTAXES, *XML_SYNTAXES)
STYLESHEET_SYNTAXES: tuple[str, ...] = ("sass", "sss", "stylus", "postcss", *CSS_SYNTAXES)


@dataclass(frozen=True, slots=True)
class AbbreviationContext:
    """Expansion context: parent tag name or a stylesheet scope."""

    name: str
    attributes: dict[str, str | None] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class SyntaxInfo:
    type: SyntaxType
    syntax: str
    inline: bool = False
    context: Context | None = None


def get_syntax_type(syntax: str | None) -> SyntaxType:
    return "stylesheet" if syntax in STYLESHEET_SYNTAXES else "markup"


def is_xml(syntax: str) -> bool:
    return syntax in XML_SYNTAXES


def is_html(syntax: str) -> bool:
    """HTML dialects, XML ones included."""
    return syntax in HTML_SYNTAXES or is_xml(syntax)


def is_css(syntax: str) -> bool:
    """CSS dialects. SASS is a stylesheet syntax but not a CSS dialect."""
    return syntax in CSS_SYNTAXES


def is_jsx(syntax: str) -> bool:
    return syntax in JSX_SYNTAXES


def is_supported(syntax: str) -> bool:
    return syntax in MARKUP_SYNTAXES or syntax in STYLESHEET_SYNTAXES


def doc_syntax(state: EditorState) -> str:
    return state.config.syntax


def syntax_info(state: EditorState, ctx: int | Context | None = None) -> SyntaxInfo:
    """Abbreviation type and syntax for a position or a resolved context."""
    syntax = doc_syntax(state)
    inline = False
    context = get_context(state, ctx) if isinstance(ctx, int) else ctx

    if isinstance(context, HTMLContext) and context.css is not None:
        inline = True
        syntax = "css"
        context = context.css
    elif isinstance(context, CSSContext):
        syntax = "css"

    return SyntaxInfo(type=get_syntax_type(syntax), syntax=syntax, inline=inline, context=context)


def get_markup_abbreviation_context(state: EditorState, ctx: HTMLContext) -> AbbreviationContext | None:
    """Innermost ancestor tag with its attributes, re-read from the tree."""
    if not ctx.ancestors:
        return None

    parent = ctx.ancestors[-1]
    node = find_ancestor(state.tree.resolve(parent.range.start, 1), "OpenTag")
    return AbbreviationContext(
        name=parent.name,
        attributes=get_tag_attributes(state, node) if node is not None else {},
    )


def get_stylesheet_abbreviation_context(ctx: CSSContext) -> AbbreviationContext:
    if ctx.inline:
        return AbbreviationContext(CSSAbbreviationScope.Property)

    parent = ctx.ancestors[-1] if ctx.ancestors else None
    scope = CSSAbbreviationScope.Global
    if ctx.current is not None:
        if ctx.current.kind == "property-value" and parent is not None:
            scope = parent.name
        elif ctx.current.kind in ("selector", "property-name") and parent is None:
            scope = CSSAbbreviationScope.Section
    elif parent is None:
        scope = CSSAbbreviationScope.Section

    return AbbreviationContext(scope)
