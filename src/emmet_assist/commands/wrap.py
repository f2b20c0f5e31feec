"""Wrap the selection, or the tag at the caret, with an abbreviation."""

from __future__ import annotations

import dataclasses
import logging
from typing import TYPE_CHECKING

from emmet_assist.activation import get_options
from emmet_assist.context import get_tag_context
from emmet_assist.document import ChangeSpec, CommandResult
from emmet_assist.expander import AbbreviationError, Expander
from emmet_assist.output import get_selections_from_snippet, line_indent
from emmet_assist.ranges import Range, narrow_to_non_space, substr

if TYPE_CHECKING:
    from emmet_assist.context_types import ContextTag
    from emmet_assist.document import EditorState

log = logging.getLogger(__name__)


def wrap_with_abbreviation(state: EditorState, abbreviation: str, expander: Expander) -> CommandResult | None:
    """Replace the wrap range of the main selection with ``abbreviation`` expanded around it.

    The wrapped content keeps its lines; they are de-indented relative to
    the line the range starts on. The caret lands on the first tab stop.
    """
    if not abbreviation:
        return None

    sel = state.main_selection
    wrap_range = get_wrap_range(state, sel, get_tag_context(state, sel.start))
    options = dataclasses.replace(
        get_options(state, wrap_range.start),
        text=get_content(state, wrap_range),
    )
    try:
        expanded = expander.expand(abbreviation, options, state.config)
    except AbbreviationError as err:
        log.debug("Cannot wrap with %r: %s", abbreviation, err.message)
        return None

    ranges, snippet = get_selections_from_snippet(expanded, wrap_range.start)
    first = ranges[0]
    return CommandResult(
        changes=(ChangeSpec(wrap_range.start, wrap_range.end, snippet),),
        selection=(Range(first.start, first.end),),
    )


def get_wrap_range(state: EditorState, sel: Range, context: ContextTag | None) -> Range:
    """Range to wrap for ``sel``.

    A non-empty selection is wrapped as is. A caret inside the open or close
    tag wraps the whole element; elsewhere it wraps the element content.
    """
    if not sel.empty or context is None:
        return sel

    open_tag, close_tag = context.open, context.close
    pos = sel.start
    if _in_range(open_tag, pos) or (close_tag is not None and _in_range(close_tag, pos)):
        return Range(open_tag.start, close_tag.end if close_tag is not None else open_tag.end)
    if close_tag is not None:
        return narrow_to_non_space(state.text, Range(open_tag.end, close_tag.start))
    return sel


def _in_range(r: Range, pos: int) -> bool:
    return r.start < pos < r.end


def get_content(state: EditorState, r: Range) -> tuple[str, ...]:
    """Lines of ``r`` without the indentation of the line it starts on."""
    base_indent = line_indent(state.line_at(r.start))
    return tuple(
        line[len(base_indent):] if line.startswith(base_indent) else line
        for line in substr(state.text, r).split("\n")
    )
