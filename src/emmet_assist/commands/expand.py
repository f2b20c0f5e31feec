"""Expand the abbreviation left of the caret."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from emmet_assist.activation import get_options
from emmet_assist.document import ChangeSpec, CommandResult
from emmet_assist.expander import AbbreviationError, Expander
from emmet_assist.output import get_selections_from_snippet
from emmet_assist.ranges import Range

if TYPE_CHECKING:
    from emmet_assist.document import EditorState

log = logging.getLogger(__name__)


def expand_abbreviation(state: EditorState, expander: Expander) -> CommandResult | None:
    """Replace the abbreviation on the caret line with its expansion.

    The caret lands on the first tab stop of the expanded snippet.
    """
    sel = state.main_selection
    if not sel.empty:
        log.debug("Skip expansion due to non-empty selection")
        return None

    line = state.line_at(sel.start)
    options = get_options(state, sel.start)
    abbr = expander.extract(line.text, sel.start - line.start, options.type)
    if abbr is None:
        return None

    start = line.start + abbr.start
    try:
        expanded = expander.expand(abbr.abbreviation, options, state.config)
    except AbbreviationError as err:
        log.debug("Cannot expand %r: %s", abbr.abbreviation, err.message)
        return None

    ranges, snippet = get_selections_from_snippet(expanded, start)
    first = ranges[0]
    return CommandResult(
        changes=(ChangeSpec(start, line.start + abbr.end, snippet),),
        selection=(Range(first.start, first.end),),
    )
