"""Evaluate the math expression under the caret."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from emmet import math_expression

from emmet_assist.document import ChangeSpec, CommandResult
from emmet_assist.ranges import Range

if TYPE_CHECKING:
    from emmet_assist.document import EditorState

log = logging.getLogger(__name__)

_TRAILING_ZEROS_RE = re.compile(r"\.?0+$")


def evaluate_math(state: EditorState) -> CommandResult | None:
    """Replace each selected expression, or the one left of the caret, with its value.

    ``2+3`` becomes ``5`` and ``10/4`` becomes ``2.5``. The caret lands after
    the result.
    """
    changes: list[ChangeSpec] = []
    selection: list[Range] = []
    shift = 0

    for sel in state.selection:
        start, end = sel.start, sel.end
        if start == end:
            line = state.line_at(start)
            expr = math_expression.extract(line.text, start - line.start)
            if expr is not None:
                start = line.start + expr[0]
                end = line.start + expr[1]

        value = format_result(state.text[start:end]) if start != end else None
        if value is None:
            selection.append(sel.shift(shift))
            continue

        changes.append(ChangeSpec(start, end, value))
        caret = start + shift + len(value)
        selection.append(Range(caret, caret))
        shift += len(value) - (end - start)

    if not changes:
        return None
    return CommandResult(changes=tuple(changes), selection=tuple(selection))


def format_result(expr: str) -> str | None:
    """Value of ``expr`` with at most four decimals, or ``None`` if it does not evaluate."""
    try:
        result = math_expression.evaluate(expr)
    # py-emmet reports malformed expressions with a bare Exception
    except Exception as err:
        log.debug("Cannot evaluate %r: %s", expr, err)
        return None
    if result is None:
        return None
    return _TRAILING_ZEROS_RE.sub("", f"{result:.4f}")
