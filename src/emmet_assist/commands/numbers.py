"""Increment or decrement the number under the caret."""

from __future__ import annotations

import math
import re
from typing import TYPE_CHECKING

from emmet_assist.document import ChangeSpec, CommandResult
from emmet_assist.ranges import Range

if TYPE_CHECKING:
    from emmet_assist.document import EditorState

_TRAILING_ZEROS_RE = re.compile(r"\.?0+$")


def increment_number(state: EditorState, delta: float) -> CommandResult | None:
    """Add ``delta`` to the selected number or the number at the caret.

    Typical deltas are ``1``, ``0.1`` and ``10``; negative ones decrement.
    """
    changes: list[ChangeSpec] = []
    selection: list[Range] = []
    shift = 0

    for sel in state.selection:
        start, end = sel.start, sel.end
        if start == end:
            line = state.line_at(start)
            num_range = extract_number(line.text, start - line.start)
            if num_range is not None:
                start = line.start + num_range[0]
                end = line.start + num_range[1]

        if start == end:
            selection.append(sel.shift(shift))
            continue

        value = update_number(state.text[start:end], delta)
        changes.append(ChangeSpec(start, end, value))
        selection.append(Range(start + shift, start + shift + len(value)))
        shift += len(value) - (end - start)

    if not changes:
        return None
    return CommandResult(changes=tuple(changes), selection=tuple(selection))


def extract_number(text: str, pos: int) -> tuple[int, int] | None:
    """Range of the number in ``text`` around ``pos``, with its minus sign."""
    has_dot = False
    start = end = pos
    length = len(text)

    while end < length:
        ch = text[end]
        if ch == ".":
            if has_dot:
                break
            has_dot = True
        elif not ch.isdigit():
            break
        end += 1

    while start > 0:
        ch = text[start - 1]
        if ch == ".":
            if has_dot:
                break
            has_dot = True
        elif not ch.isdigit():
            break
        start -= 1

    if start > 0 and text[start - 1] == "-":
        start -= 1

    if any(ch.isdigit() for ch in text[start:end]):
        return start, end
    return None


def update_number(num: str, delta: float, precision: int = 3) -> str:
    try:
        value = float(num) + delta
    except ValueError:
        return num
    if math.isnan(value):
        return num

    neg = value < 0
    result = f"{abs(value):.{precision}f}"
    result = _TRAILING_ZEROS_RE.sub("", result) or "0"

    # Keep the leading zero out when the input had none
    if (num.startswith(".") or num.startswith("-.")) and result.startswith("0"):
        result = result[1:]

    return ("-" if neg else "") + result
