"""Jump to the next or previous edit point.

Edit points are empty attribute values, positions between tags and empty
lines.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from emmet_assist.context import is_quote
from emmet_assist.document import CommandResult
from emmet_assist.ranges import Range, is_space

if TYPE_CHECKING:
    from emmet_assist.document import EditorState


def go_to_next_edit_point(state: EditorState) -> CommandResult:
    return CommandResult(selection=_next_selection(state, 1))


def go_to_previous_edit_point(state: EditorState) -> CommandResult:
    return CommandResult(selection=_next_selection(state, -1))


def _next_selection(state: EditorState, inc: int) -> tuple[Range, ...]:
    result: list[Range] = []
    for sel in state.selection:
        next_pos = find_edit_point(state, sel.start + inc, inc)
        result.append(Range(next_pos, next_pos) if next_pos is not None else sel)
    return tuple(result)


def find_edit_point(state: EditorState, pos: int, inc: int) -> int | None:
    text = state.text
    size = len(text)
    cur_pos = pos

    while 0 <= cur_pos < size:
        cur_pos += inc
        cur = _char_at(text, cur_pos)
        next_ch = _char_at(text, cur_pos + 1)
        prev_ch = _char_at(text, cur_pos - 1)

        if is_quote(cur) and next_ch == cur and prev_ch == "=":
            # Empty attribute value
            return cur_pos + 1

        if cur == "<" and prev_ch == ">":
            # Between tags
            return cur_pos

        if cur in ("\r", "\n"):
            line_pos = cur_pos + inc
            if 0 <= line_pos <= size:
                line = state.line_at(line_pos)
                if not line.text or is_space(line.text):
                    # Empty line
                    return line.end

    return None


def _char_at(text: str, pos: int) -> str:
    return text[pos] if 0 <= pos < len(text) else ""
