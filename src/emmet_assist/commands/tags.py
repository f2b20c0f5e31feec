"""Tag pair navigation, removal and split/join."""

from __future__ import annotations

from typing import TYPE_CHECKING

from emmet_assist.context import get_tag_context
from emmet_assist.context_types import ContextTag
from emmet_assist.document import ChangeSpec, CommandResult, line_by_number
from emmet_assist.output import line_indent
from emmet_assist.ranges import Range, is_space, narrow_to_non_space

if TYPE_CHECKING:
    from emmet_assist.document import EditorState


def go_to_tag_pair(state: EditorState) -> CommandResult | None:
    """Move caret from open tag to its close tag and back."""
    next_sel: list[Range] = []
    found = False

    for sel in state.selection:
        pos = sel.start
        target = sel
        if state.tree.is_active("html", pos):
            tag = get_tag_context(state, pos)
            if tag is not None and tag.close is not None:
                found = True
                next_pos = tag.close.start if tag.open.start <= pos < tag.open.end else tag.open.start
                target = Range(next_pos, next_pos)
        next_sel.append(target)

    if not found:
        return None
    return CommandResult(selection=tuple(next_sel))


def remove_tag(state: EditorState) -> CommandResult | None:
    """Remove the enclosing tag but keep its content, dedented."""
    changes: list[ChangeSpec] = []
    for sel in state.selection:
        tag = get_tag_context(state, sel.start)
        if tag is not None:
            changes.extend(_remove_tag_changes(state, tag))

    if not changes:
        return None
    return CommandResult(changes=tuple(_dedupe(changes)))


def _remove_tag_changes(state: EditorState, tag: ContextTag) -> list[ChangeSpec]:
    open_tag, close_tag = tag.open, tag.close
    if close_tag is None:
        return [ChangeSpec(open_tag.start, open_tag.end)]

    inner = narrow_to_non_space(state.text, Range(open_tag.end, close_tag.start))
    if inner.empty:
        return [ChangeSpec(open_tag.start, close_tag.end)]

    changes = [ChangeSpec(open_tag.start, inner.start)]
    line_start = state.line_at(open_tag.start)
    line_end = state.line_at(close_tag.end)
    if line_start.number != line_end.number:
        # The first content line loses its indent together with the open tag
        base_indent = line_indent(line_start)
        inner_indent = line_indent(state.line_at(inner.start))
        for number in range(line_start.number + 2, line_end.number + 1):
            line = line_by_number(state.text, number)
            head = line.text[:len(inner_indent)]
            if inner_indent and is_space(head) and line.start + len(inner_indent) <= inner.end:
                changes.append(ChangeSpec(line.start, line.start + len(inner_indent), base_indent))

    changes.append(ChangeSpec(inner.end, close_tag.end))
    return changes


def split_join_tag(state: EditorState) -> CommandResult | None:
    """Turn ``<div></div>`` into ``<div />`` and back."""
    changes: list[ChangeSpec] = []
    for sel in state.selection:
        tag = get_tag_context(state, sel.start)
        if tag is None:
            continue

        open_tag, close_tag = tag.open, tag.close
        if close_tag is not None:
            # Join: drop contents and close tag, add closing slash
            closing = "/" if is_space(_char(state, open_tag.end - 2)) else " /"
            changes.append(ChangeSpec(open_tag.end - 1, close_tag.end, f"{closing}>"))
        else:
            # Split: drop closing slash, add close tag
            insert = f"</{tag.name}>"
            start = end = open_tag.end
            if _char(state, open_tag.end - 2) == "/":
                start -= 2
                if is_space(_char(state, start - 1)):
                    start -= 1
                insert = ">" + insert
            changes.append(ChangeSpec(start, end, insert))

    if not changes:
        return None
    return CommandResult(changes=tuple(_dedupe(changes)))


def _char(state: EditorState, pos: int) -> str:
    if pos < 0:
        return ""
    return state.text[pos:pos + 1]


def _dedupe(changes: list[ChangeSpec]) -> list[ChangeSpec]:
    """Drop repeated edits from several carets inside the same tag."""
    seen: set[ChangeSpec] = set()
    result: list[ChangeSpec] = []
    for change in changes:
        if change not in seen:
            seen.add(change)
            result.append(change)
    return result
