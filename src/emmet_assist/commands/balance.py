"""Select outer or inner balanced markup and stylesheet ranges."""

from __future__ import annotations

from typing import TYPE_CHECKING

from emmet_assist.context import full_declaration_range, get_property_ranges
from emmet_assist.document import CommandResult
from emmet_assist.ranges import Range, contains, narrow_to_non_space, range_contains
from emmet_assist.syntax_tree import SyntaxNode, child_of_types, find_ancestor, node_range

if TYPE_CHECKING:
    from emmet_assist.document import EditorState

_CSS_BALANCE_NODES = ("Block", "RuleSet", "Declaration")


def balance_outward(state: EditorState) -> CommandResult | None:
    """Expand each selection to the closest enclosing balanced range."""
    next_sel: list[Range] = []
    has_match = False

    for sel in state.selection:
        ranges = get_outward_ranges(state, sel.start)
        if ranges is None:
            next_sel.append(sel)
            continue
        has_match = True
        target = next((r for r in ranges if range_contains(r, sel) and r != sel), sel)
        next_sel.append(target)

    if not has_match:
        return None
    return CommandResult(selection=tuple(next_sel))


def balance_inward(state: EditorState) -> CommandResult | None:
    """Shrink each selection to the next balanced range inside it."""
    next_sel: list[Range] = []
    has_match = False

    for sel in state.selection:
        ranges = get_inward_ranges(state, sel.start)
        if ranges is None:
            next_sel.append(sel)
            continue
        has_match = True
        ix = next((i for i, r in enumerate(ranges) if r == sel), -1)
        target = sel
        if ix < len(ranges) - 1:
            target = ranges[ix + 1]
        elif ix != -1:
            target = next((r for r in ranges[ix:] if range_contains(r, sel)), sel)
        next_sel.append(target)

    if not has_match:
        return None
    return CommandResult(selection=tuple(next_sel))


def get_outward_ranges(state: EditorState, pos: int) -> list[Range] | None:
    if state.tree.is_active("css", pos):
        return _css_outward_ranges(state, pos)
    if state.tree.is_active("html", pos):
        return _html_outward_ranges(state, pos)
    return None


def get_inward_ranges(state: EditorState, pos: int) -> list[Range] | None:
    if state.tree.is_active("css", pos):
        return _css_inward_ranges(state, pos)
    if state.tree.is_active("html", pos):
        return _html_inward_ranges(state, pos)
    return None


# ---------------------------------------------------------------------------
# Markup
# ---------------------------------------------------------------------------


def _html_outward_ranges(state: EditorState, pos: int) -> list[Range]:
    result: list[Range] = []
    node: SyntaxNode | None = state.tree.resolve_inner(pos, -1)
    while node is not None:
        if node.type_name == "Element":
            _push_html_ranges(node, result)
        node = node.parent
    return _compact_ranges(result, inward=False)


def _html_inward_ranges(state: EditorState, pos: int) -> list[Range]:
    result: list[Range] = []
    node = find_ancestor(state.tree.resolve_inner(pos, 1), "Element")
    while node is not None:
        _push_html_ranges(node, result)
        node = node.get_child("Element")
    return _compact_ranges(result, inward=True)


def _push_html_ranges(node: SyntaxNode, ranges: list[Range]) -> None:
    self_close = node.get_child("SelfClosingTag")
    if self_close is not None:
        ranges.append(node_range(self_close))
        return

    open_tag = node.get_child("OpenTag")
    if open_tag is None:
        return
    close_tag = node.get_child("CloseTag")
    if close_tag is not None:
        ranges.append(Range(open_tag.end, close_tag.start))
        ranges.append(Range(open_tag.start, close_tag.end))
    else:
        ranges.append(node_range(open_tag))


# ---------------------------------------------------------------------------
# Stylesheet
# ---------------------------------------------------------------------------


def _css_outward_ranges(state: EditorState, pos: int) -> list[Range]:
    result: list[Range] = []
    node: SyntaxNode | None = state.tree.resolve_inner(pos, -1)
    while node is not None:
        _push_css_ranges(state, node, pos, result)
        node = node.parent
    return _compact_ranges(result, inward=False)


def _css_inward_ranges(state: EditorState, pos: int) -> list[Range]:
    result: list[Range] = []
    node: SyntaxNode | None = state.tree.resolve_inner(pos, 1)
    while node is not None and node.type_name not in _CSS_BALANCE_NODES:
        node = node.parent

    while node is not None:
        _push_css_ranges(state, node, pos, result)
        node = child_of_types(node, _CSS_BALANCE_NODES)
    return result


def _push_css_ranges(state: EditorState, node: SyntaxNode, pos: int, ranges: list[Range]) -> None:
    if node.type_name == "Block":
        # Block contents without braces
        end = node.end - 1 if state.text[node.end - 1:node.end] == "}" else node.end
        ranges.append(narrow_to_non_space(state.text, Range(node.start + 1, max(node.start + 1, end))))
    elif node.type_name == "RuleSet":
        ranges.append(node_range(node))
    elif node.type_name == "Declaration":
        name, value = get_property_ranges(node)
        if value is not None and contains(value, pos):
            ranges.append(value)
        if name is not None and contains(name, pos):
            ranges.append(name)
        ranges.append(full_declaration_range(state.text, node))


def _compact_ranges(ranges: list[Range], *, inward: bool) -> list[Range]:
    """Sort ranges (outermost first when inward) and drop duplicates."""
    if inward:
        ordered = sorted(ranges, key=lambda r: (r.start, -r.end))
    else:
        ordered = sorted(ranges, key=lambda r: (-r.start, r.end))

    result: list[Range] = []
    for r in ordered:
        if not result or result[-1] != r:
            result.append(r)
    return result
