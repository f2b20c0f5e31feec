"""Select the next or previous item: tag names, attributes, class names,
selectors, declarations and their parts."""

from __future__ import annotations

from typing import TYPE_CHECKING

from emmet_assist.context import (
    attribute_value_range,
    full_declaration_range,
    get_property_ranges,
    get_selector_range,
)
from emmet_assist.document import CommandResult
from emmet_assist.ranges import Range, range_contains, substr
from emmet_assist.syntax_tree import SyntaxNode, next_node, node_range, prev_node

if TYPE_CHECKING:
    from emmet_assist.document import EditorState

_HTML_PARENTS = ("OpenTag", "CloseTag", "SelfClosingTag")
_CSS_ENTER = ("Block", "RuleSet", "StyleSheet")
_CSS_PARENTS = ("RuleSet", "Block", "StyleSheet", "Declaration")
_SPACE = " \t\n\r"


def select_next_item(state: EditorState) -> CommandResult | None:
    return _select_item(state, reverse=False)


def select_previous_item(state: EditorState) -> CommandResult | None:
    return _select_item(state, reverse=True)


def _select_item(state: EditorState, reverse: bool) -> CommandResult | None:
    next_sel: list[Range] = []
    handled = False
    for sel in state.selection:
        if state.tree.is_active("css", sel.start):
            found = _css_range(state, sel, reverse)
        else:
            found = _html_range(state, sel, reverse)
        if found is not None:
            handled = True
            next_sel.append(found)
        else:
            next_sel.append(sel)

    if not handled:
        return None
    return CommandResult(selection=tuple(next_sel))


def _html_range(state: EditorState, sel: Range, reverse: bool) -> Range | None:
    node: SyntaxNode | None = _start_node(state.tree.resolve_inner(sel.start, 1), _HTML_PARENTS, 0)
    while node is not None:
        if node.type_name in ("OpenTag", "SelfClosingTag"):
            found = find_range(sel, html_candidates(state, node), reverse)
            if found is not None:
                return found
        enter = node.type_name == "Element"
        node = prev_node(node, enter) if reverse else next_node(node, enter)
    return None


def _css_range(state: EditorState, sel: Range, reverse: bool) -> Range | None:
    node: SyntaxNode | None = _start_node(state.tree.resolve_inner(sel.start, 1), _CSS_PARENTS, 1)
    while node is not None:
        found = find_range(sel, css_candidates(state, node), reverse)
        if found is not None:
            return found
        enter = node.type_name in _CSS_ENTER
        node = prev_node(node, enter) if reverse else next_node(node, enter)
    return None


def _start_node(node: SyntaxNode, parents: tuple[str, ...], skip: int) -> SyntaxNode:
    """Closest ancestor of one of ``parents`` types, looking ``skip`` levels up first."""
    ctx: SyntaxNode | None = node
    for _ in range(skip):
        ctx = ctx.parent if ctx is not None else None
    while ctx is not None:
        if ctx.type_name in parents:
            return ctx
        ctx = ctx.parent
    return node


def html_candidates(state: EditorState, node: SyntaxNode) -> list[Range]:
    """Selectable ranges of an open or self-closing tag, in document order."""
    result: list[Range] = []
    child = node.first_child
    while child is not None:
        if child.type_name == "TagName":
            result.append(node_range(child))
        elif child.type_name == "Attribute":
            result.append(node_range(child))
            name = child.get_child("AttributeName")
            value_node = child.get_child("AttributeValue")
            value = attribute_value_range(state, value_node) if value_node is not None else None
            if name is not None and value is not None and not value.empty:
                result.append(node_range(name))
                result.append(value)
                if substr(state.text, node_range(name)).lower() == "class":
                    result.extend(token_list(substr(state.text, value), value.start))
        child = child.next_sibling
    return result


def css_candidates(state: EditorState, node: SyntaxNode) -> list[Range]:
    """Selectable ranges of a rule set or a declaration, in document order."""
    result: list[Range] = []
    if node.type_name == "RuleSet":
        result.append(get_selector_range(node))
        block = node.get_child("Block")
        if block is not None:
            for child in block.get_children("Declaration"):
                result.extend(css_candidates(state, child))
    elif node.type_name == "Declaration":
        result.append(full_declaration_range(state.text, node))
        name, value = get_property_ranges(node)
        if name is not None:
            result.append(name)
        if value is not None:
            result.append(value)
    return result


def token_list(value: str, offset: int = 0) -> list[Range]:
    """Ranges of space-separated words in ``value``, shifted by ``offset``."""
    ranges: list[Range] = []
    start: int | None = None
    for i, ch in enumerate(value):
        if ch in _SPACE:
            if start is not None:
                ranges.append(Range(offset + start, offset + i))
                start = None
        elif start is None:
            start = i
    if start is not None:
        ranges.append(Range(offset + start, offset + len(value)))
    return ranges


def find_range(sel: Range, ranges: list[Range], reverse: bool = False) -> Range | None:
    """Candidate to select after ``sel``.

    When ``sel`` is one of ``ranges``, the one following it is picked, or
    nothing if it is the last one. Otherwise the first range containing
    ``sel`` or starting after it (before it, when ``reverse``) wins.
    """
    if reverse:
        ranges = ranges[::-1]

    need_next = False
    candidate: Range | None = None
    for r in ranges:
        if need_next:
            return r
        if r == sel:
            need_next = True
        elif candidate is None and (
            range_contains(r, sel)
            or (reverse and r.start <= sel.start)
            or (not reverse and r.start >= sel.start)
        ):
            candidate = r

    return None if need_next else candidate
