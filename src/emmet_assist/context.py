"""Context resolution: what surrounds a position in markup or stylesheet code.

A context is an ordered ancestor stack (outermost first) of structural
matches plus the single match the position sits in, if any. Markup contexts
also detect stylesheet code embedded into a ``style="..."`` attribute and
carry it as a nested ``CSSContext`` in host-document coordinates.

Resolution never raises for unsupported positions; it returns ``None``.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from emmet_assist.context_types import (
    Context,
    ContextTag,
    CSSContext,
    CSSMatch,
    HTMLContext,
    HTMLMatch,
    HTMLMatchKind,
)
from emmet_assist.ranges import Range, contains, substr
from emmet_assist.syntax_tree import SyntaxNode, find_ancestor, node_range

if TYPE_CHECKING:
    from emmet_assist.document import EditorState

_NODE_TO_HTML_KIND: dict[str, HTMLMatchKind] = {
    "OpenTag": "open",
    "CloseTag": "close",
    "SelfClosingTag": "self-close",
}

_INLINE_SPACE = " \t\n\r"


@dataclass(frozen=True, slots=True)
class InlineProp:
    """Property found in inline CSS, offsets relative to the CSS source."""

    name: Range
    value: Range | None = None


def get_context(state: EditorState, pos: int) -> Context | None:
    """Returns markup or stylesheet context for ``pos``.

    Stylesheet wins when both grammars are active, e.g. inside ``<style>``.
    """
    tree = state.tree
    if tree.top_language == "html":
        if tree.is_active("css", pos):
            return get_css_context(state, pos)
        return get_html_context(state, pos)

    if tree.top_language == "css":
        return get_css_context(state, pos)

    return None


# ---------------------------------------------------------------------------
# Stylesheet
# ---------------------------------------------------------------------------


def get_css_context(state: EditorState, pos: int, embedded: Range | None = None) -> CSSContext:
    stack: list[CSSMatch] = []
    node: SyntaxNode | None = state.tree.resolve_inner(pos, -1)

    while node is not None:
        if node.type_name == "RuleSet":
            sel = get_selector_range(node)
            stack.append(CSSMatch(substr(state.text, sel), "selector", sel))
        elif node.type_name == "Declaration":
            name, value = get_property_ranges(node)
            if value is not None and contains(value, pos):
                stack.append(CSSMatch(substr(state.text, value), "property-value", value))
            if name is not None:
                stack.append(CSSMatch(substr(state.text, name), "property-name", name))
        node = node.parent

    current: CSSMatch | None = None
    if stack:
        tip = stack[0]
        tip_range = (
            Range(tip.range.start, tip.range.start + len(tip.name))
            if tip.kind == "selector"
            else tip.range
        )
        if contains(tip_range, pos):
            current = replace(tip, range=tip_range)
            stack.pop(0)

    return CSSContext(
        ancestors=tuple(reversed(stack)),
        current=current,
        inline=False,
        embedded=embedded,
    )


def get_selector_range(node: SyntaxNode) -> Range:
    """Range of the selector of a ``RuleSet``, without its block."""
    end = node.start
    child = node.first_child
    while child is not None and child.type_name != "Block":
        end = child.end
        child = child.next_sibling
    return Range(node.start, end)


def get_property_ranges(node: SyntaxNode) -> tuple[Range | None, Range | None]:
    """Name and value ranges of a ``Declaration`` node."""
    name: Range | None = None
    value: Range | None = None
    ptr = node.first_child
    if ptr is not None and ptr.type_name == "PropertyName":
        name = node_range(ptr)
        ptr = ptr.next_sibling
        if ptr is not None and ptr.type_name == ":":
            ptr = ptr.next_sibling
        last = node.last_child
        if ptr is not None and last is not None:
            value = Range(ptr.start, last.end)

    return name, value


def full_declaration_range(text: str, node: SyntaxNode) -> Range:
    """Declaration range extended over its terminating ``;``, if any."""
    sibling = node.next_sibling
    end = node.end
    if sibling is not None and sibling.type_name == ";":
        end = sibling.end
    elif text[end:end + 1] == ";":
        end += 1
    return Range(node.start, end)


# ---------------------------------------------------------------------------
# Markup
# ---------------------------------------------------------------------------


def get_html_context(state: EditorState, pos: int) -> HTMLContext:
    ancestors: list[HTMLMatch] = []
    current: HTMLMatch | None = None
    node: SyntaxNode | None = state.tree.resolve_inner(pos)

    while node is not None:
        kind = _NODE_TO_HTML_KIND.get(node.type_name)
        if kind is not None:
            match = _match_from_tag(state, node, kind)
            if match is not None:
                current = match
                # The wrapping Element is the tag itself, not an ancestor
                node = node.parent
        elif node.type_name == "Element":
            open_tag = node.get_child("OpenTag")
            if open_tag is not None:
                match = _match_from_tag(state, open_tag, "open")
                if match is not None:
                    ancestors.append(match)
        node = node.parent if node is not None else None

    ancestors.reverse()
    return HTMLContext(
        ancestors=tuple(ancestors),
        current=current,
        css=_detect_css_from_html(state, pos, current),
    )


def _match_from_tag(state: EditorState, node: SyntaxNode, kind: HTMLMatchKind) -> HTMLMatch | None:
    tag_name = node.get_child("TagName")
    if tag_name is None:
        return None
    return HTMLMatch(substr(state.text, node_range(tag_name)), kind, node_range(node))


def _detect_css_from_html(state: EditorState, pos: int, current: HTMLMatch | None) -> CSSContext | None:
    if current is None or current.kind != "open":
        return None

    open_tag = find_ancestor(state.tree.resolve(current.range.start, 1), "OpenTag")
    if open_tag is None:
        return None

    for attr in open_tag.get_children("Attribute"):
        if attr.start > pos:
            break
        if not contains(node_range(attr), pos) or get_attribute_name(state, attr) != "style":
            continue
        value_node = attr.get_child("AttributeValue")
        if value_node is None:
            continue
        clean = attribute_value_range(state, value_node)
        if contains(clean, pos):
            return get_inline_css_context(substr(state.text, clean), pos - clean.start, clean.start)

    return None


def get_attribute_name(state: EditorState, node: SyntaxNode) -> str:
    name = node.get_child("AttributeName")
    return substr(state.text, node_range(name)).lower() if name is not None else ""


def attribute_value_range(state: EditorState, node: SyntaxNode) -> Range:
    """Own value range of an ``AttributeValue`` node, without its quotes."""
    r = node_range(node)
    if is_quoted(substr(state.text, r)):
        return Range(r.start + 1, r.end - 1)
    return r


def get_tag_attributes(state: EditorState, node: SyntaxNode) -> dict[str, str | None]:
    """Attributes of an open or self-closing tag; ``None`` for valueless ones."""
    result: dict[str, str | None] = {}
    for attr in node.get_children("Attribute"):
        name_node = attr.get_child("AttributeName")
        if name_node is None:
            continue
        value_node = attr.get_child("AttributeValue")
        result[substr(state.text, node_range(name_node))] = (
            substr(state.text, attribute_value_range(state, value_node))
            if value_node is not None
            else None
        )
    return result


def get_tag_name(state: EditorState, node: SyntaxNode) -> str:
    tag_name = node.get_child("TagName")
    return substr(state.text, node_range(tag_name)) if tag_name is not None else ""


def get_tag_context(state: EditorState, pos: int) -> ContextTag | None:
    """Returns the element enclosing ``pos`` with its tag ranges."""
    element = find_ancestor(state.tree.resolve(pos, 1), "Element")
    if element is None:
        return None

    self_close = element.get_child("SelfClosingTag")
    if self_close is not None:
        return ContextTag(
            name=get_tag_name(state, self_close),
            attributes=get_tag_attributes(state, self_close),
            open=node_range(self_close),
        )

    open_tag = element.get_child("OpenTag")
    if open_tag is None:
        return None

    close_tag = element.get_child("CloseTag")
    return ContextTag(
        name=get_tag_name(state, open_tag),
        attributes=get_tag_attributes(state, open_tag),
        open=node_range(open_tag),
        close=node_range(close_tag) if close_tag is not None else None,
    )


# ---------------------------------------------------------------------------
# Inline CSS
# ---------------------------------------------------------------------------


def get_inline_css_context(code: str, pos: int, base: int = 0) -> CSSContext:
    """Context for inline CSS ``code`` with ``pos`` relative to it.

    Inline CSS has no syntax tree, so properties are found with a quick
    scanner. Produced ranges are shifted by ``base`` into host coordinates.
    """
    current: CSSMatch | None = None
    ancestors: list[CSSMatch] = []

    for prop in parse_inline_props(code, pos):
        name_text = code[prop.name.start:prop.name.end].strip()
        if prop.value is not None and contains(prop.value, pos):
            current = CSSMatch(
                code[prop.value.start:prop.value.end].strip(),
                "property-value",
                prop.value.shift(base),
            )
            ancestors.append(CSSMatch(
                name_text,
                "property-name",
                Range(base + prop.name.start, base + prop.value.end),
            ))
            break
        if contains(prop.name, pos):
            end = prop.value.end if prop.value is not None else prop.name.end
            current = CSSMatch(name_text, "property-name", Range(base + prop.name.start, base + end))
            break

    return CSSContext(
        ancestors=tuple(ancestors),
        current=current,
        inline=True,
        embedded=Range(base, base + len(code)),
    )


def parse_inline_props(code: str, limit: int | None = None) -> list[InlineProp]:
    """Split inline CSS into property name/value ranges.

    Scanning stops at the first ``;`` past ``limit``.
    """
    if limit is None:
        limit = len(code)

    props: list[tuple[list[int], list[int] | None]] = []
    name: list[int] | None = None
    value: list[int] | None = None

    for i, ch in enumerate(code):
        if name is not None:
            if value is not None:
                if value[0] != -1:
                    value[1] = i
            else:
                name[1] = i

        if ch == ";":
            if name is not None:
                props[-1] = (name, value)
            name = value = None
            if i > limit:
                break
        elif ch == ":":
            if name is not None and value is None:
                value = [-1, -1]
                props[-1] = (name, value)
        elif name is not None:
            if value is not None and value[0] == -1 and ch not in _INLINE_SPACE:
                value[0] = value[1] = i
        elif ch not in _INLINE_SPACE:
            name = [i, i]
            value = None
            props.append((name, value))

    # Trailing character of the last property
    if name is not None:
        if value is not None:
            value[1] += 1
        else:
            name[1] += 1

    result: list[InlineProp] = []
    for prop_name, prop_value in props:
        own_value = None
        if prop_value is not None and prop_value[0] != -1:
            own_value = Range(prop_value[0], prop_value[1])
        result.append(InlineProp(Range(prop_name[0], prop_name[1]), own_value))
    return result


# ---------------------------------------------------------------------------
# Quoting
# ---------------------------------------------------------------------------


def is_quote(ch: str | None) -> bool:
    return ch in ('"', "'")


def is_quoted_string(value: str) -> bool:
    return len(value) > 1 and is_quote(value[0]) and value[0] == value[-1]


def is_quoted(value: str | None) -> bool:
    """Check if ``value`` is quoted or written as a ``{...}`` expression."""
    if not value:
        return False
    return is_quoted_string(value) or (len(value) > 1 and value[0] == "{" and value[-1] == "}")
