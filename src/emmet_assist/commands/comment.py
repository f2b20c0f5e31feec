"""Comment or uncomment the element, rule set or declaration at the caret."""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeAlias

from emmet_assist.document import ChangeSpec, CommandResult
from emmet_assist.ranges import Range, narrow_to_non_space
from emmet_assist.syntax_tree import SyntaxNode

if TYPE_CHECKING:
    from emmet_assist.document import EditorState

CommentTokens: TypeAlias = tuple[str, str]

HTML_COMMENT: CommentTokens = ("<!--", "-->")
CSS_COMMENT: CommentTokens = ("/*", "*/")

_HTML_TARGETS = ("Element", "Comment")
_CSS_TARGETS = ("RuleSet", "Declaration", "Comment")


def toggle_comment(state: EditorState) -> CommandResult | None:
    """Wrap the node at each caret into a comment, or strip the comment it is in.

    Comments nested in a node being commented out are stripped first, since
    comments do not nest.
    """
    changes: set[ChangeSpec] = set()
    for sel in state.selection:
        if state.tree.is_active("css", sel.start):
            changes.update(_toggle(state, sel.start, _CSS_TARGETS, CSS_COMMENT, "css"))
        elif state.tree.is_active("html", sel.start):
            changes.update(_toggle(state, sel.start, _HTML_TARGETS, HTML_COMMENT, "html"))

    if not changes:
        return None
    return CommandResult(changes=tuple(sorted(changes, key=lambda c: (c.start, c.end))))


def _toggle(
    state: EditorState,
    pos: int,
    targets: tuple[str, ...],
    comment: CommentTokens,
    language: str,
) -> list[ChangeSpec]:
    node: SyntaxNode | None = state.tree.resolve_inner(pos, 1)
    while node is not None and node.type_name not in targets:
        node = node.parent
    if node is None:
        return []
    if node.type_name == "Comment":
        return strip_comment(state, node, comment)
    return _add_comment(state, node, comment, language)


def strip_comment(state: EditorState, node: SyntaxNode, comment: CommentTokens) -> list[ChangeSpec]:
    """Delete comment tokens of ``node`` along with the spaces padding its content."""
    inner = narrow_to_non_space(
        state.text,
        Range(node.start + len(comment[0]), max(node.start + len(comment[0]), node.end - len(comment[1]))),
    )
    return [ChangeSpec(node.start, inner.start), ChangeSpec(inner.end, node.end)]


def _add_comment(state: EditorState, node: SyntaxNode, comment: CommentTokens, language: str) -> list[ChangeSpec]:
    end = node.end
    sibling = node.next_sibling
    if node.type_name == "Declaration" and sibling is not None and sibling.type_name == ";":
        end = sibling.end

    result = [
        ChangeSpec(node.start, node.start, comment[0] + " "),
        ChangeSpec(end, end, " " + comment[1]),
    ]
    result.extend(_strip_child_comments(state, node, comment, language))
    if node.type_name == "RuleSet":
        block = node.get_child("Block")
        if block is not None:
            result.extend(_strip_child_comments(state, block, comment, language))
    return result


def _strip_child_comments(
    state: EditorState, node: SyntaxNode, comment: CommentTokens, language: str,
) -> list[ChangeSpec]:
    result: list[ChangeSpec] = []
    for child in node.get_children("Comment"):
        if state.tree.is_active(language, child.start):
            result.extend(strip_comment(state, child, comment))
    return result
