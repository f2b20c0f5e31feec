"""Read-only syntax tree contract consumed by the context resolver.

The resolver only needs a handful of traversal patterns: walk up through
parents, scan children in document order and look up a child by node type.
Any host tree that satisfies ``SyntaxNode`` / ``SyntaxTree`` can be plugged
in; ``TreeNode`` and ``DocumentTree`` are the in-repo implementation produced
by ``tree_builder.build_document_tree``.

Node handles belong to one document revision. Callers must never keep them
across an edit and should re-resolve from a position instead.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from emmet_assist.ranges import Range


class SyntaxNode(Protocol):
    """Single node of a concrete syntax tree."""

    @property
    def type_name(self) -> str: ...

    @property
    def start(self) -> int: ...

    @property
    def end(self) -> int: ...

    @property
    def parent(self) -> SyntaxNode | None: ...

    @property
    def first_child(self) -> SyntaxNode | None: ...

    @property
    def last_child(self) -> SyntaxNode | None: ...

    @property
    def next_sibling(self) -> SyntaxNode | None: ...

    @property
    def prev_sibling(self) -> SyntaxNode | None: ...

    def get_child(self, name: str) -> SyntaxNode | None: ...

    def get_children(self, name: str) -> list[SyntaxNode]: ...


class SyntaxTree(Protocol):
    """Tree snapshot for one document revision."""

    @property
    def top_language(self) -> str: ...

    @property
    def root(self) -> SyntaxNode: ...

    def resolve(self, pos: int, side: int = 0) -> SyntaxNode: ...

    def resolve_inner(self, pos: int, side: int = 0) -> SyntaxNode: ...

    def language_at(self, pos: int) -> str: ...

    def is_active(self, language: str, pos: int) -> bool: ...


def node_range(node: SyntaxNode) -> Range:
    return Range(node.start, node.end)


def find_ancestor(node: SyntaxNode | None, name: str) -> SyntaxNode | None:
    """Return ``node`` or its closest parent of type ``name``."""
    while node is not None and node.type_name != name:
        node = node.parent
    return node


def next_node(node: SyntaxNode, enter: bool = True) -> SyntaxNode | None:
    """Next node in document pre-order; ``enter=False`` skips the children of ``node``."""
    if enter and node.first_child is not None:
        return node.first_child
    ptr: SyntaxNode | None = node
    while ptr is not None:
        if ptr.next_sibling is not None:
            return ptr.next_sibling
        ptr = ptr.parent
    return None


def prev_node(node: SyntaxNode, enter: bool = True) -> SyntaxNode | None:
    """Like ``next_node`` for a last-to-first pre-order walk."""
    if enter and node.last_child is not None:
        return node.last_child
    ptr: SyntaxNode | None = node
    while ptr is not None:
        if ptr.prev_sibling is not None:
            return ptr.prev_sibling
        ptr = ptr.parent
    return None


def child_of_types(node: SyntaxNode, names: tuple[str, ...]) -> SyntaxNode | None:
    """Return the first direct child whose type is one of ``names``."""
    child = node.first_child
    while child is not None:
        if child.type_name in names:
            return child
        child = child.next_sibling
    return None


# ---------------------------------------------------------------------------
# In-repo tree implementation
# ---------------------------------------------------------------------------


@dataclass(slots=True, eq=False)
class TreeNode:
    """Concrete node with parent back-reference.

    ``language`` is set on mount roots only: the document root and embedded
    sub-trees such as the stylesheet inside a ``<style>`` element.
    """

    type_name: str
    start: int
    end: int
    children: list[TreeNode] = field(default_factory=list)
    parent: TreeNode | None = field(default=None, repr=False)
    language: str | None = None
    index: int = field(default=0, repr=False)

    def append(self, child: TreeNode) -> TreeNode:
        child.parent = self
        child.index = len(self.children)
        self.children.append(child)
        return child

    @property
    def first_child(self) -> TreeNode | None:
        return self.children[0] if self.children else None

    @property
    def last_child(self) -> TreeNode | None:
        return self.children[-1] if self.children else None

    @property
    def next_sibling(self) -> TreeNode | None:
        if self.parent is None:
            return None
        siblings = self.parent.children
        return siblings[self.index + 1] if self.index + 1 < len(siblings) else None

    @property
    def prev_sibling(self) -> TreeNode | None:
        if self.parent is None or self.index == 0:
            return None
        return self.parent.children[self.index - 1]

    def get_child(self, name: str) -> TreeNode | None:
        for child in self.children:
            if child.type_name == name:
                return child
        return None

    def get_children(self, name: str) -> list[TreeNode]:
        return [child for child in self.children if child.type_name == name]


def _enters(node: TreeNode, pos: int, side: int) -> bool:
    if side < 0:
        return node.start < pos <= node.end
    if side > 0:
        return node.start <= pos < node.end
    return node.start < pos < node.end


@dataclass(frozen=True, slots=True)
class DocumentTree:
    """Tree snapshot with position resolution and language activation."""

    root: TreeNode
    top_language: str

    def resolve_inner(self, pos: int, side: int = 0) -> TreeNode:
        """Innermost node at ``pos``, entering embedded sub-trees."""
        return self._descend(pos, side, enter_mounts=True)

    def resolve(self, pos: int, side: int = 0) -> TreeNode:
        """Innermost node at ``pos`` without entering embedded sub-trees."""
        return self._descend(pos, side, enter_mounts=False)

    def _descend(self, pos: int, side: int, *, enter_mounts: bool) -> TreeNode:
        node = self.root
        while True:
            for child in node.children:
                if not enter_mounts and child.language is not None:
                    continue
                if _enters(child, pos, side):
                    node = child
                    break
            else:
                return node

    def language_at(self, pos: int) -> str:
        """Language of the innermost mounted tree covering ``pos``.

        Mount bounds are inclusive so an empty ``<style></style>`` body still
        reports ``css`` at its single position.
        """
        language = self.root.language or self.top_language
        node = self.root
        while True:
            candidates = [c for c in node.children if c.start <= pos <= c.end]
            if not candidates:
                return language
            mounted = [c for c in candidates if c.language is not None]
            if mounted:
                node = mounted[0]
                language = mounted[0].language or language
                continue
            inner = [c for c in candidates if c.start < pos]
            node = inner[0] if inner else candidates[0]

    def is_active(self, language: str, pos: int) -> bool:
        return self.language_at(pos) == language
