"""Immutable editor state snapshots and text edits.

An ``EditorState`` bundles document text, its syntax tree, the active
configuration and the selection. Edits never modify a state in place:
``EditorState.apply`` returns the next snapshot together with the
``TextChange`` records describing what happened, in document order.
"""
from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from emmet_assist.config import EmmetConfig
from emmet_assist.ranges import Range
from emmet_assist.syntax_tree import SyntaxTree
from emmet_assist.tree_builder import build_document_tree


@dataclass(frozen=True, slots=True)
class Line:
    """Single document line; ``number`` is 1-based, ``end`` excludes EOL."""

    number: int
    start: int
    end: int
    text: str


def line_at(text: str, pos: int) -> Line:
    start = text.rfind("\n", 0, pos) + 1
    end = text.find("\n", pos)
    if end == -1:
        end = len(text)
    if end > start and text[end - 1] == "\r":
        end -= 1
    return Line(number=text.count("\n", 0, start) + 1, start=start, end=end, text=text[start:end])


def line_by_number(text: str, number: int) -> Line:
    if number < 1:
        raise ValueError(f"line number must be >= 1, got {number}")
    start = 0
    for _ in range(number - 1):
        nl = text.find("\n", start)
        if nl == -1:
            raise ValueError(f"line {number} is out of range")
        start = nl + 1
    return line_at(text, start)


@dataclass(frozen=True, slots=True)
class ChangeSpec:
    """Requested edit in coordinates of the document it is applied to."""

    start: int
    end: int
    insert: str = ""

    def __post_init__(self) -> None:
        if self.start < 0 or self.end < self.start:
            raise ValueError(f"invalid change range [{self.start}, {self.end}]")


@dataclass(frozen=True, slots=True)
class TextChange:
    """Applied edit.

    ``deleted_*`` offsets refer to the document before the edit,
    ``inserted_*`` offsets to the document after it.
    """

    deleted_from: int
    deleted_to: int
    inserted_from: int
    inserted_to: int
    inserted_text: str

    def __post_init__(self) -> None:
        if self.deleted_to < self.deleted_from:
            raise ValueError("deleted_to must be >= deleted_from")
        if self.inserted_to - self.inserted_from != len(self.inserted_text):
            raise ValueError("inserted range does not match inserted text length")

    @property
    def deleted_length(self) -> int:
        return self.deleted_to - self.deleted_from


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Edits and selection produced by a command.

    ``selection`` is expressed in coordinates of the edited document;
    ``None`` maps the current selection through ``changes``.
    """

    changes: tuple[ChangeSpec, ...] = ()
    selection: tuple[Range, ...] | None = None


def _map_pos(pos: int, changes: Sequence[ChangeSpec]) -> int:
    delta = 0
    for change in changes:
        if change.start > pos:
            break
        if pos >= change.end:
            delta += len(change.insert) - (change.end - change.start)
        else:
            # Inside a replaced range: land after the inserted text
            return change.start + delta + len(change.insert)
    return pos + delta


@dataclass(frozen=True, slots=True)
class EditorState:
    text: str
    tree: SyntaxTree
    config: EmmetConfig = field(default_factory=EmmetConfig)
    selection: tuple[Range, ...] = (Range(0, 0),)
    tab_size: int = 4

    def __post_init__(self) -> None:
        if not self.selection:
            raise ValueError("selection must contain at least one range")
        for r in self.selection:
            if r.end > len(self.text):
                raise ValueError(f"selection {r} is outside of document")

    @classmethod
    def create(
        cls,
        text: str,
        config: EmmetConfig | None = None,
        *,
        selection: Iterable[Range] | None = None,
        caret: int | None = None,
        tab_size: int = 4,
    ) -> EditorState:
        """Parse ``text`` with the host tree builder for ``config.syntax``."""
        config = config or EmmetConfig()
        if selection is not None:
            ranges = tuple(selection)
        else:
            pos = len(text) if caret is None else caret
            ranges = (Range(pos, pos),)
        return cls(
            text=text,
            tree=build_document_tree(text, config.syntax),
            config=config,
            selection=ranges,
            tab_size=tab_size,
        )

    @property
    def main_selection(self) -> Range:
        return self.selection[0]

    @property
    def caret(self) -> int:
        return self.main_selection.end

    def slice(self, r: Range) -> str:
        return self.text[r.start:r.end]

    def line_at(self, pos: int) -> Line:
        return line_at(self.text, pos)

    def with_selection(self, selection: Iterable[Range]) -> EditorState:
        return EditorState(self.text, self.tree, self.config, tuple(selection), self.tab_size)

    def reconfigure(self, config: EmmetConfig) -> EditorState:
        """Snapshot with another config; the tree is rebuilt for its syntax."""
        tree = self.tree if config.syntax == self.config.syntax else build_document_tree(self.text, config.syntax)
        return EditorState(self.text, tree, config, self.selection, self.tab_size)

    def apply(
        self,
        changes: Iterable[ChangeSpec],
        selection: Iterable[Range] | None = None,
    ) -> tuple[EditorState, tuple[TextChange, ...]]:
        """Apply non-overlapping ``changes`` and return the next snapshot."""
        ordered = sorted(changes, key=lambda c: (c.start, c.end))
        for prev, cur in zip(ordered, ordered[1:]):
            if cur.start < prev.end:
                raise ValueError(f"overlapping changes: {prev} and {cur}")
        if ordered and ordered[-1].end > len(self.text):
            raise ValueError(f"change {ordered[-1]} is outside of document")

        parts: list[str] = []
        applied: list[TextChange] = []
        cursor = 0
        delta = 0
        for change in ordered:
            parts.append(self.text[cursor:change.start])
            parts.append(change.insert)
            cursor = change.end
            inserted_from = change.start + delta
            applied.append(TextChange(
                deleted_from=change.start,
                deleted_to=change.end,
                inserted_from=inserted_from,
                inserted_to=inserted_from + len(change.insert),
                inserted_text=change.insert,
            ))
            delta += len(change.insert) - (change.end - change.start)
        parts.append(self.text[cursor:])
        text = "".join(parts)

        if selection is not None:
            next_selection = tuple(selection)
        else:
            next_selection = tuple(
                Range(*sorted((_map_pos(r.start, ordered), _map_pos(r.end, ordered))))
                for r in self.selection
            )

        tree = self.tree if not applied else build_document_tree(text, self.config.syntax)
        state = EditorState(text, tree, self.config, next_selection, self.tab_size)
        return state, tuple(applied)

    def apply_result(self, result: CommandResult) -> EditorState:
        return self.apply(result.changes, result.selection)[0]
