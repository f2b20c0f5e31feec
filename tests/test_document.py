"""Tests for editor state snapshots and edits."""
from __future__ import annotations

import pytest

from emmet_assist.config import EmmetConfig
from emmet_assist.document import (
    ChangeSpec,
    CommandResult,
    EditorState,
    Line,
    TextChange,
    line_at,
    line_by_number,
)
from emmet_assist.ranges import Range


class TestLines:
    def test_line_at(self) -> None:
        assert line_at("ab\ncd", 4) == Line(number=2, start=3, end=5, text="cd")
        assert line_at("ab\ncd", 2) == Line(number=1, start=0, end=2, text="ab")

    def test_crlf_is_not_line_text(self) -> None:
        assert line_at("ab\r\ncd", 1).text == "ab"

    def test_line_by_number(self) -> None:
        assert line_by_number("a\nb\nc", 3) == Line(number=3, start=4, end=5, text="c")
        with pytest.raises(ValueError):
            line_by_number("a", 0)
        with pytest.raises(ValueError):
            line_by_number("a\nb", 5)


class TestChangeRecords:
    def test_invalid_change_spec(self) -> None:
        with pytest.raises(ValueError):
            ChangeSpec(3, 1)

    def test_inserted_range_must_match_text(self) -> None:
        with pytest.raises(ValueError):
            TextChange(0, 0, 0, 3, "x")

    def test_deleted_length(self) -> None:
        assert TextChange(2, 5, 2, 3, "x").deleted_length == 3


class TestEditorState:
    def test_create_defaults(self) -> None:
        state = EditorState.create("<p></p>")
        assert state.caret == 7
        assert state.config == EmmetConfig()
        assert state.tree.top_language == "html"

    def test_selection_must_fit_document(self) -> None:
        with pytest.raises(ValueError):
            EditorState.create("abc", selection=[Range(0, 10)])

    def test_apply_reports_changes_in_order(self) -> None:
        state = EditorState.create("hello world")
        next_state, changes = state.apply([ChangeSpec(6, 11, "there"), ChangeSpec(0, 0, ">")])
        assert next_state.text == ">hello there"
        assert changes == (
            TextChange(0, 0, 0, 1, ">"),
            TextChange(6, 11, 7, 12, "there"),
        )
        assert next_state.caret == 12
        assert state.text == "hello world"

    def test_caret_moves_past_insertion(self) -> None:
        state = EditorState.create("abcdef", caret=3)
        next_state, _ = state.apply([ChangeSpec(3, 3, "x")])
        assert next_state.caret == 4

    def test_explicit_selection(self) -> None:
        state = EditorState.create("abc")
        next_state, _ = state.apply([ChangeSpec(0, 3, "xy")], [Range(1, 1)])
        assert next_state.selection == (Range(1, 1),)

    def test_overlapping_changes(self) -> None:
        state = EditorState.create("abcdef")
        with pytest.raises(ValueError, match="overlapping"):
            state.apply([ChangeSpec(0, 3), ChangeSpec(2, 4)])

    def test_change_outside_document(self) -> None:
        with pytest.raises(ValueError):
            EditorState.create("abc").apply([ChangeSpec(2, 9)])

    def test_tree_is_rebuilt(self) -> None:
        state = EditorState.create("<p>")
        next_state, _ = state.apply([ChangeSpec(3, 3, "<b></b>")])
        assert next_state.tree is not state.tree
        assert next_state.tree.resolve_inner(4).type_name in ("OpenTag", "TagName", "StartTag")

    def test_apply_result_without_changes(self) -> None:
        state = EditorState.create("abc")
        assert state.apply_result(CommandResult(selection=(Range(1, 2),))).selection == (Range(1, 2),)

    def test_reconfigure_rebuilds_for_syntax(self) -> None:
        state = EditorState.create("a{}")
        css_state = state.reconfigure(EmmetConfig(syntax="css"))
        assert css_state.tree.top_language == "css"
        assert state.reconfigure(EmmetConfig(bem=True)).tree is state.tree
