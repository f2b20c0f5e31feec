"""Editor session: current document snapshot plus its abbreviation tracker.

Host editors keep one session per view and feed it edits; every call
produces the next ``EditorState`` and runs it through ``update_tracker``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from emmet_assist.document import ChangeSpec, EditorState
from emmet_assist.expander import Expander
from emmet_assist.ranges import Range
from emmet_assist.tracker.projection import (
    CommitInstruction,
    TrackerPreview,
    get_abbreviation_preview,
    handle_tab,
)
from emmet_assist.tracker.state import enter_abbreviation_mode, reset_tracker, update_tracker
from emmet_assist.tracker.types import AbbreviationTracker, Transaction

log = logging.getLogger(__name__)


class TrackerSession:
    def __init__(self, state: EditorState, expander: Expander, tracker: AbbreviationTracker | None = None):
        self.state = state
        self.expander = expander
        self.tracker = tracker

    def dispatch(self, tr: Transaction) -> AbbreviationTracker | None:
        self.state = tr.state
        self.tracker = update_tracker(self.tracker, tr, self.expander)
        return self.tracker

    def edit(
        self,
        changes: Iterable[ChangeSpec],
        selection: Iterable[Range] | None = None,
        *,
        picked_completion: bool = False,
        snippet_active: bool = False,
    ) -> AbbreviationTracker | None:
        state, applied = self.state.apply(changes, selection)
        return self.dispatch(Transaction(
            state=state,
            changes=applied,
            picked_completion=picked_completion,
            snippet_active=snippet_active,
        ))

    def type_text(self, text: str) -> AbbreviationTracker | None:
        """Type ``text`` at the caret, one transaction per character."""
        for ch in text:
            sel = self.state.main_selection
            caret = sel.start + len(ch)
            self.edit([ChangeSpec(sel.start, sel.end, ch)], [Range(caret, caret)])
        return self.tracker

    def backspace(self, count: int = 1) -> AbbreviationTracker | None:
        for _ in range(count):
            sel = self.state.main_selection
            start = sel.start if not sel.empty else max(sel.start - 1, 0)
            if start == sel.end:
                break
            self.edit([ChangeSpec(start, sel.end)], [Range(start, start)])
        return self.tracker

    def move_caret(self, pos: int) -> AbbreviationTracker | None:
        return self.dispatch(Transaction(state=self.state.with_selection([Range(pos, pos)])))

    def force(self) -> AbbreviationTracker | None:
        return self.dispatch(enter_abbreviation_mode(self.state))

    def reset(self) -> AbbreviationTracker | None:
        return self.dispatch(reset_tracker(self.state))

    def preview(self) -> TrackerPreview | None:
        return get_abbreviation_preview(self.state, self.tracker)

    def tab(self) -> CommitInstruction | None:
        """Commit the tracked abbreviation, if any; the tracker is dropped."""
        commit = handle_tab(self.state, self.tracker, self.expander)
        if commit is None:
            return None

        log.debug("Expanding %r at %s", self.tracker.abbreviation if self.tracker else "", commit.replace_range)
        self.reset()
        result = commit.to_command_result()
        self.edit(result.changes, result.selection, snippet_active=True)
        return commit
