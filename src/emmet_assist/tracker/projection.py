"""Read-only views over tracker state: preview, underline, completions, commit.

Nothing here changes the tracker. Committing an abbreviation produces a
``CommitInstruction``; the caller applies it and dispatches ``reset_tracker``.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from emmet_assist.config import enabled_for_syntax
from emmet_assist.document import ChangeSpec, CommandResult
from emmet_assist.expander import AbbreviationError, Expander, error_message
from emmet_assist.output import field, get_selections_from_snippet
from emmet_assist.ranges import Range, contains
from emmet_assist.tracker.state import reset_tracker
from emmet_assist.tracker.types import (
    AbbreviationTracker,
    AbbreviationTrackerError,
    AbbreviationTrackerValid,
    Transaction,
)

if TYPE_CHECKING:
    from emmet_assist.document import EditorState

log = logging.getLogger(__name__)

COMPLETION_LABEL = "Emmet abbreviation"


@dataclass(frozen=True, slots=True)
class TrackerPreview:
    """Preview anchored at ``pos``; ``syntax`` is ``error`` for error trackers."""

    pos: int
    text: str
    syntax: str
    is_error: bool = False


@dataclass(frozen=True, slots=True)
class CompletionOption:
    label: str
    range: Range
    boost: int
    preview: str
    type: str = "emmet"


@dataclass(frozen=True, slots=True)
class CommitInstruction:
    """Replace ``replace_range`` with ``insert_text``.

    ``selections`` are tab stop ranges relative to ``insert_text``.
    """

    replace_range: Range
    insert_text: str
    selections: tuple[Range, ...]

    def __post_init__(self) -> None:
        for sel in self.selections:
            if sel.end > len(self.insert_text):
                raise ValueError(f"selection {sel} is outside of inserted text")

    def to_command_result(self) -> CommandResult:
        """Edit with the first tab stop selected, in document coordinates."""
        base = self.replace_range.start
        first = self.selections[0] if self.selections else Range(len(self.insert_text), len(self.insert_text))
        return CommandResult(
            changes=(ChangeSpec(self.replace_range.start, self.replace_range.end, self.insert_text),),
            selection=(first.shift(base),),
        )


def can_display_preview(
    state: EditorState,
    tracker: AbbreviationTracker,
    completion_active: bool = False,
) -> bool:
    if completion_active:
        return False

    enabled = state.config.preview_enabled
    if not enabled_for_syntax(enabled, tracker.config.syntax, tracker.config.type):
        return False

    if isinstance(tracker, AbbreviationTrackerError):
        return True

    return (
        (not tracker.simple or tracker.forced)
        and bool(tracker.abbreviation)
        and contains(tracker.range, state.caret)
    )


def get_abbreviation_preview(
    state: EditorState,
    tracker: AbbreviationTracker | None,
    completion_active: bool = False,
) -> TrackerPreview | None:
    if tracker is None or tracker.inactive or completion_active:
        return None

    if tracker.config.type == "stylesheet":
        # Stylesheet abbreviations are offered as completions instead
        return None

    if not can_display_preview(state, tracker, completion_active):
        return None

    if isinstance(tracker, AbbreviationTrackerError):
        return TrackerPreview(
            pos=tracker.range.start,
            text=tracker.error.message,
            syntax="error",
            is_error=True,
        )

    return TrackerPreview(
        pos=tracker.range.start,
        text=tracker.preview,
        syntax=tracker.config.syntax or "html",
    )


def tracker_decoration(tracker: AbbreviationTracker | None) -> Range | None:
    """Range to underline for an active tracker."""
    if tracker is None or tracker.inactive or tracker.range.empty:
        return None
    return tracker.range


def completion_options(state: EditorState, tracker: AbbreviationTracker | None) -> list[CompletionOption]:
    if not isinstance(tracker, AbbreviationTrackerValid) or tracker.inactive:
        return []
    if tracker.simple and not tracker.forced:
        return []
    if not tracker.preview:
        return []

    return [CompletionOption(
        label=COMPLETION_LABEL,
        range=tracker.range,
        boost=state.config.completion_boost,
        preview=tracker.preview,
    )]


def error_snippet(error: AbbreviationError) -> str:
    """Pointer line under the offending character followed by the message."""
    return f"{'-' * max(error.pos, 0)}^\n{error_message(error)}"


def expand_tracker(
    state: EditorState,
    tracker: AbbreviationTracker,
    expander: Expander,
) -> CommitInstruction | None:
    """Full expansion of the tracked abbreviation with tab stops."""
    # Each expansion needs its own tab-stop field
    options = dataclasses.replace(tracker.config, options={**tracker.config.options, "output.field": field()})
    try:
        expanded = expander.expand(tracker.abbreviation, options, state.config)
    except AbbreviationError as err:
        log.debug("Cannot expand %r: %s", tracker.abbreviation, err.message)
        return None

    ranges, snippet = get_selections_from_snippet(expanded)
    return CommitInstruction(
        replace_range=tracker.range,
        insert_text=snippet,
        selections=tuple(ranges),
    )


def handle_tab(
    state: EditorState,
    tracker: AbbreviationTracker | None,
    expander: Expander,
    completion_active: bool = False,
) -> CommitInstruction | None:
    if completion_active:
        # Accepting the completion handles Tab
        return None
    if tracker is not None and not tracker.inactive and contains(tracker.range, state.caret):
        return expand_tracker(state, tracker, expander)
    return None


def handle_escape(state: EditorState, tracker: AbbreviationTracker | None) -> Transaction | None:
    if tracker is None:
        return None
    return reset_tracker(state)
