"""Abbreviation tracking: state machine and its read-only projections."""

from emmet_assist.tracker.projection import (
    CommitInstruction,
    CompletionOption,
    TrackerPreview,
    can_display_preview,
    completion_options,
    error_snippet,
    expand_tracker,
    get_abbreviation_preview,
    handle_escape,
    handle_tab,
    tracker_decoration,
)
from emmet_assist.tracker.session import TrackerSession
from emmet_assist.tracker.state import (
    JSX_PREFIX,
    allow_tracking,
    create_tracker,
    enter_abbreviation_mode,
    reset_tracker,
    typing_abbreviation,
    update_tracker,
)
from emmet_assist.tracker.types import (
    AbbreviationTracker,
    AbbreviationTrackerError,
    AbbreviationTrackerValid,
    TrackerEffect,
    Transaction,
    tracker_to_dict,
)

__all__ = [
    "JSX_PREFIX",
    "AbbreviationTracker",
    "AbbreviationTrackerError",
    "AbbreviationTrackerValid",
    "CommitInstruction",
    "CompletionOption",
    "TrackerEffect",
    "TrackerPreview",
    "TrackerSession",
    "Transaction",
    "allow_tracking",
    "can_display_preview",
    "completion_options",
    "create_tracker",
    "enter_abbreviation_mode",
    "error_snippet",
    "expand_tracker",
    "get_abbreviation_preview",
    "handle_escape",
    "handle_tab",
    "reset_tracker",
    "tracker_decoration",
    "tracker_to_dict",
    "typing_abbreviation",
    "update_tracker",
]
