"""Abbreviation tracker states and transaction inputs."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, TypeAlias

from emmet_assist.activation import ActivationOptions
from emmet_assist.context_types import range_to_list
from emmet_assist.expander import AbbreviationError
from emmet_assist.ranges import Range

if TYPE_CHECKING:
    from emmet_assist.document import EditorState, TextChange


@dataclass(frozen=True, slots=True)
class AbbreviationTrackerValid:
    """Tracked abbreviation that parses and expands to ``preview``.

    ``range`` covers the abbreviation in the document, including ``offset``
    prefix characters that are not part of ``abbreviation`` itself.
    """

    range: Range
    abbreviation: str
    config: ActivationOptions
    preview: str
    # Single plain element, not worth a preview
    simple: bool = False
    # User requested tracking explicitly: kept even when empty or invalid
    forced: bool = False
    # Suppressed from UI, retained so the user can fix the abbreviation
    inactive: bool = False
    offset: int = 0

    def __post_init__(self) -> None:
        if self.offset < 0 or self.offset > len(self.range):
            raise ValueError("offset must be within range")


@dataclass(frozen=True, slots=True)
class AbbreviationTrackerError:
    """Forced abbreviation that failed to parse."""

    range: Range
    abbreviation: str
    config: ActivationOptions
    error: AbbreviationError
    forced: bool = True
    inactive: bool = False
    offset: int = 0

    def __post_init__(self) -> None:
        if self.offset < 0 or self.offset > len(self.range):
            raise ValueError("offset must be within range")


AbbreviationTracker: TypeAlias = AbbreviationTrackerValid | AbbreviationTrackerError


class TrackerEffect(Enum):
    FORCE = "force"
    RESET = "reset"


@dataclass(frozen=True, slots=True)
class Transaction:
    """Single editor update as seen by the tracker.

    ``state`` is the document after ``changes`` were applied.
    ``snippet_active`` marks edits made while an expanded snippet is being
    filled in; such edits never start or continue tracking.
    """

    state: EditorState
    changes: tuple[TextChange, ...] = ()
    effects: tuple[TrackerEffect, ...] = ()
    picked_completion: bool = False
    snippet_active: bool = False

    @property
    def doc_changed(self) -> bool:
        return bool(self.changes)


def tracker_to_dict(tracker: AbbreviationTracker | None) -> dict[str, object] | None:
    """Serialize tracker for deterministic snapshots."""
    if tracker is None:
        return None

    payload: dict[str, object] = {
        "type": "abbreviation" if isinstance(tracker, AbbreviationTrackerValid) else "error",
        "range": range_to_list(tracker.range),
        "abbreviation": tracker.abbreviation,
        "forced": tracker.forced,
        "inactive": tracker.inactive,
        "offset": tracker.offset,
        "syntax": tracker.config.syntax,
        "syntax_type": tracker.config.type,
        "context": tracker.config.context.name if tracker.config.context else None,
    }
    if isinstance(tracker, AbbreviationTrackerValid):
        payload["simple"] = tracker.simple
        payload["preview"] = tracker.preview
    else:
        payload["error"] = {"message": tracker.error.message, "pos": tracker.error.pos}
    return payload
