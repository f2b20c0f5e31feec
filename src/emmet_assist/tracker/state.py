"""Abbreviation tracker state machine.

``update_tracker`` is a reducer: given the previous tracker (or ``None``) and
a ``Transaction`` it returns the next tracker. Trackers are never mutated;
every accepted edit produces a new tracker instance.
"""

from __future__ import annotations

import dataclasses
import logging
import re
from typing import TYPE_CHECKING

from emmet_assist.activation import ActivationOptions, get_activation_context
from emmet_assist.config import enabled_for_syntax
from emmet_assist.expander import AbbreviationError, Expander
from emmet_assist.ranges import Range, contains
from emmet_assist.syntax import doc_syntax, is_css, is_jsx, is_supported
from emmet_assist.tracker.types import (
    AbbreviationTracker,
    AbbreviationTrackerError,
    AbbreviationTrackerValid,
    TrackerEffect,
    Transaction,
)

if TYPE_CHECKING:
    from emmet_assist.document import EditorState, TextChange

log = logging.getLogger(__name__)

JSX_PREFIX = "<"

_JSX_START_RE = re.compile(r"[a-zA-Z.#\[(]")
_CSS_START_RE = re.compile(r"[a-zA-Z!@#]")
_MARKUP_START_RE = re.compile(r"[a-zA-Z.#!@\[(]")
_BOUND_PREFIX_RE = re.compile(r"[\s>;\"']")
# Colon and open brace also bound a stylesheet abbreviation: ``color:#``, ``a{p``
_CSS_BOUND_PREFIX_RE = re.compile(r"[\s>;\"':{]")
_INVALID_CHARS_RE = re.compile(r"[\r\n]")


def enter_abbreviation_mode(state: EditorState) -> Transaction:
    """Transaction that forces tracking at the main selection."""
    return Transaction(state=state, effects=(TrackerEffect.FORCE,))


def reset_tracker(state: EditorState) -> Transaction:
    return Transaction(state=state, effects=(TrackerEffect.RESET,))


def allow_tracking(state: EditorState) -> bool:
    """Check if abbreviation tracking is enabled for the document syntax."""
    syntax = doc_syntax(state)
    return is_supported(syntax) and enabled_for_syntax(state.config.mark, syntax)


def update_tracker(
    tracker: AbbreviationTracker | None,
    tr: Transaction,
    expander: Expander,
) -> AbbreviationTracker | None:
    state = tr.state

    if tr.picked_completion:
        return None

    if tr.snippet_active:
        # Edits made by snippet expansion are not typing
        return None

    if len(state.selection) > 1:
        return None

    for effect in tr.effects:
        if effect is TrackerEffect.RESET:
            return None

        if effect is TrackerEffect.FORCE:
            sel = state.main_selection
            options = get_activation_context(state, sel.start)
            if options is not None:
                return create_tracker(state, sel.start, sel.end, options, expander, forced=True)

    if not tr.doc_changed:
        return tracker

    return _handle_update(state, tracker, tr.changes, expander)


def _handle_update(
    state: EditorState,
    tracker: AbbreviationTracker | None,
    changes: tuple[TextChange, ...],
    expander: Expander,
) -> AbbreviationTracker | None:
    if tracker is None:
        if not allow_tracking(state):
            return None
        started: AbbreviationTracker | None = None
        for change in changes:
            if change.inserted_text:
                started = typing_abbreviation(state, change.inserted_from, change.inserted_text, expander) or started
        return started

    # Changes come in document order. ``inserted_from`` is where a change
    # starts once the earlier changes are applied, so mapping ``rng``
    # through each change keeps both in the same coordinates and leaves
    # ``rng`` in coordinates of ``state`` at the end.
    rng = tracker.range
    edited = False
    for change in changes:
        start = change.inserted_from
        end = start + change.deleted_length
        delta = len(change.inserted_text) - change.deleted_length

        if not contains(rng, start):
            if not tracker.inactive:
                log.debug("Edit at %d is outside of %r, dropping tracker", start, tracker.abbreviation)
                return None
            # Inactive tracker tolerates outside edits, but typing a new
            # abbreviation elsewhere replaces it
            started = _start_elsewhere(state, change, expander)
            if started is not None:
                return started
            if end <= rng.start:
                rng = rng.shift(delta)
            elif start <= rng.end:
                # Deletion overlaps the range start: tracked text is gone
                return None
            continue

        new_end = max(rng.end, end) + delta
        collapsed = new_end < rng.start or (new_end == rng.start and not tracker.forced)
        if collapsed or _INVALID_CHARS_RE.search(change.inserted_text):
            log.debug("Tracked abbreviation %r collapsed or got a line break", tracker.abbreviation)
            return None
        rng = Range(rng.start, new_end)
        edited = True

    if not edited:
        return tracker if rng == tracker.range else dataclasses.replace(tracker, range=rng)

    next_tracker = create_tracker(
        state, rng.start, rng.end, tracker.config, expander,
        forced=tracker.forced, offset=tracker.offset,
    )
    if next_tracker is None:
        return _deactivate(state, tracker, rng)
    return next_tracker


def _start_elsewhere(state: EditorState, change: TextChange, expander: Expander) -> AbbreviationTracker | None:
    if not change.inserted_text or not allow_tracking(state):
        return None
    return typing_abbreviation(state, change.inserted_from, change.inserted_text, expander)


def _deactivate(state: EditorState, tracker: AbbreviationTracker, rng: Range) -> AbbreviationTracker:
    """Keep last known tracker state, but over the edited range."""
    log.debug("Abbreviation at %d is not valid anymore, tracker is inactive", rng.start)
    return dataclasses.replace(
        tracker,
        range=rng,
        abbreviation=state.slice(rng)[tracker.offset:],
        inactive=True,
    )


# ---------------------------------------------------------------------------
# Start detection
# ---------------------------------------------------------------------------


def get_syntax_from_pos(state: EditorState, pos: int) -> str:
    """Grammar used for the start check: ``css``, ``html`` or document syntax."""
    if state.tree.is_active("css", pos):
        return "css"
    if state.tree.is_active("html", pos):
        return "html"
    syntax = doc_syntax(state)
    return syntax if is_supported(syntax) else ""


def is_valid_prefix(prefix: str, syntax: str) -> bool:
    if is_jsx(syntax):
        return prefix == JSX_PREFIX
    if is_css(syntax):
        return prefix == "" or bool(_CSS_BOUND_PREFIX_RE.fullmatch(prefix))
    return prefix == "" or bool(_BOUND_PREFIX_RE.fullmatch(prefix))


def is_valid_abbreviation_start(ch: str, syntax: str) -> bool:
    if is_jsx(syntax):
        return bool(_JSX_START_RE.fullmatch(ch))
    if is_css(syntax):
        return bool(_CSS_START_RE.fullmatch(ch))
    return bool(_MARKUP_START_RE.fullmatch(ch))


def can_start_typing(prefix: str, ch: str, syntax: str) -> bool:
    return is_valid_prefix(prefix, syntax) and is_valid_abbreviation_start(ch, syntax)


def typing_abbreviation(
    state: EditorState,
    pos: int,
    text: str,
    expander: Expander,
) -> AbbreviationTracker | None:
    """Detects if user started typing an abbreviation with ``text`` at ``pos``."""
    if len(text) != 1:
        return None

    # Start only at a word bound: the character before the input on its line
    # must be empty, a bound character or the JSX prefix
    line = state.line_at(pos)
    col = pos - line.start
    prefix = line.text[max(0, col - 1):col]

    if not can_start_typing(prefix, text, get_syntax_from_pos(state, pos)):
        return None

    options = get_activation_context(state, pos)
    if options is None:
        return None

    if options.type == "stylesheet":
        # The position may turn out to be CSS embedded into markup
        if not can_start_typing(prefix, text, "css"):
            return None

        # Inside a property value only color literals start tracking
        ctx_name = options.context.name if options.context is not None else ""
        if ctx_name and not ctx_name.startswith("@@") and text != "#":
            return None

    syntax = options.syntax or "html"
    start = pos
    offset = 0
    if is_jsx(syntax) and prefix == JSX_PREFIX:
        offset = len(JSX_PREFIX)
        start -= offset

    tracker = create_tracker(state, start, pos + len(text), options, expander, offset=offset)
    if tracker is not None:
        log.debug("Started tracking %r at %d (%s)", tracker.abbreviation, start, syntax)
    return tracker


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


def create_tracker(
    state: EditorState,
    start: int,
    end: int,
    options: ActivationOptions,
    expander: Expander,
    *,
    forced: bool = False,
    offset: int = 0,
) -> AbbreviationTracker | None:
    """Build tracker for ``[start, end)``, or ``None`` when it cannot be tracked.

    Parse errors are returned as an error tracker in forced mode and
    discarded otherwise; this function never raises for bad input.
    """
    if start > end or start < 0 or end > len(state.text):
        return None

    rng = Range(start, end)
    abbreviation = state.slice(rng)[offset:]

    if (not abbreviation and not forced) or _INVALID_CHARS_RE.search(abbreviation):
        return None

    if not abbreviation:
        return AbbreviationTrackerError(
            range=rng,
            abbreviation=abbreviation,
            config=options,
            error=AbbreviationError("Empty abbreviation", 0),
            forced=True,
            offset=offset,
        )

    try:
        if options.type == "markup":
            parsed = expander.parse_markup(abbreviation, options, state.config)
        else:
            parsed = expander.parse_stylesheet(abbreviation, options, state.config)
        preview = expander.expand(parsed, options, state.config, preview=True)
    except AbbreviationError as err:
        if forced:
            return AbbreviationTrackerError(
                range=rng,
                abbreviation=abbreviation,
                config=options,
                error=err,
                forced=True,
                offset=offset,
            )
        log.debug("Rejected abbreviation %r: %s", abbreviation, err.message)
        return None

    if not preview:
        # Most likely a stylesheet scope where the abbreviation is not applicable
        return None

    return AbbreviationTrackerValid(
        range=rng,
        abbreviation=abbreviation,
        config=options,
        preview=preview,
        simple=parsed.simple if options.type == "markup" else False,
        forced=forced,
        offset=offset,
    )
