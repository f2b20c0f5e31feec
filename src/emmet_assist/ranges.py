"""Half-open text range primitives shared by context, tracker and commands.

Ranges are immutable: every helper here builds a new ``Range`` instead of
adjusting an existing one.
"""
from __future__ import annotations

from dataclasses import dataclass

_SPACE_CHARS = frozenset(" \t\n\r\f\v")


@dataclass(frozen=True, slots=True)
class Range:
    """Offsets ``[start, end)`` into a document."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 0:
            raise ValueError(f"start must be >= 0, got {self.start}")
        if self.end < self.start:
            raise ValueError(f"end must be >= start, got {self.end} < {self.start}")

    @property
    def empty(self) -> bool:
        return self.start == self.end

    def __len__(self) -> int:
        return self.end - self.start

    def shift(self, delta: int) -> Range:
        return Range(self.start + delta, self.end + delta)


def contains(r: Range, pos: int) -> bool:
    """Check if ``pos`` is inside ``r``, both bounds included."""
    return r.start <= pos <= r.end


def range_contains(a: Range, b: Range) -> bool:
    """Check if range ``a`` fully contains range ``b``."""
    return a.start <= b.start and a.end >= b.end


def ranges_equal(a: Range, b: Range) -> bool:
    return a.start == b.start and a.end == b.end


def range_empty(r: Range) -> bool:
    return r.start == r.end


def is_space(text: str) -> bool:
    """True for a non-empty string made of whitespace only."""
    return bool(text) and all(ch in _SPACE_CHARS for ch in text)


def substr(text: str, r: Range) -> str:
    return text[r.start:r.end]


def narrow_to_non_space(text: str, r: Range) -> Range:
    """Return a copy of ``r`` that starts and ends at a non-space character."""
    chunk = substr(text, r)
    start_offset = 0
    end_offset = len(chunk)

    while start_offset < end_offset and chunk[start_offset] in _SPACE_CHARS:
        start_offset += 1

    while end_offset > start_offset and chunk[end_offset - 1] in _SPACE_CHARS:
        end_offset -= 1

    return Range(r.start + start_offset, r.start + end_offset)
