"""Context resolution result types and deterministic snapshots."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, TypeAlias

from emmet_assist.ranges import Range

HTMLMatchKind: TypeAlias = Literal["open", "close", "self-close"]
CSSMatchKind: TypeAlias = Literal["selector", "property-name", "property-value"]


@dataclass(frozen=True, slots=True)
class HTMLMatch:
    """Tag match: ``name`` is the tag name, ``range`` the whole tag."""

    name: str
    kind: HTMLMatchKind
    range: Range


@dataclass(frozen=True, slots=True)
class CSSMatch:
    """Selector or property match: ``name`` is the literal source text."""

    name: str
    kind: CSSMatchKind
    range: Range


@dataclass(frozen=True, slots=True)
class CSSContext:
    ancestors: tuple[CSSMatch, ...] = ()
    current: CSSMatch | None = None
    inline: bool = False
    # Host-document range of the CSS source when embedded into markup
    embedded: Range | None = None

    @property
    def language(self) -> Literal["css"]:
        return "css"


@dataclass(frozen=True, slots=True)
class HTMLContext:
    ancestors: tuple[HTMLMatch, ...] = ()
    current: HTMLMatch | None = None
    css: CSSContext | None = None

    @property
    def language(self) -> Literal["html"]:
        return "html"


Context: TypeAlias = HTMLContext | CSSContext


@dataclass(frozen=True, slots=True)
class ContextTag:
    """Matched element with its open and (optional) close tag ranges."""

    name: str
    open: Range
    close: Range | None = None
    attributes: dict[str, str | None] = field(default_factory=dict)


def range_to_list(r: Range | None) -> list[int] | None:
    return None if r is None else [r.start, r.end]


def _match_to_dict(match: HTMLMatch | CSSMatch | None) -> dict[str, object] | None:
    if match is None:
        return None
    return {"name": match.name, "kind": match.kind, "range": range_to_list(match.range)}


def context_to_dict(ctx: Context | None) -> dict[str, object] | None:
    """Serialize a context for snapshots and script output."""
    if ctx is None:
        return None
    payload: dict[str, object] = {
        "language": ctx.language,
        "ancestors": [_match_to_dict(m) for m in ctx.ancestors],
        "current": _match_to_dict(ctx.current),
    }
    if isinstance(ctx, CSSContext):
        payload["inline"] = ctx.inline
        payload["embedded"] = range_to_list(ctx.embedded)
    else:
        payload["css"] = context_to_dict(ctx.css)
    return payload


def context_tag_to_dict(tag: ContextTag | None) -> dict[str, object] | None:
    if tag is None:
        return None
    return {
        "name": tag.name,
        "attributes": dict(sorted(tag.attributes.items())),
        "open": range_to_list(tag.open),
        "close": range_to_list(tag.close),
    }
