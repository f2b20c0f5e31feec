"""JSON and JSONL I/O backed by orjson.

Snapshots produced by ``*_to_dict`` helpers are plain dicts, but scripts may
hand over ``Range`` objects and sets directly; those are serialized through
``default``. Other dataclasses are rejected.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any

import orjson

from emmet_assist.ranges import Range


def _default(obj: Any) -> Any:
    if isinstance(obj, Range):
        return [obj.start, obj.end]
    if isinstance(obj, (set, frozenset)):
        return sorted(obj)
    raise TypeError(f"Type is not JSON serializable: {type(obj).__name__}")


def dumps(obj: Any, *, pretty: bool = False) -> bytes:
    opts = orjson.OPT_SORT_KEYS | orjson.OPT_NON_STR_KEYS | orjson.OPT_PASSTHROUGH_DATACLASS
    if pretty:
        opts |= orjson.OPT_INDENT_2
    return orjson.dumps(obj, default=_default, option=opts)


def loads(raw: bytes | str) -> Any:
    return orjson.loads(raw)


def load_json(path: Path) -> Any:
    return orjson.loads(path.read_bytes())


def save_json(obj: Any, path: Path, *, pretty: bool = True) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(dumps(obj, pretty=pretty))


def load_jsonl(path: Path) -> list[dict[str, Any]]:
    """Load a JSON Lines file (one JSON object per line). Blank lines skipped."""
    records: list[dict[str, Any]] = []
    for line in path.read_bytes().split(b"\n"):
        line = line.strip()
        if line:
            records.append(orjson.loads(line))
    return records


def save_jsonl(records: list[dict[str, Any]], path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    lines = [dumps(r) for r in records]
    path.write_bytes(b"\n".join(lines) + b"\n")
