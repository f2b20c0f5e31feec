"""Tests for orjson-backed serialization helpers."""
from __future__ import annotations

from pathlib import Path

import pytest

from emmet_assist.io_utils import dumps, load_json, load_jsonl, loads, save_json, save_jsonl
from emmet_assist.ranges import Range


class TestDumps:
    def test_sorted_keys_and_ranges(self) -> None:
        assert dumps({"b": Range(1, 2), "a": {"z", "y"}}) == b'{"a":["y","z"],"b":[1,2]}'

    def test_pretty(self) -> None:
        assert dumps({"a": 1}, pretty=True) == b'{\n  "a": 1\n}'

    def test_unsupported_type(self) -> None:
        with pytest.raises(TypeError):
            dumps({"a": object()})

    def test_loads(self) -> None:
        assert loads('{"a": [1]}') == {"a": [1]}


class TestFiles:
    def test_json_file(self, tmp_path: Path) -> None:
        path = tmp_path / "nested" / "out.json"
        save_json({"range": Range(0, 3)}, path)
        assert load_json(path) == {"range": [0, 3]}

    def test_jsonl_file_skips_blank_lines(self, tmp_path: Path) -> None:
        path = tmp_path / "trace.jsonl"
        save_jsonl([{"step": "type:u"}, {"step": "tab"}], path)
        path.write_bytes(path.read_bytes() + b"\n\n")
        assert [r["step"] for r in load_jsonl(path)] == ["type:u", "tab"]
