"""Tests for the command line scripts."""
from __future__ import annotations

import importlib.util
import sys
from pathlib import Path

import orjson
import pytest
from conftest import FakeExpander, make_state

from emmet_assist.tracker import TrackerSession


def _load_script(name: str) -> object:
    root = Path(__file__).resolve().parents[1]
    script_path = root / "scripts" / f"{name}.py"
    spec = importlib.util.spec_from_file_location(name, script_path)
    assert spec is not None
    module = importlib.util.module_from_spec(spec)
    assert spec.loader is not None
    spec.loader.exec_module(module)
    return module


class TestShowContext:
    def test_inline_style_context(self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
        mod = _load_script("show_context")
        monkeypatch.setattr(sys, "argv", ["show_context.py", "--text", '<div style="color: red"></div>', "--pos", "14"])
        mod.main()
        data = orjson.loads(capsys.readouterr().out)
        assert data["pos"] == 14
        assert data["context"]["css"]["current"]["kind"] == "property-name"
        assert data["activation"] == {"syntax": "css", "type": "stylesheet", "context": {"name": "@@property", "attributes": {}}}
        assert data["tag"]["name"] == "div"

    def test_position_out_of_range(self, monkeypatch: pytest.MonkeyPatch) -> None:
        mod = _load_script("show_context")
        monkeypatch.setattr(sys, "argv", ["show_context.py", "--text", "<p>", "--pos", "10"])
        with pytest.raises(SystemExit):
            mod.main()

    def test_syntax_from_file_suffix(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
        mod = _load_script("show_context")
        path = tmp_path / "site.scss"
        path.write_text("a{}")
        monkeypatch.setattr(sys, "argv", ["show_context.py", str(path), "--pos", "2"])
        mod.main()
        data = orjson.loads(capsys.readouterr().out)
        assert data["syntax"] == "scss"
        assert data["activation"]["syntax"] == "scss"


class TestTraceAbbreviation:
    def test_steps(self) -> None:
        mod = _load_script("trace_abbreviation")
        session = TrackerSession(make_state("<div>|</div>"), FakeExpander())
        first = mod.run_step(session, "type:ul>li")
        assert first["tracker"]["abbreviation"] == "ul>li"
        assert first["preview"] == "<ul><li></li></ul>"

        second = mod.run_step(session, "tab")
        assert second["tracker"] is None
        assert second["expanded"] == "<ul><li></li></ul>"
        assert second["text"] == "<div><ul><li></li></ul></div>"

    def test_unknown_step(self) -> None:
        mod = _load_script("trace_abbreviation")
        session = TrackerSession(make_state(""), FakeExpander())
        with pytest.raises(ValueError, match="unknown step"):
            mod.run_step(session, "jump")

    def test_caret_marker(self) -> None:
        mod = _load_script("trace_abbreviation")
        state = mod.initial_state("<p>|</p>", make_state("").config)
        assert state.text == "<p></p>"
        assert state.caret == 3
