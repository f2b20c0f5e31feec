"""Integration tests for the py-emmet backed expander."""
from __future__ import annotations

import dataclasses

from conftest import make_state
from emmet.stylesheet import CSSAbbreviationScope

from emmet_assist.activation import ActivationOptions, get_activation_context
from emmet_assist.commands import wrap_with_abbreviation
from emmet_assist.config import EmmetConfig
from emmet_assist.emmet_bridge import EmmetExpander, _translate, user_config
from emmet_assist.expander import AbbreviationError, ParsedAbbreviation
from emmet_assist.output import TAB_STOP_START, get_output_options
from emmet_assist.ranges import Range
from emmet_assist.syntax import AbbreviationContext
from emmet_assist.tracker import AbbreviationTrackerError, AbbreviationTrackerValid, TrackerSession


def _markup_options() -> ActivationOptions:
    options = get_activation_context(make_state("<div></div>"), 5)
    assert options is not None
    return options


class TestUserConfig:
    def test_includes_context(self) -> None:
        options = ActivationOptions(
            syntax="html",
            type="markup",
            context=AbbreviationContext("ul", {"class": "nav"}),
            options={"output.indent": "  "},
        )
        data = user_config(options, {"output.format": False})
        assert data["type"] == "markup"
        assert data["syntax"] == "html"
        assert data["context"] == {"name": "ul", "attributes": {"class": "nav"}}
        assert data["options"] == {"output.indent": "  ", "output.format": False}
        assert "text" not in data

    def test_includes_wrapped_text(self) -> None:
        options = ActivationOptions(syntax="html", type="markup", text=("a", "b"))
        assert user_config(options)["text"] == ["a", "b"]

    def test_translate_keeps_position(self) -> None:
        class ScannerError(Exception):
            def __init__(self) -> None:
                super().__init__("Unexpected character at 4")
                self.message = "Unexpected character at 4"
                self.pos = 4

        err = _translate(ScannerError())
        assert isinstance(err, AbbreviationError)
        assert err.pos == 4
        assert err.message == "Unexpected character at 4"

    def test_translate_plain_exception(self) -> None:
        err = _translate(RuntimeError("boom"))
        assert err.message == "boom"
        assert err.pos == 0


class TestEmmetExpander:
    def test_parse_markup_simple_flag(self) -> None:
        expander = EmmetExpander()
        assert expander.parse_markup("div", _markup_options()).simple
        assert not expander.parse_markup("ul>li", _markup_options()).simple

    def test_preview_expansion(self) -> None:
        expander = EmmetExpander()
        preview = expander.expand("ul>li", _markup_options(), EmmetConfig(), preview=True)
        assert preview.startswith("<ul>")
        assert "<li></li>" in preview
        assert TAB_STOP_START not in preview

    def test_preview_is_memoized_per_config(self) -> None:
        expander = EmmetExpander()
        options = _markup_options()
        expander.expand("ul>li", options, EmmetConfig(), preview=True)
        assert len(expander._previews) == 1
        expander.expand("ul>li", options, EmmetConfig(), preview=True)
        assert len(expander._previews) == 1
        expander.expand("ul>li", options, EmmetConfig(bem=True), preview=True)
        assert len(expander._previews) == 1
        expander.reset_cache()
        assert expander._previews == {}

    def test_full_expansion_has_tab_stop(self) -> None:
        state = make_state("<div></div>", caret=5)
        options = get_activation_context(state, 5)
        assert options is not None
        result = EmmetExpander().expand("ul>li", options, state.config)
        assert TAB_STOP_START in result

    def test_stylesheet_expansion(self) -> None:
        options = ActivationOptions(
            syntax="css",
            type="stylesheet",
            context=AbbreviationContext(CSSAbbreviationScope.Property),
            options=get_output_options(make_state("a{}", "css"), 2),
        )
        expander = EmmetExpander()
        expander.parse_stylesheet("p10", options)
        assert "padding: 10px" in expander.expand("p10", options, EmmetConfig(syntax="css"), preview=True)

    def test_expands_parsed_payload(self) -> None:
        expander = EmmetExpander()
        options = _markup_options()
        parsed = expander.parse_markup("ul>li", options, EmmetConfig())
        # Rendering uses the parse result, not the source string
        relabeled = dataclasses.replace(parsed, abbreviation="p")
        assert expander.expand(relabeled, options, EmmetConfig(), preview=True).startswith("<ul>")

    def test_global_snippets_are_used(self) -> None:
        config = EmmetConfig(config={"markup": {"snippets": {"foo": "div.foo"}}})
        expander = EmmetExpander()
        assert 'class="foo"' in expander.expand("foo", _markup_options(), config, preview=True)
        parsed = expander.parse_markup("foo", _markup_options(), config)
        assert 'class="foo"' in expander.expand(parsed, _markup_options(), config)

    def test_extract(self) -> None:
        abbr = EmmetExpander().extract("foo ul>li", 9)
        assert abbr is not None
        assert abbr.abbreviation == "ul>li"
        assert (abbr.start, abbr.end) == (4, 9)

    def test_extract_nothing(self) -> None:
        assert EmmetExpander().extract("   ", 3) is None


class TestTrackingWithEmmet:
    def test_type_and_expand(self) -> None:
        session = TrackerSession(make_state("<div></div>", caret=5), EmmetExpander())
        session.type_text("ul>li")
        assert session.tracker is not None
        assert session.tracker.abbreviation == "ul>li"
        commit = session.tab()
        assert commit is not None
        assert "<li>" in session.state.text
        assert session.tracker is None

    def test_markup_tracking_preview(self) -> None:
        session = TrackerSession(make_state("<div>|</div>"), EmmetExpander())
        tracker = session.type_text("ul>li*2")
        assert isinstance(tracker, AbbreviationTrackerValid)
        assert not tracker.inactive
        assert tracker.range.start == 5
        preview = session.preview()
        assert preview is not None
        assert preview.text.startswith("<ul>\n  <li></li>")

    def test_simple_abbreviation_tracks_without_preview(self) -> None:
        session = TrackerSession(make_state("<div>|</div>"), EmmetExpander())
        tracker = session.type_text("ul")
        assert isinstance(tracker, AbbreviationTrackerValid)
        assert tracker.simple
        assert session.preview() is None

    def test_color_in_property_value(self) -> None:
        session = TrackerSession(make_state("a{color:|}", "css"), EmmetExpander())
        tracker = session.type_text("#f")
        assert isinstance(tracker, AbbreviationTrackerValid)
        assert tracker.abbreviation == "#f"
        assert tracker.preview == "#fff"

    def test_forced_invalid_abbreviation_reports_parser_error(self) -> None:
        session = TrackerSession(make_state("<div>|</div>"), EmmetExpander())
        session.force()
        tracker = session.type_text("ul>[")
        assert isinstance(tracker, AbbreviationTrackerError)
        assert "NoneType" not in tracker.error.message
        assert tracker.error.message


class TestWrapWithEmmet:
    def test_wraps_element_content(self) -> None:
        state = make_state("<div><p>hi</p></div>", caret=9)
        result = wrap_with_abbreviation(state, "span", EmmetExpander())
        assert result is not None
        assert state.apply_result(result).text == "<div><p><span>hi</span></p></div>"

    def test_lines_fill_implicit_repeat(self) -> None:
        state = make_state("one\ntwo").with_selection([Range(0, 7)])
        result = wrap_with_abbreviation(state, "ul>li*", EmmetExpander())
        assert result is not None
        text = state.apply_result(result).text
        assert text.startswith("<ul>")
        assert "<li>one</li>" in text
        assert "<li>two</li>" in text

    def test_invalid_abbreviation(self) -> None:
        state = make_state("<p>hi</p>", caret=4)
        assert wrap_with_abbreviation(state, "ul>[", EmmetExpander()) is None
