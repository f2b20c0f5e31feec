"""Tests for configuration loading and validation."""
from __future__ import annotations

from pathlib import Path

import pytest

from emmet_assist.config import (
    ConfigError,
    EmmetConfig,
    config_from_dict,
    config_to_dict,
    enabled_for_syntax,
    load_config,
    merge_config,
)


class TestEmmetConfig:
    def test_defaults(self) -> None:
        config = EmmetConfig()
        assert config.syntax == "html"
        assert config.mark is True
        assert config.preview_enabled is True
        assert config.attribute_quotes == "double"
        assert config.markup_style == "html"
        assert config.comments_template == "<!-- /[#ID][.CLASS] -->"
        assert config.completion_boost == 99
        assert config.config == {}

    def test_unsupported_syntax(self) -> None:
        with pytest.raises(ConfigError):
            EmmetConfig(syntax="python")

    def test_config_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            EmmetConfig(attribute_quotes="backtick")

    def test_bad_markup_style(self) -> None:
        with pytest.raises(ConfigError):
            EmmetConfig(markup_style="sgml")

    def test_syntax_list_becomes_tuple(self) -> None:
        config = EmmetConfig(mark=["css", "markup"])
        assert config.mark == ("css", "markup")

    def test_bad_enable_option(self) -> None:
        with pytest.raises(ConfigError):
            EmmetConfig(preview_enabled="yes")

    def test_fingerprint_follows_values(self) -> None:
        assert EmmetConfig().fingerprint() == EmmetConfig().fingerprint()
        assert EmmetConfig().fingerprint() != EmmetConfig(bem=True).fingerprint()


class TestEnabledForSyntax:
    def test_boolean(self) -> None:
        assert enabled_for_syntax(True, "html")
        assert not enabled_for_syntax(False, "html")

    def test_syntax_names_and_types(self) -> None:
        assert enabled_for_syntax(("css",), "css")
        assert enabled_for_syntax(("stylesheet",), "scss")
        assert not enabled_for_syntax(("markup",), "css")
        assert enabled_for_syntax(("markup",), "css", "markup")
        assert not enabled_for_syntax((), "html")


class TestLoading:
    def test_camel_case_keys(self) -> None:
        config = config_from_dict({"syntax": "css", "previewEnabled": False, "shortHex": False})
        assert config.syntax == "css"
        assert config.preview_enabled is False
        assert config.short_hex is False

    def test_unknown_key(self) -> None:
        with pytest.raises(ConfigError, match="unknown config key"):
            config_from_dict({"colour": "red"})

    def test_tag_pair_keys_are_not_options(self) -> None:
        with pytest.raises(ConfigError, match="unknown config key"):
            config_from_dict({"markTagPairs": True})
        with pytest.raises(ConfigError, match="unknown config key"):
            config_from_dict({"auto_rename_tags": False})

    def test_merge_keeps_base(self) -> None:
        base = EmmetConfig()
        merged = merge_config(base, {"markupStyle": "xhtml"})
        assert merged.markup_style == "xhtml"
        assert base.markup_style == "html"
        assert merge_config(base, {}) is base

    def test_merge_validates(self) -> None:
        with pytest.raises(ConfigError):
            merge_config(EmmetConfig(), {"syntax": "cobol"})

    def test_load_with_emmet_section(self, tmp_path: Path) -> None:
        path = tmp_path / "settings.json"
        path.write_text('{"emmet": {"syntax": "scss", "mark": ["stylesheet"]}}')
        config = load_config(path)
        assert config.syntax == "scss"
        assert config.mark == ("stylesheet",)

    def test_load_plain_object(self, tmp_path: Path) -> None:
        path = tmp_path / "emmet.json"
        path.write_text('{"bem": true, "config": {"markup": {"snippets": {"foo": "div.foo"}}}}')
        config = load_config(path)
        assert config.bem is True
        assert config.config["markup"]["snippets"] == {"foo": "div.foo"}

    def test_load_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.json"
        path.write_text("{syntax: html")
        with pytest.raises(ConfigError, match="invalid JSON"):
            load_config(path)

    def test_load_non_object(self, tmp_path: Path) -> None:
        path = tmp_path / "list.json"
        path.write_text("[1, 2]")
        with pytest.raises(ConfigError, match="expected a JSON object"):
            load_config(path)

    def test_to_dict_lists_syntaxes(self) -> None:
        data = config_to_dict(EmmetConfig(preview_enabled=("html",)))
        assert data["preview_enabled"] == ["html"]
        assert data["syntax"] == "html"
